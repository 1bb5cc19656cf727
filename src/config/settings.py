"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Nothing is strictly required: without PEXELS_API_KEY the engine serves
    the local catalog only, and without OPENAI_API_KEY keyword synthesis
    and the stylist chat fall back to fixed answers.

    Optional environment variables:
        - HOST: Server host (default: 0.0.0.0)
        - PORT: Server port (default: 8080)
        - CATALOG_DIR: Directory holding the local photo catalog
        - PEXELS_API_KEY: Access key for the Pexels search API
        - OPENAI_API_KEY: Key for keyword synthesis and stylist chat
        - ENVIRONMENT: Environment name (development, staging, production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS origins: comma-separated or a JSON list in the environment
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Local Catalog
    # ==========================================================================
    catalog_dir: Path = Field(
        default=Path("images"),
        description="Directory holding the local photo catalog"
    )
    catalog_rules_path: Optional[Path] = Field(
        default=None,
        description="Gender classification rules JSON (default: <catalog_dir>/gender_rules.json)"
    )
    catalog_url_prefix: str = Field(
        default="/images",
        description="URL prefix the catalog directory is served under"
    )

    @field_validator("catalog_dir", mode="before")
    @classmethod
    def parse_catalog_dir(cls, v):
        # CATALOG_DIR= (blank) keeps the default directory
        if isinstance(v, str) and not v.strip():
            return Path("images")
        return v

    @field_validator("catalog_rules_path", mode="before")
    @classmethod
    def parse_rules_path(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def catalog_rules_file(self) -> Path:
        from config.constants import DEFAULT_CATALOG_CONFIG
        if self.catalog_rules_path:
            return self.catalog_rules_path
        return self.catalog_dir / DEFAULT_CATALOG_CONFIG.RULES_FILENAME

    # ==========================================================================
    # Pexels (external photo provider)
    # ==========================================================================
    pexels_api_key: str = Field(default="", description="Pexels API key")
    pexels_api_base_url: str = Field(
        default="https://api.pexels.com/v1",
        description="Pexels API base URL"
    )
    pexels_request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for Pexels search requests (seconds)"
    )
    search_query_prefix: str = Field(
        default="japanese asian",
        description="Words prepended to every provider query"
    )
    default_pexels_ratio: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Share of a listing drawn from Pexels when the caller omits it"
    )

    # ==========================================================================
    # OpenAI (keyword synthesis + stylist chat)
    # ==========================================================================
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_org_id: str = Field(default="", description="OpenAI organization ID (optional)")
    openai_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for each OpenAI call (seconds)"
    )
    keyword_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for style keyword synthesis"
    )
    keyword_synthesis_enabled: bool = Field(
        default=True,
        description="Enable LLM keyword synthesis (falls back to fixed keywords if disabled or fails)"
    )
    chat_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for the stylist chat"
    )
    chat_max_tokens: int = Field(default=150, description="Max tokens per stylist reply")
    chat_temperature: float = Field(default=0.8, description="Sampling temperature for stylist replies")

    @property
    def pexels_configured(self) -> bool:
        return bool(self.pexels_api_key)

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
        "pexels_api_key": "",
        "openai_api_key": "",
    }
    test_defaults.update(overrides)

    return Settings(_env_file=None, **test_defaults)
