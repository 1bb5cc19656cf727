"""
LLM-based style keyword synthesis.

Turns the photos a user liked in the swipe deck (plus an optional free-text
hint such as "minimalist streetwear") into 3-5 search keywords describing
their common style.

Falls back to a fixed keyword set when:
- OpenAI API key is not configured
- Feature flag is disabled
- The call fails (network, auth, rate limit, timeout)
- The model returns an empty, invalid or unparseable response

The result always says which of the two happened.
"""

import json
import threading
import time
from enum import Enum
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from config.constants import DEFAULT_KEYWORD_CONFIG, FALLBACK_KEYWORDS, KeywordConfig
from config.settings import Settings, get_settings
from core.logging import get_logger
from core.utils import normalize_string_list
from photos.models import PhotoRecord

logger = get_logger(__name__)


# =============================================================================
# Result Types
# =============================================================================

class KeywordSource(str, Enum):
    MODEL = "model"
    FALLBACK = "fallback"


class StyleKeywords(BaseModel):
    """Structured output expected from the model."""
    keywords: List[Any] = Field(default_factory=list)


class KeywordSynthesis(BaseModel):
    """Keywords plus where they came from."""
    keywords: List[str]
    source: KeywordSource
    reason: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.source is KeywordSource.FALLBACK

    @classmethod
    def fallback(cls, reason: str) -> "KeywordSynthesis":
        return cls(keywords=list(FALLBACK_KEYWORDS), source=KeywordSource.FALLBACK, reason=reason)


# =============================================================================
# Prompts
# =============================================================================

_SYSTEM_PROMPT = (
    "You are a fashion expert who can identify style patterns and generate "
    "relevant search keywords for a photo search engine."
)


def build_prompt(liked: Sequence[PhotoRecord], hint: Optional[str], max_keywords: int) -> str:
    summaries = [photo.summary() for photo in liked]
    prompt = (
        "I have liked these fashion outfit photos:\n"
        f"{json.dumps(summaries, ensure_ascii=False)}\n\n"
        "Based on these photos, identify the common fashion style elements and "
        f"generate {max_keywords} specific search keywords or short phrases that "
        "would help find similar outfits."
    )
    if hint and hint.strip():
        prompt += (
            "\n\nAdditionally, give strong weight to this specific request from the user: "
            f"\"{hint.strip()}\""
        )
    prompt += (
        '\n\nReturn ONLY a JSON object of the form {"keywords": ["...", "..."]}. '
        "No markdown, no explanation."
    )
    return prompt


# =============================================================================
# Synthesizer
# =============================================================================

class KeywordSynthesizer:
    """Style keyword synthesis using OpenAI chat completions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: KeywordConfig = DEFAULT_KEYWORD_CONFIG,
    ):
        self._client = None
        self._client_lock = threading.Lock()
        settings = settings or get_settings()
        self._api_key = settings.openai_api_key
        self._organization = settings.openai_org_id or None
        self._model = settings.keyword_model
        self._timeout = settings.openai_timeout_seconds
        self._enabled = settings.keyword_synthesis_enabled and bool(self._api_key)
        self._config = config

    @property
    def client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    from openai import OpenAI
                    self._client = OpenAI(
                        api_key=self._api_key,
                        organization=self._organization,
                        timeout=self._timeout,
                        max_retries=0,
                    )
        return self._client

    @property
    def enabled(self) -> bool:
        return self._enabled

    def synthesize(
        self,
        liked: Sequence[PhotoRecord],
        hint: Optional[str] = None,
    ) -> KeywordSynthesis:
        """
        Produce a style keyword set. Never raises.
        """
        if not self._enabled:
            logger.debug("Keyword synthesis disabled (no API key or feature flag off)")
            return KeywordSynthesis.fallback("disabled")
        if not liked:
            return KeywordSynthesis.fallback("no_liked_photos")

        t_start = time.time()
        try:
            response = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(liked, hint, self._config.MAX_KEYWORDS)},
                ],
                temperature=0.3,
                max_tokens=200,
                response_format={"type": "json_object"},
            )
            raw = response.choices[0].message.content
        except Exception as e:
            latency_ms = int((time.time() - t_start) * 1000)
            logger.warning(
                "Keyword synthesis failed, using fallback keywords",
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=latency_ms,
            )
            return KeywordSynthesis.fallback("service_error")

        result = self.parse(raw)
        logger.info(
            "Synthesized style keywords",
            keywords=result.keywords,
            source=result.source.value,
            reason=result.reason,
            liked=len(liked),
            has_hint=bool(hint),
            latency_ms=int((time.time() - t_start) * 1000),
        )
        return result

    def parse(self, raw: Optional[str]) -> KeywordSynthesis:
        """Parse a model response, falling back on any shape problem."""
        if not raw or not raw.strip():
            logger.warning("Keyword synthesis returned empty response")
            return KeywordSynthesis.fallback("empty_response")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Keyword synthesis returned invalid JSON", error=str(e))
            return KeywordSynthesis.fallback("invalid_json")

        if isinstance(data, list):
            # Some models answer with a bare array despite the instructions
            data = {"keywords": data}
        if not isinstance(data, dict):
            return KeywordSynthesis.fallback("unexpected_shape")

        try:
            parsed = StyleKeywords(**data)
        except (TypeError, ValidationError) as e:
            logger.warning("Keyword synthesis response failed validation", error=str(e))
            return KeywordSynthesis.fallback("unexpected_shape")

        keywords = normalize_string_list(parsed.keywords)[: self._config.MAX_KEYWORDS]
        if len(keywords) < self._config.MIN_KEYWORDS:
            logger.warning("Keyword synthesis returned too few keywords", keywords=keywords)
            return KeywordSynthesis.fallback("too_few_keywords")

        return KeywordSynthesis(keywords=keywords, source=KeywordSource.MODEL)
