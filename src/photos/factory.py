"""
Service Factory Module.

Builds the PhotoService once per process. The recency cache is created
here and shared by every request through the service instance.
"""

import random
import threading
from typing import Optional

from config.settings import Settings, get_settings
from core.logging import get_logger
from photos.catalog import CatalogFilter
from photos.pexels_client import PexelsClient
from photos.recency_cache import RecencyCache
from photos.search_adapter import SearchAdapter
from photos.service import PhotoService
from stylist.chat import StylistChat
from stylist.keyword_synthesizer import KeywordSynthesizer
from stylist.recommendation_fetcher import RecommendationFetcher

logger = get_logger(__name__)


def build_photo_service(
    settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
) -> PhotoService:
    """Assemble a PhotoService from settings."""
    settings = settings or get_settings()
    rng = rng or random.Random()

    client = PexelsClient(
        api_key=settings.pexels_api_key,
        base_url=settings.pexels_api_base_url,
        timeout_seconds=settings.pexels_request_timeout_seconds,
    )
    catalog = CatalogFilter(
        catalog_dir=settings.catalog_dir,
        rules_path=settings.catalog_rules_file,
        url_prefix=settings.catalog_url_prefix,
        rng=rng,
    )
    search = SearchAdapter(
        client=client,
        cache=RecencyCache(),
        query_prefix=settings.search_query_prefix,
        rng=rng,
    )
    fetcher = RecommendationFetcher(client=client, query_prefix=settings.search_query_prefix)

    logger.info(
        "Built photo service",
        catalog_dir=str(settings.catalog_dir),
        pexels_configured=client.is_configured(),
        openai_configured=settings.openai_configured,
    )
    return PhotoService(
        catalog=catalog,
        search=search,
        synthesizer=KeywordSynthesizer(settings),
        fetcher=fetcher,
        rng=rng,
    )


# =============================================================================
# Singletons
# =============================================================================

_service: Optional[PhotoService] = None
_chat: Optional[StylistChat] = None
_lock = threading.Lock()


def get_photo_service() -> PhotoService:
    """Get or create the PhotoService singleton (thread-safe)."""
    global _service
    if _service is None:
        with _lock:
            if _service is None:
                _service = build_photo_service()
    return _service


def get_stylist_chat() -> StylistChat:
    """Get or create the StylistChat singleton (thread-safe)."""
    global _chat
    if _chat is None:
        with _lock:
            if _chat is None:
                _chat = StylistChat()
    return _chat


def reset_services() -> None:
    """Drop the singletons (tests)."""
    global _service, _chat
    with _lock:
        _service = None
        _chat = None
