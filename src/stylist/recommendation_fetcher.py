"""
Recommendation fetching from the photo provider.

Queries the provider directly with the synthesized keywords. The recency
cache used by the swipe deck is deliberately not consulted here.

Fallback chain:
    1. audience + first three keywords
    2. audience + "fashion outfit"   (when 1 fails or finds nothing)
    3. empty list                    (when 2 fails or finds nothing)
"""

from typing import List, Sequence

from config.constants import DEFAULT_BATCH_CONFIG, DEFAULT_SEARCH_CONFIG, SearchConfig
from core.errors import PhotoSourceError
from core.logging import get_logger
from core.utils import dedupe_by
from photos.models import Audience, PhotoRecord
from photos.pexels_client import PexelsClient
from photos.search_adapter import build_query

logger = get_logger(__name__)


class RecommendationFetcher:

    def __init__(
        self,
        client: PexelsClient,
        query_prefix: str = "",
        config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    ):
        self.client = client
        self.query_prefix = query_prefix
        self._config = config

    def keyword_query(self, keywords: Sequence[str], audience: Audience) -> str:
        return build_query(
            self.query_prefix,
            audience.search_word,
            *keywords[: self._config.RECOMMENDATION_KEYWORDS],
        )

    def generic_query(self, audience: Audience) -> str:
        return build_query(self.query_prefix, audience.search_word, self._config.GENERIC_QUERY)

    def fetch(
        self,
        keywords: Sequence[str],
        audience: Audience,
        limit: int = DEFAULT_BATCH_CONFIG.RECOMMENDATION_TOTAL,
    ) -> List[PhotoRecord]:
        """
        Up to ``limit`` photos matching the keywords. Never raises; an empty
        list means nothing was found even with the generic query.
        """
        if limit <= 0:
            return []

        photos = self._search(self.keyword_query(keywords, audience), limit)
        if photos:
            return photos

        logger.info("No keyword matches, retrying with generic query", audience=audience.value)
        photos = self._search(self.generic_query(audience), limit)
        if not photos:
            logger.warning("Generic recommendation query found nothing", audience=audience.value)
        return photos

    def _search(self, query: str, limit: int) -> List[PhotoRecord]:
        try:
            photos = self.client.search(
                query,
                per_page=limit,
                page=1,
                orientation=self._config.ORIENTATION,
            )
        except PhotoSourceError as e:
            logger.warning(
                "Recommendation search failed",
                query=query,
                error=str(e),
                error_type=e.error_type,
            )
            return []

        photos = dedupe_by(photos, key=lambda p: p.id)[:limit]
        logger.info("Recommendation search", query=query, returned=len(photos))
        return photos
