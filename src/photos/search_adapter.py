"""
Provider source for the swipe deck.

Each call picks a random query template and a random result page so that
identical listing requests still surface different photos, then filters
the batch through the injected recency cache.
"""

import random
from typing import List, Optional

from config.constants import DEFAULT_RECENCY_CONFIG, DEFAULT_SEARCH_CONFIG, SearchConfig
from core.errors import MalformedResponseError
from core.logging import get_logger
from photos.models import Audience, PhotoRecord
from photos.pexels_client import PexelsClient
from photos.recency_cache import RecencyCache

logger = get_logger(__name__)


def build_query(prefix: str, *parts: str) -> str:
    """Join query words, skipping empties and collapsing whitespace."""
    return " ".join(" ".join(p for p in (prefix, *parts) if p).split())


class SearchAdapter:
    """Diversified, recency-filtered provider listing."""

    def __init__(
        self,
        client: PexelsClient,
        cache: RecencyCache,
        query_prefix: str = "",
        rng: Optional[random.Random] = None,
        config: SearchConfig = DEFAULT_SEARCH_CONFIG,
        min_fresh: int = DEFAULT_RECENCY_CONFIG.MIN_FRESH,
    ):
        self.client = client
        self.cache = cache
        self.query_prefix = query_prefix
        self._rng = rng or random.Random()
        self._config = config
        self._min_fresh = min_fresh

    def pick_query(self, audience: Audience) -> str:
        template = self._rng.choice(self._config.QUERY_TEMPLATES)
        return build_query(self.query_prefix, template.format(audience=audience.search_word))

    def pick_page(self) -> int:
        return self._rng.randint(1, self._config.MAX_PAGE)

    def page_size_for(self, count: int) -> int:
        return max(self._config.MIN_PAGE_SIZE, min(self._config.MAX_PAGE_SIZE, count * 2))

    def fetch(self, audience: Audience, count: int) -> List[PhotoRecord]:
        """
        Up to ``count`` provider photos, avoiding recently served ones.

        Raises:
            MissingCredentialError, UpstreamError, MalformedResponseError
        """
        if count <= 0:
            return []

        query = self.pick_query(audience)
        page = self.pick_page()
        batch = self.client.search(
            query,
            per_page=self.page_size_for(count),
            page=page,
            orientation=self._config.ORIENTATION,
        )
        if not batch:
            raise MalformedResponseError(f"No photos received from Pexels for {query!r} page {page}")

        chosen = self.cache.take_fresh(
            batch,
            limit=count,
            key=lambda photo: photo.id,
            min_fresh=self._min_fresh,
            rng=self._rng,
        )
        logger.info(
            "Fetched provider photos",
            query=query,
            page=page,
            received=len(batch),
            returned=len(chosen),
        )
        return chosen
