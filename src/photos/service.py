"""
Photo engine entry points.

PhotoService wires the sources together and exposes the two operations the
UI layer consumes:

    list_photos(audience, ratio, count)          -> swipe deck batch
    recommend(liked, audience, hint, ratio)      -> recommendations

All collaborators are injected so tests can swap the provider, the catalog
directory, the OpenAI-backed synthesizer and the random source.
"""

import random
from typing import List, Optional, Sequence

from config.constants import DEFAULT_BATCH_CONFIG
from core.logging import get_logger
from core.utils import dedupe_by, shuffled, split_by_ratio
from photos.catalog import CatalogFilter
from photos.mixer import RatioMixer
from photos.models import Audience, PhotoRecord, Recommendation
from photos.recency_cache import RecencyCache
from photos.search_adapter import SearchAdapter
from stylist.keyword_synthesizer import KeywordSynthesizer
from stylist.recommendation_fetcher import RecommendationFetcher

logger = get_logger(__name__)


class PhotoService:

    def __init__(
        self,
        catalog: CatalogFilter,
        search: SearchAdapter,
        synthesizer: KeywordSynthesizer,
        fetcher: RecommendationFetcher,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.search = search
        self.synthesizer = synthesizer
        self.fetcher = fetcher
        self._rng = rng or random.Random()
        self.mixer = RatioMixer(catalog, search, rng=self._rng)

    @property
    def recency_cache(self) -> RecencyCache:
        return self.search.cache

    # =========================================================================
    # Listing
    # =========================================================================

    def list_photos(
        self,
        audience: Audience,
        ratio: int,
        count: int = DEFAULT_BATCH_CONFIG.LISTING_TOTAL,
    ) -> List[PhotoRecord]:
        """
        Swipe deck batch of at most ``count`` photos.

        Raises:
            PhotoSourceError: Only at ratio == 100 when the provider fails.
            ValueError: If ratio is outside [0, 100].
        """
        return self.mixer.mix(audience, ratio, count)

    # =========================================================================
    # Recommendations
    # =========================================================================

    def recommend(
        self,
        liked: Sequence[PhotoRecord],
        audience: Audience,
        hint: Optional[str] = None,
        ratio: int = DEFAULT_BATCH_CONFIG.MAX_RATIO,
    ) -> List[PhotoRecord]:
        """Recommended photos; an empty list means nothing matched."""
        return self.recommend_detailed(liked, audience, hint, ratio).photos

    def recommend_detailed(
        self,
        liked: Sequence[PhotoRecord],
        audience: Audience,
        hint: Optional[str] = None,
        ratio: int = DEFAULT_BATCH_CONFIG.MAX_RATIO,
    ) -> Recommendation:
        """
        Recommendations plus the keywords that produced them. Never raises
        for source failures.

        Raises:
            ValueError: If ``liked`` is empty or ratio is outside [0, 100].
        """
        if not liked:
            raise ValueError("liked photos must not be empty")

        total = DEFAULT_BATCH_CONFIG.RECOMMENDATION_TOTAL
        remote_count, _ = split_by_ratio(total, ratio)

        synthesis = self.synthesizer.synthesize(liked, hint)
        keywords = synthesis.keywords

        remote: List[PhotoRecord] = []
        if remote_count > 0:
            remote = self.fetcher.fetch(keywords, audience, limit=remote_count)

        local: List[PhotoRecord] = []
        if ratio < 100:
            local = self.catalog.select_safely(audience, total - len(remote), keywords=keywords)

        photos = remote + local
        if remote and local:
            photos = shuffled(photos, self._rng)
        photos = dedupe_by(photos, key=lambda p: p.id)[:total]

        logger.info(
            "Built recommendations",
            audience=audience.value,
            ratio=ratio,
            liked=len(liked),
            keywords=keywords,
            keyword_source=synthesis.source.value,
            remote=len(remote),
            local=len(local),
        )
        return Recommendation(
            photos=photos,
            keywords=keywords,
            keyword_source=synthesis.source.value,
        )

    def stats(self) -> dict:
        return {
            "catalog": self.catalog.stats(),
            "recency_cache": self.recency_cache.get_stats(),
            "pexels_configured": self.search.client.is_configured(),
            "keyword_synthesis_enabled": self.synthesizer.enabled,
        }
