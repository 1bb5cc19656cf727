"""
Ratio mixer: blends the local catalog and the provider into one batch.

Policy:
    ratio == 0    -> local catalog only, the provider is never called
    ratio == 100  -> provider only, provider failures propagate
    otherwise     -> provider for round(total * ratio / 100), local catalog
                     fills whatever the provider did not deliver

Local catalog failures always degrade to an empty local contribution.
"""

import random
from typing import List, Optional

from core.errors import LocalSourceUnavailableError, PhotoSourceError
from core.logging import get_logger
from core.utils import shuffled, split_by_ratio
from photos.catalog import CatalogFilter
from photos.models import Audience, PhotoRecord
from photos.search_adapter import SearchAdapter

logger = get_logger(__name__)


class RatioMixer:

    def __init__(
        self,
        catalog: CatalogFilter,
        search: SearchAdapter,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.search = search
        self._rng = rng or random.Random()

    def mix(self, audience: Audience, ratio: int, total: int) -> List[PhotoRecord]:
        """
        Build a batch of at most ``total`` photos.

        Raises:
            PhotoSourceError: Only when ratio == 100 and the provider fails.
            ValueError: If ratio is outside [0, 100].
        """
        remote_count, local_count = split_by_ratio(total, ratio)

        if ratio == 0:
            return self._local(audience, local_count)

        if ratio == 100:
            return self.search.fetch(audience, remote_count)

        try:
            remote = self.search.fetch(audience, remote_count)
        except PhotoSourceError as e:
            logger.warning(
                "Provider unavailable, filling batch from local catalog",
                error=str(e),
                error_type=e.error_type,
                requested_remote=remote_count,
            )
            remote = []

        local = self._local(audience, total - len(remote))
        combined = shuffled(remote + local, self._rng)

        logger.info(
            "Mixed photo batch",
            audience=audience.value,
            ratio=ratio,
            remote=len(remote),
            local=len(local),
            total=len(combined),
        )
        return combined

    def _local(self, audience: Audience, count: int) -> List[PhotoRecord]:
        try:
            return self.catalog.select(audience, count)
        except LocalSourceUnavailableError as e:
            logger.warning("Local catalog unavailable, contributing no local photos", error=str(e))
            return []
