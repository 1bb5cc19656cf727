"""
Local catalog source.

Enumerates image files in the catalog directory, keeps those the gender
rules accept for the requested audience, optionally narrows them by
style keywords, and returns a random sample as PhotoRecords.
"""

import random
import re
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from config.constants import DEFAULT_CATALOG_CONFIG, CatalogConfig
from core.errors import LocalSourceUnavailableError
from core.logging import get_logger
from core.utils import shuffled
from photos.gender_rules import GenderRules, load_gender_rules
from photos.models import Attribution, Audience, PhotoRecord, PhotoSource, PhotoUrls

logger = get_logger(__name__)

_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|webp)$", re.IGNORECASE)
_TRAILING_NUMBER_RE = re.compile(r"[_-]\d+$")


def generate_alt_text(filename: str, audience: Audience) -> str:
    """
    Describe a catalog file from its name, e.g. "Women's street outfit".
    """
    base = _TRAILING_NUMBER_RE.sub("", _EXTENSION_RE.sub("", filename)).lower()
    category = "fashion"
    for candidate in DEFAULT_CATALOG_CONFIG.ALT_TEXT_CATEGORIES:
        if candidate in base:
            category = candidate
            break
    return f"{audience.label} {category} outfit"


class CatalogFilter:
    """
    Audience-aware sampler over the local photo directory.

    The gender rules are loaded on first use and kept for the lifetime of
    the instance.
    """

    def __init__(
        self,
        catalog_dir: Path,
        rules_path: Optional[Path] = None,
        url_prefix: str = "/images",
        rng: Optional[random.Random] = None,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    ):
        self.catalog_dir = Path(catalog_dir)
        self.rules_path = rules_path
        self.url_prefix = url_prefix.rstrip("/")
        self._rng = rng or random.Random()
        self._config = config
        self._rules: Optional[GenderRules] = None
        self._rules_lock = threading.Lock()

    @property
    def rules(self) -> GenderRules:
        if self._rules is None:
            with self._rules_lock:
                if self._rules is None:
                    self._rules = load_gender_rules(self.rules_path)
        return self._rules

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def list_image_files(self) -> List[str]:
        """
        Sorted image filenames in the catalog directory.

        Raises:
            LocalSourceUnavailableError: If the directory cannot be read.
        """
        try:
            names = [p.name for p in self.catalog_dir.iterdir() if p.is_file()]
        except OSError as e:
            raise LocalSourceUnavailableError(
                f"Catalog directory unreadable: {self.catalog_dir} ({e})"
            ) from e
        return sorted(n for n in names if n.lower().endswith(self._config.IMAGE_EXTENSIONS))

    def matching_files(
        self,
        audience: Audience,
        keywords: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """Files accepted for ``audience``, narrowed by ``keywords`` when enough match."""
        return self._filter(self.list_image_files(), audience, keywords)

    def _filter(
        self,
        files: Sequence[str],
        audience: Audience,
        keywords: Optional[Sequence[str]],
    ) -> List[str]:
        rules = self.rules
        candidates = [f for f in files if rules.accepts(f, audience)]

        needles = [k.lower() for k in (keywords or []) if k and k.strip()]
        if not needles:
            return candidates

        narrowed = [f for f in candidates if any(k in f.lower() for k in needles)]
        if len(narrowed) < self._config.MIN_KEYWORD_MATCHES:
            logger.debug(
                "Too few keyword matches in catalog, using audience filter only",
                matched=len(narrowed),
                keywords=needles,
            )
            return candidates
        return narrowed

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(
        self,
        audience: Audience,
        limit: int,
        keywords: Optional[Sequence[str]] = None,
    ) -> List[PhotoRecord]:
        """
        Random sample of up to ``limit`` catalog photos.

        Raises:
            LocalSourceUnavailableError: If the directory cannot be read.
        """
        if limit <= 0:
            return []

        all_files = self.list_image_files()
        index_of = {name: i for i, name in enumerate(all_files)}
        chosen = shuffled(self._filter(all_files, audience, keywords), self._rng)[:limit]

        logger.debug(
            "Selected catalog photos",
            audience=audience.value,
            requested=limit,
            returned=len(chosen),
        )
        return [self._to_record(name, index_of[name], audience) for name in chosen]

    def select_safely(
        self,
        audience: Audience,
        limit: int,
        keywords: Optional[Sequence[str]] = None,
    ) -> List[PhotoRecord]:
        """Like ``select`` but an unreadable catalog yields an empty list."""
        try:
            return self.select(audience, limit, keywords)
        except LocalSourceUnavailableError as e:
            logger.warning("Local catalog unavailable", error=str(e))
            return []

    def _to_record(self, filename: str, catalog_index: int, audience: Audience) -> PhotoRecord:
        url = f"{self.url_prefix}/{filename}"
        return PhotoRecord(
            id=-(catalog_index + 1),
            width=self._config.DEFAULT_WIDTH,
            height=self._config.DEFAULT_HEIGHT,
            urls=PhotoUrls.single(url),
            attribution=Attribution(name=self._config.ATTRIBUTION_NAME),
            alt_text=generate_alt_text(filename, audience),
            source=PhotoSource.LOCAL,
            avg_color=self._config.DEFAULT_AVG_COLOR,
            page_url=url,
        )

    def stats(self) -> dict:
        """Diagnostics for the health endpoint."""
        try:
            count = len(self.list_image_files())
            readable = True
        except LocalSourceUnavailableError:
            count = 0
            readable = False
        return {
            "catalog_dir": str(self.catalog_dir),
            "readable": readable,
            "image_count": count,
            "rules_loaded": not self.rules.is_empty,
        }
