"""
Application constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


# =============================================================================
# Batch Sizes
# =============================================================================

@dataclass(frozen=True)
class BatchConfig:
    """Result batch sizes for the two engine entry points."""

    # Swipe deck listing
    LISTING_TOTAL: int = 30

    # Recommendation page
    RECOMMENDATION_TOTAL: int = 10

    # Ratio bounds (percentage of the batch drawn from the provider)
    MIN_RATIO: int = 0
    MAX_RATIO: int = 100


DEFAULT_BATCH_CONFIG = BatchConfig()


# =============================================================================
# Recency Cache
# =============================================================================

@dataclass(frozen=True)
class RecencyConfig:
    """Sizing for the provider recency cache."""

    # Trim starts once the cache grows past this many ids
    SOFT_CAPACITY: int = 200

    # Number of most recent ids kept after a trim
    TRIM_TARGET: int = 150

    # Below this many fresh photos the cache is cleared and the raw batch used
    MIN_FRESH: int = 10


DEFAULT_RECENCY_CONFIG = RecencyConfig()


# =============================================================================
# Provider Search
# =============================================================================

@dataclass(frozen=True)
class SearchConfig:
    """Query diversification for the external photo provider."""

    # {audience} is replaced with the audience search word
    QUERY_TEMPLATES: Tuple[str, ...] = (
        "{audience} fashion outfit full body",
        "{audience} street style outfit",
        "{audience} casual fashion",
        "{audience} minimalist outfit",
        "{audience} fashion portrait full length",
        "{audience} trendy outfit city",
    )

    # Pages are drawn uniformly from 1..MAX_PAGE
    MAX_PAGE: int = 5

    # Provider per_page bounds for listing calls
    MIN_PAGE_SIZE: int = 30
    MAX_PAGE_SIZE: int = 80

    ORIENTATION: str = "portrait"

    # Recommendation fetches
    RECOMMENDATION_KEYWORDS: int = 3
    GENERIC_QUERY: str = "fashion outfit"


DEFAULT_SEARCH_CONFIG = SearchConfig()


# =============================================================================
# Local Catalog
# =============================================================================

@dataclass(frozen=True)
class CatalogConfig:
    """Local catalog conventions."""

    IMAGE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")

    # Local files carry no dimension metadata; they are served as portrait frames
    DEFAULT_WIDTH: int = 800
    DEFAULT_HEIGHT: int = 1200
    DEFAULT_AVG_COLOR: str = "#CCCCCC"

    ATTRIBUTION_NAME: str = "Local Collection"

    # Keyword filtering is dropped when fewer files than this survive it
    MIN_KEYWORD_MATCHES: int = 5

    RULES_FILENAME: str = "gender_rules.json"

    # Alt-text category detection, first match wins
    ALT_TEXT_CATEGORIES: Tuple[str, ...] = ("casual", "formal", "street", "business")


DEFAULT_CATALOG_CONFIG = CatalogConfig()


# =============================================================================
# Keyword Synthesis
# =============================================================================

@dataclass(frozen=True)
class KeywordConfig:
    """Bounds on the synthesized style keyword set."""

    MIN_KEYWORDS: int = 3
    MAX_KEYWORDS: int = 5

    FALLBACK_KEYWORDS: List[str] = field(default_factory=lambda: [
        "fashion outfit",
        "style",
        "clothing",
        "trendy",
        "full body",
    ])


DEFAULT_KEYWORD_CONFIG = KeywordConfig()

# Module-level alias used by the synthesizer and tests
FALLBACK_KEYWORDS: Tuple[str, ...] = tuple(DEFAULT_KEYWORD_CONFIG.FALLBACK_KEYWORDS)
