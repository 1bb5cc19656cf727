"""
Photo Module: local catalog + Pexels aggregation.

Provides:
- PhotoRecord / Audience models
- CatalogFilter: audience-aware local catalog sampling
- SearchAdapter: diversified, recency-filtered Pexels listing
- RecencyCache: bounded set of recently served provider ids
- RatioMixer: blends both sources at a caller-chosen percentage

The PhotoService and its factory live in photos.service / photos.factory.
"""

from photos.models import Audience, PhotoRecord, PhotoSource, normalize_audience
from photos.recency_cache import RecencyCache

__all__ = [
    "Audience",
    "PhotoRecord",
    "PhotoSource",
    "normalize_audience",
    "RecencyCache",
]
