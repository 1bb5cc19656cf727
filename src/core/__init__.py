"""
Core module for cross-cutting concerns.

This module provides:
- Structured logging configuration
- Request tracing middleware
- Typed photo source errors
- Common utilities
"""

from core.errors import (
    LocalSourceUnavailableError,
    MalformedResponseError,
    MissingCredentialError,
    PhotoSourceError,
    UpstreamError,
)
from core.logging import configure_logging, get_logger
from core.utils import dedupe_by, normalize_string_list, shuffled, split_by_ratio

__all__ = [
    "configure_logging",
    "get_logger",
    "PhotoSourceError",
    "MissingCredentialError",
    "UpstreamError",
    "MalformedResponseError",
    "LocalSourceUnavailableError",
    "dedupe_by",
    "normalize_string_list",
    "shuffled",
    "split_by_ratio",
]
