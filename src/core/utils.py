"""
Core Utility Functions.

Small helpers shared by the photo sources and the stylist package.
"""

import math
import random
from typing import Callable, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def shuffled(items: Iterable[T], rng: Optional[random.Random] = None) -> List[T]:
    """
    Return a uniformly shuffled copy of ``items``.

    ``random.Random.shuffle`` is a Fisher-Yates shuffle; the input is never
    mutated so callers can keep their own ordering.
    """
    out = list(items)
    (rng or random).shuffle(out)
    return out


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def split_by_ratio(total: int, ratio: int) -> Tuple[int, int]:
    """
    Split a batch size between the provider and the local catalog.

    Args:
        total: Batch size.
        ratio: Percentage (0-100) of the batch drawn from the provider.

    Returns:
        (remote_count, local_count), always summing to ``total``.
    """
    if not 0 <= ratio <= 100:
        raise ValueError(f"ratio must be within [0, 100], got {ratio}")
    remote = round_half_up(total * ratio / 100)
    return remote, total - remote


def dedupe_by(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Drop later items whose key was already seen, preserving order."""
    seen = set()
    out: List[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out


def normalize_string_list(values: Optional[Sequence[object]]) -> List[str]:
    """
    Strip strings, drop empties and non-strings, dedupe case-insensitively.

    Order of first appearance is preserved.
    """
    if not values:
        return []
    seen = set()
    out: List[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        text = " ".join(value.split())
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        out.append(text)
    return out
