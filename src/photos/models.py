"""
Pydantic models for the photo engine.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================

class Audience(str, Enum):
    """Which catalog/query audience a request targets."""
    MALE = "male"
    FEMALE = "female"

    @property
    def search_word(self) -> str:
        """Word used in provider queries."""
        return self.value

    @property
    def label(self) -> str:
        """Possessive label used in generated alt text."""
        return "Men's" if self is Audience.MALE else "Women's"


class PhotoSource(str, Enum):
    """Where a photo came from."""
    LOCAL = "local"
    PEXELS = "pexels"


_AUDIENCE_ALIASES: Dict[str, Audience] = {
    "male": Audience.MALE,
    "man": Audience.MALE,
    "men": Audience.MALE,
    "m": Audience.MALE,
    "mens": Audience.MALE,
    "menswear": Audience.MALE,
    "female": Audience.FEMALE,
    "woman": Audience.FEMALE,
    "women": Audience.FEMALE,
    "w": Audience.FEMALE,
    "f": Audience.FEMALE,
    "womens": Audience.FEMALE,
    "womenswear": Audience.FEMALE,
}


def normalize_audience(value: Optional[str]) -> Audience:
    """
    Normalize an audience/gender string.

    Missing values default to the female audience, like the swipe page does.

    Raises:
        ValueError: For values that are not a known alias.
    """
    if isinstance(value, Audience):
        return value
    if value is None or not str(value).strip():
        return Audience.FEMALE
    key = str(value).strip().lower().replace("'", "")
    try:
        return _AUDIENCE_ALIASES[key]
    except KeyError:
        raise ValueError(f"Unknown audience: {value!r}") from None


# ============================================================================
# Photo Record
# ============================================================================

class PhotoUrls(BaseModel):
    """Resolution variants of the same image."""
    model_config = ConfigDict(frozen=True)

    original: str
    large: str = Field(..., min_length=1)
    medium: str = Field(..., min_length=1)
    small: str = ""
    thumbnail: str = ""

    @classmethod
    def single(cls, url: str) -> "PhotoUrls":
        """All variants pointing at the same file (local catalog)."""
        return cls(original=url, large=url, medium=url, small=url, thumbnail=url)


class Attribution(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: Optional[str] = None


class PhotoRecord(BaseModel):
    """
    One photo, independent of source.

    Local ids are negative and provider ids positive, so ids never collide
    inside a mixed batch.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    urls: PhotoUrls
    attribution: Attribution
    alt_text: str = ""
    source: PhotoSource
    avg_color: Optional[str] = None
    page_url: Optional[str] = None
    liked: bool = False

    def summary(self) -> Dict[str, Any]:
        """Compact description sent to the keyword synthesizer."""
        return {
            "id": self.id,
            "description": self.alt_text,
            "source": self.source.value,
            "attribution": self.attribution.name,
            "orientation": "portrait" if self.height >= self.width else "landscape",
        }


def photo_from_pexels(payload: Dict[str, Any]) -> Optional[PhotoRecord]:
    """
    Normalize one Pexels photo descriptor.

    Returns None when the descriptor lacks an id, dimensions or the
    medium/large variants consumers depend on.
    """
    if not isinstance(payload, dict):
        return None
    src = payload.get("src")
    if not isinstance(src, dict):
        return None

    large = src.get("large") or src.get("large2x")
    medium = src.get("medium")
    photo_id = payload.get("id")
    width = payload.get("width")
    height = payload.get("height")
    if not large or not medium or not isinstance(photo_id, int) or photo_id <= 0:
        return None
    if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
        return None

    return PhotoRecord(
        id=photo_id,
        width=width,
        height=height,
        urls=PhotoUrls(
            original=src.get("original") or large,
            large=large,
            medium=medium,
            small=src.get("small") or medium,
            thumbnail=src.get("tiny") or src.get("small") or medium,
        ),
        attribution=Attribution(
            name=payload.get("photographer") or "Pexels",
            url=payload.get("photographer_url") or None,
        ),
        alt_text=(payload.get("alt") or "").strip() or "Fashion outfit photo",
        source=PhotoSource.PEXELS,
        avg_color=payload.get("avg_color"),
        page_url=payload.get("url"),
    )


# ============================================================================
# Result Models
# ============================================================================

class Recommendation(BaseModel):
    """Detailed recommendation result (photos plus the keywords behind them)."""
    photos: List[PhotoRecord] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    keyword_source: str = "model"
