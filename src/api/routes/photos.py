"""
Photo listing routes (swipe deck).

NOTE: Routes use `def` (not `async def`) because the provider client and
the catalog scan are synchronous. FastAPI runs sync handlers in a thread
pool, so concurrent swipe requests do not block each other.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from config.constants import DEFAULT_BATCH_CONFIG
from config.settings import get_settings
from photos.factory import get_photo_service
from photos.models import PhotoRecord, normalize_audience
from photos.service import PhotoService

router = APIRouter(prefix="/api", tags=["Photos"])


class PhotoListResponse(BaseModel):
    photos: List[PhotoRecord]
    count: int
    ratio: int
    gender: str


@router.get(
    "/photos",
    response_model=PhotoListResponse,
    summary="Swipe deck batch from the local catalog and Pexels",
)
def list_photos(
    gender: Optional[str] = Query(None, description="'male'/'men' or 'female'/'women' (default female)"),
    ratio: Optional[int] = Query(
        None,
        ge=DEFAULT_BATCH_CONFIG.MIN_RATIO,
        le=DEFAULT_BATCH_CONFIG.MAX_RATIO,
        description="Percentage of the batch drawn from Pexels",
    ),
    count: int = Query(DEFAULT_BATCH_CONFIG.LISTING_TOTAL, ge=1, le=80),
    service: PhotoService = Depends(get_photo_service),
) -> PhotoListResponse:
    """
    Photos for the swipe deck.

    - **ratio=0**: local catalog only
    - **ratio=100**: Pexels only; provider failures are returned as errors
    - anything else: mixed, Pexels outages silently fall back to the catalog
    """
    try:
        audience = normalize_audience(gender)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if ratio is None:
        ratio = get_settings().default_pexels_ratio

    photos = service.list_photos(audience, ratio, count)
    return PhotoListResponse(
        photos=photos,
        count=len(photos),
        ratio=ratio,
        gender=audience.value,
    )
