"""
Recommendation routes.

Takes the photos liked in the swipe deck (the UI keeps them in its own
session storage) and returns similar photos. Finding nothing is a normal
answer: an empty list the UI turns into a "try different likes" prompt.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from config.constants import DEFAULT_BATCH_CONFIG
from core.logging import get_logger
from photos.factory import get_photo_service
from photos.models import PhotoRecord, normalize_audience
from photos.service import PhotoService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Recommendations"])


class RecommendRequest(BaseModel):
    liked_photos: List[PhotoRecord] = Field(..., min_length=1, max_length=100)
    gender: Optional[str] = Field(default=None, description="'male'/'men' or 'female'/'women'")
    custom_prompt: Optional[str] = Field(default=None, max_length=500, description="Free-text style hint")
    ratio: int = Field(
        default=DEFAULT_BATCH_CONFIG.MAX_RATIO,
        ge=DEFAULT_BATCH_CONFIG.MIN_RATIO,
        le=DEFAULT_BATCH_CONFIG.MAX_RATIO,
        description="Percentage of recommendations drawn from Pexels",
    )


class RecommendResponse(BaseModel):
    photos: List[PhotoRecord]
    keywords: List[str]
    keyword_source: str
    count: int


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    summary="Recommendations from liked photos",
)
def recommend(
    request: RecommendRequest,
    service: PhotoService = Depends(get_photo_service),
) -> RecommendResponse:
    try:
        audience = normalize_audience(request.gender)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = service.recommend_detailed(
        request.liked_photos,
        audience,
        hint=request.custom_prompt,
        ratio=request.ratio,
    )
    if not result.photos:
        logger.info("No recommendations found", keywords=result.keywords)

    return RecommendResponse(
        photos=result.photos,
        keywords=result.keywords,
        keyword_source=result.keyword_source,
        count=len(result.photos),
    )
