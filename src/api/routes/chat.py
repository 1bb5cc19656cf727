"""
Stylist chat route.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from photos.factory import get_stylist_chat
from photos.models import normalize_audience
from stylist.chat import ChatMessage, ChatReply, StylistChat

router = APIRouter(prefix="/api", tags=["Chat"])


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1)
    gender: Optional[str] = None


@router.post("/chat", response_model=ChatReply, summary="Stylist chat reply")
def chat(
    request: ChatRequest,
    stylist: StylistChat = Depends(get_stylist_chat),
) -> ChatReply:
    """Always answers; failures come back as a friendly canned reply."""
    try:
        audience = normalize_audience(request.gender)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return stylist.reply(request.messages, audience)
