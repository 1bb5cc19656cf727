"""
Stylist chat.

Short, friendly stylist replies shown next to the recommendations. The chat
is decoration around the engine, so every failure turns into a canned reply
instead of an error.
"""

import threading
from typing import List, Optional, Sequence

from openai import APIConnectionError, APIStatusError
from pydantic import BaseModel, Field

from config.settings import Settings, get_settings
from core.logging import get_logger
from photos.models import Audience

logger = get_logger(__name__)


class ChatMessage(BaseModel):
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str = Field(..., min_length=1, max_length=2000)


class ChatReply(BaseModel):
    message: str
    fallback_used: bool = False
    reason: Optional[str] = None


# Canned replies, keyed by failure reason
FALLBACK_REPLIES = {
    "disabled": "Looks like the AI stylist is offline right now, but I'll still find outfits based on what you liked!",
    "auth": "There's a problem with the stylist's API setup. No worries, your likes still drive the recommendations!",
    "rate_limited": "The stylist is a bit busy right now. Give it a moment and try again!",
    "server_error": "The AI service is having a temporary hiccup. Try again in a little while!",
    "network": "It looks like there's a connection problem. Check your network and try again!",
    "empty": "Hmm, I'm not sure what to say to that. Tell me more about the look you want!",
    "unknown": "Something's a little off on my side, but I'll keep finding looks you'll love!",
}

_MAX_HISTORY = 20


def _system_prompt(audience: Audience) -> str:
    wardrobe = "menswear" if audience is Audience.MALE else "womenswear"
    return (
        f"You are a fashionable stylist who talks like a close friend and helps with {wardrobe} questions.\n"
        "- Use emoji sparingly to stay approachable\n"
        "- Keep replies short and easy to read\n"
        "- Include concrete styling advice\n"
        "- Keep a casual, warm tone\n"
        "- Be empathetic about how the user feels"
    )


def classify_error(error: Exception) -> str:
    """Map an OpenAI SDK exception to a fallback reason."""
    if isinstance(error, APIConnectionError):
        return "network"
    if isinstance(error, APIStatusError):
        if error.status_code == 401:
            return "auth"
        if error.status_code == 429:
            return "rate_limited"
        if error.status_code >= 500:
            return "server_error"
    return "unknown"


class StylistChat:
    """Conversational stylist backed by OpenAI chat completions."""

    def __init__(self, settings: Optional[Settings] = None):
        self._client = None
        self._client_lock = threading.Lock()
        settings = settings or get_settings()
        self._api_key = settings.openai_api_key
        self._organization = settings.openai_org_id or None
        self._model = settings.chat_model
        self._timeout = settings.openai_timeout_seconds
        self._max_tokens = settings.chat_max_tokens
        self._temperature = settings.chat_temperature

    @property
    def client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    from openai import OpenAI
                    self._client = OpenAI(
                        api_key=self._api_key,
                        organization=self._organization,
                        timeout=self._timeout,
                        max_retries=0,
                    )
        return self._client

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def reply(self, messages: Sequence[ChatMessage], audience: Audience) -> ChatReply:
        """Answer the latest user message. Never raises."""
        if not self.enabled:
            return self._fallback("disabled")

        history: List[dict] = [{"role": m.role, "content": m.content} for m in messages[-_MAX_HISTORY:]]
        try:
            completion = self.client.chat.completions.create(
                model=self._model,
                messages=[{"role": "system", "content": _system_prompt(audience)}, *history],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            content = completion.choices[0].message.content
        except Exception as e:
            reason = classify_error(e)
            logger.warning(
                "Stylist chat failed",
                error=str(e),
                error_type=type(e).__name__,
                reason=reason,
            )
            return self._fallback(reason)

        if not content or not content.strip():
            return self._fallback("empty")
        return ChatReply(message=content.strip())

    def probe(self) -> dict:
        """
        Minimal round-trip used by the OpenAI health check.

        Reports the outcome without ever exposing the key.
        """
        if not self.enabled:
            return {"success": False, "error": "OPENAI_API_KEY is not set", "has_org_id": bool(self._organization)}
        try:
            completion = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": "You are a test assistant. Reply with 'API is working!'."},
                    {"role": "user", "content": "Hello"},
                ],
                max_tokens=10,
            )
        except Exception as e:
            return {
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
                "status": getattr(e, "status_code", None),
                "has_org_id": bool(self._organization),
            }
        return {
            "success": True,
            "message": completion.choices[0].message.content,
            "has_org_id": bool(self._organization),
        }

    @staticmethod
    def _fallback(reason: str) -> ChatReply:
        return ChatReply(message=FALLBACK_REPLIES[reason], fallback_used=True, reason=reason)
