"""
Stylist Module: turning liked photos into recommendations.

Provides:
- KeywordSynthesizer: OpenAI-backed style keyword synthesis with fixed fallback
- RecommendationFetcher: keyword -> generic -> empty provider search chain
- StylistChat: conversational stylist replies with canned fallbacks
"""

from stylist.chat import ChatMessage, ChatReply, StylistChat
from stylist.keyword_synthesizer import (
    KeywordSource,
    KeywordSynthesis,
    KeywordSynthesizer,
)
from stylist.recommendation_fetcher import RecommendationFetcher

__all__ = [
    "ChatMessage",
    "ChatReply",
    "StylistChat",
    "KeywordSource",
    "KeywordSynthesis",
    "KeywordSynthesizer",
    "RecommendationFetcher",
]
