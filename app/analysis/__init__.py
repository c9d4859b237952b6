"""Mention detection for LLM responses.

  1. Mention Detector: first occurrence of each tracked entity (name or alias)
  2. Sentiment Heuristic: lexicon vote on the text window around the mention

Both are pure functions with no I/O.
"""

from app.analysis.mention_detector import detect_mentions, highlight_mentions
from app.analysis.sentiment import classify_sentiment
from app.analysis.types import Mention, Sentiment, TrackedEntity

__all__ = [
    "Mention",
    "Sentiment",
    "TrackedEntity",
    "classify_sentiment",
    "detect_mentions",
    "highlight_mentions",
]
