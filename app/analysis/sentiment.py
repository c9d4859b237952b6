"""Lexicon-based sentiment for the text window around a mention.

Substring containment against two fixed word lists. Order-insensitive and
blind to negation: "not the best" still counts as positive.
"""

from app.analysis.types import Sentiment

POSITIVE_WORDS: tuple[str, ...] = (
    "excellent",
    "great",
    "amazing",
    "best",
    "outstanding",
    "perfect",
    "highly recommend",
    "love",
    "fantastic",
    "superior",
    "top",
    "quality",
    "reliable",
    "impressive",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "poor",
    "bad",
    "terrible",
    "worst",
    "avoid",
    "disappointing",
    "flawed",
    "inferior",
    "unreliable",
    "issues",
    "problems",
    "difficult",
    "expensive",
)


def classify_sentiment(context: str) -> Sentiment:
    """positive-only hit -> POSITIVE, negative-only -> NEGATIVE, both or neither -> NEUTRAL."""
    context_lower = context.lower()

    has_positive = any(word in context_lower for word in POSITIVE_WORDS)
    has_negative = any(word in context_lower for word in NEGATIVE_WORDS)

    if has_positive and not has_negative:
        return Sentiment.POSITIVE
    if has_negative and not has_positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
