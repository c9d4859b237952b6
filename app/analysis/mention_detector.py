"""Find tracked entities in an LLM response.

For every entity the candidate terms are its name followed by its aliases,
all lower-cased. The first term (in that order) that appears anywhere in the
response wins, at its leftmost occurrence. One mention per entity at most.

Positions index the original text. A few characters lower-case to more than
one code point ("İ" becomes "i" plus a combining dot), so the scan runs on a
lowered copy whose offsets are mapped back.
"""

import re
from collections.abc import Iterable

from app.analysis.sentiment import classify_sentiment
from app.analysis.types import Mention, TrackedEntity

# Characters kept on each side of the matched term
CONTEXT_RADIUS = 50


def _fold(text: str) -> tuple[str, list[int]]:
    """Lower-case *text* and map each lowered index back to its source index."""
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered, list(range(len(text)))

    offsets: list[int] = []
    for i, ch in enumerate(text):
        offsets.extend([i] * len(ch.lower()))
    return lowered, offsets


def detect_mentions(response_text: str, entities: Iterable[TrackedEntity]) -> list[Mention]:
    """Return mentions of *entities* in *response_text*, ordered by position."""
    mentions: list[Mention] = []
    response_lower, offsets = _fold(response_text)

    for entity in entities:
        for term in entity.search_terms:
            found = response_lower.find(term)
            if found == -1:
                continue

            index = offsets[found]
            end = offsets[found + len(term) - 1] + 1
            context_start = max(0, index - CONTEXT_RADIUS)
            context_end = min(len(response_text), end + CONTEXT_RADIUS)
            context = response_text[context_start:context_end]

            mentions.append(
                Mention(
                    entity=entity,
                    position=index,
                    sentiment=classify_sentiment(context),
                    context=context.strip(),
                    matched_term=term,
                )
            )
            break

    # list.sort is stable: equal positions keep entity input order
    mentions.sort(key=lambda m: m.position)
    return mentions


def highlight_mentions(response_text: str, mentions: Iterable[Mention]) -> str:
    """Wrap every occurrence of each mentioned entity's terms in ``**bold**`` markers."""
    terms: list[str] = []
    for mention in mentions:
        for term in [mention.entity.name, *mention.entity.aliases]:
            if term and term.strip() and term.lower() not in (t.lower() for t in terms):
                terms.append(term)

    if not terms:
        return response_text

    # Longest first so "Wireless Headphones Pro" wins over "Wireless Headphones"
    terms.sort(key=len, reverse=True)
    pattern = re.compile("(" + "|".join(re.escape(t) for t in terms) + ")", re.IGNORECASE)
    return pattern.sub(r"**\1**", response_text)
