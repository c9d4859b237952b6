"""Tests for the lexicon sentiment heuristic."""

import pytest

from app.analysis.sentiment import NEGATIVE_WORDS, POSITIVE_WORDS, classify_sentiment
from app.analysis.types import Sentiment


@pytest.mark.parametrize(
    "context,expected",
    [
        ("This is an excellent choice", Sentiment.POSITIVE),
        ("Users report poor battery life", Sentiment.NEGATIVE),
        ("Great sound but expensive", Sentiment.NEUTRAL),
        ("It ships in a box", Sentiment.NEUTRAL),
        ("", Sentiment.NEUTRAL),
    ],
)
def test_decision_table(context, expected):
    assert classify_sentiment(context) == expected


def test_case_insensitive():
    assert classify_sentiment("HIGHLY RECOMMEND it") == Sentiment.POSITIVE
    assert classify_sentiment("AVOID this one") == Sentiment.NEGATIVE


def test_substring_containment():
    # "topic" contains "top"; matching is plain substring containment
    assert classify_sentiment("a related topic") == Sentiment.POSITIVE


def test_negation_is_not_understood():
    assert classify_sentiment("not the best option") == Sentiment.POSITIVE


def test_unreliable_also_contains_reliable():
    assert classify_sentiment("it is unreliable") == Sentiment.NEUTRAL


def test_every_lexicon_word_counts():
    for word in POSITIVE_WORDS:
        assert classify_sentiment(f"it is {word}") == Sentiment.POSITIVE, word
    for word in NEGATIVE_WORDS:
        if word == "unreliable":
            continue
        assert classify_sentiment(f"it is {word}") == Sentiment.NEGATIVE, word
