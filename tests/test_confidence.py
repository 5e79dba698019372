"""Tests for qa_agent/confidence.py."""

import pytest

from qa_agent.confidence import MAX_CONFIDENCE, MIN_CONFIDENCE, estimate_confidence


def test_neutral_text_scores_base():
    assert estimate_confidence("The login form accepts any email.") == 50


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("This is definitely a race condition.", 65),
        ("The logs clearly show a timeout.", 65),
        ("The evidence points to caching.", 60),
        ("Our data shows regressions.", 60),
        ("Recent research agrees.", 60),
        ("Two studies agree.", 60),
        ("It might be the proxy.", 40),
        ("Possibly a config issue.", 50),  # capitalized: no match
        ("It is possibly a config issue.", 40),
        ("The cause is uncertain.", 35),
        ("I am not sure about the root cause.", 35),
        ("I think it is the cache.", 45),
        ("It is probably the cache.", 45),
    ],
)
def test_single_marker_deltas(text, expected):
    assert estimate_confidence(text) == expected


def test_marker_counts_once_per_group():
    assert estimate_confidence("definitely definitely clearly") == 65


def test_long_text_bonus_needs_more_than_800_chars():
    assert estimate_confidence("x" * 800) == 50
    assert estimate_confidence("x" * 801) == 60


def test_matching_is_case_sensitive():
    assert estimate_confidence("Definitely. Clearly. Evidence.") == 50


def test_upper_clamp():
    text = "definitely evidence research " + "x" * 900
    assert estimate_confidence(text) == MAX_CONFIDENCE == 95


def test_lower_clamp():
    text = "I think it might be uncertain"
    assert estimate_confidence(text) == MIN_CONFIDENCE == 25


def test_order_independent():
    assert estimate_confidence("clearly, it might work") == estimate_confidence("it might work, clearly")


@pytest.mark.parametrize("text", ["", "a", "definitely might", "I think " * 200, "data " * 300])
def test_deterministic_and_in_range(text):
    first = estimate_confidence(text)
    assert first == estimate_confidence(text)
    assert MIN_CONFIDENCE <= first <= MAX_CONFIDENCE
