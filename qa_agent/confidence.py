"""Lexical confidence heuristic for consensus responses.

This is keyword matching, not semantic judgment: a response that says
"definitely" scores higher whether or not it is right. Matching is
case-sensitive ("Clearly" at the start of a sentence does not count), which
is kept as-is until someone decides it should not be. Each marker group adds
its delta at most once, regardless of where or how often it appears.
"""

MIN_CONFIDENCE = 25
MAX_CONFIDENCE = 95
BASE_CONFIDENCE = 50
DETAIL_LENGTH = 800

# (delta, markers): any one marker in the group triggers the delta
_MARKER_GROUPS: list[tuple[int, tuple[str, ...]]] = [
    (15, ("definitely", "clearly")),
    (10, ("evidence", "data")),
    (10, ("research", "studies")),
    (-10, ("might", "possibly")),
    (-15, ("uncertain", "not sure")),
    (-5, ("I think", "probably")),
]

_DETAIL_BONUS = 10


def estimate_confidence(text: str) -> int:
    """Score ``text`` in [25, 95]. Deterministic."""
    score = BASE_CONFIDENCE
    for delta, markers in _MARKER_GROUPS:
        if any(marker in text for marker in markers):
            score += delta
    if len(text) > DETAIL_LENGTH:
        score += _DETAIL_BONUS
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, score))
