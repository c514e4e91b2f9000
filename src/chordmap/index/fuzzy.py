from __future__ import annotations

from typing import Optional

from rapidfuzz import fuzz

DEFAULT_THRESHOLD = 0.4
DEFAULT_DISTANCE = 100


def field_score(
    pattern: str,
    text: str,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    distance: int = DEFAULT_DISTANCE,
) -> Optional[float]:
    """Score ``text`` for ``pattern``: 0.0 is perfect, ``None`` is no match.

    Case-insensitive. The score adds the dissimilarity of the best aligned
    substring to a penalty for how far into the text that substring starts.
    """

    pattern = pattern.casefold()
    text = text.casefold()
    if not pattern or not text:
        return None
    if pattern == text:
        return 0.0

    idx = text.find(pattern)
    if idx >= 0:
        score = idx / distance
    elif len(pattern) > len(text):
        # A short field inside a long query is not a hit; compare whole strings.
        ratio = fuzz.ratio(pattern, text)
        score = 1 - ratio / 100
    else:
        cutoff = max(0.0, (1 - threshold) * 100)
        alignment = fuzz.partial_ratio_alignment(pattern, text, score_cutoff=cutoff)
        if alignment is None:
            return None
        score = 1 - alignment.score / 100 + alignment.dest_start / distance

    if score > threshold:
        return None
    return score
