"""Edit-distance name suggestions for error messages."""

from __future__ import annotations

from typing import Iterable, List

MAX_DISTANCE = 3
MAX_SUGGESTIONS = 3


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def find_similar(
    name: str,
    candidates: Iterable[str],
    max_distance: int = MAX_DISTANCE,
    limit: int = MAX_SUGGESTIONS,
) -> List[str]:
    """Rank candidates by case-insensitive edit distance to ``name``.

    Exact matches (distance 0) are excluded; ties keep candidate order.
    """
    target = name.lower()
    scored = []
    seen = set()
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        distance = levenshtein(target, candidate.lower())
        if 0 < distance <= max_distance:
            scored.append((distance, len(scored), candidate))
    scored.sort()
    return [c for _, _, c in scored[:limit]]
