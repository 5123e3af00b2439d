"""Near-miss command name suggestions."""

import enum
from collections.abc import Iterable
from typing import NamedTuple

DEFAULT_INPUT_CUTOFF = 30


class SuggestionAccuracy(enum.Enum):
    """Named presets for the maximum edit distance."""

    STRICT = "strict"
    BALANCED = "balanced"
    LENIENT = "lenient"

    @property
    def max_distance(self) -> int:
        return {"strict": 1, "balanced": 2, "lenient": 3}[self.value]


class Suggestion(NamedTuple):
    name: str
    distance: int


def edit_distance(source: str, target: str) -> int:
    """Edit distance with unit cost for insert, delete, substitute and
    swapping two adjacent characters (optimal string alignment)."""
    if source == target:
        return 0
    if not source or not target:
        return len(source) + len(target)

    before_previous: list[int] = []
    previous = list(range(len(target) + 1))
    for i in range(1, len(source) + 1):
        current = [i]
        for j in range(1, len(target) + 1):
            cost = source[i - 1] != target[j - 1]
            best = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
            if i > 1 and j > 1 and source[i - 1] == target[j - 2] and source[i - 2] == target[j - 1]:
                best = min(best, before_previous[j - 2] + 1)
            current.append(best)
        before_previous, previous = previous, current
    return previous[-1]


def rank(
    name: str,
    known_names: Iterable[str],
    max_distance: int,
    max_results: int | None = None,
    cutoff: int = DEFAULT_INPUT_CUTOFF,
) -> list[Suggestion]:
    """Known names within ``max_distance`` of ``name``, closest first."""
    # Bounds the quadratic distance computation on pathological input
    if len(name) > cutoff:
        return []

    matches = []
    for candidate in set(known_names):
        distance = edit_distance(name, candidate)
        if distance <= max_distance:
            matches.append(Suggestion(candidate, distance))

    matches.sort(key=lambda s: (s.distance, s.name))
    if max_results is not None:
        matches = matches[:max_results]
    return matches


def suggest(
    name: str,
    known_names: Iterable[str],
    max_distance: int,
    max_results: int | None = None,
    cutoff: int = DEFAULT_INPUT_CUTOFF,
) -> list[str]:
    return [s.name for s in rank(name, known_names, max_distance, max_results, cutoff)]
