"""Pick exactly one "best" (lowest) entry per metric."""

from __future__ import annotations

from typing import Sequence

from eve_value.utils.esi import DEFAULT_EPSILON


def select_best(values: Sequence[float], epsilon: float = DEFAULT_EPSILON) -> int | None:
    """Return the index of the first strictly smallest value, or ``None`` if empty.

    The running minimum only moves when a later value is lower by more than
    ``epsilon``, so near-ties resolve to the earliest entry.
    """

    if not values:
        return None
    best_index = 0
    best_value = values[0]
    for index in range(1, len(values)):
        value = values[index]
        if value < best_value - epsilon:
            best_index = index
            best_value = value
    return best_index


def mark_best(values: Sequence[float | None], epsilon: float = DEFAULT_EPSILON) -> int | None:
    """Like :func:`select_best` but skips ``None`` entries (unrankable rows).

    The returned index points into ``values``.
    """

    positions = [index for index, value in enumerate(values) if value is not None]
    winner = select_best([values[index] for index in positions], epsilon)  # type: ignore[misc]
    return positions[winner] if winner is not None else None


__all__ = ["mark_best", "select_best"]
