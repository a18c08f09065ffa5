from __future__ import annotations

import pytest

from eve_value.engine.ranking import mark_best, select_best


def test_select_best_returns_first_occurrence_of_minimum() -> None:
    assert select_best([5, 3, 3, 8], 1e-9) == 1


def test_select_best_empty_and_single() -> None:
    assert select_best([]) is None
    assert select_best([4]) == 0


def test_select_best_treats_values_within_epsilon_as_tied() -> None:
    assert select_best([3.0000000001, 3.0], 1e-6) == 0


def test_select_best_moves_when_difference_exceeds_epsilon() -> None:
    assert select_best([3.1, 3.0], 1e-6) == 1


@pytest.mark.parametrize(
    "values, expected",
    [
        ([0.02, 0.0175], 1),
        ([0.0175, 0.02, 0.0175], 0),
        ([9.0, 8.0, 7.0, 6.0], 3),
    ],
)
def test_select_best_picks_exactly_one_winner(values: list[float], expected: int) -> None:
    assert select_best(values) == expected


def test_mark_best_skips_unrankable_rows() -> None:
    assert mark_best([None, 0.02, None, 0.0175]) == 3


def test_mark_best_all_unrankable() -> None:
    assert mark_best([None, None]) is None
    assert mark_best([]) is None
