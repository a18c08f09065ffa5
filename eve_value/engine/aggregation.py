"""Reduce price candidates to a single reference rate."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from eve_value.errors import EmptyCandidateSetError, InvalidAggregateError, InvalidInputError
from eve_value.ingestion.models import RateCandidate


class AggregationPolicy(str, Enum):
    """How candidates are reduced; ``MANUAL`` only labels user overrides."""

    MIN = "min"
    MEAN = "mean"
    MEDIAN = "median"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: "AggregationPolicy | str") -> "AggregationPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unsupported aggregation policy {value!r}. Use one of: min, mean, median."
            ) from None


@dataclass(frozen=True, slots=True)
class ReferenceRate:
    """ISK per PLEX used for every valuation in one refresh cycle."""

    value: float
    as_of: datetime
    aggregation_policy: AggregationPolicy
    sample_size: int
    source: str

    @classmethod
    def manual(cls, value: float, *, as_of: datetime | None = None) -> "ReferenceRate":
        if not _is_usable(value):
            raise InvalidInputError(f"manual rate must be finite and positive, got {value!r}")
        return cls(
            value=float(value),
            as_of=as_of or datetime.now(timezone.utc),
            aggregation_policy=AggregationPolicy.MANUAL,
            sample_size=1,
            source="manual",
        )


def _is_usable(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def _median(values: list[float]) -> float:
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def aggregate(
    candidates: Iterable[RateCandidate],
    policy: AggregationPolicy | str = AggregationPolicy.MEDIAN,
    *,
    as_of: datetime | None = None,
) -> ReferenceRate:
    """Aggregate ``candidates`` with ``policy`` into a :class:`ReferenceRate`.

    Candidates are re-validated here even though the adapters already filter
    them. Raises :class:`EmptyCandidateSetError` when nothing usable remains
    and :class:`InvalidAggregateError` when the result itself is unusable.
    """

    resolved = AggregationPolicy.parse(policy)
    if resolved is AggregationPolicy.MANUAL:
        raise ValueError("manual rates are created with ReferenceRate.manual, not aggregated")

    usable = [candidate for candidate in candidates if _is_usable(candidate.value)]
    if not usable:
        raise EmptyCandidateSetError("no usable price candidates to aggregate")

    values = [candidate.value for candidate in usable]
    if resolved is AggregationPolicy.MIN:
        result = min(values)
    elif resolved is AggregationPolicy.MEAN:
        try:
            result = math.fsum(values) / len(values)
        except OverflowError as exc:
            raise InvalidAggregateError("mean aggregate overflowed") from exc
    else:
        result = _median(values)

    if not _is_usable(result):
        raise InvalidAggregateError(f"{resolved.value} aggregate is not a positive finite number: {result!r}")

    sources = list(dict.fromkeys(candidate.source for candidate in usable))
    return ReferenceRate(
        value=result,
        as_of=as_of or datetime.now(timezone.utc),
        aggregation_policy=resolved,
        sample_size=len(values),
        source="+".join(sources),
    )


__all__ = ["AggregationPolicy", "ReferenceRate", "aggregate"]
