"""Error taxonomy shared by every stage of a refresh."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from eve_value.ingestion.fallback import SourceAttempt


class ValueCalculatorError(Exception):
    """Base class for all errors raised by :mod:`eve_value`."""


class RateSourceError(ValueCalculatorError):
    """Failure while turning a market feed into candidates."""


class FetchError(RateSourceError):
    """Transport failure or non-success HTTP response."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(RateSourceError):
    """Payload is not the structured data the adapter expects."""


class NotFoundError(RateSourceError):
    """Lookup key is absent from an otherwise valid payload."""


class SourcesExhaustedError(RateSourceError):
    """Every configured rate source failed."""

    def __init__(self, attempts: Sequence["SourceAttempt"]) -> None:
        details = "; ".join(
            f"{attempt.source}: {attempt.error}" for attempt in attempts if attempt.error
        )
        super().__init__(f"all rate sources failed ({details})" if details else "no rate sources configured")
        self.attempts = tuple(attempts)


class AggregationError(ValueCalculatorError):
    """Failure while reducing candidates to a reference rate."""


class EmptyCandidateSetError(AggregationError):
    """No usable price candidates survived filtering."""


class InvalidAggregateError(AggregationError):
    """Aggregation produced a zero, negative or non-finite rate."""


class InvalidInputError(ValueCalculatorError):
    """Malformed offer/plan record or invalid configuration value."""


__all__ = [
    "AggregationError",
    "EmptyCandidateSetError",
    "FetchError",
    "InvalidAggregateError",
    "InvalidInputError",
    "NotFoundError",
    "ParseError",
    "RateSourceError",
    "SourcesExhaustedError",
    "ValueCalculatorError",
]
