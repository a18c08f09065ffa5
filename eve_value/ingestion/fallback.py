"""Ordered fallback across several rate sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from eve_value.errors import RateSourceError, SourcesExhaustedError
from eve_value.ingestion.models import RateCandidate
from eve_value.ingestion.strategy import RateSource
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SourceAttempt:
    """Outcome of asking one source for candidates."""

    source: str
    candidates: tuple[RateCandidate, ...] = ()
    error: RateSourceError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CandidateResolution:
    """Candidates chosen for aggregation plus the attempts that led there."""

    source: str
    candidates: tuple[RateCandidate, ...]
    attempts: tuple[SourceAttempt, ...] = field(default_factory=tuple)


class FallbackRateSource:
    """Try each source in order and keep the first one that yields candidates.

    A source that answers with zero usable candidates does not stop the chain.
    When no source yields candidates the first empty answer is returned so the
    aggregator reports :class:`~eve_value.errors.EmptyCandidateSetError`. When
    every source raised, a lone source re-raises its own error and a longer
    chain raises :class:`~eve_value.errors.SourcesExhaustedError` carrying the
    full attempt list.
    """

    def __init__(self, sources: Sequence[RateSource]) -> None:
        self.sources = tuple(sources)
        self.name = "+".join(source.name for source in self.sources) or "none"

    def resolve(self) -> CandidateResolution:
        attempts: list[SourceAttempt] = []
        for source in self.sources:
            try:
                candidates = tuple(source.fetch_candidates())
            except RateSourceError as exc:
                LOGGER.warning("Rate source %s failed: %s", source.name, exc)
                attempts.append(SourceAttempt(source=source.name, error=exc))
                continue
            attempts.append(SourceAttempt(source=source.name, candidates=candidates))
            if candidates:
                return CandidateResolution(
                    source=source.name, candidates=candidates, attempts=tuple(attempts)
                )
            LOGGER.warning("Rate source %s returned no usable prices", source.name)

        empty = next((attempt for attempt in attempts if attempt.succeeded), None)
        if empty is not None:
            return CandidateResolution(source=empty.source, candidates=(), attempts=tuple(attempts))
        if len(attempts) == 1 and attempts[0].error is not None:
            raise attempts[0].error
        raise SourcesExhaustedError(attempts)

    def fetch_candidates(self) -> list[RateCandidate]:
        return list(self.resolve().candidates)


__all__ = ["CandidateResolution", "FallbackRateSource", "SourceAttempt"]
