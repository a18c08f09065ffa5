"""Abstractions for pluggable rate sources."""

from __future__ import annotations

from typing import Protocol

from eve_value.ingestion.models import RateCandidate


class RateSource(Protocol):
    """Contract for turning one market feed into price candidates.

    Implementations raise :class:`~eve_value.errors.FetchError`,
    :class:`~eve_value.errors.ParseError` or
    :class:`~eve_value.errors.NotFoundError`; malformed individual entries are
    skipped rather than reported.
    """

    name: str

    def fetch_candidates(self) -> list[RateCandidate]:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
