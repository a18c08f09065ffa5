"""Rate feeds and catalog loaders for :mod:`eve_value`."""

from __future__ import annotations

from typing import Callable, Sequence

from eve_value.ingestion.esi import AggregateRecordSource, OrderBookSource
from eve_value.ingestion.fallback import FallbackRateSource
from eve_value.ingestion.feeds import (
    AggregateRecordFeed,
    FeedConfig,
    OrderBookFeed,
    StatisticsMapFeed,
)
from eve_value.ingestion.fuzzwork import StatisticsMapSource
from eve_value.ingestion.http_client import JsonHttpClient
from eve_value.ingestion.strategy import RateSource

_SOURCE_BUILDERS: dict[type, Callable[..., RateSource]] = {
    AggregateRecordFeed: AggregateRecordSource,
    OrderBookFeed: OrderBookSource,
    StatisticsMapFeed: StatisticsMapSource,
}


def build_rate_source(feed: FeedConfig, client: JsonHttpClient) -> RateSource:
    """Return the adapter registered for ``feed``'s configuration type."""

    builder = _SOURCE_BUILDERS.get(type(feed))
    if builder is None:
        raise ValueError(f"Unsupported feed configuration: {type(feed).__name__}")
    return builder(feed, client)


def build_fallback_source(feeds: Sequence[FeedConfig], client: JsonHttpClient) -> FallbackRateSource:
    return FallbackRateSource([build_rate_source(feed, client) for feed in feeds])


__all__ = ["build_fallback_source", "build_rate_source"]
