"""Feed configurations: one dataclass per supported payload shape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Union

from eve_value.errors import InvalidInputError
from eve_value.utils.esi import (
    ESI_ORDERS_URL,
    ESI_PRICES_URL,
    FUZZWORK_AGGREGATES_URL,
    GLOBAL_PLEX_REGION,
    THE_FORGE_REGION,
    TYPE_PLEX,
)

OrderSide = Literal["sell", "buy", "all"]


@dataclass(frozen=True, slots=True)
class AggregateRecordFeed:
    """A list of per-type records carrying several named price fields."""

    type_id: int = TYPE_PLEX
    url: str = ESI_PRICES_URL
    fields: tuple[str, ...] = ("average_price", "adjusted_price")
    name: str = "esi-prices"

    kind = "aggregate_record"


@dataclass(frozen=True, slots=True)
class OrderBookFeed:
    """A paginated list of individual market orders."""

    type_id: int = TYPE_PLEX
    region_id: int = GLOBAL_PLEX_REGION
    url: str = ESI_ORDERS_URL
    side: OrderSide = "sell"
    price_field: str = "price"
    max_pages: int | None = None
    name: str = "esi-orders"

    kind = "order_book"

    @property
    def resolved_url(self) -> str:
        return self.url.format(region_id=self.region_id)


@dataclass(frozen=True, slots=True)
class StatisticsMapFeed:
    """A map keyed by type id whose values are nested statistics objects."""

    type_id: int = TYPE_PLEX
    region_id: int = THE_FORGE_REGION
    url: str = FUZZWORK_AGGREGATES_URL
    side: str | None = "sell"
    fields: tuple[str, ...] = ("median",)
    name: str = "fuzzwork"

    kind = "statistics_map"


FeedConfig = Union[AggregateRecordFeed, OrderBookFeed, StatisticsMapFeed]

FEED_TYPES: dict[str, type] = {
    AggregateRecordFeed.kind: AggregateRecordFeed,
    OrderBookFeed.kind: OrderBookFeed,
    StatisticsMapFeed.kind: StatisticsMapFeed,
}


def feed_from_mapping(raw: Mapping[str, Any]) -> FeedConfig:
    """Build a feed configuration from a ``{"kind": ..., ...}`` mapping."""

    if not isinstance(raw, Mapping):
        raise InvalidInputError("feed entries must be mappings")
    options = dict(raw)
    kind = options.pop("kind", None)
    feed_type = FEED_TYPES.get(str(kind))
    if feed_type is None:
        raise InvalidInputError(
            f"Unsupported feed kind {kind!r}. Supported values are: {', '.join(sorted(FEED_TYPES))}."
        )
    if "fields" in options:
        fields = options["fields"]
        options["fields"] = (fields,) if isinstance(fields, str) else tuple(fields)
    if feed_type is OrderBookFeed and options.get("side", "sell") not in ("sell", "buy", "all"):
        raise InvalidInputError("order book side must be one of 'sell', 'buy' or 'all'")
    try:
        return feed_type(**options)
    except TypeError as exc:
        raise InvalidInputError(f"Invalid {kind} feed options: {exc}") from exc


__all__ = [
    "AggregateRecordFeed",
    "FEED_TYPES",
    "FeedConfig",
    "OrderBookFeed",
    "OrderSide",
    "StatisticsMapFeed",
    "feed_from_mapping",
]
