"""Rate sources backed by the EVE Swagger Interface (ESI) market endpoints."""

from __future__ import annotations

from typing import Any, Mapping

from eve_value.errors import FetchError, NotFoundError, ParseError
from eve_value.ingestion.feeds import AggregateRecordFeed, OrderBookFeed
from eve_value.ingestion.http_client import JsonHttpClient
from eve_value.ingestion.models import RateCandidate, parse_number
from eve_value.utils.esi import ESI_DATASOURCE, PAGES_HEADER
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)


def _matches_type(record: Mapping[str, Any], type_id: int) -> bool:
    value = parse_number(record.get("type_id"))
    return value is not None and value == type_id


def _page_count(headers: Mapping[str, str]) -> int:
    for key, value in headers.items():
        if key.lower() == PAGES_HEADER.lower():
            pages = parse_number(value)
            if pages is not None and 1 <= pages < float("inf"):
                return int(pages)
    return 1


class AggregateRecordSource:
    """Pick one price from the ESI ``/markets/prices/`` aggregate records.

    The first populated, finite, positive field in ``feed.fields`` wins, so a
    missing ``average_price`` falls back to ``adjusted_price``.
    """

    def __init__(self, feed: AggregateRecordFeed, client: JsonHttpClient) -> None:
        self.feed = feed
        self.client = client
        self.name = feed.name

    def fetch_candidates(self) -> list[RateCandidate]:
        response = self.client.get_json(self.feed.url, params={"datasource": ESI_DATASOURCE})
        return self.parse(response.payload)

    def parse(self, payload: object) -> list[RateCandidate]:
        if not isinstance(payload, list):
            raise ParseError(f"{self.name} returned {type(payload).__name__}, expected a list")
        if not payload:
            raise NotFoundError(f"{self.name} returned an empty price list")

        record = next(
            (
                item
                for item in payload
                if isinstance(item, Mapping) and _matches_type(item, self.feed.type_id)
            ),
            None,
        )
        if record is None:
            raise NotFoundError(f"type_id={self.feed.type_id} not found in {self.name}")

        for field_name in self.feed.fields:
            candidate = RateCandidate.coerce(record.get(field_name), f"{self.name}:{field_name}")
            if candidate is not None:
                LOGGER.info(
                    "Using %s=%s for type_id=%s", field_name, candidate.value, self.feed.type_id
                )
                return [candidate]
            LOGGER.debug("Skipping unusable %s for type_id=%s", field_name, self.feed.type_id)
        return []


class OrderBookSource:
    """Flatten every page of ESI ``/markets/{region_id}/orders/`` into candidates."""

    def __init__(self, feed: OrderBookFeed, client: JsonHttpClient) -> None:
        self.feed = feed
        self.client = client
        self.name = feed.name

    def _params(self, page: int) -> dict[str, Any]:
        return {
            "datasource": ESI_DATASOURCE,
            "order_type": self.feed.side,
            "type_id": self.feed.type_id,
            "page": page,
        }

    def fetch_candidates(self) -> list[RateCandidate]:
        url = self.feed.resolved_url
        first = self.client.get_json(url, params=self._params(1))
        orders = self._orders(first.payload)
        if not orders:
            raise NotFoundError(f"no orders for type_id={self.feed.type_id} in {self.name}")

        total_pages = _page_count(first.headers)
        if self.feed.max_pages is not None:
            total_pages = min(total_pages, self.feed.max_pages)

        type_seen = self._has_type(orders)
        candidates = self.parse_orders(orders)
        for page in range(2, total_pages + 1):
            try:
                response = self.client.get_json(url, params=self._params(page))
                page_orders = self._orders(response.payload)
            except (FetchError, ParseError) as exc:
                LOGGER.warning(
                    "Stopping %s at page %s/%s, keeping %s candidates: %s",
                    self.name,
                    page,
                    total_pages,
                    len(candidates),
                    exc,
                )
                break
            if not page_orders:
                LOGGER.info("Page %s/%s of %s was empty", page, total_pages, self.name)
                break
            type_seen = type_seen or self._has_type(page_orders)
            candidates.extend(self.parse_orders(page_orders))

        if not type_seen:
            raise NotFoundError(f"type_id={self.feed.type_id} not found in {self.name}")
        LOGGER.info(
            "Collected %s candidates from %s page(s) of %s", len(candidates), total_pages, self.name
        )
        return candidates

    def _orders(self, payload: object) -> list[object]:
        if not isinstance(payload, list):
            raise ParseError(f"{self.name} returned {type(payload).__name__}, expected a list")
        return payload

    def _has_type(self, orders: list[object]) -> bool:
        return any(
            isinstance(order, Mapping)
            and ("type_id" not in order or _matches_type(order, self.feed.type_id))
            for order in orders
        )

    def parse_orders(self, orders: list[object]) -> list[RateCandidate]:
        candidates: list[RateCandidate] = []
        for order in orders:
            if not isinstance(order, Mapping):
                continue
            if "type_id" in order and not _matches_type(order, self.feed.type_id):
                continue
            if not self._side_matches(order):
                continue
            candidate = RateCandidate.coerce(order.get(self.feed.price_field), self.name)
            if candidate is None:
                LOGGER.debug("Skipping order with unusable price: %r", order.get(self.feed.price_field))
                continue
            candidates.append(candidate)
        return candidates

    def _side_matches(self, order: Mapping[str, Any]) -> bool:
        if self.feed.side == "all" or "is_buy_order" not in order:
            return True
        return bool(order["is_buy_order"]) == (self.feed.side == "buy")


__all__ = ["AggregateRecordSource", "OrderBookSource"]
