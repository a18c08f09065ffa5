"""Rate source for keyed statistics maps such as Fuzzwork market aggregates.

The payload looks like ``{"44992": {"buy": {...}, "sell": {"median": "4.9e6",
"weightedAverage": ..., "min": ...}}}``. Statistics are serialised as strings,
so values go through the same numeric coercion as every other feed.
"""

from __future__ import annotations

from typing import Mapping

from eve_value.errors import NotFoundError, ParseError
from eve_value.ingestion.feeds import StatisticsMapFeed
from eve_value.ingestion.http_client import JsonHttpClient
from eve_value.ingestion.models import RateCandidate
from eve_value.utils.logger import get_logger

LOGGER = get_logger(__name__)


class StatisticsMapSource:
    def __init__(self, feed: StatisticsMapFeed, client: JsonHttpClient) -> None:
        self.feed = feed
        self.client = client
        self.name = feed.name

    def fetch_candidates(self) -> list[RateCandidate]:
        response = self.client.get_json(
            self.feed.url,
            params={"region": self.feed.region_id, "types": self.feed.type_id},
        )
        return self.parse(response.payload)

    def parse(self, payload: object) -> list[RateCandidate]:
        if not isinstance(payload, Mapping):
            raise ParseError(f"{self.name} returned {type(payload).__name__}, expected an object")

        key = str(self.feed.type_id)
        if key not in payload:
            raise NotFoundError(f"type_id={key} not found in {self.name}")

        stats = payload[key]
        label = self.name
        if self.feed.side:
            if not isinstance(stats, Mapping) or self.feed.side not in stats:
                raise NotFoundError(f"{self.feed.side!r} statistics missing for type_id={key}")
            stats = stats[self.feed.side]
            label = f"{label}:{self.feed.side}"
        if not isinstance(stats, Mapping):
            raise ParseError(f"statistics for type_id={key} in {self.name} are not an object")

        candidates: list[RateCandidate] = []
        for field_name in self.feed.fields:
            candidate = RateCandidate.coerce(stats.get(field_name), f"{label}.{field_name}")
            if candidate is None:
                LOGGER.debug("Skipping unusable %s for type_id=%s", field_name, key)
                continue
            candidates.append(candidate)
        LOGGER.info("Collected %s candidates from %s", len(candidates), self.name)
        return candidates


__all__ = ["StatisticsMapSource"]
