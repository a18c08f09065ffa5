"""Runtime settings for the calculator, loadable from YAML or JSON files."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from eve_value.engine.aggregation import AggregationPolicy
from eve_value.errors import InvalidInputError
from eve_value.ingestion.feeds import AggregateRecordFeed, FeedConfig, feed_from_mapping
from eve_value.ingestion.http_client import DEFAULT_USER_AGENT
from eve_value.utils.esi import DEFAULT_BLOCK_SIZE, DEFAULT_EPSILON


@dataclass(frozen=True)
class CalculatorSettings:
    """Where to read packs, plans and prices from, and how to reduce them.

    The defaults reproduce the stock deployment: ``packs.json`` and
    ``omega.json`` next to the page and the ESI prices endpoint for PLEX.
    """

    offers_source: str = "packs.json"
    plans_source: str | None = "omega.json"
    feeds: tuple[FeedConfig, ...] = field(default_factory=lambda: (AggregateRecordFeed(),))
    aggregation_policy: AggregationPolicy = AggregationPolicy.MEDIAN
    block_size: float = DEFAULT_BLOCK_SIZE
    epsilon: float = DEFAULT_EPSILON
    timeout: float = 15.0
    max_attempts: int = 2
    backoff_seconds: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        try:
            policy = AggregationPolicy.parse(self.aggregation_policy)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        object.__setattr__(self, "aggregation_policy", policy)
        object.__setattr__(self, "feeds", tuple(self.feeds))
        if policy is AggregationPolicy.MANUAL:
            raise InvalidInputError("aggregation_policy must be one of min, mean or median")
        for name in ("block_size", "epsilon", "timeout"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise InvalidInputError(f"{name} must be a positive number, got {value!r}")
        if self.backoff_seconds < 0:
            raise InvalidInputError("backoff_seconds must not be negative")
        if self.max_attempts < 1:
            raise InvalidInputError("max_attempts must be at least 1")
        if not self.feeds:
            raise InvalidInputError("at least one rate feed must be configured")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CalculatorSettings":
        """Validate a decoded settings document and build the settings object."""

        if not isinstance(raw, Mapping):
            raise InvalidInputError("settings document must be a mapping")
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise InvalidInputError(f"Unknown settings: {', '.join(unknown)}")

        options = dict(raw)
        if "feeds" in options:
            feeds = options["feeds"]
            if not isinstance(feeds, list):
                raise InvalidInputError("feeds must be a list of feed mappings")
            options["feeds"] = tuple(feed_from_mapping(feed) for feed in feeds)
        try:
            return cls(**options)
        except TypeError as exc:
            raise InvalidInputError(f"Invalid settings: {exc}") from exc

    def with_overrides(self, **overrides: Any) -> "CalculatorSettings":
        """Return a copy with every non-``None`` override applied."""

        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def load_settings(path: str | Path) -> CalculatorSettings:
    """Read settings from a YAML (or JSON) file."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as handle:
        try:
            document = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise InvalidInputError(f"{config_path} is not valid YAML: {exc}") from exc
    return CalculatorSettings.from_mapping(document or {})


__all__ = ["CalculatorSettings", "load_settings"]
