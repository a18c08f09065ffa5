"""Data models shared across ingestion and valuation modules."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping

DURATION_PATTERN = re.compile(r"(\d+)\s*(months?|mos?|years?|yrs?)\b", re.IGNORECASE)


def parse_number(value: object | None) -> float | None:
    """Coerce JSON numbers and numeric strings to ``float``.

    Booleans, empty strings and anything that fails to parse return ``None``.
    Thousands separators are tolerated because some feeds serialise prices as
    display strings.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return None
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def parse_positive(value: object | None) -> float | None:
    """Return ``value`` as a float only when it is finite and strictly positive."""

    number = parse_number(value)
    if number is None or not math.isfinite(number) or number <= 0:
        return None
    return number


def parse_duration_months(label: str) -> int | None:
    """Extract a duration in months from labels such as ``"3 Months"``."""

    match = DURATION_PATTERN.search(label or "")
    if not match:
        return None
    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit.startswith(("year", "yr")):
        return amount * 12
    return amount


def _first_present(record: Mapping[str, Any], *keys: str) -> object | None:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


@dataclass(frozen=True, slots=True)
class RateCandidate:
    """A single usable price observation taken from a feed."""

    value: float
    source: str

    @classmethod
    def coerce(cls, raw: object | None, source: str) -> "RateCandidate | None":
        """Build a candidate from a raw payload value, or ``None`` if unusable."""

        value = parse_positive(raw)
        if value is None:
            return None
        return cls(value=value, source=source)


@dataclass(frozen=True, slots=True)
class Offer:
    """A purchasable cash bundle of PLEX.

    Numeric fields stay ``None`` when the source record is malformed so the
    valuation engine can flag the row instead of dropping it.
    """

    name: str
    cash_price: float | None
    unit_quantity: float | None
    is_discounted: bool = False
    list_price: float | None = None

    @classmethod
    def from_record(cls, record: object, index: int = 0) -> "Offer":
        if not isinstance(record, Mapping):
            return cls(name=f"Offer #{index + 1}", cash_price=None, unit_quantity=None)
        list_price = parse_number(_first_present(record, "cashPrice", "cash_price", "price_usd"))
        sale_price = parse_number(_first_present(record, "sale_price_usd", "salePrice"))
        flagged = record.get("isDiscounted", record.get("is_discounted"))
        return cls(
            name=str(record.get("name") or record.get("id") or f"Offer #{index + 1}"),
            cash_price=sale_price if sale_price is not None else list_price,
            unit_quantity=parse_number(
                _first_present(record, "unitQuantity", "unit_quantity", "plex_amount")
            ),
            is_discounted=bool(flagged) if flagged is not None else sale_price is not None,
            list_price=list_price,
        )


@dataclass(frozen=True, slots=True)
class Plan:
    """A subscription plan that can be paid in cash or in PLEX."""

    label: str
    duration_months: float | None
    cash_price: float | None
    unit_cost: float | None

    @classmethod
    def from_record(cls, record: object, index: int = 0) -> "Plan":
        if not isinstance(record, Mapping):
            return cls(
                label=f"Plan #{index + 1}", duration_months=None, cash_price=None, unit_cost=None
            )
        label = str(record.get("label") or record.get("name") or f"Plan #{index + 1}")
        duration = parse_number(_first_present(record, "durationMonths", "duration_months", "months"))
        if duration is None:
            parsed = parse_duration_months(label)
            duration = float(parsed) if parsed is not None else None
        return cls(
            label=label,
            duration_months=duration,
            cash_price=parse_number(_first_present(record, "cashPrice", "cash_price", "cash_usd")),
            unit_cost=parse_number(_first_present(record, "unitCost", "unit_cost", "plex_cost")),
        )


@dataclass(frozen=True, slots=True)
class Catalog:
    """Offers and plans loaded together during one refresh."""

    offers: tuple[Offer, ...] = ()
    plans: tuple[Plan, ...] = ()


__all__ = [
    "Catalog",
    "Offer",
    "Plan",
    "RateCandidate",
    "parse_duration_months",
    "parse_number",
    "parse_positive",
]
