"""Derive comparative value metrics for packs and Omega plans."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Sequence, TypeVar

from eve_value.engine.aggregation import ReferenceRate
from eve_value.engine.ranking import mark_best
from eve_value.errors import InvalidInputError
from eve_value.ingestion.models import Offer, Plan
from eve_value.utils.esi import DEFAULT_BLOCK_SIZE, DEFAULT_EPSILON

COST_PER_UNIT = "cost_per_unit"
COST_PER_BLOCK = "cost_per_block"
COST_PER_MONTH = "cost_per_month"
EXCHANGE_COST_PER_MONTH = "exchange_cost_per_month"
EFFECTIVE_COST_PER_MONTH = "effective_cost_per_month"

OFFER_METRICS: tuple[str, ...] = (COST_PER_UNIT, COST_PER_BLOCK)
PLAN_METRICS: tuple[str, ...] = (COST_PER_MONTH, EXCHANGE_COST_PER_MONTH, EFFECTIVE_COST_PER_MONTH)

RowT = TypeVar("RowT", "OfferValuation", "PlanValuation")


def _require_positive(value: float | None, field_name: str, owner: str) -> float:
    if value is None:
        raise InvalidInputError(f"{owner}: {field_name} is missing")
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{owner}: {field_name} must be positive, got {value:g}")
    return value


@dataclass(frozen=True, slots=True)
class OfferValuation:
    offer: Offer
    cost_per_unit: float | None = None
    cost_per_block: float | None = None
    best_metrics: frozenset[str] = frozenset()
    warning: str | None = None

    @property
    def rankable(self) -> bool:
        return self.warning is None

    def is_best(self, metric: str) -> bool:
        return metric in self.best_metrics


@dataclass(frozen=True, slots=True)
class PlanValuation:
    plan: Plan
    best_cost_per_unit: float
    cost_per_month: float | None = None
    exchange_cost_per_month: float | None = None
    exchange_cost_total: float | None = None
    savings_vs_cash: float | None = None
    effective_cost_per_month: float | None = None
    best_metrics: frozenset[str] = frozenset()
    warning: str | None = None

    @property
    def rankable(self) -> bool:
        return self.warning is None

    def is_best(self, metric: str) -> bool:
        return metric in self.best_metrics


class PlanStatus(str, Enum):
    WAITING = "waiting"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class PlanReport:
    status: PlanStatus
    rows: tuple[PlanValuation, ...] = ()
    message: str | None = None


def _with_best_flags(rows: Sequence[RowT], metrics: Iterable[str], epsilon: float) -> tuple[RowT, ...]:
    flags: list[set[str]] = [set() for _ in rows]
    for metric in metrics:
        winner = mark_best([getattr(row, metric) for row in rows], epsilon)
        if winner is not None:
            flags[winner].add(metric)
    return tuple(
        replace(row, best_metrics=frozenset(flag)) if flag else row
        for row, flag in zip(rows, flags)
    )


def valuate_offer(offer: Offer, rate: ReferenceRate, block_size: float = DEFAULT_BLOCK_SIZE) -> OfferValuation:
    """Compute the metrics for one pack; raises :class:`InvalidInputError` for bad records."""

    price = _require_positive(offer.cash_price, "cash price", offer.name)
    quantity = _require_positive(offer.unit_quantity, "PLEX amount", offer.name)
    return OfferValuation(
        offer=offer,
        cost_per_unit=price / quantity,
        cost_per_block=price / (quantity * rate.value) * block_size,
    )


def valuate_offers(
    offers: Iterable[Offer],
    rate: ReferenceRate,
    *,
    block_size: float = DEFAULT_BLOCK_SIZE,
    epsilon: float = DEFAULT_EPSILON,
) -> tuple[OfferValuation, ...]:
    """Valuate every pack against ``rate`` and flag the best row per metric.

    Invalid packs come back with ``warning`` set and no metrics; they never
    win a ranking and never abort the rest of the valuation.
    """

    rows: list[OfferValuation] = []
    for offer in offers:
        try:
            rows.append(valuate_offer(offer, rate, block_size))
        except InvalidInputError as exc:
            rows.append(OfferValuation(offer=offer, warning=str(exc)))
    return _with_best_flags(rows, OFFER_METRICS, epsilon)


def best_cost_per_unit(rows: Sequence[OfferValuation]) -> float | None:
    """Cost per PLEX of the row flagged best, or ``None`` when nothing is rankable."""

    for row in rows:
        if row.is_best(COST_PER_UNIT):
            return row.cost_per_unit
    return None


def valuate_plan(plan: Plan, cost_per_unit: float) -> PlanValuation:
    months = _require_positive(plan.duration_months, "duration", plan.label)
    cash = _require_positive(plan.cash_price, "cash price", plan.label)
    unit_cost = _require_positive(plan.unit_cost, "PLEX cost", plan.label)
    cost_per_month = cash / months
    exchange_total = unit_cost * cost_per_unit
    exchange_per_month = exchange_total / months
    return PlanValuation(
        plan=plan,
        best_cost_per_unit=cost_per_unit,
        cost_per_month=cost_per_month,
        exchange_cost_per_month=exchange_per_month,
        exchange_cost_total=exchange_total,
        savings_vs_cash=exchange_total - cash,
        effective_cost_per_month=min(cost_per_month, exchange_per_month),
    )


def valuate_plans(
    plans: Iterable[Plan],
    cost_per_unit: float | None,
    *,
    epsilon: float = DEFAULT_EPSILON,
) -> PlanReport:
    """Valuate Omega plans using the best pack cost per PLEX of the same refresh.

    ``cost_per_unit`` comes from :func:`best_cost_per_unit`; without it the
    report stays in the ``waiting`` state instead of computing anything.
    """

    if cost_per_unit is None or not math.isfinite(cost_per_unit) or cost_per_unit <= 0:
        return PlanReport(
            status=PlanStatus.WAITING,
            message="Waiting for a valid cost per PLEX from packs.",
        )

    rows: list[PlanValuation] = []
    for plan in plans:
        try:
            rows.append(valuate_plan(plan, cost_per_unit))
        except InvalidInputError as exc:
            rows.append(PlanValuation(plan=plan, best_cost_per_unit=cost_per_unit, warning=str(exc)))
    return PlanReport(status=PlanStatus.READY, rows=_with_best_flags(rows, PLAN_METRICS, epsilon))


__all__ = [
    "COST_PER_BLOCK",
    "COST_PER_MONTH",
    "COST_PER_UNIT",
    "EFFECTIVE_COST_PER_MONTH",
    "EXCHANGE_COST_PER_MONTH",
    "OFFER_METRICS",
    "OfferValuation",
    "PLAN_METRICS",
    "PlanReport",
    "PlanStatus",
    "PlanValuation",
    "best_cost_per_unit",
    "valuate_offer",
    "valuate_offers",
    "valuate_plan",
    "valuate_plans",
]
