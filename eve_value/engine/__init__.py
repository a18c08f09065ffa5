"""Aggregation, valuation and ranking core of :mod:`eve_value`."""

from __future__ import annotations

from eve_value.engine.aggregation import AggregationPolicy, ReferenceRate, aggregate
from eve_value.engine.ranking import mark_best, select_best
from eve_value.engine.state import CalculatorState, CalculatorStatus
from eve_value.engine.valuation import (
    OfferValuation,
    PlanReport,
    PlanStatus,
    PlanValuation,
    best_cost_per_unit,
    valuate_offers,
    valuate_plans,
)

__all__ = [
    "AggregationPolicy",
    "CalculatorState",
    "CalculatorStatus",
    "OfferValuation",
    "PlanReport",
    "PlanStatus",
    "PlanValuation",
    "ReferenceRate",
    "aggregate",
    "best_cost_per_unit",
    "mark_best",
    "select_best",
    "valuate_offers",
    "valuate_plans",
]
