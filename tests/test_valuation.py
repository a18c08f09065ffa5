from __future__ import annotations

from datetime import datetime, timezone

import pytest

from eve_value.engine.aggregation import AggregationPolicy, ReferenceRate
from eve_value.engine.valuation import (
    COST_PER_BLOCK,
    COST_PER_MONTH,
    COST_PER_UNIT,
    EFFECTIVE_COST_PER_MONTH,
    EXCHANGE_COST_PER_MONTH,
    PlanStatus,
    best_cost_per_unit,
    valuate_offers,
    valuate_plans,
)
from eve_value.ingestion.models import Offer, Plan

RATE = ReferenceRate(
    value=5000.0,
    as_of=datetime(2026, 10, 1, tzinfo=timezone.utc),
    aggregation_policy=AggregationPolicy.MEDIAN,
    sample_size=1,
    source="esi-prices:average_price",
)


def _offer(name: str, cash: float | None, quantity: float | None) -> Offer:
    return Offer(name=name, cash_price=cash, unit_quantity=quantity)


def test_cost_per_unit_and_best_row() -> None:
    rows = valuate_offers([_offer("Small", 10, 500), _offer("Large", 35, 2000)], RATE)

    assert [row.cost_per_unit for row in rows] == pytest.approx([0.02, 0.0175])
    assert [row.is_best(COST_PER_UNIT) for row in rows] == [False, True]
    assert [row.is_best(COST_PER_BLOCK) for row in rows] == [False, True]


def test_cost_per_block_uses_rate_and_block_size() -> None:
    rows = valuate_offers([_offer("Small", 10, 500)], RATE, block_size=1_000_000_000)

    assert rows[0].cost_per_block == pytest.approx(10 / (500 * 5000) * 1e9)


def test_valuation_is_pure() -> None:
    offers = [_offer("Small", 10, 500), _offer("Large", 35, 2000), _offer("Odd", 19.99, 1100)]

    assert valuate_offers(offers, RATE) == valuate_offers(offers, RATE)


def test_empty_offer_list_yields_no_rows() -> None:
    assert valuate_offers([], RATE) == ()


def test_ties_go_to_the_earliest_pack() -> None:
    rows = valuate_offers([_offer("A", 10, 500), _offer("B", 20, 1000)], RATE)

    assert rows[0].best_metrics == frozenset({COST_PER_UNIT, COST_PER_BLOCK})
    assert rows[1].best_metrics == frozenset()


@pytest.mark.parametrize(
    "offer",
    [
        _offer("Zero", 10, 0),
        _offer("Missing", 10, None),
        _offer("Negative", -5, 500),
        _offer("No price", None, 500),
    ],
)
def test_invalid_offer_is_flagged_and_excluded(offer: Offer) -> None:
    rows = valuate_offers([offer, _offer("Valid", 35, 2000)], RATE)

    assert rows[0].warning is not None
    assert offer.name in rows[0].warning
    assert rows[0].cost_per_unit is None
    assert rows[0].best_metrics == frozenset()
    assert rows[1].is_best(COST_PER_UNIT)


def test_every_offer_invalid_marks_nothing() -> None:
    rows = valuate_offers([_offer("Zero", 10, 0)], RATE)

    assert not rows[0].rankable
    assert best_cost_per_unit(rows) is None


def test_best_cost_per_unit_reads_the_flagged_row() -> None:
    rows = valuate_offers([_offer("Small", 10, 500), _offer("Large", 35, 2000)], RATE)

    assert best_cost_per_unit(rows) == pytest.approx(0.0175)


def test_plans_wait_for_offer_valuation() -> None:
    plans = [Plan(label="1 Month", duration_months=1, cash_price=19.99, unit_cost=500)]

    report = valuate_plans(plans, None)

    assert report.status is PlanStatus.WAITING
    assert report.rows == ()
    assert report.message


def test_plan_metrics() -> None:
    plans = [Plan(label="3 Months", duration_months=3, cash_price=45.0, unit_cost=1200)]

    report = valuate_plans(plans, 0.0175)
    row = report.rows[0]

    assert report.status is PlanStatus.READY
    assert row.cost_per_month == pytest.approx(15.0)
    assert row.exchange_cost_total == pytest.approx(21.0)
    assert row.exchange_cost_per_month == pytest.approx(7.0)
    assert row.savings_vs_cash == pytest.approx(-24.0)
    assert row.effective_cost_per_month == pytest.approx(7.0)
    assert row.best_cost_per_unit == 0.0175


def test_plan_best_flags_are_per_metric() -> None:
    plans = [
        Plan(label="1 Month", duration_months=1, cash_price=19.99, unit_cost=500),
        Plan(label="12 Months", duration_months=12, cash_price=131.4, unit_cost=6600),
        Plan(label="Broken", duration_months=0, cash_price=10, unit_cost=100),
    ]

    report = valuate_plans(plans, 0.02)
    monthly, yearly, broken = report.rows

    # cash: 19.99 vs 10.95; via PLEX: 10.0 vs 11.0
    assert yearly.is_best(COST_PER_MONTH)
    assert monthly.is_best(EXCHANGE_COST_PER_MONTH)
    assert monthly.is_best(EFFECTIVE_COST_PER_MONTH)
    assert broken.warning is not None
    assert broken.best_metrics == frozenset()


def test_plans_with_empty_list_are_ready() -> None:
    report = valuate_plans([], 0.02)

    assert report.status is PlanStatus.READY
    assert report.rows == ()
