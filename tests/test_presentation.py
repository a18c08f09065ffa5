from __future__ import annotations

from datetime import datetime, timezone

import pytest

from eve_value.engine.aggregation import AggregationPolicy, ReferenceRate
from eve_value.engine.state import CalculatorState
from eve_value.engine.valuation import valuate_offers, valuate_plans
from eve_value.ingestion.models import Offer, Plan
from eve_value.presentation.table import (
    BEST_TAG,
    PLACEHOLDER,
    format_number,
    offers_frame,
    plans_frame,
    render_state,
)

RATE = ReferenceRate(
    value=5_000.0,
    as_of=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    aggregation_policy=AggregationPolicy.MEDIAN,
    sample_size=2,
    source="esi-prices:average_price+esi-prices:adjusted_price",
)


def _ready_state(offers, plans=()) -> CalculatorState:
    rows = valuate_offers(offers, RATE)
    report = valuate_plans(plans, min(r.cost_per_unit for r in rows if r.rankable)) if plans else None
    return CalculatorState.ready(RATE, rows, report)


@pytest.mark.parametrize(
    "value, digits, expected",
    [
        (1_234_567.0, 0, "1,234,567"),
        (0.0175, 4, "0.0175"),
        (10.0, 2, "10"),
        (4.5, 2, "4.5"),
        (None, 2, PLACEHOLDER),
        (float("nan"), 2, PLACEHOLDER),
    ],
)
def test_format_number(value, digits, expected) -> None:
    assert format_number(value, digits) == expected


def test_render_loading_and_error_states() -> None:
    assert render_state(CalculatorState.loading()).startswith("Loading")
    assert render_state(CalculatorState.error("rate (FetchError): boom")) == "Error: rate (FetchError): boom"


def test_offers_frame_tags_best_rows() -> None:
    state = _ready_state(
        [
            Offer(name="500 PLEX", cash_price=10.0, unit_quantity=500),
            Offer(name="2000 PLEX", cash_price=35.0, unit_quantity=2000, is_discounted=True),
        ]
    )

    frame = offers_frame(state)

    assert list(frame["Pack"]) == ["500 PLEX", "2000 PLEX (Sale)"]
    assert list(frame["$/PLEX"]) == ["$0.02", f"{BEST_TAG} $0.0175"]
    assert list(frame["$/B ISK"]) == ["$4,000", f"{BEST_TAG} $3,500"]
    assert list(frame["ISK/PLEX"]) == ["5,000", "5,000"]


def test_offers_frame_shows_placeholders_for_invalid_rows() -> None:
    state = _ready_state(
        [
            Offer(name="Good", cash_price=10.0, unit_quantity=500),
            Offer(name="Free", cash_price=0.0, unit_quantity=500),
        ]
    )

    frame = offers_frame(state)

    assert frame.loc[1, "$/PLEX"] == PLACEHOLDER
    assert "cash price must be positive" in frame.loc[1, "Note"]


def test_plans_frame_tags_cheapest_effective_plan() -> None:
    state = _ready_state(
        [Offer(name="2000 PLEX", cash_price=35.0, unit_quantity=2000)],
        [
            Plan(label="1 Month", duration_months=1, cash_price=19.99, unit_cost=600),
            Plan(label="12 Months", duration_months=12, cash_price=131.4, unit_cost=6600),
        ],
    )

    frame = plans_frame(state)

    assert list(frame["Plan"]) == ["1 Month", f"{BEST_TAG} 12 Months"]
    assert frame.loc[0, "Via PLEX"] == "$10.5"
    assert frame.loc[0, "PLEX cost"] == "600 PLEX"


def test_render_ready_state_includes_rate_and_tables() -> None:
    state = _ready_state(
        [Offer(name="500 PLEX", cash_price=10.0, unit_quantity=500)],
        [Plan(label="1 Month", duration_months=1, cash_price=19.99, unit_cost=500)],
    )

    text = render_state(state)

    assert text.startswith("PLEX price: 5,000 ISK (median of 2 from esi-prices")
    assert "500 PLEX" in text
    assert "1 Month" in text
    assert "Note" not in text


def test_render_ready_state_without_packs_or_plans() -> None:
    text = render_state(CalculatorState.ready(RATE, ()))

    assert "No packs loaded." in text
    assert "No Omega data." in text


def test_render_waiting_plans_and_warnings() -> None:
    rows = valuate_offers([Offer(name="Broken", cash_price=None, unit_quantity=500)], RATE)
    report = valuate_plans([Plan(label="1 Month", duration_months=1, cash_price=19.99, unit_cost=500)], None)
    state = CalculatorState.ready(RATE, rows, report, ("plans (FetchError): offline",))

    text = render_state(state)

    assert "Waiting for a valid cost per PLEX from packs." in text
    assert "Warning: plans (FetchError): offline" in text
    assert "Warning: Broken: cash price is missing" in text
