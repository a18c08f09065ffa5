"""Render calculator state as pandas tables or a plain-text report."""

from __future__ import annotations

import math

import pandas as pd

from eve_value.engine.state import CalculatorState, CalculatorStatus
from eve_value.engine.valuation import (
    COST_PER_BLOCK,
    COST_PER_UNIT,
    EFFECTIVE_COST_PER_MONTH,
    PlanStatus,
)

PLACEHOLDER = "—"
BEST_TAG = "[Best]"

OFFER_COLUMNS = ["Pack", "Price", "$/PLEX", "ISK/PLEX", "$/B ISK", "Note"]
PLAN_COLUMNS = [
    "Plan",
    "Cash",
    "PLEX cost",
    "$/PLEX used",
    "Via PLEX",
    "Save vs cash",
    "$/month cash",
    "$/month via PLEX",
    "Note",
]


def format_number(value: float | None, digits: int = 2) -> str:
    """Group thousands and drop trailing zeros, up to ``digits`` decimals."""

    if value is None or (isinstance(value, float) and math.isnan(value)):
        return PLACEHOLDER
    text = f"{value:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _money(value: float | None, digits: int = 2) -> str:
    formatted = format_number(value, digits)
    return formatted if formatted == PLACEHOLDER else f"${formatted}"


def _tagged(text: str, best: bool) -> str:
    return f"{BEST_TAG} {text}" if best else text


def offers_frame(state: CalculatorState) -> pd.DataFrame:
    """One row per pack with the best $/PLEX and $/B ISK entries tagged."""

    rate_value = state.rate.value if state.rate else None
    records = []
    for row in state.offer_rows:
        offer = row.offer
        name = f"{offer.name} (Sale)" if offer.is_discounted else offer.name
        records.append(
            {
                "Pack": name,
                "Price": _money(offer.cash_price),
                "$/PLEX": _tagged(_money(row.cost_per_unit, 4), row.is_best(COST_PER_UNIT)),
                "ISK/PLEX": format_number(rate_value, 0),
                "$/B ISK": _tagged(_money(row.cost_per_block, 4), row.is_best(COST_PER_BLOCK)),
                "Note": row.warning or "",
            }
        )
    return pd.DataFrame(records, columns=OFFER_COLUMNS)


def plans_frame(state: CalculatorState) -> pd.DataFrame:
    """One row per Omega plan; the single cheapest effective monthly cost is tagged."""

    report = state.plan_report
    records = []
    if report is not None and report.status is PlanStatus.READY:
        for row in report.rows:
            plan = row.plan
            records.append(
                {
                    "Plan": _tagged(plan.label, row.is_best(EFFECTIVE_COST_PER_MONTH)),
                    "Cash": _money(plan.cash_price),
                    "PLEX cost": f"{format_number(plan.unit_cost, 0)} PLEX",
                    "$/PLEX used": _money(row.best_cost_per_unit, 4),
                    "Via PLEX": _money(row.exchange_cost_total),
                    "Save vs cash": _money(row.savings_vs_cash),
                    "$/month cash": _money(row.cost_per_month),
                    "$/month via PLEX": _money(row.exchange_cost_per_month),
                    "Note": row.warning or "",
                }
            )
    return pd.DataFrame(records, columns=PLAN_COLUMNS)


def _table_text(frame: pd.DataFrame) -> str:
    if not frame["Note"].astype(bool).any():
        frame = frame.drop(columns=["Note"])
    return frame.to_string(index=False)


def render_state(state: CalculatorState) -> str:
    """Return either populated tables or a single explanatory line."""

    if state.status is CalculatorStatus.LOADING:
        return "Loading… waiting for PLEX price."
    if state.status is CalculatorStatus.ERROR:
        return f"Error: {state.message}"

    rate = state.rate
    lines = [
        f"PLEX price: {format_number(rate.value, 0)} ISK "
        f"({rate.aggregation_policy.value} of {rate.sample_size} from {rate.source}, "
        f"as of {rate.as_of:%Y-%m-%d %H:%M:%S %Z})",
        "",
    ]

    if state.offer_rows:
        lines.append(_table_text(offers_frame(state)))
    else:
        lines.append("No packs loaded.")
    lines.append("")

    report = state.plan_report
    if report is None:
        lines.append("No Omega data.")
    elif report.status is PlanStatus.WAITING:
        lines.append(report.message or "Waiting for PLEX price…")
    elif not report.rows:
        lines.append("No Omega data.")
    else:
        lines.append(_table_text(plans_frame(state)))

    if state.warnings:
        lines.append("")
        lines.extend(f"Warning: {warning}" for warning in state.warnings)
    return "\n".join(lines)


__all__ = ["format_number", "offers_frame", "plans_frame", "render_state"]
