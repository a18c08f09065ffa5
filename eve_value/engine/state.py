"""Immutable calculator snapshots replaced wholesale on every refresh."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from eve_value.engine.aggregation import ReferenceRate
from eve_value.engine.valuation import OfferValuation, PlanReport


class CalculatorStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class CalculatorState:
    """Everything the presentation layer needs for one render.

    ``rate`` and the row tuples are only populated in the ``READY`` state;
    ``message`` carries the failure reason in the ``ERROR`` state.
    """

    status: CalculatorStatus
    rate: ReferenceRate | None = None
    offer_rows: tuple[OfferValuation, ...] = ()
    plan_report: PlanReport | None = None
    message: str | None = None
    warnings: tuple[str, ...] = ()
    updated_at: datetime | None = None

    @classmethod
    def loading(cls) -> "CalculatorState":
        return cls(status=CalculatorStatus.LOADING, updated_at=_now())

    @classmethod
    def error(cls, message: str) -> "CalculatorState":
        return cls(status=CalculatorStatus.ERROR, message=message, updated_at=_now())

    @classmethod
    def ready(
        cls,
        rate: ReferenceRate,
        offer_rows: tuple[OfferValuation, ...],
        plan_report: PlanReport | None = None,
        warnings: tuple[str, ...] = (),
    ) -> "CalculatorState":
        row_warnings = tuple(row.warning for row in offer_rows if row.warning)
        if plan_report is not None:
            row_warnings += tuple(row.warning for row in plan_report.rows if row.warning)
        return cls(
            status=CalculatorStatus.READY,
            rate=rate,
            offer_rows=offer_rows,
            plan_report=plan_report,
            warnings=tuple(warnings) + row_warnings,
            updated_at=_now(),
        )

    @property
    def is_ready(self) -> bool:
        return self.status is CalculatorStatus.READY


__all__ = ["CalculatorState", "CalculatorStatus"]
