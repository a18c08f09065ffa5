"""Public interface for the eve_value package."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from importlib import metadata as importlib_metadata
from typing import Any, TypeVar

from eve_value.config import CalculatorSettings, load_settings
from eve_value.engine.aggregation import AggregationPolicy, ReferenceRate, aggregate
from eve_value.engine.state import CalculatorState, CalculatorStatus
from eve_value.engine.valuation import best_cost_per_unit, valuate_offers, valuate_plans
from eve_value.errors import InvalidInputError, ValueCalculatorError
from eve_value.ingestion import build_fallback_source
from eve_value.ingestion.catalog import load_offers, load_plans
from eve_value.ingestion.http_client import JsonHttpClient
from eve_value.ingestion.models import Catalog, Plan
from eve_value.ingestion.strategy import RateSource
from eve_value.utils.logger import get_logger

__all__ = [
    "__version__",
    "AggregationPolicy",
    "CalculatorSettings",
    "CalculatorState",
    "CalculatorStatus",
    "ReferenceRate",
    "ValueCalculator",
    "load_settings",
    "render_state",
]

try:
    __version__ = importlib_metadata.version("eve-value")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"

LOGGER = get_logger(__name__)

T = TypeVar("T")


def _outcome(future: Future[T]) -> tuple[T | None, ValueCalculatorError | None]:
    try:
        return future.result(), None
    except ValueCalculatorError as exc:
        return None, exc


def _failure(stage: str, exc: ValueCalculatorError) -> str:
    return f"{stage} ({type(exc).__name__}): {exc}"


class ValueCalculator:
    """Package facade that owns the refresh cycle and the current state.

    Each refresh loads the pack and plan documents and the PLEX price feed
    concurrently, then aggregates, valuates and ranks synchronously. The
    resulting :class:`CalculatorState` is immutable and swapped in as a whole,
    so readers never observe a half-updated table.
    """

    __slots__ = (
        "settings",
        "client",
        "rate_source",
        "_owns_client",
        "_state",
        "_catalog",
        "_refresh_lock",
        "_state_lock",
        "_generation",
    )

    __version__ = __version__

    def __init__(
        self,
        settings: CalculatorSettings | None = None,
        *,
        client: JsonHttpClient | None = None,
        rate_source: RateSource | None = None,
    ) -> None:
        self.settings = settings or CalculatorSettings()
        self._owns_client = client is None
        self.client = client or JsonHttpClient(
            timeout=self.settings.timeout,
            max_attempts=self.settings.max_attempts,
            backoff_seconds=self.settings.backoff_seconds,
            user_agent=self.settings.user_agent,
        )
        self.rate_source = rate_source or build_fallback_source(self.settings.feeds, self.client)
        self._state = CalculatorState.loading()
        self._catalog = Catalog()
        self._refresh_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._generation = 0

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    def refresh(self) -> CalculatorState:
        """Run one refresh cycle and return the new state.

        A call made while another refresh is still in flight is ignored and
        returns the current state unchanged. A manual rate applied while the
        refresh runs takes precedence over its result.
        """

        if not self._refresh_lock.acquire(blocking=False):
            LOGGER.warning("Refresh already in progress; ignoring the new request")
            return self._state
        try:
            with self._state_lock:
                generation = self._generation
                self._state = CalculatorState.loading()
            state = self._run_refresh()
            with self._state_lock:
                superseded = self._generation != generation
                if not superseded:
                    self._state = state
        finally:
            self._refresh_lock.release()
        if superseded:
            LOGGER.info("Manual rate applied during refresh; keeping it over the refreshed state")
        elif state.status is CalculatorStatus.ERROR:
            LOGGER.error("Refresh failed: %s", state.message)
        else:
            LOGGER.info(
                "Refresh complete: %s packs, rate %.2f ISK/PLEX (%s)",
                len(state.offer_rows),
                state.rate.value,
                state.rate.aggregation_policy.value,
            )
        return self._state

    def _run_refresh(self) -> CalculatorState:
        plans_source = self.settings.plans_source
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="eve-value") as pool:
            offers_future = pool.submit(load_offers, self.settings.offers_source, self.client)
            plans_future = (
                pool.submit(load_plans, plans_source, self.client) if plans_source else None
            )
            rate_future = pool.submit(self._fetch_rate)

            offers, offers_error = _outcome(offers_future)
            plans, plans_error = _outcome(plans_future) if plans_future else ((), None)
            rate, rate_error = _outcome(rate_future)

        if offers_error is not None:
            return CalculatorState.error(_failure("offers", offers_error))

        warnings: tuple[str, ...] = ()
        if plans_error is not None:
            LOGGER.warning("Omega plans unavailable: %s", plans_error)
            warnings = (_failure("plans", plans_error),)
            plans = ()
        # set_manual_rate values this catalog, including after a failed rate phase.
        self._catalog = Catalog(offers=tuple(offers or ()), plans=tuple(plans or ()))

        if rate_error is not None:
            return CalculatorState.error(_failure("rate", rate_error))
        return self._valuate(rate, self._catalog, warnings)

    def load_catalog(self) -> Catalog:
        """Load packs and plans without touching the price feed.

        A missing or broken plan document is logged and treated as empty.
        """

        offers = load_offers(self.settings.offers_source, self.client)
        plans: tuple[Plan, ...] = ()
        if self.settings.plans_source:
            try:
                plans = load_plans(self.settings.plans_source, self.client)
            except ValueCalculatorError as exc:
                LOGGER.warning("Omega plans unavailable: %s", exc)
        self._catalog = Catalog(offers=offers, plans=plans)
        return self._catalog

    def _fetch_rate(self) -> ReferenceRate:
        candidates = self.rate_source.fetch_candidates()
        return aggregate(candidates, self.settings.aggregation_policy)

    def _valuate(
        self, rate: ReferenceRate, catalog: Catalog, warnings: tuple[str, ...] = ()
    ) -> CalculatorState:
        offer_rows = valuate_offers(
            catalog.offers,
            rate,
            block_size=self.settings.block_size,
            epsilon=self.settings.epsilon,
        )
        plan_report = (
            valuate_plans(
                catalog.plans, best_cost_per_unit(offer_rows), epsilon=self.settings.epsilon
            )
            if catalog.plans
            else None
        )
        return CalculatorState.ready(rate, offer_rows, plan_report, warnings)

    def set_manual_rate(self, value: Any) -> bool:
        """Value the last loaded catalog against a user-supplied ISK/PLEX rate.

        Returns ``False`` (and leaves the state untouched) when ``value`` is
        not a finite positive number.
        """

        try:
            rate = ReferenceRate.manual(value)
        except InvalidInputError as exc:
            LOGGER.warning("Rejected manual rate: %s", exc)
            return False
        with self._state_lock:
            self._generation += 1
            self._state = self._valuate(rate, self._catalog)
        LOGGER.info("Manual rate %.2f ISK/PLEX applied", rate.value)
        return True

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "ValueCalculator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def __getattr__(name: str) -> Any:
    """Lazily import the pandas-backed presentation helpers."""

    if name == "render_state":
        from eve_value.presentation.table import render_state as _render

        return _render
    raise AttributeError(f"module 'eve_value' has no attribute {name}")
