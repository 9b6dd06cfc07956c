from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Hashable, Literal, TypeVar

import pandas as pd

from loanscope.config import AppConfig, ColumnsConfig
from loanscope.features.aggregates import InsightSummary, build_insight_summary
from loanscope.features.filters import (
    FilterCriteria,
    FilterOptions,
    apply_filters,
    build_filter_options,
)
from loanscope.io.load import CancellationToken, LoadOutcome, load_raw_dataset_async
from loanscope.io.schema import RECORD_FIELDS
from loanscope.preprocess.records import normalize_frame
from loanscope.viz.charts import build_charts
from loanscope.viz.contracts import ChartSpec
from loanscope.viz.interaction import HoverController
from loanscope.viz.tooltips import round_percent

LOGGER = logging.getLogger(__name__)

NO_MATCH_NOTICE = (
    "No records match the current filter selection. Try broadening your filters or "
    "resetting them to view the full dataset."
)

SessionState = Literal["idle", "loading", "ready", "error", "closed"]
Loader = Callable[[Path, ColumnsConfig, CancellationToken], Awaitable[LoadOutcome]]

T = TypeVar("T")


class DerivationCache:
    """Bounded memo for pure derivations, keyed by dataset version and criteria."""

    def __init__(self, max_entries: int = 32) -> None:
        self._max_entries = max(1, int(max_entries))
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            LOGGER.debug("Derivation cache hit for %s", key[0] if isinstance(key, tuple) else key)
            return self._entries[key]
        self.misses += 1
        value = compute()
        self._entries[key] = value
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return value

    def clear(self) -> None:
        self._entries.clear()


@dataclass(frozen=True)
class DashboardView:
    criteria: FilterCriteria
    options: FilterOptions
    summary: InsightSummary | None
    total_available: int
    total_records: int
    charts: list[ChartSpec] = field(default_factory=list)
    notice: str | None = None

    @property
    def filtered_percentage(self) -> int:
        return round_percent(self.total_records, self.total_available)

    def chart(self, chart_id: str) -> ChartSpec:
        for chart in self.charts:
            if chart.chart_id == chart_id:
                return chart
        raise KeyError(chart_id)

    def controller(self, chart_id: str) -> HoverController:
        return HoverController(self.chart(chart_id))


def _empty_dataset() -> pd.DataFrame:
    return pd.DataFrame({name: pd.Series(dtype=object) for name in RECORD_FIELDS})


class DashboardSession:
    """Owns the loaded dataset, the filter criteria and their derived views."""

    def __init__(self, config: AppConfig | None = None, cache_size: int = 32) -> None:
        self.config = config or AppConfig()
        self.state: SessionState = "idle"
        self.error: str | None = None
        self._dataset = _empty_dataset()
        self._dataset_version = 0
        self._criteria = FilterCriteria()
        self._token: CancellationToken | None = None
        self._cache = DerivationCache(max_entries=cache_size)

    @property
    def dataset(self) -> pd.DataFrame:
        return self._dataset

    @property
    def dataset_version(self) -> int:
        return self._dataset_version

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def cache(self) -> DerivationCache:
        return self._cache

    def set_raw_rows(self, raw: pd.DataFrame) -> None:
        """Normalize canonical-named raw rows and make them the session dataset."""
        self._dataset = normalize_frame(raw)
        self._dataset_version += 1
        self._cache.clear()
        self.state = "ready"
        self.error = None
        LOGGER.info(
            "Dataset version %d ready with %d records", self._dataset_version, len(self._dataset)
        )

    async def load(self, csv_path: Path, loader: Loader = load_raw_dataset_async) -> None:
        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token
        self.state = "loading"
        self.error = None

        outcome = await loader(csv_path, self.config.columns, token)
        if outcome.cancelled or token.cancelled:
            LOGGER.debug("Ignoring outcome of cancelled load for %s", csv_path)
            return
        self._token = None
        if outcome.error is not None or outcome.rows is None:
            self.state = "error"
            self.error = outcome.error
            return
        self.set_raw_rows(outcome.rows)

    def close(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.state = "closed"

    def update_filter(self, name: str, value: str) -> FilterCriteria:
        self._criteria = self._criteria.with_selector(name, value)
        return self._criteria

    def reset_filters(self) -> FilterCriteria:
        self._criteria = self._criteria.reset()
        return self._criteria

    def filtered_view(self) -> pd.DataFrame:
        key = ("filtered", self._dataset_version, self._criteria)
        return self._cache.get_or_compute(
            key, lambda: apply_filters(self._dataset, self._criteria)
        )

    def filter_options(self) -> FilterOptions:
        return self._cache.get_or_compute(
            ("options", self._dataset_version),
            lambda: build_filter_options(self._dataset),
        )

    def insight_summary(self) -> InsightSummary | None:
        return self._cache.get_or_compute(
            ("summary", self._dataset_version),
            lambda: build_insight_summary(self._dataset),
        )

    def charts(self) -> list[ChartSpec]:
        key = ("charts", self._dataset_version, self._criteria)
        return self._cache.get_or_compute(
            key, lambda: build_charts(self.filtered_view(), self.config)
        )

    def build_view(self) -> DashboardView:
        filtered = self.filtered_view()
        charts = self.charts()
        return DashboardView(
            criteria=self._criteria,
            options=self.filter_options(),
            summary=self.insight_summary(),
            total_available=int(len(self._dataset)),
            total_records=int(len(filtered)),
            charts=charts,
            notice=None if charts else NO_MATCH_NOTICE,
        )
