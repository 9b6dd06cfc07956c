from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from loanscope.config import AppConfig
from loanscope.features.aggregates import (
    aggregate_credit_history,
    aggregate_education,
    aggregate_property_area,
)
from loanscope.features.binning import build_income_bins
from loanscope.features.filters import FilterCriteria
from loanscope.io.write import write_summary, write_tables
from loanscope.paths import build_output_paths
from loanscope.report.render import render_dashboard
from loanscope.session import DashboardSession, DashboardView
from loanscope.viz.charts import aggregation_options
from loanscope.viz.figures import plot_charts

LOGGER = logging.getLogger(__name__)


class DatasetLoadError(RuntimeError):
    """Raised when the dataset cannot be loaded for a pipeline run."""


@dataclass(frozen=True)
class DashboardRun:
    report_path: Path
    view: DashboardView
    tables: dict[str, Path]


def build_tables(frame: pd.DataFrame, config: AppConfig) -> dict[str, pd.DataFrame]:
    options = aggregation_options(config)
    return {
        "income_bins": build_income_bins(
            frame,
            thresholds=config.binning.income_thresholds,
            overflow_boundary=config.binning.overflow_boundary,
            currency_symbol=config.binning.currency_symbol,
            **options,
        ),
        "education": aggregate_education(frame, **options),
        "credit_history": aggregate_credit_history(frame, **options),
        "property_area": aggregate_property_area(frame, **options),
        "filtered_records": frame.reset_index(drop=True),
    }


def view_summary(view: DashboardView) -> dict:
    return {
        "criteria": view.criteria.to_dict(),
        "active_filters": view.criteria.active(),
        "options": view.options.to_dict(),
        "total_available": view.total_available,
        "total_records": view.total_records,
        "filtered_percentage": view.filtered_percentage,
        "insight_summary": view.summary.to_dict() if view.summary else None,
        "notice": view.notice,
        "charts": [chart.to_dict() for chart in view.charts],
    }


def load_session(
    csv_path: Path,
    config: AppConfig,
    criteria: FilterCriteria | None = None,
) -> DashboardSession:
    session = DashboardSession(config=config)
    asyncio.run(session.load(csv_path))
    if session.state != "ready":
        raise DatasetLoadError(session.error or f"Dataset load did not complete: {csv_path}")
    for name, value in (criteria or FilterCriteria()).to_dict().items():
        session.update_filter(name, value)
    return session


def run_dashboard(
    csv_path: Path,
    out_dir: Path,
    config: AppConfig,
    criteria: FilterCriteria | None = None,
) -> DashboardRun:
    paths = build_output_paths(out_dir)
    session = load_session(csv_path=csv_path, config=config, criteria=criteria)
    view = session.build_view()

    written = write_tables(
        build_tables(session.filtered_view(), config),
        paths.tables,
        fmt=config.outputs.tables_format,
    )
    write_summary(view_summary(view), paths.summary / "dashboard.json")

    if config.outputs.write_figures:
        try:
            plot_charts(view.charts, paths.figures, fmt=config.outputs.figures_format)
        except Exception:  # pragma: no cover
            LOGGER.exception("Failed rendering one or more chart figures")

    report_path = render_dashboard(view, paths.report)
    session.close()
    return DashboardRun(report_path=report_path, view=view, tables=written)
