from __future__ import annotations

import math
from typing import Callable

import pandas as pd

from loanscope.config import AppConfig, ChartsConfig, MarginConfig
from loanscope.features.aggregates import (
    aggregate_credit_history,
    aggregate_education,
    aggregate_property_area,
)
from loanscope.features.binning import build_income_bins
from loanscope.features.stacking import STATUS_CATEGORIES, StackedGroup, build_stacks
from loanscope.viz.contracts import AxisTick, ChartSpec, LegendEntry, Margin, Shape
from loanscope.viz.scales import BandScale, LinearScale, band_scale, count_scale
from loanscope.viz.tooltips import CATEGORY_LABELS

CHART_IDS = (
    "income_vs_status",
    "education_approval",
    "credit_history_outcome",
    "approval_by_property",
)


def _margin(config: MarginConfig) -> Margin:
    return Margin(top=config.top, right=config.right, bottom=config.bottom, left=config.left)


def _status_colors(config: ChartsConfig) -> dict[str, str]:
    return {
        "approved": config.approved_color,
        "rejected": config.rejected_color,
        "undecided": config.undecided_color,
    }


def _status_legend(config: ChartsConfig, stacks: list[StackedGroup]) -> tuple[LegendEntry, ...]:
    """Legend in stacking order; the undecided entry only shows when a bar has one."""
    colors = _status_colors(config)
    entries = []
    for category, _ in STATUS_CATEGORIES:
        if category == "undecided" and not any(stack.segment(category).count for stack in stacks):
            continue
        entries.append(LegendEntry(label=CATEGORY_LABELS[category], color=colors[category]))
    return tuple(entries)


def _format_count(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,g}"


def _format_percent(value: float) -> str:
    return f"{value * 100:.0f}%"


def _x_ticks(scale: BandScale) -> tuple[AxisTick, ...]:
    return tuple(
        AxisTick(label=value, position=scale.center(value) or 0.0) for value in scale.domain
    )


def _y_ticks(scale: LinearScale, formatter: Callable[[float], str]) -> tuple[AxisTick, ...]:
    return tuple(AxisTick(label=formatter(value), position=scale(value)) for value in scale.ticks())


def _column(
    chart_id: str,
    index: int,
    key: str,
    x_scale: BandScale,
    plot_height: float,
    datum: dict,
) -> Shape:
    return Shape(
        shape_id=f"{chart_id}/{index}/column",
        role="column",
        x=x_scale(key) or 0.0,
        y=0.0,
        width=x_scale.bandwidth,
        height=plot_height,
        fill="transparent",
        group_key=key,
        datum=datum,
    )


def build_stacked_status_chart(
    groups: pd.DataFrame,
    *,
    chart_id: str,
    title: str,
    description: str,
    aria_label: str,
    x_label: str,
    charts: ChartsConfig,
    margin: MarginConfig,
    rotate_x_labels: bool = False,
) -> ChartSpec:
    """Approved-then-rejected stacked bars, one per group, plus column overlays."""
    spec_margin = _margin(margin)
    plot_width = charts.width - margin.left - margin.right
    plot_height = charts.height - margin.top - margin.bottom

    stacks = build_stacks(groups, STATUS_CATEGORIES)
    x_scale = band_scale([stack.key for stack in stacks], plot_width, charts.stacked_padding)
    max_total = max((stack.total for stack in stacks), default=0)
    y_scale = count_scale(max_total, plot_height)
    colors = _status_colors(charts)

    shapes: list[Shape] = []
    columns: list[Shape] = []
    for index, stack in enumerate(stacks):
        x = x_scale(stack.key) or 0.0
        for segment in stack.segments:
            top = y_scale(segment.end)
            bottom = y_scale(segment.start)
            shapes.append(
                Shape(
                    shape_id=f"{chart_id}/{index}/{segment.category}",
                    role="segment",
                    x=x,
                    y=top,
                    width=x_scale.bandwidth,
                    height=max(0.0, bottom - top),
                    fill=colors[segment.category],
                    group_key=stack.key,
                    category=segment.category,
                    opacity=0.9,
                    datum=stack.datum,
                )
            )
        columns.append(_column(chart_id, index, stack.key, x_scale, plot_height, stack.datum))

    return ChartSpec(
        chart_id=chart_id,
        title=title,
        description=description,
        aria_label=aria_label,
        width=charts.width,
        height=charts.height,
        margin=spec_margin,
        x_label=x_label,
        y_label="Number of applicants",
        shapes=tuple(shapes),
        hover_columns=tuple(columns),
        legend=_status_legend(charts, stacks),
        x_ticks=_x_ticks(x_scale),
        y_ticks=_y_ticks(y_scale, _format_count),
        tooltip_offset=charts.stacked_tooltip_offset,
        rotate_x_labels=rotate_x_labels,
    )


def build_rate_chart(
    groups: pd.DataFrame,
    *,
    chart_id: str,
    title: str,
    description: str,
    aria_label: str,
    x_label: str,
    charts: ChartsConfig,
    colors: dict[str, str],
) -> ChartSpec:
    """One bar per group with height proportional to its approval rate."""
    margin = charts.margin
    plot_width = charts.width - margin.left - margin.right
    plot_height = charts.height - margin.top - margin.bottom

    # Groups without a defined rate (no decided records) are left off the chart.
    rows = [
        row
        for row in groups.to_dict(orient="records")
        if row["approval_rate"] is not None and math.isfinite(float(row["approval_rate"]))
    ]
    keys = [str(row["key"]) for row in rows]
    rates = [float(row["approval_rate"]) for row in rows]
    x_scale = band_scale(keys, plot_width, charts.rate_padding)
    max_rate = max(rates, default=0.0) or 1.0
    y_scale = LinearScale(domain=(0.0, max_rate), range=(plot_height, 0.0)).nice()

    shapes: list[Shape] = []
    columns: list[Shape] = []
    legend: list[LegendEntry] = []
    for index, (key, rate, row) in enumerate(zip(keys, rates, rows)):
        color = colors.get(key, charts.fallback_color)
        top = y_scale(rate)
        shapes.append(
            Shape(
                shape_id=f"{chart_id}/{index}/bar",
                role="bar",
                x=x_scale(key) or 0.0,
                y=top,
                width=x_scale.bandwidth,
                height=max(0.0, plot_height - top),
                fill=color,
                group_key=key,
                datum=row,
            )
        )
        columns.append(_column(chart_id, index, key, x_scale, plot_height, row))
        legend.append(LegendEntry(label=key, color=color))

    return ChartSpec(
        chart_id=chart_id,
        title=title,
        description=description,
        aria_label=aria_label,
        width=charts.width,
        height=charts.height,
        margin=_margin(margin),
        x_label=x_label,
        y_label="Approval rate",
        shapes=tuple(shapes),
        hover_columns=tuple(columns),
        legend=tuple(legend),
        x_ticks=_x_ticks(x_scale),
        y_ticks=_y_ticks(y_scale, _format_percent),
        tooltip_offset=charts.rate_tooltip_offset,
    )


def aggregation_options(config: AppConfig) -> dict[str, object]:
    return {
        "undecided_policy": config.aggregation.undecided_policy,
    }


def build_income_chart(frame: pd.DataFrame, config: AppConfig) -> ChartSpec:
    groups = build_income_bins(
        frame,
        thresholds=config.binning.income_thresholds,
        overflow_boundary=config.binning.overflow_boundary,
        currency_symbol=config.binning.currency_symbol,
        **aggregation_options(config),
    )
    return build_stacked_status_chart(
        groups,
        chart_id="income_vs_status",
        title="Income vs loan status",
        description=(
            "Compare income ranges for approved and rejected applications. Income shown is "
            "annual income in Indian Rupees (₹)."
        ),
        aria_label="Stacked bar chart showing income ranges by loan approval status",
        x_label="Income range",
        charts=config.charts,
        margin=config.charts.income_margin,
        rotate_x_labels=True,
    )


def build_education_chart(frame: pd.DataFrame, config: AppConfig) -> ChartSpec:
    return build_stacked_status_chart(
        aggregate_education(frame, **aggregation_options(config)),
        chart_id="education_approval",
        title="Education and loan approval",
        description="Compare approval rates between graduate and non-graduate applicants.",
        aria_label="Stacked bar chart showing education level and loan approval outcomes",
        x_label="Education level",
        charts=config.charts,
        margin=config.charts.margin,
    )


def build_credit_history_chart(frame: pd.DataFrame, config: AppConfig) -> ChartSpec:
    return build_stacked_status_chart(
        aggregate_credit_history(frame, **aggregation_options(config)),
        chart_id="credit_history_outcome",
        title="Credit history and outcomes",
        description="Compare loan outcomes for applicants with and without a credit history.",
        aria_label="Stacked bar chart showing credit history and loan approval outcomes",
        x_label="Credit history",
        charts=config.charts,
        margin=config.charts.margin,
    )


def build_property_chart(frame: pd.DataFrame, config: AppConfig) -> ChartSpec:
    return build_rate_chart(
        aggregate_property_area(frame, **aggregation_options(config)),
        chart_id="approval_by_property",
        title="Property area trends",
        description=(
            "Compare loan approval rates and patterns across urban, rural, and semi-urban areas."
        ),
        aria_label="Bar chart showing approval rate by property area",
        x_label="Property area",
        charts=config.charts,
        colors=config.charts.property_area_colors,
    )


def build_charts(frame: pd.DataFrame, config: AppConfig) -> list[ChartSpec]:
    """Every dashboard chart for a filtered view; nothing for an empty view."""
    if frame.empty:
        return []
    return [
        build_income_chart(frame, config),
        build_education_chart(frame, config),
        build_credit_history_chart(frame, config),
        build_property_chart(frame, config),
    ]
