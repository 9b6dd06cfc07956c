from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from loanscope.config import DEFAULT_INCOME_THRESHOLDS
from loanscope.features.aggregates import (
    GROUP_COLUMNS,
    UndecidedPolicy,
    add_rate_columns,
    count_outcomes,
    order_groups,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_OVERFLOW_BOUNDARY = 75000.0

BIN_COLUMNS = [
    "key",
    "bin_index",
    "range_start",
    "range_end",
    "is_overflow",
    *GROUP_COLUMNS[1:],
]


def compute_bin_edges(
    thresholds: Sequence[float],
    max_value: float,
    min_value: float | None = None,
) -> list[float]:
    """Threshold edges below ``max_value + 1`` followed by ``max_value + 1``.

    The trailing edge keeps the maximum inside the last bin instead of on its
    boundary. A leading edge at ``min_value`` is added when it sits below the
    first threshold so that every value in ``[min_value, max_value]`` lands in
    exactly one ``[lower, upper)`` interval. Past 2**53 adding one is lost to
    rounding, so the trailing edge falls back to the next float up.
    """
    upper = float(max_value) + 1.0
    if upper <= float(max_value):
        upper = float(np.nextafter(float(max_value), np.inf))
    edges = [float(edge) for edge in sorted(set(thresholds)) if float(edge) < upper]
    if min_value is not None and (not edges or float(min_value) < edges[0]):
        edges.insert(0, float(min_value))
    edges.append(upper)
    return edges


def _thousands(value: float) -> str:
    return f"{value / 1000:,.0f}"


def format_bin_label(
    lower: float,
    upper: float,
    overflow_boundary: float = DEFAULT_OVERFLOW_BOUNDARY,
    currency_symbol: str = "₹",
) -> str:
    if lower >= overflow_boundary:
        return f"≥ {currency_symbol}{_thousands(lower)}k"
    return f"{currency_symbol}{_thousands(lower)}k – {currency_symbol}{_thousands(upper)}k"


def _empty_bins() -> pd.DataFrame:
    return pd.DataFrame({column: pd.Series(dtype=object) for column in BIN_COLUMNS})


def build_income_bins(
    frame: pd.DataFrame,
    thresholds: Sequence[float] = DEFAULT_INCOME_THRESHOLDS,
    overflow_boundary: float = DEFAULT_OVERFLOW_BOUNDARY,
    currency_symbol: str = "₹",
    value_column: str = "total_income",
    undecided_policy: UndecidedPolicy = "count_as_non_approval",
) -> pd.DataFrame:
    """Histogram positive incomes into realized bins with outcome counts.

    Records whose value is non-numeric or not positive are left out entirely.
    Bins without records are dropped.
    """
    if frame.empty or value_column not in frame.columns:
        return _empty_bins()

    values = pd.to_numeric(frame[value_column], errors="coerce").astype(float)
    eligible_mask = np.isfinite(values) & (values > 0)
    eligible = frame.loc[eligible_mask]
    if eligible.empty:
        return _empty_bins()

    income = values.loc[eligible.index]
    edges = compute_bin_edges(thresholds, max_value=income.max(), min_value=income.min())
    positions = np.searchsorted(edges, income.to_numpy(), side="right") - 1
    LOGGER.debug(
        "Binned %d of %d records across %d edges", len(eligible), len(frame), len(edges)
    )

    counts = count_outcomes(eligible, pd.Series(positions, index=eligible.index))
    groups = order_groups(add_rate_columns(counts, undecided_policy=undecided_policy))
    bin_index = groups["key"].astype(int)
    groups["bin_index"] = bin_index
    groups["range_start"] = [edges[index] for index in bin_index]
    groups["range_end"] = [edges[index + 1] for index in bin_index]
    groups["is_overflow"] = groups["range_start"] >= float(overflow_boundary)
    groups["key"] = [
        format_bin_label(
            lower=lower,
            upper=upper,
            overflow_boundary=overflow_boundary,
            currency_symbol=currency_symbol,
        )
        for lower, upper in zip(groups["range_start"], groups["range_end"])
    ]
    return groups[BIN_COLUMNS]
