from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

import numpy as np
import pandas as pd

from loanscope.features.filters import CREDIT_HISTORY_LABELS

UndecidedPolicy = Literal["count_as_non_approval", "exclude"]

PROPERTY_AREA_ORDER = ("Rural", "Semiurban", "Urban")

GROUP_COLUMNS = [
    "key",
    "n_total",
    "n_approved",
    "n_rejected",
    "n_undecided",
    "approval_rate",
]


def _empty_groups() -> pd.DataFrame:
    return pd.DataFrame({column: pd.Series(dtype=object) for column in GROUP_COLUMNS})


def count_outcomes(frame: pd.DataFrame, keys: pd.Series) -> pd.DataFrame:
    """Count records and outcomes per key; NaN and empty-string keys are dropped."""
    status = frame["loan_status"]
    working = pd.DataFrame(
        {
            "key": keys,
            "is_approved": (status == "Y").astype(int),
            "is_rejected": (status == "N").astype(int),
            "is_undecided": (status == "").astype(int),
        },
        index=frame.index,
    )
    working = working[working["key"].notna() & (working["key"] != "")]
    if working.empty:
        return _empty_groups()[["key", "n_total", "n_approved", "n_rejected", "n_undecided"]]

    return (
        working.groupby("key", sort=False)
        .agg(
            n_total=("is_approved", "size"),
            n_approved=("is_approved", "sum"),
            n_rejected=("is_rejected", "sum"),
            n_undecided=("is_undecided", "sum"),
        )
        .reset_index()
    )


def approval_rate(approved: pd.Series, denominator: pd.Series) -> pd.Series:
    """Share approved per group; NaN where the denominator is empty."""
    approved = pd.to_numeric(approved, errors="coerce").astype(float)
    denominator = pd.to_numeric(denominator, errors="coerce").astype(float)
    return (approved / denominator).where(denominator > 0)


def add_rate_columns(
    groups: pd.DataFrame,
    undecided_policy: UndecidedPolicy = "count_as_non_approval",
) -> pd.DataFrame:
    working = groups.copy()
    denominator = working["n_total"]
    if undecided_policy == "exclude":
        denominator = working["n_total"] - working["n_undecided"]
    working["approval_rate"] = approval_rate(working["n_approved"], denominator)
    return working


def order_groups(groups: pd.DataFrame, order: Sequence[str] | None = None) -> pd.DataFrame:
    """Sort by a fixed priority table when given, otherwise ascending by key.

    Keys missing from ``order`` sort after every listed key, ascending among
    themselves.
    """
    if groups.empty:
        return groups.reset_index(drop=True)
    working = groups.copy()
    if order is None:
        working = working.sort_values("key", kind="mergesort")
    else:
        priority = {label: index for index, label in enumerate(order)}
        working["_priority"] = working["key"].map(priority).fillna(len(priority))
        working = working.sort_values(["_priority", "key"], kind="mergesort")
        working = working.drop(columns="_priority")
    return working.reset_index(drop=True)


def sort_by_rate(groups: pd.DataFrame, ascending: bool = False) -> pd.DataFrame:
    """Stable sort on approval rate; ties keep their incoming key order."""
    return groups.sort_values(
        "approval_rate", ascending=ascending, kind="mergesort", na_position="last"
    ).reset_index(drop=True)


def aggregate_by_category(
    frame: pd.DataFrame,
    field: str,
    order: Sequence[str] | None = None,
    undecided_policy: UndecidedPolicy = "count_as_non_approval",
) -> pd.DataFrame:
    if frame.empty:
        return _empty_groups()
    counts = count_outcomes(frame, frame[field])
    if counts.empty:
        return _empty_groups()
    groups = add_rate_columns(counts, undecided_policy=undecided_policy)
    return order_groups(groups, order=order)[GROUP_COLUMNS]


def aggregate_property_area(frame: pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    return aggregate_by_category(frame, "property_area", order=PROPERTY_AREA_ORDER, **kwargs)


def aggregate_education(frame: pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    return aggregate_by_category(frame, "education", **kwargs)


def _credit_history_key(value: float) -> str | None:
    if not np.isfinite(value):
        return None
    code = str(int(value)) if float(value).is_integer() else str(value)
    return CREDIT_HISTORY_LABELS.get(code, code)


def aggregate_credit_history(frame: pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    """Group by the numeric credit-history flag; records without one are dropped."""
    if frame.empty:
        return _empty_groups()
    keys = frame["credit_history"].astype(float).map(_credit_history_key)
    counts = count_outcomes(frame, keys)
    if counts.empty:
        return _empty_groups()
    groups = add_rate_columns(counts, **kwargs)
    return order_groups(groups, order=tuple(CREDIT_HISTORY_LABELS.values()))[GROUP_COLUMNS]


@dataclass(frozen=True)
class AreaImpact:
    area: str
    approval_rate: float
    count: int


@dataclass(frozen=True)
class InsightSummary:
    total_count: int
    approval_rate_pct: float
    avg_approved_loan_amount: float
    avg_total_income: float
    property_impact: tuple[AreaImpact, ...]

    @property
    def top_area(self) -> AreaImpact | None:
        return self.property_impact[0] if self.property_impact else None

    @property
    def trailing_area(self) -> AreaImpact | None:
        return self.property_impact[-1] if self.property_impact else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "approval_rate_pct": self.approval_rate_pct,
            "avg_approved_loan_amount": self.avg_approved_loan_amount,
            "avg_total_income": self.avg_total_income,
            "property_impact": [
                {"area": item.area, "approval_rate": item.approval_rate, "count": item.count}
                for item in self.property_impact
            ],
        }


def _mean_or_zero(values: pd.Series) -> float:
    mean = values.mean()
    return 0.0 if pd.isna(mean) else float(mean)


def build_insight_summary(frame: pd.DataFrame) -> InsightSummary | None:
    """Dataset-wide overview; ``None`` when there is nothing to summarize."""
    if frame.empty:
        return None

    approved = frame[frame["loan_status"] == "Y"]
    # Property impact keeps first-appearance order before the stable rate sort.
    counts = count_outcomes(frame, frame["property_area"])
    impact_frame = sort_by_rate(add_rate_columns(counts)) if not counts.empty else counts
    impact = tuple(
        AreaImpact(
            area=str(row.key),
            approval_rate=float(row.approval_rate),
            count=int(row.n_total),
        )
        for row in impact_frame.itertuples(index=False)
    )
    return InsightSummary(
        total_count=int(len(frame)),
        approval_rate_pct=float(len(approved) / len(frame) * 100.0),
        avg_approved_loan_amount=_mean_or_zero(approved["loan_amount"]),
        avg_total_income=_mean_or_zero(frame["total_income"]),
        property_impact=impact,
    )
