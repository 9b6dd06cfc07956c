from __future__ import annotations

import math
from typing import Any, Callable

from loanscope.viz.contracts import Shape, TooltipContent

CATEGORY_LABELS = {
    "approved": "Approved",
    "rejected": "Rejected",
    "undecided": "Pending",
}


def _count(datum: dict[str, Any], name: str) -> int:
    value = datum.get(name)
    return int(value) if value is not None else 0


def round_percent(part: float, whole: float) -> int:
    """Whole-number percentage rounded half up; 0 for an empty whole."""
    if not whole:
        return 0
    return int(math.floor(part / whole * 100.0 + 0.5))


def format_rate(rate: float | None) -> str:
    if rate is None or not math.isfinite(rate):
        return "n/a"
    return f"{rate * 100:.1f}%"


def _outcome_lines(datum: dict[str, Any]) -> tuple[str, ...]:
    lines = (
        f"Approved: {_count(datum, 'n_approved')}",
        f"Rejected: {_count(datum, 'n_rejected')}",
    )
    pending = _count(datum, "n_undecided")
    if pending:
        lines += (f"Pending: {pending}",)
    return lines


def _describe_income_bin(shape: Shape) -> TooltipContent:
    datum = shape.datum
    return TooltipContent(
        title=shape.group_key,
        lines=(*_outcome_lines(datum), f"Total: {_count(datum, 'n_total')}"),
    )


def _describe_status_group(shape: Shape) -> TooltipContent:
    datum = shape.datum
    total = _count(datum, "n_total")
    if shape.role == "segment" and shape.category in CATEGORY_LABELS:
        count = _count(datum, f"n_{shape.category}")
        return TooltipContent(
            title=shape.group_key,
            lines=(
                f"{CATEGORY_LABELS[shape.category]}: {count}",
                f"Share: {round_percent(count, total)}%",
                f"Total: {total}",
            ),
        )
    approved = _count(datum, "n_approved")
    return TooltipContent(
        title=shape.group_key,
        lines=(
            *_outcome_lines(datum),
            f"Total: {total}",
            f"Approval rate: {round_percent(approved, total)}%",
        ),
    )


def _describe_rate_group(shape: Shape) -> TooltipContent:
    datum = shape.datum
    return TooltipContent(
        title=shape.group_key,
        lines=(
            f"Approval rate: {format_rate(datum.get('approval_rate'))}",
            f"Applications: {_count(datum, 'n_total')}",
        ),
    )


def _describe_generic(shape: Shape) -> TooltipContent:
    lines = tuple(
        f"{name}: {value}" for name, value in shape.datum.items() if name.startswith("n_")
    )
    return TooltipContent(title=shape.group_key, lines=lines)


TOOLTIP_FORMATTERS: dict[str, Callable[[Shape], TooltipContent]] = {
    "income_vs_status": _describe_income_bin,
    "education_approval": _describe_status_group,
    "credit_history_outcome": _describe_status_group,
    "approval_by_property": _describe_rate_group,
}


def describe_shape(chart_id: str, shape: Shape) -> TooltipContent:
    formatter = TOOLTIP_FORMATTERS.get(chart_id, _describe_generic)
    return formatter(shape)
