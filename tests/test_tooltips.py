from __future__ import annotations

from loanscope.viz.contracts import Shape
from loanscope.viz.tooltips import describe_shape, format_rate, round_percent


def _shape(role: str, category: str | None = None, **datum: object) -> Shape:
    return Shape(
        shape_id=f"chart/0/{category or role}",
        role=role,
        x=0.0,
        y=0.0,
        width=10.0,
        height=10.0,
        fill="#000000",
        group_key="Graduate",
        category=category,
        datum=datum,
    )


def test_round_percent_rounds_half_up() -> None:
    assert round_percent(1, 8) == 13
    assert round_percent(1, 3) == 33
    assert round_percent(0, 0) == 0


def test_format_rate_handles_missing_rates() -> None:
    assert format_rate(2 / 3) == "66.7%"
    assert format_rate(float("nan")) == "n/a"
    assert format_rate(None) == "n/a"


def test_status_segment_reports_its_share() -> None:
    shape = _shape("segment", "rejected", n_total=8, n_approved=7, n_rejected=1)

    content = describe_shape("education_approval", shape)

    assert content.title == "Graduate"
    assert content.lines == ("Rejected: 1", "Share: 13%", "Total: 8")


def test_status_column_reports_group_breakdown() -> None:
    shape = _shape("column", n_total=4, n_approved=3, n_rejected=1)

    content = describe_shape("credit_history_outcome", shape)

    assert content.lines == ("Approved: 3", "Rejected: 1", "Total: 4", "Approval rate: 75%")


def test_income_bin_description() -> None:
    shape = _shape("segment", "approved", n_total=5, n_approved=2, n_rejected=3)

    assert describe_shape("income_vs_status", shape).lines == (
        "Approved: 2",
        "Rejected: 3",
        "Total: 5",
    )


def test_rate_bar_description() -> None:
    shape = _shape("bar", n_total=3, approval_rate=2 / 3)

    assert describe_shape("approval_by_property", shape).lines == (
        "Approval rate: 66.7%",
        "Applications: 3",
    )


def test_unknown_chart_falls_back_to_counts() -> None:
    shape = _shape("bar", n_total=3, approval_rate=0.5)

    assert describe_shape("other", shape).lines == ("n_total: 3",)


def test_pending_records_get_their_own_line_and_segment() -> None:
    datum = {"n_total": 4, "n_approved": 2, "n_rejected": 1, "n_undecided": 1}

    column = describe_shape("education_approval", _shape("column", **datum))
    pending = describe_shape("education_approval", _shape("segment", "undecided", **datum))

    assert column.lines == (
        "Approved: 2",
        "Rejected: 1",
        "Pending: 1",
        "Total: 4",
        "Approval rate: 50%",
    )
    assert pending.lines == ("Pending: 1", "Share: 25%", "Total: 4")
