from __future__ import annotations

import pytest

from loanscope.viz.contracts import ChartSpec, Margin, Shape
from loanscope.viz.interaction import HoverController

DATUM = {"n_total": 4, "n_approved": 3, "n_rejected": 1}


def _chart() -> ChartSpec:
    segment = Shape(
        shape_id="education_approval/0/approved",
        role="segment",
        x=0.0,
        y=50.0,
        width=20.0,
        height=50.0,
        fill="#22c55e",
        group_key="Graduate",
        category="approved",
        datum=DATUM,
    )
    empty_segment = Shape(
        shape_id="education_approval/0/rejected",
        role="segment",
        x=0.0,
        y=50.0,
        width=20.0,
        height=0.0,
        fill="#ef4444",
        group_key="Graduate",
        category="rejected",
        datum=DATUM,
    )
    column = Shape(
        shape_id="education_approval/0/column",
        role="column",
        x=0.0,
        y=0.0,
        width=20.0,
        height=100.0,
        fill="transparent",
        group_key="Graduate",
        datum=DATUM,
    )
    return ChartSpec(
        chart_id="education_approval",
        title="Education",
        description="",
        aria_label="",
        width=50.0,
        height=120.0,
        margin=Margin(top=10.0, right=10.0, bottom=10.0, left=20.0),
        x_label="Education",
        y_label="Applicants",
        shapes=(segment, empty_segment),
        hover_columns=(column,),
        legend=(),
        x_ticks=(),
        y_ticks=(),
        tooltip_offset=(8.0, -32.0),
    )


def test_pointer_over_segment_prefers_the_innermost_region() -> None:
    controller = HoverController(_chart())

    tooltip = controller.pointer_move(5.0, 60.0)

    assert controller.state == "hovered"
    assert tooltip is not None
    assert tooltip.shape_id == "education_approval/0/approved"
    assert tooltip.content.lines == ("Approved: 3", "Share: 75%", "Total: 4")
    assert tooltip.anchor == (33.0, 38.0)


def test_pointer_over_column_only_shows_group_breakdown() -> None:
    controller = HoverController(_chart())

    tooltip = controller.pointer_move(5.0, 10.0)

    assert tooltip is not None
    assert controller.hovered_shape.role == "column"
    assert tooltip.content.lines[-1] == "Approval rate: 75%"


def test_zero_area_regions_never_win() -> None:
    controller = HoverController(_chart())

    tooltip = controller.pointer_move(5.0, 50.0)

    assert tooltip is not None
    assert tooltip.shape_id != "education_approval/0/rejected"


def test_pointer_leaving_every_region_returns_to_idle() -> None:
    controller = HoverController(_chart())
    controller.pointer_move(5.0, 60.0)

    assert controller.pointer_move(40.0, 60.0) is None
    assert controller.state == "idle"
    assert controller.tooltip is None


def test_only_one_region_is_hovered_at_a_time() -> None:
    controller = HoverController(_chart())
    controller.pointer_enter("education_approval/0/column", 5.0, 10.0)
    controller.pointer_enter("education_approval/0/approved", 5.0, 60.0)

    # Leave events for a region that was already replaced are ignored.
    controller.pointer_leave("education_approval/0/column")

    assert controller.state == "hovered"
    assert controller.tooltip.shape_id == "education_approval/0/approved"

    controller.pointer_leave("education_approval/0/approved")
    assert controller.state == "idle"


def test_unknown_region_is_rejected() -> None:
    controller = HoverController(_chart())

    with pytest.raises(KeyError):
        controller.pointer_enter("education_approval/9/column", 0.0, 0.0)
    assert controller.state == "idle"


def test_tooltip_state_serializes_anchor() -> None:
    controller = HoverController(_chart())
    state = controller.pointer_enter("education_approval/0/approved", 0.0, 0.0)

    payload = state.to_dict()

    assert (payload["left"], payload["top"]) == (28.0, -22.0)
    assert payload["content"]["title"] == "Graduate"
