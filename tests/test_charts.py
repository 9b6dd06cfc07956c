from __future__ import annotations

import pandas as pd
import pytest

from loanscope.config import AppConfig
from loanscope.preprocess.records import normalize_frame
from loanscope.viz.charts import (
    CHART_IDS,
    build_charts,
    build_education_chart,
    build_income_chart,
    build_property_chart,
)


def _frame() -> pd.DataFrame:
    return normalize_frame(
        pd.DataFrame(
            {
                "id": ["1", "2", "3", "4", "5"],
                "applicant_income": ["2000", "12000", "12500", "80000", "4000"],
                "education": ["Graduate", "Graduate", "Not Graduate", "Graduate", "Not Graduate"],
                "credit_history": ["1", "0", "1", "", "1"],
                "property_area": ["Rural", "Urban", "Rural", "Coastal", "Semiurban"],
                "loan_status": ["Y", "N", "Y", "N", "Y"],
            }
        )
    )


def test_build_charts_returns_every_chart_in_order() -> None:
    charts = build_charts(_frame(), AppConfig())

    assert [chart.chart_id for chart in charts] == list(CHART_IDS)


def test_build_charts_is_empty_for_an_empty_view() -> None:
    assert build_charts(_frame().iloc[0:0], AppConfig()) == []


def test_stacked_segments_start_at_the_baseline() -> None:
    chart = build_education_chart(_frame(), AppConfig())

    assert chart.plot_width == 216
    assert chart.plot_height == 240
    approved = chart.shape("education_approval/0/approved")
    rejected = chart.shape("education_approval/0/rejected")
    assert approved.group_key == "Graduate"
    assert approved.y + approved.height == pytest.approx(chart.plot_height)
    assert rejected.y + rejected.height == pytest.approx(approved.y)
    assert approved.fill == "#22c55e"
    assert rejected.fill == "#ef4444"
    assert [entry.label for entry in chart.legend] == ["Approved", "Rejected"]


def test_hover_columns_span_each_slot() -> None:
    chart = build_education_chart(_frame(), AppConfig())

    assert len(chart.hover_columns) == 2
    for column in chart.hover_columns:
        assert column.fill == "transparent"
        assert column.y == 0.0
        assert column.height == chart.plot_height
        segment = chart.shape(column.shape_id.replace("column", "approved"))
        assert column.x == segment.x
        assert column.width == segment.width


def test_income_chart_labels_bins_and_rotates_ticks() -> None:
    chart = build_income_chart(_frame(), AppConfig())

    assert [tick.label for tick in chart.x_ticks] == [
        "₹0k – ₹5k",
        "₹10k – ₹15k",
        "≥ ₹75k",
    ]
    assert chart.rotate_x_labels
    assert chart.margin.bottom == 80
    assert chart.tooltip_offset == (8.0, -32.0)


def test_property_chart_colors_known_areas_and_falls_back() -> None:
    chart = build_property_chart(_frame(), AppConfig())

    fills = {shape.group_key: shape.fill for shape in chart.shapes}
    assert list(fills) == ["Rural", "Semiurban", "Urban", "Coastal"]
    assert fills["Rural"] == "#3b82f6"
    assert fills["Coastal"] == "#007bff"
    assert chart.tooltip_offset == (0.0, -24.0)


def test_property_bar_heights_follow_approval_rate() -> None:
    chart = build_property_chart(_frame(), AppConfig())

    rural = chart.shape("approval_by_property/0/bar")
    urban = chart.shape("approval_by_property/2/bar")
    assert rural.height == pytest.approx(chart.plot_height)
    assert urban.height == pytest.approx(0.0)
    assert chart.y_ticks[-1].label == "100%"


def test_chart_payload_is_plain_data() -> None:
    payload = build_education_chart(_frame(), AppConfig()).to_dict()

    assert payload["chart_id"] == "education_approval"
    assert payload["shapes"][0]["datum"]["n_total"] == 3
    assert isinstance(payload["shapes"][0]["datum"]["n_total"], int)


def test_blank_statuses_add_a_pending_segment_on_top() -> None:
    frame = normalize_frame(
        pd.DataFrame({"education": ["Graduate"] * 3, "loan_status": ["Y", "", "N"]})
    )

    chart = build_education_chart(frame, AppConfig())

    rejected = chart.shape("education_approval/0/rejected")
    pending = chart.shape("education_approval/0/undecided")
    assert pending.height > 0
    assert pending.y + pending.height == pytest.approx(rejected.y)
    assert pending.fill == "#94a3b8"
    assert [entry.label for entry in chart.legend] == ["Approved", "Rejected", "Pending"]


def test_rate_chart_leaves_out_groups_without_decided_records() -> None:
    frame = normalize_frame(
        pd.DataFrame({"property_area": ["Rural", "Urban"], "loan_status": ["Y", ""]})
    )
    config = AppConfig.model_validate({"aggregation": {"undecided_policy": "exclude"}})

    chart = build_property_chart(frame, config)

    assert [shape.group_key for shape in chart.shapes] == ["Rural"]
    assert [tick.label for tick in chart.x_ticks] == ["Rural"]
    assert [entry.label for entry in chart.legend] == ["Rural"]
