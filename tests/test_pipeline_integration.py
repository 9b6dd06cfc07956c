from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from loanscope.config import AppConfig
from loanscope.features.filters import FilterCriteria
from loanscope.pipeline.run_all import DatasetLoadError, run_dashboard


def test_run_dashboard_generates_report_and_outputs(loan_csv: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    run = run_dashboard(
        csv_path=loan_csv,
        out_dir=out_dir,
        config=AppConfig(),
        criteria=FilterCriteria(property_area="Urban"),
    )

    assert run.report_path == out_dir / "dashboard.html"
    assert run.report_path.exists()
    assert run.view.total_records == 3
    assert run.view.filtered_percentage == 43

    for name in ("income_bins", "education", "credit_history", "property_area"):
        assert (out_dir / "tables" / f"{name}.csv").exists()
    records = pd.read_csv(out_dir / "tables" / "filtered_records.csv")
    assert records["id"].tolist() == ["LP001", "LP003", "LP004"]

    summary = json.loads((out_dir / "summary" / "dashboard.json").read_text(encoding="utf-8"))
    assert summary["criteria"]["property_area"] == "Urban"
    assert summary["active_filters"] == {"property_area": "Urban"}
    assert summary["insight_summary"]["total_count"] == 7
    assert len(summary["charts"]) == 4

    figures = sorted(path.name for path in (out_dir / "figures").glob("*.png"))
    assert len(figures) == 4


def test_run_dashboard_writes_parquet_tables(loan_csv: Path, tmp_path: Path) -> None:
    config = AppConfig.model_validate(
        {"outputs": {"tables_format": "parquet", "write_figures": False}}
    )

    run = run_dashboard(csv_path=loan_csv, out_dir=tmp_path / "out", config=config)

    income_bins = pd.read_parquet(run.tables["income_bins"])
    assert income_bins["key"].iloc[-1] == "≥ ₹75k"
    assert int(income_bins["n_total"].sum()) == 6
    assert not list((tmp_path / "out" / "figures").glob("*"))


def test_run_dashboard_with_no_matches_writes_notice(loan_csv: Path, tmp_path: Path) -> None:
    run = run_dashboard(
        csv_path=loan_csv,
        out_dir=tmp_path / "out",
        config=AppConfig(),
        criteria=FilterCriteria(property_area="Coastal"),
    )

    assert run.view.charts == []
    assert run.view.notice is not None
    assert run.view.notice in run.report_path.read_text(encoding="utf-8")


def test_run_dashboard_raises_when_dataset_cannot_load(tmp_path: Path) -> None:
    with pytest.raises(DatasetLoadError):
        run_dashboard(
            csv_path=tmp_path / "missing.csv", out_dir=tmp_path / "out", config=AppConfig()
        )
