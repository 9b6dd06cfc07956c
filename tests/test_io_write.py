from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from loanscope.io.write import write_summary, write_table, write_tables


def test_write_tables_names_files_after_tables(tmp_path: Path) -> None:
    tables = {
        "education": pd.DataFrame({"key": ["Graduate"], "n_total": [3]}),
        "property_area": pd.DataFrame({"key": ["Rural"], "n_total": [2]}),
    }

    written = write_tables(tables, tmp_path / "tables", fmt="csv")

    assert written["education"] == tmp_path / "tables" / "education.csv"
    assert pd.read_csv(written["property_area"])["n_total"].tolist() == [2]


def test_write_table_rejects_unknown_formats(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported table format"):
        write_table(pd.DataFrame(), tmp_path / "table.xlsx", fmt="xlsx")


def test_write_summary_serializes_numpy_scalars(tmp_path: Path) -> None:
    path = write_summary(
        {"total": np.int64(7), "rate": np.float64(0.5), "label": "≥ ₹75k"},
        tmp_path / "summary" / "dashboard.json",
    )

    text = path.read_text(encoding="utf-8")
    assert json.loads(text) == {"total": 7, "rate": 0.5, "label": "≥ ₹75k"}
    assert "₹" in text
