from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from loanscope.config import ColumnsConfig
from loanscope.io.load import (
    LOAD_ERROR_MESSAGE,
    CancellationToken,
    load_raw_dataset_async,
)
from loanscope.io.read import load_raw_dataset, read_raw_records


def test_read_raw_records_keeps_blank_cells_as_text(loan_csv: Path) -> None:
    raw = read_raw_records(loan_csv)

    assert len(raw) == 7
    assert raw.loc[0, "Loan_Amount"] == ""
    assert raw.loc[0, "Applicant_Income"] == "5849"


def test_read_raw_records_strips_byte_order_mark(tmp_path: Path) -> None:
    csv_path = tmp_path / "bom.csv"
    csv_path.write_text("\ufeffCustomer_ID,Loan_Status\nLP1,Y\n", encoding="utf-8")

    raw = read_raw_records(csv_path)

    assert list(raw.columns) == ["Customer_ID", "Loan_Status"]


def test_load_raw_dataset_uses_canonical_names(loan_csv: Path) -> None:
    raw = load_raw_dataset(loan_csv, ColumnsConfig())

    assert "applicant_income" in raw.columns
    assert "loan_term" in raw.columns
    assert raw.loc[6, "loan_status"] == ""


def test_load_raw_dataset_maps_custom_headers(tmp_path: Path) -> None:
    csv_path = tmp_path / "custom.csv"
    csv_path.write_text("ApplicantID,Status\nA1,N\n", encoding="utf-8")

    raw = load_raw_dataset(csv_path, ColumnsConfig(id="ApplicantID", loan_status="Status"))

    assert raw.loc[0, "id"] == "A1"
    assert raw.loc[0, "loan_status"] == "N"


def test_async_load_reports_rows(loan_csv: Path) -> None:
    outcome = asyncio.run(load_raw_dataset_async(loan_csv, ColumnsConfig(), CancellationToken()))

    assert outcome.ok
    assert len(outcome.rows) == 7


def test_async_load_reports_a_single_message_on_failure(tmp_path: Path) -> None:
    outcome = asyncio.run(
        load_raw_dataset_async(tmp_path / "missing.csv", ColumnsConfig(), CancellationToken())
    )

    assert not outcome.ok
    assert outcome.rows is None
    assert outcome.error == LOAD_ERROR_MESSAGE


def test_async_load_honours_cancellation(loan_csv: Path) -> None:
    token = CancellationToken()
    token.cancel()

    outcome = asyncio.run(load_raw_dataset_async(loan_csv, ColumnsConfig(), token))

    assert outcome.cancelled
    assert outcome.rows is None
    assert outcome.error is None


@pytest.mark.parametrize("content", [b"", b"\xff\xfe\xfa\n"])
def test_async_load_treats_unparseable_files_as_failures(tmp_path: Path, content: bytes) -> None:
    csv_path = tmp_path / "broken.csv"
    csv_path.write_bytes(content)

    outcome = asyncio.run(load_raw_dataset_async(csv_path, ColumnsConfig(), CancellationToken()))

    assert outcome.error == LOAD_ERROR_MESSAGE
