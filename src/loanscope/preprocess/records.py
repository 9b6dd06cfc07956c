from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping

import numpy as np
import pandas as pd

from loanscope.config import ColumnsConfig
from loanscope.io.schema import (
    CATEGORICAL_FIELDS,
    NUMERIC_FIELDS,
    STATUS_FIELD,
    normalize_columns,
)

LOGGER = logging.getLogger(__name__)

LOAN_STATUS_CODES = ("Y", "N")
INCOME_FIELDS = ("applicant_income", "coapplicant_income")


@dataclass(frozen=True)
class NormalizedRecord:
    id: str
    applicant_income: float | None
    coapplicant_income: float | None
    loan_amount: float | None
    loan_term: float | None
    credit_history: float | None
    dependents: str
    gender: str
    married: str
    education: str
    self_employed: str
    property_area: str
    loan_status: str
    total_income: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> NormalizedRecord:
        values: dict[str, Any] = {"id": str(row["id"])}
        for name in NUMERIC_FIELDS:
            value = row[name]
            values[name] = None if pd.isna(value) else float(value)
        for name in (*CATEGORICAL_FIELDS, STATUS_FIELD):
            values[name] = str(row[name])
        values["total_income"] = float(row["total_income"])
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in fields(self)}


def _coerce_numeric(values: pd.Series) -> pd.Series:
    """Parse numbers; blanks, unparseable text and non-finite values become NaN."""
    if pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(values):
        numeric = values.astype(float)
    else:
        stripped = values.map(lambda item: item.strip() if isinstance(item, str) else item)
        numeric = pd.to_numeric(stripped, errors="coerce").astype(float)
    return numeric.where(np.isfinite(numeric))


def _coerce_text(values: pd.Series) -> pd.Series:
    return values.fillna("").astype(str).str.strip()


def _coerce_status(values: pd.Series) -> pd.Series:
    status = _coerce_text(values)
    return status.where(status.isin(LOAN_STATUS_CODES), "")


def normalize_frame(raw: pd.DataFrame, columns: ColumnsConfig | None = None) -> pd.DataFrame:
    """Return one typed, trimmed row per raw row, keeping the raw index.

    ``columns`` maps source headers to canonical names; when omitted the raw
    frame is expected to use canonical names already. Fields absent from the
    source normalize to NaN (numeric) or the empty string (categorical).
    """
    source = normalize_columns(df=raw, columns=columns) if columns is not None else raw
    blank = pd.Series([None] * len(source), index=source.index, dtype=object)

    def _column(name: str) -> pd.Series:
        return source[name] if name in source.columns else blank

    normalized = pd.DataFrame(index=source.index)
    normalized["id"] = _coerce_text(_column("id"))
    for name in NUMERIC_FIELDS:
        normalized[name] = _coerce_numeric(_column(name))
    for name in CATEGORICAL_FIELDS:
        normalized[name] = _coerce_text(_column(name))
    normalized[STATUS_FIELD] = _coerce_status(_column(STATUS_FIELD))
    # Absent incomes are skipped rather than counted as zero; both absent sums to 0.
    normalized["total_income"] = normalized[list(INCOME_FIELDS)].sum(axis=1, min_count=0)

    LOGGER.debug(
        "Normalized %d records (%d without a recognized loan status)",
        len(normalized),
        int((normalized[STATUS_FIELD] == "").sum()),
    )
    return normalized


def normalize_record(
    raw: Mapping[str, Any],
    columns: ColumnsConfig | None = None,
) -> NormalizedRecord:
    frame = normalize_frame(pd.DataFrame([dict(raw)]), columns=columns)
    return NormalizedRecord.from_row(frame.iloc[0])


def records_from_frame(frame: pd.DataFrame) -> list[NormalizedRecord]:
    return [NormalizedRecord.from_row(row) for _, row in frame.iterrows()]
