from __future__ import annotations

import logging

import pandas as pd

from loanscope.config import ColumnsConfig

LOGGER = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "applicant_income",
    "coapplicant_income",
    "loan_amount",
    "loan_term",
    "credit_history",
)
CATEGORICAL_FIELDS = (
    "dependents",
    "gender",
    "married",
    "education",
    "self_employed",
    "property_area",
)
STATUS_FIELD = "loan_status"
DERIVED_FIELDS = ("total_income",)
RECORD_FIELDS = ("id", *NUMERIC_FIELDS, *CATEGORICAL_FIELDS, STATUS_FIELD, *DERIVED_FIELDS)


def normalize_columns(df: pd.DataFrame, columns: ColumnsConfig) -> pd.DataFrame:
    """Rename source headers to the canonical field names used downstream."""
    rename_map = {source: canonical for canonical, source in columns.model_dump().items()}
    missing = [source for source in rename_map if source not in df.columns]
    if missing:
        LOGGER.warning("Source table is missing columns: %s", ", ".join(missing))
    return df.rename(columns=rename_map)
