from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from loanscope.config import ColumnsConfig
from loanscope.io.schema import normalize_columns

LOGGER = logging.getLogger(__name__)


def read_raw_records(csv_path: Path) -> pd.DataFrame:
    """Read every cell as text; blank cells stay empty strings rather than NaN."""
    # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
    return pd.read_csv(csv_path, encoding="utf-8-sig", dtype=str, keep_default_na=False)


def load_raw_dataset(csv_path: Path, columns: ColumnsConfig) -> pd.DataFrame:
    raw = read_raw_records(csv_path)
    LOGGER.info("Read %d raw rows from %s", len(raw), csv_path)
    return normalize_columns(df=raw, columns=columns)
