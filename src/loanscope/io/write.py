from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import numpy as np
import pandas as pd

LOGGER = logging.getLogger(__name__)

TABLE_EXTENSIONS = {"csv": "csv", "parquet": "parquet"}


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    if fmt not in TABLE_EXTENSIONS:
        raise ValueError(f"Unsupported table format: {fmt}")
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path


def write_tables(
    tables: Mapping[str, pd.DataFrame],
    directory: Path,
    fmt: str = "csv",
) -> dict[str, Path]:
    """Write each named table as ``<name>.<ext>`` under ``directory``."""
    if fmt not in TABLE_EXTENSIONS:
        raise ValueError(f"Unsupported table format: {fmt}")
    written = {
        name: write_table(table, directory / f"{name}.{TABLE_EXTENSIONS[fmt]}", fmt=fmt)
        for name, table in tables.items()
    }
    LOGGER.info("Wrote %d %s tables to %s", len(written), fmt, directory)
    return written


def _json_default(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_summary(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False, default=_json_default)
    path.write_text(payload, encoding="utf-8")
    return path
