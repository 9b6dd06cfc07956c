from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_INCOME_THRESHOLDS = [0, 5000, 10000, 15000, 20000, 30000, 50000, 75000]


class ColumnsConfig(BaseModel):
    id: str = "Customer_ID"
    gender: str = "Gender"
    married: str = "Married"
    dependents: str = "Dependents"
    education: str = "Education"
    self_employed: str = "Self_Employed"
    applicant_income: str = "Applicant_Income"
    coapplicant_income: str = "Coapplicant_Income"
    loan_amount: str = "Loan_Amount"
    loan_term: str = "Loan_Amount_Term"
    credit_history: str = "Credit_History"
    property_area: str = "Property_Area"
    loan_status: str = "Loan_Status"


class BinningConfig(BaseModel):
    income_thresholds: list[float] = Field(
        default_factory=lambda: list(DEFAULT_INCOME_THRESHOLDS)
    )
    overflow_boundary: float = Field(default=75000.0, ge=0.0)
    currency_symbol: str = "₹"

    @field_validator("income_thresholds")
    @classmethod
    def _thresholds_ascending(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("income_thresholds must not be empty")
        if any(item < 0 for item in value):
            raise ValueError("income_thresholds must be non-negative")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("income_thresholds must be strictly ascending")
        return value


class AggregationConfig(BaseModel):
    undecided_policy: Literal["count_as_non_approval", "exclude"] = "count_as_non_approval"


class MarginConfig(BaseModel):
    top: int = Field(default=24, ge=0)
    right: int = Field(default=140, ge=0)
    bottom: int = Field(default=56, ge=0)
    left: int = Field(default=64, ge=0)


class ChartsConfig(BaseModel):
    width: int = Field(default=420, ge=100)
    height: int = Field(default=320, ge=100)
    margin: MarginConfig = Field(default_factory=MarginConfig)
    income_margin: MarginConfig = Field(
        default_factory=lambda: MarginConfig(top=24, right=140, bottom=80, left=72)
    )
    stacked_padding: float = Field(default=0.4, ge=0.0, lt=1.0)
    rate_padding: float = Field(default=0.35, ge=0.0, lt=1.0)
    stacked_tooltip_offset: tuple[float, float] = (8.0, -32.0)
    rate_tooltip_offset: tuple[float, float] = (0.0, -24.0)
    approved_color: str = "#22c55e"
    rejected_color: str = "#ef4444"
    undecided_color: str = "#94a3b8"
    fallback_color: str = "#007bff"
    property_area_colors: dict[str, str] = Field(
        default_factory=lambda: {
            "Rural": "#3b82f6",
            "Semiurban": "#10b981",
            "Urban": "#f59e0b",
        }
    )


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"
    figures_format: str = "png"
    write_figures: bool = True


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    binning: BinningConfig = Field(default_factory=BinningConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    charts: ChartsConfig = Field(default_factory=ChartsConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)
    data_path: str | None = None


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.data_path = _resolve_optional_path(config.data_path, base_dir) or os.getenv(
        "LOANSCOPE_DATA_PATH"
    )
    return config
