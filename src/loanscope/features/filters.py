from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any

import pandas as pd

LOGGER = logging.getLogger(__name__)

MATCH_ALL = "All"

LOAN_STATUS_CODES: dict[str, str] = {
    "Approved": "Y",
    "Rejected": "N",
}
CREDIT_HISTORY_LABELS: dict[str, str] = {
    "1": "Has credit history",
    "0": "No credit history",
}

# Selectors whose options come from a fixed table rather than from the data.
FIXED_SELECTOR_OPTIONS: dict[str, tuple[str, ...]] = {
    "credit_history": tuple(CREDIT_HISTORY_LABELS),
    "loan_status": tuple(LOAN_STATUS_CODES),
}


@dataclass(frozen=True)
class FilterCriteria:
    property_area: str = MATCH_ALL
    education: str = MATCH_ALL
    gender: str = MATCH_ALL
    credit_history: str = MATCH_ALL
    loan_status: str = MATCH_ALL

    @classmethod
    def selector_names(cls) -> tuple[str, ...]:
        return tuple(field.name for field in fields(cls))

    def with_selector(self, name: str, value: str) -> FilterCriteria:
        """Return a copy with exactly one selector replaced."""
        if name not in self.selector_names():
            raise ValueError(f"Unknown filter selector: {name!r}")
        value = str(value)
        if not value:
            # An empty value would select the records where the field is unset.
            raise ValueError(f"Empty value for selector {name!r}; use {MATCH_ALL!r} to clear it")
        allowed = FIXED_SELECTOR_OPTIONS.get(name)
        if allowed is not None and value != MATCH_ALL and value not in allowed:
            raise ValueError(f"Unsupported value {value!r} for selector {name!r}")
        return replace(self, **{name: value})

    def reset(self) -> FilterCriteria:
        return FilterCriteria()

    def active(self) -> dict[str, str]:
        return {
            name: getattr(self, name)
            for name in self.selector_names()
            if getattr(self, name) != MATCH_ALL
        }

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in self.selector_names()}


@dataclass(frozen=True)
class FilterOptions:
    property_areas: tuple[str, ...]
    educations: tuple[str, ...]
    genders: tuple[str, ...]
    credit_histories: tuple[str, ...] = (MATCH_ALL, *CREDIT_HISTORY_LABELS)
    loan_statuses: tuple[str, ...] = (MATCH_ALL, *LOAN_STATUS_CODES)

    def for_selector(self, name: str) -> tuple[str, ...]:
        mapping = {
            "property_area": self.property_areas,
            "education": self.educations,
            "gender": self.genders,
            "credit_history": self.credit_histories,
            "loan_status": self.loan_statuses,
        }
        return mapping[name]

    def to_dict(self) -> dict[str, Any]:
        return {
            "property_areas": list(self.property_areas),
            "educations": list(self.educations),
            "genders": list(self.genders),
            "credit_histories": list(self.credit_histories),
            "loan_statuses": list(self.loan_statuses),
        }


def credit_history_label(option: str) -> str:
    if option == MATCH_ALL:
        return MATCH_ALL
    return CREDIT_HISTORY_LABELS.get(option, option)


def _distinct_options(values: pd.Series) -> tuple[str, ...]:
    distinct = [value for value in pd.unique(values) if value]
    return (MATCH_ALL, *distinct)


def build_filter_options(frame: pd.DataFrame) -> FilterOptions:
    return FilterOptions(
        property_areas=_distinct_options(frame["property_area"]),
        educations=_distinct_options(frame["education"]),
        genders=_distinct_options(frame["gender"]),
    )


def _criterion_mask(frame: pd.DataFrame, name: str, value: str) -> pd.Series:
    if name == "credit_history":
        target = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
        # NaN compares unequal to everything, so absent history never matches.
        return frame["credit_history"] == target
    if name == "loan_status":
        code = LOAN_STATUS_CODES.get(value)
        if code is None:
            return pd.Series(True, index=frame.index)
        return frame["loan_status"] == code
    return frame[name] == value


def apply_filters(frame: pd.DataFrame, criteria: FilterCriteria) -> pd.DataFrame:
    """Keep rows satisfying every active selector, preserving order and index."""
    mask = pd.Series(True, index=frame.index)
    for name, value in criteria.active().items():
        mask &= _criterion_mask(frame, name, value)
    filtered = frame.loc[mask]
    LOGGER.debug("Filter %s kept %d of %d records", criteria.active(), len(filtered), len(frame))
    return filtered
