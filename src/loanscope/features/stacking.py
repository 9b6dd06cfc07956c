from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import pandas as pd

# (category, count column) pairs in stacking order, bottom segment first.
# Records with a blank loan status stack on top as "undecided" so every bar
# reaches its group's full record count.
STATUS_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("approved", "n_approved"),
    ("rejected", "n_rejected"),
    ("undecided", "n_undecided"),
)


@dataclass(frozen=True)
class StackedSegment:
    group_key: str
    category: str
    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class StackedGroup:
    key: str
    total: int
    segments: tuple[StackedSegment, ...]
    datum: dict[str, Any]

    def segment(self, category: str) -> StackedSegment:
        for item in self.segments:
            if item.category == category:
                return item
        raise KeyError(category)


def _category_count(row: dict[str, Any], column: str) -> int:
    value = row.get(column)
    if value is None or pd.isna(value):
        return 0
    return int(value)


def build_stacks(
    groups: pd.DataFrame,
    categories: Sequence[tuple[str, str]] = STATUS_CATEGORIES,
    key_column: str = "key",
    total_column: str = "n_total",
) -> list[StackedGroup]:
    """Turn per-group category counts into cumulative ``[start, end)`` segments.

    Every group uses the same category order, and a category column absent
    from ``groups`` counts as zero. When ``total_column`` is present the
    segments must partition it exactly; a mismatch raises ``ValueError``.
    """
    stacks: list[StackedGroup] = []
    for row in groups.to_dict(orient="records"):
        key = str(row[key_column])
        offset = 0
        segments: list[StackedSegment] = []
        for category, column in categories:
            count = _category_count(row, column)
            segments.append(
                StackedSegment(group_key=key, category=category, start=offset, end=offset + count)
            )
            offset += count
        if total_column in row and offset != int(row[total_column]):
            raise ValueError(
                f"Segments for {key!r} sum to {offset}, expected {int(row[total_column])}"
            )
        stacks.append(StackedGroup(key=key, total=offset, segments=tuple(segments), datum=row))
    return stacks
