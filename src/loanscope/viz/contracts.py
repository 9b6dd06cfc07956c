from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

ShapeRole = Literal["segment", "bar", "column"]

ALLOWED_SHAPE_ROLES = frozenset({"segment", "bar", "column"})


def plain_value(value: Any) -> Any:
    """Convert numpy scalars to builtins and non-finite floats to ``None``."""
    if hasattr(value, "item"):
        try:
            value = value.item()
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return value


def plain_mapping(values: dict[str, Any]) -> dict[str, Any]:
    return {str(key): plain_value(item) for key, item in values.items()}


def _ensure_extent(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0.0:
        raise ValueError(f"{name} must be finite and >= 0, got {value!r}.")


@dataclass(slots=True, frozen=True)
class Margin:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(slots=True, frozen=True)
class TooltipContent:
    title: str
    lines: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(str(line) for line in self.lines))

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "lines": list(self.lines)}


@dataclass(slots=True, frozen=True)
class Shape:
    shape_id: str
    role: ShapeRole
    x: float
    y: float
    width: float
    height: float
    fill: str
    group_key: str
    category: str | None = None
    opacity: float = 1.0
    datum: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.shape_id.strip():
            raise ValueError("shape_id must be non-empty.")
        if self.role not in ALLOWED_SHAPE_ROLES:
            raise ValueError(f"Unsupported shape role: {self.role!r}.")
        _ensure_extent("width", self.width)
        _ensure_extent("height", self.height)
        object.__setattr__(self, "datum", plain_mapping(dict(self.datum)))

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape_id": self.shape_id,
            "role": self.role,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "fill": self.fill,
            "group_key": self.group_key,
            "category": self.category,
            "opacity": self.opacity,
            "datum": dict(self.datum),
        }


@dataclass(slots=True, frozen=True)
class LegendEntry:
    label: str
    color: str


@dataclass(slots=True, frozen=True)
class AxisTick:
    label: str
    position: float


@dataclass(slots=True, frozen=True)
class ChartSpec:
    chart_id: str
    title: str
    description: str
    aria_label: str
    width: float
    height: float
    margin: Margin
    x_label: str
    y_label: str
    shapes: tuple[Shape, ...]
    hover_columns: tuple[Shape, ...]
    legend: tuple[LegendEntry, ...]
    x_ticks: tuple[AxisTick, ...]
    y_ticks: tuple[AxisTick, ...]
    tooltip_offset: tuple[float, float] = (0.0, 0.0)
    rotate_x_labels: bool = False

    def __post_init__(self) -> None:
        if not self.chart_id.strip():
            raise ValueError("chart_id must be non-empty.")
        ids = [shape.shape_id for shape in (*self.shapes, *self.hover_columns)]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate shape ids in chart {self.chart_id!r}.")
        for name in ("shapes", "hover_columns", "legend", "x_ticks", "y_ticks"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def plot_width(self) -> float:
        return self.width - self.margin.left - self.margin.right

    @property
    def plot_height(self) -> float:
        return self.height - self.margin.top - self.margin.bottom

    @property
    def hit_regions(self) -> tuple[Shape, ...]:
        return (*self.shapes, *self.hover_columns)

    def shape(self, shape_id: str) -> Shape:
        for candidate in self.hit_regions:
            if candidate.shape_id == shape_id:
                return candidate
        raise KeyError(shape_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "chart_id": self.chart_id,
            "title": self.title,
            "description": self.description,
            "width": self.width,
            "height": self.height,
            "margin": {
                "top": self.margin.top,
                "right": self.margin.right,
                "bottom": self.margin.bottom,
                "left": self.margin.left,
            },
            "x_label": self.x_label,
            "y_label": self.y_label,
            "shapes": [shape.to_dict() for shape in self.shapes],
            "hover_columns": [shape.to_dict() for shape in self.hover_columns],
            "legend": [{"label": entry.label, "color": entry.color} for entry in self.legend],
            "x_ticks": [{"label": tick.label, "position": tick.position} for tick in self.x_ticks],
            "y_ticks": [{"label": tick.label, "position": tick.position} for tick in self.y_ticks],
            "tooltip_offset": list(self.tooltip_offset),
        }
