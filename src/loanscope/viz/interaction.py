from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

from loanscope.viz.contracts import ChartSpec, Shape, TooltipContent
from loanscope.viz.tooltips import describe_shape

LOGGER = logging.getLogger(__name__)

HoverState = Literal["idle", "hovered"]


@dataclass(slots=True, frozen=True)
class TooltipState:
    shape_id: str
    content: TooltipContent
    anchor: tuple[float, float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape_id": self.shape_id,
            "content": self.content.to_dict(),
            "left": self.anchor[0],
            "top": self.anchor[1],
        }


class HoverController:
    """Pointer hover state for one chart: idle -> hovered -> idle.

    Pointer coordinates are relative to the plot area, the same space the
    chart's shapes are laid out in. At most one region is hovered at a time.
    """

    def __init__(
        self,
        chart: ChartSpec,
        describe: Callable[[str, Shape], TooltipContent] = describe_shape,
    ) -> None:
        self._chart = chart
        self._describe = describe
        self._regions: dict[str, Shape] = {shape.shape_id: shape for shape in chart.hit_regions}
        self._hovered: str | None = None
        self._tooltip: TooltipState | None = None

    @property
    def state(self) -> HoverState:
        return "idle" if self._hovered is None else "hovered"

    @property
    def hovered_shape(self) -> Shape | None:
        return None if self._hovered is None else self._regions[self._hovered]

    @property
    def tooltip(self) -> TooltipState | None:
        return self._tooltip

    def region_at(self, x: float, y: float) -> Shape | None:
        """Innermost region under the pointer: smallest area, later region on ties."""
        best: Shape | None = None
        best_rank: tuple[float, int] | None = None
        for order, shape in enumerate(self._regions.values()):
            if shape.area <= 0.0 or not shape.contains(x, y):
                continue
            rank = (shape.area, -order)
            if best_rank is None or rank < best_rank:
                best, best_rank = shape, rank
        return best

    def _anchor(self, x: float, y: float) -> tuple[float, float]:
        offset_x, offset_y = self._chart.tooltip_offset
        margin = self._chart.margin
        return (x + margin.left + offset_x, y + margin.top + offset_y)

    def pointer_enter(self, shape_id: str, x: float, y: float) -> TooltipState:
        shape = self._regions[shape_id]
        if self._hovered is not None and self._hovered != shape_id:
            self.pointer_leave(self._hovered)
        self._hovered = shape_id
        self._tooltip = TooltipState(
            shape_id=shape_id,
            content=self._describe(self._chart.chart_id, shape),
            anchor=self._anchor(x, y),
        )
        LOGGER.debug("Hover enter %s", shape_id)
        return self._tooltip

    def pointer_leave(self, shape_id: str | None = None) -> None:
        # A leave for a region that is no longer hovered is stale and ignored.
        if shape_id is not None and shape_id != self._hovered:
            return
        if self._hovered is not None:
            LOGGER.debug("Hover leave %s", self._hovered)
        self._hovered = None
        self._tooltip = None

    def pointer_move(self, x: float, y: float) -> TooltipState | None:
        region = self.region_at(x, y)
        if region is None:
            self.pointer_leave()
            return None
        if region.shape_id != self._hovered:
            return self.pointer_enter(region.shape_id, x, y)
        return self._tooltip
