from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from matplotlib.patches import Patch, Rectangle

from loanscope.viz.common import new_figure, save_figure
from loanscope.viz.contracts import ChartSpec

LOGGER = logging.getLogger(__name__)

PIXELS_PER_INCH = 80.0


def plot_chart(chart: ChartSpec, output_path: Path) -> Path | None:
    """Draw a chart's positioned shapes in plot-area pixel space (y grows downward)."""
    if not chart.shapes:
        return None

    figure, axis = new_figure(chart.width, chart.height, PIXELS_PER_INCH)
    for shape in chart.shapes:
        axis.add_patch(
            Rectangle(
                (shape.x, shape.y),
                shape.width,
                shape.height,
                facecolor=shape.fill,
                alpha=shape.opacity,
                linewidth=0,
            )
        )
    axis.set_xlim(0.0, chart.plot_width)
    axis.set_ylim(chart.plot_height, 0.0)
    axis.set_xticks(
        [tick.position for tick in chart.x_ticks],
        [tick.label for tick in chart.x_ticks],
        rotation=45 if chart.rotate_x_labels else 0,
        ha="right" if chart.rotate_x_labels else "center",
    )
    axis.set_yticks(
        [tick.position for tick in chart.y_ticks],
        [tick.label for tick in chart.y_ticks],
    )
    axis.set_title(chart.title)
    axis.set_xlabel(chart.x_label)
    axis.set_ylabel(chart.y_label)
    axis.legend(
        handles=[Patch(facecolor=entry.color, label=entry.label) for entry in chart.legend],
        loc="upper left",
        bbox_to_anchor=(1.02, 1.0),
        frameon=False,
    )
    return save_figure(figure, output_path)


def plot_charts(charts: Sequence[ChartSpec], figures_dir: Path, fmt: str = "png") -> list[Path]:
    written: list[Path] = []
    for chart in charts:
        path = plot_chart(chart, figures_dir / f"{chart.chart_id}.{fmt}")
        if path is not None:
            written.append(path)
    LOGGER.info("Wrote %d chart figures to %s", len(written), figures_dir)
    return written
