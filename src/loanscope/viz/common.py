from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402


def new_figure(width_px: float, height_px: float, pixels_per_inch: float) -> tuple[Figure, object]:
    figure, axis = plt.subplots(figsize=(width_px / pixels_per_inch, height_px / pixels_per_inch))
    return figure, axis


def save_figure(figure: Figure, path: Path, dpi: int = 120) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    figure.tight_layout()
    figure.savefig(path, dpi=dpi)
    plt.close(figure)
    return path
