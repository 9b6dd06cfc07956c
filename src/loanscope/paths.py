from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

REPORT_FILE_NAME = "dashboard.html"


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    tables: Path
    figures: Path
    summary: Path

    @property
    def report(self) -> Path:
        return self.root / REPORT_FILE_NAME


def build_output_paths(out_dir: Path) -> OutputPaths:
    """Create the run output tree: tables, figures and summary JSON under one root."""
    paths = OutputPaths(
        root=out_dir,
        tables=out_dir / "tables",
        figures=out_dir / "figures",
        summary=out_dir / "summary",
    )
    for path in (paths.root, paths.tables, paths.figures, paths.summary):
        path.mkdir(parents=True, exist_ok=True)
    return paths
