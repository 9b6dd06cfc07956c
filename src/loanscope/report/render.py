from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from loanscope.features.filters import FilterCriteria, credit_history_label
from loanscope.report.formatting import format_currency
from loanscope.session import DashboardView
from loanscope.viz.contracts import ChartSpec
from loanscope.viz.tooltips import describe_shape

LOGGER = logging.getLogger(__name__)

SELECTOR_TITLES = {
    "property_area": "Property Area",
    "education": "Education",
    "gender": "Gender",
    "credit_history": "Credit History",
    "loan_status": "Loan Status",
}


def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["currency"] = lambda value: format_currency(value, show_both=True)
    return env


def _chart_payload(chart: ChartSpec) -> dict[str, Any]:
    payload = chart.to_dict()
    payload["aria_label"] = chart.aria_label
    payload["plot_width"] = chart.plot_width
    payload["plot_height"] = chart.plot_height
    payload["rotate_x_labels"] = chart.rotate_x_labels
    for key, shapes in (("shapes", chart.shapes), ("hover_columns", chart.hover_columns)):
        for entry, shape in zip(payload[key], shapes):
            entry["tooltip"] = describe_shape(chart.chart_id, shape).to_dict()
    return payload


def _filter_panel(view: DashboardView) -> list[dict[str, Any]]:
    selected = view.criteria.to_dict()
    panel = []
    for name in FilterCriteria.selector_names():
        options = view.options.for_selector(name)
        labels = [
            credit_history_label(option) if name == "credit_history" else option
            for option in options
        ]
        panel.append(
            {
                "name": name,
                "title": SELECTOR_TITLES[name],
                "selected": selected[name],
                "options": [
                    {"value": option, "label": label} for option, label in zip(options, labels)
                ],
            }
        )
    return panel


def render_dashboard(view: DashboardView, report_path: Path) -> Path:
    """Write a self-contained HTML dashboard for one filtered view."""
    env = _template_env()
    template = env.get_template("dashboard.html.j2")
    rendered = template.render(
        generated_at=datetime.now(timezone.utc).isoformat(),
        summary=view.summary,
        filter_panel=_filter_panel(view),
        total_records=view.total_records,
        total_available=view.total_available,
        filtered_percentage=view.filtered_percentage,
        charts=[_chart_payload(chart) for chart in view.charts],
        notice=view.notice,
    )
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(rendered, encoding="utf-8")
    LOGGER.info("Dashboard written to %s (%d charts)", report_path, len(view.charts))
    return report_path
