from __future__ import annotations

import json
from pathlib import Path

import typer

from loanscope.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from loanscope.features.filters import MATCH_ALL, FilterCriteria
from loanscope.logging import configure_logging
from loanscope.pipeline.run_all import DatasetLoadError, load_session, run_dashboard
from loanscope.report.formatting import format_currency
from loanscope.session import DashboardSession

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _resolve_csv(csv: Path | None, cfg: AppConfig) -> Path:
    if csv is not None:
        return csv
    if cfg.data_path:
        candidate = Path(cfg.data_path)
        if not candidate.is_file():
            raise typer.BadParameter(f"Configured data_path does not exist: {candidate}")
        return candidate
    raise typer.BadParameter(
        "Missing --csv. Pass a dataset path, set data_path in the config, "
        "or export LOANSCOPE_DATA_PATH."
    )


def _build_criteria(**selected: str) -> FilterCriteria:
    criteria = FilterCriteria()
    for name, value in selected.items():
        try:
            criteria = criteria.with_selector(name, value)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint=f"--{name.replace('_', '-')}") from exc
    return criteria


def _load_or_exit(
    csv: Path, cfg: AppConfig, criteria: FilterCriteria | None = None
) -> DashboardSession:
    try:
        return load_session(csv_path=csv, config=cfg, criteria=criteria)
    except DatasetLoadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def report(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    property_area: str = typer.Option(MATCH_ALL, help="Property area to keep, or All."),
    education: str = typer.Option(MATCH_ALL, help="Education level to keep, or All."),
    gender: str = typer.Option(MATCH_ALL, help="Gender to keep, or All."),
    credit_history: str = typer.Option(MATCH_ALL, help="1, 0 or All."),
    loan_status: str = typer.Option(MATCH_ALL, help="Approved, Rejected or All."),
) -> None:
    """Build the filtered dashboard: aggregate tables, figures and an HTML report."""
    configure_logging()
    cfg = _load_app_config(config)
    csv_path = _resolve_csv(csv, cfg)
    criteria = _build_criteria(
        property_area=property_area,
        education=education,
        gender=gender,
        credit_history=credit_history,
        loan_status=loan_status,
    )
    try:
        run = run_dashboard(csv_path=csv_path, out_dir=out, config=cfg, criteria=criteria)
    except DatasetLoadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Showing {run.view.total_records} applicants "
        f"({run.view.filtered_percentage}% of dataset)"
    )
    if run.view.notice:
        typer.echo(run.view.notice)
    typer.echo(f"Report written to: {run.report_path}")


@app.command()
def summary(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
) -> None:
    """Print the dataset-wide insight summary."""
    configure_logging()
    cfg = _load_app_config(config)
    session = _load_or_exit(_resolve_csv(csv, cfg), cfg)
    insight = session.insight_summary()
    session.close()
    if insight is None:
        typer.echo("No records loaded.")
        return
    if as_json:
        typer.echo(json.dumps(insight.to_dict(), indent=2, ensure_ascii=False))
        return

    typer.echo(f"Applications: {insight.total_count}")
    typer.echo(f"Approval rate: {insight.approval_rate_pct:.1f}%")
    typer.echo(
        "Average approved loan: "
        f"{format_currency(insight.avg_approved_loan_amount, show_both=True)}"
    )
    typer.echo(f"Average total income: {format_currency(insight.avg_total_income, show_both=True)}")
    for impact in insight.property_impact:
        typer.echo(f"- {impact.area}: {impact.approval_rate * 100:.1f}% of {impact.count}")


@app.command()
def options(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """List the values each filter selector accepts for a dataset."""
    configure_logging()
    cfg = _load_app_config(config)
    session = _load_or_exit(_resolve_csv(csv, cfg), cfg)
    filter_options = session.filter_options()
    session.close()
    for name in FilterCriteria.selector_names():
        values = ", ".join(filter_options.for_selector(name))
        typer.echo(f"{name}: {values}")


if __name__ == "__main__":
    app()
