"""Typer CLI for churn_analytics."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.exceptions import ChurnError
from churn_analytics.formatting import format_value
from churn_analytics.logging_setup import setup_logging
from churn_analytics.settings import Settings

app = typer.Typer(
    name="churn-analytics",
    help="Customer churn analytics: cohorts, drivers, risk scores and what-if ROI.",
    no_args_is_help=True,
)
console = Console()


def _load_settings(config: Path | None, **overrides) -> Settings:
    if config and config.exists():
        return Settings.from_yaml(config, **overrides)
    return Settings.from_args(**{k: v for k, v in overrides.items() if v is not None})


def _filter_overrides(
    contract: str | None,
    internet: str | None,
    tenure_min: int | None,
    tenure_max: int | None,
) -> dict | None:
    filters = {
        "contract": contract,
        "internet_service": internet,
        "tenure_min": tenure_min,
        "tenure_max": tenure_max,
    }
    filters = {k: v for k, v in filters.items() if v is not None}
    return filters or None


def _print_result(analysis: AnalysisResult) -> None:
    table = Table(title=analysis.title, show_lines=False)
    for col in analysis.df.columns:
        table.add_column(str(col), justify="left" if col in ("segment", "cohort", "metric") else "right")
    for row in analysis.df.to_dict("records"):
        table.add_row(*(format_value(row[col], str(col)) for col in analysis.df.columns))
    console.print(table)


@app.command()
def analyze(
    data_file: Path = typer.Argument(None, help="Path to CSV/Excel customer file (demo data if omitted)."),
    config: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    output_dir: Path = typer.Option(None, "--output-dir", "-o", help="Output directory"),
    contract: str = typer.Option(None, "--contract", help="Contract filter (or All)"),
    internet: str = typer.Option(None, "--internet", help="Internet service filter (or All)"),
    tenure_min: int = typer.Option(None, "--tenure-min", help="Minimum tenure (months)"),
    tenure_max: int = typer.Option(None, "--tenure-max", help="Maximum tenure (months)"),
    risk_cut: int = typer.Option(None, "--risk-cut", help="At-risk score threshold"),
    no_offload: bool = typer.Option(False, "--no-offload", help="Skip the background KPI worker"),
    no_excel: bool = typer.Option(False, "--no-excel", help="Skip the Excel report"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run the full analysis pipeline."""
    setup_logging(verbose=verbose)
    from churn_analytics.pipeline import export_outputs, run_pipeline

    try:
        settings = _load_settings(
            config,
            data_file=data_file,
            output_dir=output_dir,
            filters=_filter_overrides(contract, internet, tenure_min, tenure_max),
            risk_cut=risk_cut,
            outputs={"excel": False} if no_excel else None,
        )

        def on_progress(step: int, total: int, msg: str) -> None:
            console.print(f"  [{step + 1}/{total}] {msg}")

        console.print(f"[bold]Churn Analysis[/bold] -- {settings.source_name}")
        result = run_pipeline(settings, on_progress=on_progress, offload=not no_offload)
    except ChurnError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    if result.kpis is not None:
        console.print(
            f"  Customers: {result.kpis.count:,}  |  Churn: {result.kpis.churn:.1f}%"
            f"  |  Avg monthly: ${result.kpis.avg_monthly:.2f}"
        )
    for name in ("churn_drivers", "what_if_roi"):
        analysis = result.get(name)
        if analysis is not None and analysis.error is None:
            _print_result(analysis)

    successful = sum(1 for a in result.analyses if a.error is None)
    console.print(f"  {successful}/{len(result.analyses)} analyses completed")

    for f in export_outputs(result):
        console.print(f"  Output: {f}")

    console.print("[bold green]Done.[/bold green]")


@app.command()
def explain(
    customer_id: str = typer.Argument(..., help="Customer ID to explain"),
    data_file: Path = typer.Option(None, "--data-file", "-d", help="CSV/Excel customer file"),
    show_all: bool = typer.Option(False, "--all", help="Include zero-point factors"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Break a customer's risk score down into its factors."""
    setup_logging(verbose=verbose)
    from churn_analytics.analyses.risk import explain as explain_record
    from churn_analytics.data_loader import load_data
    from churn_analytics.session import DashboardSession

    try:
        settings = Settings.from_args(data_file=data_file)
        session = DashboardSession(load_data(settings), settings)
        record = session.select(customer_id)
    except ChurnError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    explanation = explain_record(record)
    console.print(f"[bold]{record.customer_id}[/bold] -- Risk Score: {explanation.total}")
    factors = explanation.factors if show_all else explanation.visible_factors
    for factor in factors:
        console.print(f"  {factor.label:<28} +{factor.points}")


@app.command()
def demo(
    output: Path = typer.Argument(Path("demo_customers.csv"), help="Where to write the CSV"),
    rows: int = typer.Option(1200, "--rows", "-n", help="Number of customers"),
    seed: int = typer.Option(71313, "--seed", help="Generator seed"),
) -> None:
    """Write the seeded synthetic customer dataset to CSV."""
    from churn_analytics.demo_data import make_demo_data

    df = make_demo_data(rows, seed)
    output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output, index=False)
    console.print(f"Wrote {len(df):,} customers to {output}")
