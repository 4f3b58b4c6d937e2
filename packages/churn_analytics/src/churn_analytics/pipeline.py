"""Pipeline orchestrator shared by CLI and run_client()."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd
from loguru import logger

from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.data_loader import load_data
from churn_analytics.offload import KpiResponse, OffloadCoordinator
from churn_analytics.session import DashboardSession
from churn_analytics.settings import Settings

KPI_TIMEOUT_SECONDS = 60.0


@dataclass
class PipelineResult:
    """Container for all pipeline outputs."""

    settings: Settings
    df: pd.DataFrame
    filtered: pd.DataFrame
    analyses: list[AnalysisResult] = field(default_factory=list)
    kpis: KpiResponse | None = None

    def get(self, name: str) -> AnalysisResult | None:
        return next((a for a in self.analyses if a.name == name), None)


def run_pipeline(
    settings: Settings,
    on_progress: Callable[[int, int, str], None] | None = None,
    offload: bool = True,
) -> PipelineResult:
    """Execute the full analysis pipeline: load -> analyze -> collect worker KPIs.

    Args:
        settings: Application configuration.
        on_progress: Optional callback(step, total, message) for UI progress.
        offload: Compute headline KPIs on a background worker process.
    """
    # Step 1: Load data
    if on_progress:
        on_progress(0, 3, "Loading data...")
    df = load_data(settings)

    coordinator = OffloadCoordinator() if offload else None
    try:
        # Step 2: Run analyses (KPI request goes out alongside)
        if on_progress:
            on_progress(1, 3, "Running analyses...")
        session = DashboardSession(df, settings, coordinator=coordinator)
        snapshot = session.recompute()
        successful = [a for a in snapshot.analyses if a.error is None]
        for a in snapshot.analyses:
            if a.error is not None:
                logger.warning("Skipped: {name} ({err})", name=a.name, err=a.error)
        logger.info("{ok}/{n} analyses completed", ok=len(successful), n=len(snapshot.analyses))

        # Step 3: Collect worker KPIs
        if on_progress:
            on_progress(2, 3, "Collecting KPIs...")
        kpis = coordinator.wait(KPI_TIMEOUT_SECONDS) if coordinator else None
    finally:
        if coordinator:
            coordinator.close()

    return PipelineResult(
        settings=settings,
        df=df,
        filtered=snapshot.filtered,
        analyses=snapshot.analyses,
        kpis=kpis,
    )


def export_outputs(result: PipelineResult) -> list[Path]:
    """Export pipeline results to configured output formats.

    Returns list of generated file paths.
    """
    settings = result.settings
    settings.output_dir.mkdir(parents=True, exist_ok=True)

    generated: list[Path] = []
    date_str = datetime.now().strftime("%Y%m%d")

    if settings.outputs.excel:
        try:
            from churn_analytics.exports.excel_report import write_excel_report

            path = settings.output_dir / f"Churn_Analysis_{date_str}.xlsx"
            write_excel_report(result, path)
            generated.append(path)
        except Exception as e:
            logger.opt(exception=True).error("Excel report failed: {err}", err=e)

    return generated
