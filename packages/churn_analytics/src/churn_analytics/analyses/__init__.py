"""Analysis registry and runner."""

from __future__ import annotations

from collections.abc import Callable

import pandas as pd
from loguru import logger

from churn_analytics.analyses.aggregates import (
    analyze_contract_cohorts,
    analyze_internet_cohorts,
    analyze_kpis,
    analyze_tenure_cohorts,
)
from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.analyses.drivers import analyze_drivers
from churn_analytics.analyses.risk import analyze_risk_ranking
from churn_analytics.analyses.what_if import analyze_what_if
from churn_analytics.exceptions import AnalysisError
from churn_analytics.settings import Settings

AnalysisFunc = Callable[[pd.DataFrame, Settings], AnalysisResult]

# Deterministic ordering; every analysis reads the same filtered frame.
ANALYSIS_REGISTRY: list[tuple[str, AnalysisFunc]] = [
    ("kpi_summary", analyze_kpis),
    ("cohort_tenure", analyze_tenure_cohorts),
    ("cohort_contract", analyze_contract_cohorts),
    ("cohort_internet", analyze_internet_cohorts),
    ("churn_drivers", analyze_drivers),
    ("risk_ranking", analyze_risk_ranking),
    ("what_if_roi", analyze_what_if),
]


def run_all_analyses(
    df: pd.DataFrame,
    settings: Settings,
    on_progress: Callable[[str], None] | None = None,
) -> list[AnalysisResult]:
    """Execute every registered analysis over the filtered frame *df*.

    Failed analyses produce an AnalysisResult with error set (no crash).
    """
    results: list[AnalysisResult] = []

    for name, func in ANALYSIS_REGISTRY:
        if on_progress:
            on_progress(name)
        try:
            results.append(func(df, settings))
        except Exception as e:
            err = AnalysisError(name, e)
            logger.warning("{err}", err=err)
            results.append(AnalysisResult.from_df(name, name, pd.DataFrame(), error=str(err)))

    return results
