"""Churn-rate and average-charge reducers, cohort grouping, cohort analyses."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence

import pandas as pd

from churn_analytics.analyses.base import AnalysisResult, safe_percentage
from churn_analytics.models import CONTRACT_ORDER, INTERNET_ORDER
from churn_analytics.settings import Settings

TENURE_BUCKETS: list[tuple[int, str]] = [
    (3, "0–3"),
    (6, "4–6"),
    (12, "7–12"),
    (24, "13–24"),
]
TENURE_TOP_BUCKET = "25+"
TENURE_ORDER = [label for _, label in TENURE_BUCKETS] + [TENURE_TOP_BUCKET]


def churn_rate(df: pd.DataFrame) -> float:
    """Percentage of churned customers; 0.0 for an empty frame."""
    return safe_percentage(int(df["churn"].sum()), len(df))


def average_monthly(df: pd.DataFrame) -> float:
    """Mean monthly charge; 0.0 for an empty frame."""
    if df.empty:
        return 0.0
    return float(df["monthly"].mean())


def group_by(df: pd.DataFrame, key_fn: Callable[[pd.Series], Hashable]) -> dict[Hashable, pd.DataFrame]:
    """Split *df* by ``key_fn(row)``; keys appear in first-seen order, observed rows only."""
    if df.empty:
        return {}
    keys = df.apply(key_fn, axis=1)
    return {key: group for key, group in df.groupby(keys.to_numpy(), sort=False, dropna=False)}


def tenure_bucket(tenure: int) -> str:
    """Map tenure months onto the fixed cohort labels."""
    for upper, label in TENURE_BUCKETS:
        if tenure <= upper:
            return label
    return TENURE_TOP_BUCKET


def cohort_table(
    df: pd.DataFrame,
    key_fn: Callable[[pd.Series], Hashable],
    order: Sequence[Hashable],
) -> pd.DataFrame:
    """One row per cohort in *order*; declared cohorts with no customers get zeros."""
    groups = group_by(df, key_fn)
    rows = []
    for key in order:
        members = groups.get(key, df.iloc[0:0])
        rows.append(
            {
                "cohort": key,
                "customers": len(members),
                "churned": int(members["churn"].sum()),
                "churn_rate": round(churn_rate(members), 2),
            }
        )
    return pd.DataFrame(rows, columns=["cohort", "customers", "churned", "churn_rate"])


# ---------------------------------------------------------------------------
# Registered analyses
# ---------------------------------------------------------------------------


def analyze_kpis(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    """Headline KPIs of the filtered view."""
    result = pd.DataFrame(
        [
            {"metric": "Customers", "value": len(df)},
            {"metric": "Churn rate %", "value": round(churn_rate(df), 2)},
            {"metric": "Avg monthly $", "value": round(average_monthly(df), 2)},
        ]
    )
    return AnalysisResult.from_df("kpi_summary", "Headline KPIs", result, sheet_name="KPIs")


def analyze_tenure_cohorts(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    table = cohort_table(df, lambda r: tenure_bucket(r["tenure"]), TENURE_ORDER)
    return AnalysisResult.from_df(
        "cohort_tenure", "Churn by Tenure (months)", table, sheet_name="Cohort Tenure"
    )


def analyze_contract_cohorts(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    table = cohort_table(df, lambda r: r["contract"], CONTRACT_ORDER)
    return AnalysisResult.from_df(
        "cohort_contract", "Churn by Contract", table, sheet_name="Cohort Contract"
    )


def analyze_internet_cohorts(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    table = cohort_table(df, lambda r: r["internet_service"], INTERNET_ORDER)
    return AnalysisResult.from_df(
        "cohort_internet", "Churn by Internet Service", table, sheet_name="Cohort Internet"
    )
