"""Churn drivers: relative risk lift of fixed segments against the baseline."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pandas as pd

from churn_analytics.analyses.aggregates import churn_rate
from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.models import Contract, InternetService
from churn_analytics.settings import Settings

BASELINE_EPSILON = 1e-4
MIN_SEGMENT_SIZE = 40
TOP_DRIVERS = 5

SegmentPredicate = Callable[[pd.DataFrame], pd.Series]

# Declaration order is the final tie-breaker when ranking.
CANDIDATE_SEGMENTS: list[tuple[str, SegmentPredicate]] = [
    ("Month-to-month", lambda df: df["contract"] == Contract.MONTH_TO_MONTH.value),
    ("Fiber optic", lambda df: df["internet_service"] == InternetService.FIBER.value),
    ("Tenure ≤ 6", lambda df: df["tenure"] <= 6),
    ("Monthly ≥ 90", lambda df: df["monthly"] >= 90),
    ("Senior citizen", lambda df: df["senior"].astype(bool)),
]


@dataclass(frozen=True)
class DriverSegment:
    name: str
    rate: float
    lift: float
    n: int
    predicate: SegmentPredicate = field(repr=False, compare=False)


def baseline_rate(df: pd.DataFrame) -> float:
    """Overall churn rate, floored so lifts stay finite when nobody churned."""
    return churn_rate(df) or BASELINE_EPSILON


def compute_drivers(
    df: pd.DataFrame,
    min_segment_size: int = MIN_SEGMENT_SIZE,
    top_n: int = TOP_DRIVERS,
) -> list[DriverSegment]:
    """Rank candidate segments by lift.

    Segments smaller than *min_segment_size* are dropped. Ties on lift go to
    the larger segment, then to declaration order.
    """
    base = baseline_rate(df)

    ranked: list[tuple[int, DriverSegment]] = []
    for position, (name, predicate) in enumerate(CANDIDATE_SEGMENTS):
        rows = df[predicate(df)] if not df.empty else df
        n = len(rows)
        if n < min_segment_size:
            continue
        rate = churn_rate(rows)
        ranked.append((position, DriverSegment(name=name, rate=rate, lift=rate / base, n=n, predicate=predicate)))

    ranked.sort(key=lambda item: (-item[1].lift, -item[1].n, item[0]))
    return [segment for _, segment in ranked[:top_n]]


def analyze_drivers(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    """Top churn drivers of the filtered view."""
    drivers = compute_drivers(
        df,
        min_segment_size=settings.driver_min_segment,
        top_n=settings.driver_top_n,
    )
    result = pd.DataFrame(
        [
            {
                "rank": i,
                "segment": d.name,
                "customers": d.n,
                "churn_rate": round(d.rate, 2),
                "lift": round(d.lift, 2),
            }
            for i, d in enumerate(drivers, 1)
        ],
        columns=["rank", "segment", "customers", "churn_rate", "lift"],
    )
    return AnalysisResult.from_df(
        "churn_drivers",
        "Top Churn Drivers (lift vs baseline)",
        result,
        sheet_name="Drivers",
        metadata={"baseline_rate": round(churn_rate(df), 2)},
    )
