"""Per-customer risk scoring and its factor-level explanation.

The score is an additive heuristic over five factor categories. ``risk_score``
and ``explain`` both read the per-category points from ``risk_factors`` so an
explanation always adds up to the score it explains.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.models import Contract, InternetService
from churn_analytics.settings import Settings

MAX_SCORE = 100

# Category order doubles as the tie-break order in explanations.
FACTOR_CATEGORIES = ("contract", "tenure", "internet", "charge", "senior")

CONTRACT_POINTS = {
    Contract.MONTH_TO_MONTH: ("Month-to-month contract", 35),
    Contract.ONE_YEAR: ("One year contract", 16),
    Contract.TWO_YEAR: ("Two year contract", 6),
}

# (inclusive upper bound, label, points), checked ascending
TENURE_POINTS = [
    (3, "Tenure 0–3 months", 26),
    (6, "Tenure 4–6 months", 18),
    (12, "Tenure 7–12 months", 10),
    (24, "Tenure 13–24 months", 6),
]
TENURE_LONG = ("Tenure 25+ months", 0)

INTERNET_POINTS = {
    InternetService.FIBER: ("Fiber optic", 14),
    InternetService.DSL: ("DSL", 6),
    InternetService.NONE: ("No internet", 0),
}

# (inclusive lower bound, label, points), checked high to low
CHARGE_POINTS = [
    (90, "Monthly ≥ $90", 14),
    (70, "Monthly $70–$89", 7),
]
CHARGE_LOW = ("Monthly < $70", 0)

SENIOR_POINTS = {
    True: ("Senior citizen", 5),
    False: ("Not a senior citizen", 0),
}


@dataclass(frozen=True)
class RiskFactor:
    category: str
    label: str
    points: int


@dataclass(frozen=True)
class Explanation:
    total: int
    factors: list[RiskFactor]

    @property
    def visible_factors(self) -> list[RiskFactor]:
        """Factors that contributed points; what a report usually shows."""
        return [f for f in self.factors if f.points > 0]


def _contract_factor(contract) -> RiskFactor:
    label, pts = CONTRACT_POINTS[Contract(contract)]
    return RiskFactor("contract", label, pts)


def _tenure_factor(tenure: int) -> RiskFactor:
    for upper, label, pts in TENURE_POINTS:
        if tenure <= upper:
            return RiskFactor("tenure", label, pts)
    return RiskFactor("tenure", *TENURE_LONG)


def _internet_factor(internet) -> RiskFactor:
    label, pts = INTERNET_POINTS[InternetService(internet)]
    return RiskFactor("internet", label, pts)


def _charge_factor(monthly: float) -> RiskFactor:
    for lower, label, pts in CHARGE_POINTS:
        if monthly >= lower:
            return RiskFactor("charge", label, pts)
    return RiskFactor("charge", *CHARGE_LOW)


def _senior_factor(senior) -> RiskFactor:
    label, pts = SENIOR_POINTS[bool(senior)]
    return RiskFactor("senior", label, pts)


def risk_factors(record) -> list[RiskFactor]:
    """Per-category contributions in category order.

    *record* is anything exposing the customer fields as attributes: a
    ``CustomerRecord`` or a row from ``DataFrame.itertuples()``.
    """
    return [
        _contract_factor(record.contract),
        _tenure_factor(record.tenure),
        _internet_factor(record.internet_service),
        _charge_factor(record.monthly),
        _senior_factor(record.senior),
    ]


def risk_score(record) -> int:
    """Additive churn-risk score, capped at 100."""
    return min(MAX_SCORE, sum(f.points for f in risk_factors(record)))


def explain(record) -> Explanation:
    """Score breakdown, highest contribution first; zero-point factors included."""
    factors = risk_factors(record)
    # sorted() is stable, so equal points keep category order
    ordered = sorted(factors, key=lambda f: -f.points)
    return Explanation(total=risk_score(record), factors=ordered)


def score_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Copy of *df* with a ``risk`` column."""
    scored = df.copy()
    scored["risk"] = [risk_score(row) for row in df.itertuples(index=False)]
    return scored


def analyze_risk_ranking(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    """Highest-risk customers with an at-risk flag against the configured cut."""
    columns = ["customer_id", "risk", "at_risk", "contract", "tenure", "monthly", "internet_service", "churn"]
    scored = score_frame(df)
    top = scored.sort_values("risk", ascending=False, kind="stable").head(settings.risk_top_n)
    top = top.assign(at_risk=top["risk"] >= settings.risk_cut)[columns].reset_index(drop=True)

    at_risk_total = int((scored["risk"] >= settings.risk_cut).sum()) if not scored.empty else 0
    return AnalysisResult.from_df(
        "risk_ranking",
        "Highest-Risk Customers",
        top,
        sheet_name="Risk Ranking",
        metadata={"risk_cut": settings.risk_cut, "at_risk_customers": at_risk_total},
    )
