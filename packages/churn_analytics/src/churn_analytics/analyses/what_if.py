"""What-if retention scenario: migrate month-to-month customers to term contracts."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from churn_analytics.analyses.aggregates import average_monthly, churn_rate
from churn_analytics.analyses.base import AnalysisResult, round_half_up
from churn_analytics.models import Contract
from churn_analytics.settings import Settings

# No more than this share of a cohort is assumed convertible per target.
MAX_CONVERSION_PCT = 60.0

# Stand-in churn rates (as a share of current churn) when a target cohort is empty
ONE_YEAR_FALLBACK = 0.70
TWO_YEAR_FALLBACK = 0.55

DEFAULT_HORIZON_MONTHS = 6


@dataclass(frozen=True)
class WhatIfResult:
    current: float
    simulated: float
    delta: float
    saved_customers: int
    converted_count: int
    spend: float
    value: float
    roi: float | None

    @property
    def roi_label(self) -> str:
        return "—" if self.roi is None else f"{self.roi:.0f}%"


def clamp_pct(pct: float) -> float:
    return max(0.0, min(MAX_CONVERSION_PCT, float(pct)))


def simulate_conversion(df: pd.DataFrame, pct_to_one_year: float, pct_to_two_year: float) -> tuple[float, float]:
    """Return ``(current, simulated)`` overall churn rates.

    The month-to-month cohort's rate is replaced by a blend of the three
    contract cohorts' observed rates, weighted by the clamped conversion
    shares; every other customer keeps its observed churn.
    """
    current = churn_rate(df)

    m2m_mask = df["contract"] == Contract.MONTH_TO_MONTH.value
    m2m = df[m2m_mask]
    if m2m.empty:
        return current, current

    one_year = df[df["contract"] == Contract.ONE_YEAR.value]
    two_year = df[df["contract"] == Contract.TWO_YEAR.value]
    r_m = churn_rate(m2m)
    r_1 = churn_rate(one_year) if not one_year.empty else current * ONE_YEAR_FALLBACK
    r_2 = churn_rate(two_year) if not two_year.empty else current * TWO_YEAR_FALLBACK

    p_1 = clamp_pct(pct_to_one_year) / 100
    p_2 = clamp_pct(pct_to_two_year) / 100
    p_0 = max(0.0, 1 - p_1 - p_2)
    blended = p_0 * r_m + p_1 * r_1 + p_2 * r_2

    other_churned = int(df.loc[~m2m_mask, "churn"].sum())
    simulated = (other_churned + blended / 100 * len(m2m)) / len(df) * 100
    return current, simulated


def what_if(
    df: pd.DataFrame,
    pct_to_one_year: float,
    pct_to_two_year: float,
    cost_per_conversion: float,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
) -> WhatIfResult:
    """Simulated churn plus the ROI of paying for the conversions.

    ROI is ``None`` when nothing is spent (no conversions or free conversions).
    """
    current, simulated = simulate_conversion(df, pct_to_one_year, pct_to_two_year)
    delta = max(0.0, current - simulated)

    saved = round_half_up(delta / 100 * len(df))
    m2m_count = int((df["contract"] == Contract.MONTH_TO_MONTH.value).sum())
    converted = round_half_up((clamp_pct(pct_to_one_year) + clamp_pct(pct_to_two_year)) / 100 * m2m_count)
    spend = converted * cost_per_conversion
    value = saved * average_monthly(df) * horizon_months
    roi = (value - spend) / spend * 100 if spend > 0 else None

    return WhatIfResult(
        current=current,
        simulated=simulated,
        delta=delta,
        saved_customers=saved,
        converted_count=converted,
        spend=spend,
        value=value,
        roi=roi,
    )


def analyze_what_if(df: pd.DataFrame, settings: Settings) -> AnalysisResult:
    """Contract-migration scenario using the configured percentages and cost."""
    cfg = settings.what_if
    res = what_if(
        df,
        cfg.pct_to_one_year,
        cfg.pct_to_two_year,
        cfg.cost_per_conversion,
        cfg.horizon_months,
    )
    result = pd.DataFrame(
        [
            {"metric": "Current churn %", "value": round(res.current, 2)},
            {"metric": "Simulated churn %", "value": round(res.simulated, 2)},
            {"metric": "Reduction (pts)", "value": round(res.delta, 2)},
            {"metric": "Customers saved", "value": res.saved_customers},
            {"metric": "Customers converted", "value": res.converted_count},
            {"metric": "Conversion spend $", "value": round(res.spend, 2)},
            {"metric": "Retained value $", "value": round(res.value, 2)},
            {"metric": "ROI", "value": res.roi_label},
        ]
    )
    return AnalysisResult.from_df(
        "what_if_roi",
        "What-If: Contract Migration ROI",
        result,
        sheet_name="What-If",
        metadata={
            "pct_to_one_year": clamp_pct(cfg.pct_to_one_year),
            "pct_to_two_year": clamp_pct(cfg.pct_to_two_year),
            "roi": res.roi,
        },
    )
