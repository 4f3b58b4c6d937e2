"""Predicate-based subset selection over the customer collection."""

from __future__ import annotations

import pandas as pd

from churn_analytics.models import ALL, FilterCriteria, enum_value


def filter_customers(df: pd.DataFrame, criteria: FilterCriteria) -> pd.DataFrame:
    """Rows matching contract, internet service and the inclusive tenure range.

    Relative order is preserved and *df* is left untouched. An inverted
    tenure range matches nothing.
    """
    mask = df["tenure"].between(criteria.tenure_min, criteria.tenure_max, inclusive="both")

    contract = enum_value(criteria.contract)
    if contract != ALL:
        mask &= df["contract"] == contract

    internet = enum_value(criteria.internet_service)
    if internet != ALL:
        mask &= df["internet_service"] == internet

    return df[mask]
