"""Column alias resolution and required column definitions."""

from __future__ import annotations

import pandas as pd

from churn_analytics.exceptions import ColumnMismatchError

REQUIRED_COLUMNS = {
    "customer_id",
    "contract",
    "internet_service",
    "tenure",
    "monthly",
    "churn",
}

OPTIONAL_COLUMNS = {
    "senior",
}

# Maps raw header variations -> canonical name.
COLUMN_ALIASES: dict[str, str] = {
    # customer_id
    "customer_id": "customer_id",
    "customerid": "customer_id",
    "customer id": "customer_id",
    "customer": "customer_id",
    "id": "customer_id",
    # contract
    "contract": "contract",
    "contract_type": "contract",
    "contract type": "contract",
    # internet_service
    "internet_service": "internet_service",
    "internetservice": "internet_service",
    "internet service": "internet_service",
    "internet": "internet_service",
    # senior
    "senior": "senior",
    "seniorcitizen": "senior",
    "senior_citizen": "senior",
    "senior citizen": "senior",
    "is_senior": "senior",
    # tenure
    "tenure": "tenure",
    "tenure_months": "tenure",
    "tenure months": "tenure",
    # monthly
    "monthly": "monthly",
    "monthlycharges": "monthly",
    "monthly_charges": "monthly",
    "monthly charges": "monthly",
    "monthly_charge": "monthly",
    # churn
    "churn": "churn",
    "churned": "churn",
    "is_churned": "churn",
}


def resolve_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns to canonical names using COLUMN_ALIASES.

    Returns a new DataFrame with resolved column names.
    Raises ColumnMismatchError if required columns are missing after resolution.
    """
    rename_map: dict[str, str] = {}
    for col in df.columns:
        key = str(col).strip().lower().replace("-", "_")
        if key in COLUMN_ALIASES:
            rename_map[col] = COLUMN_ALIASES[key]

    result = df.rename(columns=rename_map)

    resolved = set(result.columns)
    missing = REQUIRED_COLUMNS - resolved
    if missing:
        raise ColumnMismatchError(missing=missing, available=resolved)

    return result
