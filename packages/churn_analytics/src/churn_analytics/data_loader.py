"""Data loading, validation, and preparation.

Handles two sources:
1. A CSV/Excel customer file (settings.data_file)
2. The seeded demo generator when no file is configured
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger
from pydantic import ValidationError

from churn_analytics.column_map import resolve_columns
from churn_analytics.demo_data import make_demo_data
from churn_analytics.exceptions import DataLoadError
from churn_analytics.models import CustomerRecord, records_to_frame
from churn_analytics.settings import Settings

# Lower-cased raw values -> canonical enum values
CONTRACT_VALUES: dict[str, str] = {
    "month-to-month": "Month-to-month",
    "month to month": "Month-to-month",
    "monthly": "Month-to-month",
    "one year": "One year",
    "1 year": "One year",
    "two year": "Two year",
    "2 year": "Two year",
}

INTERNET_VALUES: dict[str, str] = {
    "fiber optic": "Fiber optic",
    "fiber": "Fiber optic",
    "dsl": "DSL",
    "none": "None",
    "no": "None",
}

TRUE_VALUES = {"yes", "y", "true", "t", "1", "1.0"}
FALSE_VALUES = {"no", "n", "false", "f", "0", "0.0", ""}

MAX_REPORTED_ERRORS = 5


def load_data(settings: Settings) -> pd.DataFrame:
    """Load, validate, and prepare the customer collection.

    Steps:
      1. Read the data file (or generate demo data when none is configured)
      2. Resolve column aliases -> canonical names
      3. Normalize categorical spellings and yes/no flags
      4. Validate every row against CustomerRecord domains

    Returns the canonical customer frame ready for analysis.
    """
    if settings.data_file is None:
        df = make_demo_data(settings.demo_rows, settings.demo_seed)
        logger.info("Generated {n} demo customers", n=len(df))
        return df

    df = _read_file(settings.data_file)
    df = resolve_columns(df)
    df = _normalize_values(df)
    df = _validate_rows(df)
    logger.info(
        "Loaded {n} customers from {name} ({churned} churned)",
        n=len(df),
        name=settings.data_file.name,
        churned=int(df["churn"].sum()),
    )
    return df


def _read_file(path: Path) -> pd.DataFrame:
    """Read a CSV or Excel file into a DataFrame."""
    suffix = path.suffix.lower()
    try:
        # "None" is a valid internet service, not a missing value
        if suffix == ".csv":
            return pd.read_csv(path, keep_default_na=False, na_values=[""])
        return pd.read_excel(path, keep_default_na=False, na_values=[""])
    except Exception as e:
        raise DataLoadError(f"Failed to read {path}: {e}") from e


def _normalize_values(df: pd.DataFrame) -> pd.DataFrame:
    """Map known spellings onto canonical values; unknown values pass through."""
    df = df.copy()
    df["customer_id"] = df["customer_id"].astype(str).str.strip()
    df["contract"] = _map_text(df["contract"], CONTRACT_VALUES)
    df["internet_service"] = _map_text(df["internet_service"], INTERNET_VALUES)
    if "senior" not in df.columns:
        df["senior"] = False
    df["senior"] = df["senior"].fillna(False).map(_parse_flag)
    df["churn"] = df["churn"].map(_parse_flag)
    return df


def _map_text(series: pd.Series, mapping: dict[str, str]) -> pd.Series:
    cleaned = series.astype(str).str.strip()
    return cleaned.str.lower().map(mapping).fillna(cleaned)


def _parse_flag(value):
    """Yes/No, true/false and 1/0 -> bool; anything else is returned unchanged."""
    if isinstance(value, bool):
        return value
    key = str(value).strip().lower()
    if key in TRUE_VALUES:
        return True
    if key in FALSE_VALUES:
        return False
    return value


def _validate_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Build CustomerRecords; raise DataLoadError listing the first bad rows."""
    records: list[CustomerRecord] = []
    errors: list[str] = []
    for idx, row in enumerate(df.to_dict("records")):
        try:
            records.append(CustomerRecord.model_validate(row))
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            errors.append(f"row {idx + 2}: invalid {fields}")

    if errors:
        shown = "; ".join(errors[:MAX_REPORTED_ERRORS])
        more = len(errors) - MAX_REPORTED_ERRORS
        suffix = f" (+{more} more)" if more > 0 else ""
        raise DataLoadError(f"{len(errors)} invalid customer row(s): {shown}{suffix}")

    return records_to_frame(records)
