"""Customer record model, filter criteria, and collection conversions.

A customer collection is carried through the engine as a DataFrame with the
canonical columns in ``CUSTOMER_COLUMNS``. ``CustomerRecord`` is the validated,
immutable per-row form used at ingest, in the worker protocol, and for
per-customer scoring.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Literal

import pandas as pd
from pydantic import BaseModel, Field

ALL = "All"


class Contract(str, Enum):
    MONTH_TO_MONTH = "Month-to-month"
    ONE_YEAR = "One year"
    TWO_YEAR = "Two year"


class InternetService(str, Enum):
    FIBER = "Fiber optic"
    DSL = "DSL"
    NONE = "None"


CONTRACT_ORDER = [c.value for c in Contract]
INTERNET_ORDER = [i.value for i in InternetService]

CUSTOMER_COLUMNS = [
    "customer_id",
    "contract",
    "internet_service",
    "senior",
    "tenure",
    "monthly",
    "churn",
]

TENURE_MIN = 1
TENURE_MAX = 72
MONTHLY_MIN = 18.0
MONTHLY_MAX = 120.0


class CustomerRecord(BaseModel):
    """One customer -- immutable after creation."""

    model_config = {"frozen": True}

    customer_id: str
    contract: Contract
    internet_service: InternetService
    senior: bool = False
    tenure: int = Field(ge=TENURE_MIN, le=TENURE_MAX)
    monthly: float = Field(ge=MONTHLY_MIN, le=MONTHLY_MAX)
    churn: bool = False


class FilterCriteria(BaseModel):
    """Subset selection parameters.

    ``tenure_min > tenure_max`` is accepted as-is; it selects no rows.
    """

    model_config = {"frozen": True}

    contract: Contract | Literal["All"] = ALL
    internet_service: InternetService | Literal["All"] = ALL
    tenure_min: int = 0
    tenure_max: int = TENURE_MAX


def enum_value(value) -> str:
    """Plain string for an enum member or an ``"All"`` marker."""
    return value.value if isinstance(value, Enum) else value


def records_to_frame(records: Iterable[CustomerRecord]) -> pd.DataFrame:
    """Build a canonical customer frame from validated records."""
    rows = [
        {
            "customer_id": r.customer_id,
            "contract": r.contract.value,
            "internet_service": r.internet_service.value,
            "senior": r.senior,
            "tenure": r.tenure,
            "monthly": r.monthly,
            "churn": r.churn,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)


def frame_to_records(df: pd.DataFrame) -> list[CustomerRecord]:
    """Validate every row of a customer frame into a ``CustomerRecord``."""
    return [CustomerRecord.model_validate(row) for row in df[CUSTOMER_COLUMNS].to_dict("records")]
