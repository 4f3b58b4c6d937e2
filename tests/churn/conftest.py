"""Shared fixtures for churn_analytics tests."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
from loguru import logger

from churn_analytics.demo_data import make_demo_data
from churn_analytics.models import CUSTOMER_COLUMNS
from churn_analytics.settings import Settings


def customer(**overrides) -> dict:
    """One canonical customer row with low-risk defaults."""
    row = {
        "customer_id": "C-0000",
        "contract": "Two year",
        "internet_service": "None",
        "senior": False,
        "tenure": 40,
        "monthly": 50.0,
        "churn": False,
    }
    row.update(overrides)
    return row


def make_frame(rows: list[dict]) -> pd.DataFrame:
    """Canonical frame with sequential ids."""
    rows = [{**r, "customer_id": f"C-{i:04d}"} for i, r in enumerate(rows)]
    return pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)


@pytest.fixture(autouse=True)
def _quiet_loguru():
    """CLI tests install sinks on captured streams; drop them after each test."""
    yield
    logger.remove()


@pytest.fixture()
def example_df() -> pd.DataFrame:
    """100 customers: 60 month-to-month (30 churned), 25 one-year (5), 15 two-year (1)."""
    rows: list[dict] = []
    for i in range(60):
        rows.append(
            customer(
                contract="Month-to-month",
                internet_service="Fiber optic" if i % 2 == 0 else "DSL",
                tenure=2 if i < 20 else 10,
                monthly=95.0 if i % 3 == 0 else 60.0,
                senior=i % 10 == 0,
                churn=i < 30,
            )
        )
    for i in range(25):
        rows.append(customer(contract="One year", internet_service="DSL", tenure=30, monthly=70.0, churn=i < 5))
    for i in range(15):
        rows.append(customer(contract="Two year", internet_service="None", tenure=60, monthly=25.0, churn=i < 1))
    return make_frame(rows)


@pytest.fixture(scope="session")
def demo_df() -> pd.DataFrame:
    return make_demo_data()


@pytest.fixture()
def sample_csv_path(tmp_path: Path) -> Path:
    """Demo dataset written to CSV (400 rows)."""
    path = tmp_path / "customers.csv"
    make_demo_data(400).to_csv(path, index=False)
    return path


@pytest.fixture()
def sample_settings(tmp_path: Path) -> Settings:
    """Settings on demo data, writing into tmp_path."""
    return Settings(output_dir=tmp_path / "out")


@pytest.fixture()
def row():
    """Factory for one customer row (see ``customer``)."""
    return customer


@pytest.fixture()
def frame():
    """Factory turning a list of rows into a canonical frame."""
    return make_frame
