"""Tests for churn_analytics.demo_data."""

from __future__ import annotations

import pytest

from churn_analytics.demo_data import make_demo_data, seeded_random
from churn_analytics.models import CONTRACT_ORDER, CUSTOMER_COLUMNS, INTERNET_ORDER, frame_to_records


class TestSeededRandom:
    def test_reproducible(self):
        a, b = seeded_random(42), seeded_random(42)
        assert [a() for _ in range(5)] == [b() for _ in range(5)]

    def test_first_value(self):
        assert seeded_random(1)() == pytest.approx(16807 / 2147483647)

    def test_open_unit_interval(self):
        rand = seeded_random(71313)
        assert all(0 < rand() < 1 for _ in range(1000))

    def test_non_positive_seed(self):
        rand = seeded_random(0)
        assert 0 < rand() < 1


class TestMakeDemoData:
    def test_shape(self, demo_df):
        assert len(demo_df) == 1200
        assert list(demo_df.columns) == CUSTOMER_COLUMNS

    def test_deterministic(self):
        assert make_demo_data(50).equals(make_demo_data(50))

    def test_seed_changes_data(self):
        assert not make_demo_data(50, seed=1).equals(make_demo_data(50, seed=2))

    def test_rows_are_valid_records(self, demo_df):
        assert len(frame_to_records(demo_df)) == 1200

    def test_domains(self, demo_df):
        assert set(demo_df["contract"]) <= set(CONTRACT_ORDER)
        assert set(demo_df["internet_service"]) <= set(INTERNET_ORDER)
        assert demo_df["tenure"].between(1, 72).all()
        assert demo_df["monthly"].between(18, 120).all()

    def test_ids_unique_and_prefixed(self, demo_df):
        assert demo_df["customer_id"].is_unique
        assert demo_df["customer_id"].iloc[0].startswith("0001-")
        assert demo_df["customer_id"].iloc[-1].startswith("1200-")

    def test_usual_drivers_visible(self, demo_df):
        m2m = demo_df[demo_df["contract"] == "Month-to-month"]["churn"].mean()
        two_year = demo_df[demo_df["contract"] == "Two year"]["churn"].mean()
        assert m2m > two_year
        assert 0.1 < demo_df["churn"].mean() < 0.6
