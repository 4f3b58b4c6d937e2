"""Dashboard session: presentation-side state around the analytics engine.

The engine functions are stateless. Everything a dashboard keeps between
recomputes -- the dataset, the current filters and scenario inputs, the
selected customer, the KPI worker -- lives here and is passed into the engine
explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
from loguru import logger

from churn_analytics.analyses import run_all_analyses
from churn_analytics.analyses.base import AnalysisResult
from churn_analytics.analyses.filters import filter_customers
from churn_analytics.analyses.risk import Explanation, explain
from churn_analytics.demo_data import make_demo_data
from churn_analytics.exceptions import CustomerNotFoundError
from churn_analytics.models import CustomerRecord, FilterCriteria
from churn_analytics.offload import OffloadCoordinator
from churn_analytics.settings import Settings, WhatIfConfig


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything derived from one recompute, all under the same parameters."""

    criteria: FilterCriteria
    filtered: pd.DataFrame
    analyses: list[AnalysisResult]
    explanation: Explanation | None = None
    kpi_seq: int | None = None

    def get(self, name: str) -> AnalysisResult | None:
        return next((a for a in self.analyses if a.name == name), None)


class DashboardSession:
    def __init__(
        self,
        data: pd.DataFrame,
        settings: Settings,
        coordinator: OffloadCoordinator | None = None,
    ) -> None:
        self.data = data
        self.settings = settings
        self.coordinator = coordinator
        self.selected_id: str | None = None

    @property
    def criteria(self) -> FilterCriteria:
        return self.settings.filters

    def load_demo(self) -> None:
        """Replace the dataset with fresh demo data and clear the selection."""
        self.data = make_demo_data(self.settings.demo_rows, self.settings.demo_seed)
        self.selected_id = None

    def set_filters(self, **changes) -> FilterCriteria:
        criteria = FilterCriteria.model_validate({**self.criteria.model_dump(), **changes})
        self.settings = self.settings.model_copy(update={"filters": criteria})
        return criteria

    def set_what_if(self, **changes) -> WhatIfConfig:
        cfg = WhatIfConfig.model_validate({**self.settings.what_if.model_dump(), **changes})
        self.settings = self.settings.model_copy(update={"what_if": cfg})
        return cfg

    def set_risk_cut(self, risk_cut: int) -> None:
        self.settings = Settings.model_validate({**self.settings.model_dump(), "risk_cut": risk_cut})

    def reset(self) -> None:
        """Restore default filters, scenario inputs and risk cut; clear the selection."""
        defaults = Settings()
        self.settings = self.settings.model_copy(
            update={
                "filters": defaults.filters,
                "what_if": defaults.what_if,
                "risk_cut": defaults.risk_cut,
            }
        )
        self.selected_id = None

    def select(self, customer_id: str) -> CustomerRecord:
        """Select a customer for explanation; raises CustomerNotFoundError."""
        record = self._lookup(customer_id)
        self.selected_id = customer_id
        return record

    def selected_record(self) -> CustomerRecord | None:
        if self.selected_id is None:
            return None
        return self._lookup(self.selected_id)

    def _lookup(self, customer_id: str) -> CustomerRecord:
        match = self.data[self.data["customer_id"] == customer_id]
        if match.empty:
            raise CustomerNotFoundError(customer_id)
        return CustomerRecord.model_validate(match.head(1).to_dict("records")[0])

    def recompute(self) -> DashboardSnapshot:
        """Run every foreground analysis under one parameter snapshot.

        The KPI worker, when present, is sent the same criteria; its response
        arrives through the coordinator.
        """
        settings = self.settings
        criteria = settings.filters
        filtered = filter_customers(self.data, criteria)

        kpi_seq = None
        if self.coordinator is not None:
            kpi_seq = self.coordinator.submit(self.data, criteria)

        analyses = run_all_analyses(filtered, settings)
        record = self.selected_record()
        explanation = explain(record) if record is not None else None

        logger.debug(
            "Recomputed {n}/{total} customers under {criteria}",
            n=len(filtered),
            total=len(self.data),
            criteria=criteria,
        )
        return DashboardSnapshot(
            criteria=criteria,
            filtered=filtered,
            analyses=analyses,
            explanation=explanation,
            kpi_seq=kpi_seq,
        )
