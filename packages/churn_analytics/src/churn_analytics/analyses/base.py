"""Base types and helpers for all analyses."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of a single analysis function."""

    name: str
    title: str
    df: pd.DataFrame
    error: str | None = None
    sheet_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def from_df(
        cls,
        name: str,
        title: str,
        df: pd.DataFrame,
        *,
        error: str | None = None,
        sheet_name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AnalysisResult:
        return cls(
            name=name,
            title=title,
            df=df,
            error=error,
            sheet_name=sheet_name or name.replace(" ", "_")[:31],
            metadata=dict(metadata) if metadata else {},
        )


def safe_percentage(part: float, total: float) -> float:
    """Return part/total * 100 without ZeroDivisionError."""
    if total == 0:
        return 0.0
    return (part / total) * 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)
