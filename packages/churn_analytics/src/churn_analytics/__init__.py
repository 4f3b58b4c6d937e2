"""Customer churn analytics: filtering, cohorts, drivers, risk scoring and what-if ROI."""

from __future__ import annotations

from pathlib import Path

__version__ = "1.0.0"


def run_client(
    data_file: str | Path | None = None,
    output_dir: str | Path = "output/",
    **kwargs,
):
    """Convenience entry-point for Jupyter / REPL usage.

    Usage::

        from churn_analytics import run_client
        result = run_client("data/customers.csv")
        result = run_client()  # seeded demo data
    """
    from churn_analytics.pipeline import export_outputs, run_pipeline
    from churn_analytics.settings import Settings

    settings = Settings.from_args(data_file=data_file, output_dir=Path(output_dir), **kwargs)
    result = run_pipeline(settings)
    export_outputs(result)
    return result
