"""Exception hierarchy for churn_analytics."""


class ChurnError(Exception):
    """Base exception for all churn_analytics errors."""


class ConfigError(ChurnError):
    """Invalid or missing configuration."""


class DataLoadError(ChurnError):
    """Failed to load or parse the customer file."""


class ColumnMismatchError(DataLoadError):
    """Required columns missing from the dataset."""

    def __init__(self, missing: set[str], available: set[str]) -> None:
        self.missing = missing
        self.available = available
        super().__init__(f"Missing required columns: {sorted(missing)}")


class AnalysisError(ChurnError):
    """An individual analysis failed."""

    def __init__(self, analysis_name: str, cause: Exception) -> None:
        self.analysis_name = analysis_name
        self.cause = cause
        super().__init__(f"Analysis '{analysis_name}' failed: {cause}")


class CustomerNotFoundError(ChurnError):
    """Lookup of a customer id that is not in the collection."""

    def __init__(self, customer_id: str) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id!r}")
