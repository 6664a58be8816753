"""
exceptions.py

Error taxonomy for the growth forecasting engine.

Data-quality problems (missing facts, outliers, cross-entity pairs) are never
raised; they shrink the training set instead. Everything below indicates a
structural problem that aborts the current call.
"""


class ForecastError(Exception):
    """Base class for all errors raised by filing_forecast."""


class InsufficientSampleError(ForecastError, ValueError):
    """A statistic was requested from fewer than two retained values."""

    def __init__(self, size: int, column: str = None):
        self.size = size
        self.column = column
        where = f" for column '{column}'" if column else ""
        super().__init__(
            f"Need at least 2 retained values to compute a statistic{where}, got {size}"
        )


class DimensionMismatchError(ForecastError, ValueError):
    """A vector does not match the fixed dimension it is applied to."""

    def __init__(self, expected: int, actual: int, what: str = "vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {what} of length {expected}, got {actual}")


class ModelNotTrainedError(ForecastError, RuntimeError):
    """Prediction was requested before any training call."""


class StaleModelError(ForecastError, ValueError):
    """A ModelVersion was passed that is not the engine's current version."""


class DatasetError(ForecastError):
    """Filing data set files are missing or malformed, or lack a requested filing."""
