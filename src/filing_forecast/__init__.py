"""
Filing Growth Forecast

Forecasts quarter-over-quarter growth of financial statement line items for
companies in an industry, learned from historical SEC filings.

Main Components:
- Robust column statistics (outlier-trimmed mean and deviation)
- Growth vectors and deviation-based interpolation of missing facts
- One feed-forward network per predicted line item
- SEC Financial Statement Data Set repository
"""

__version__ = "1.0.0"

from filing_forecast.config import ForecastConfig
from filing_forecast.exceptions import (
    ForecastError,
    InsufficientSampleError,
    DimensionMismatchError,
    ModelNotTrainedError,
    StaleModelError,
    DatasetError,
)
from filing_forecast.data.data_structures import (
    Fact,
    FilerStatus,
    FilingSnapshot,
    FiscalPeriod,
    Quantity,
)
from filing_forecast.forecast.statistic import RobustStatistic
from filing_forecast.forecast.growth import GrowthVectorBuilder
from filing_forecast.forecast.interpolation import Interpolator
from filing_forecast.neural.network import NeuralNetwork
from filing_forecast.forecast.engine import ForecastEngine, ModelVersion, TrainingResult

__all__ = [
    'ForecastConfig',

    # Errors
    'ForecastError',
    'InsufficientSampleError',
    'DimensionMismatchError',
    'ModelNotTrainedError',
    'StaleModelError',
    'DatasetError',

    # Records
    'Fact',
    'FilerStatus',
    'FilingSnapshot',
    'FiscalPeriod',
    'Quantity',

    # Engine
    'RobustStatistic',
    'GrowthVectorBuilder',
    'Interpolator',
    'NeuralNetwork',
    'ForecastEngine',
    'ModelVersion',
    'TrainingResult',
]
