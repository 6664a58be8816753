# src/filing_forecast/forecast/__init__.py
"""
Growth Forecasting Module
"""

from .statistic import RobustStatistic
from .growth import GrowthVectorBuilder, find_comparable_pair, quarterly_growth
from .interpolation import Interpolator
from .engine import ForecastEngine, ModelVersion, TrainingPair, TrainingResult
from .persistence import save_engine, load_engine
from .rolling_validator import run_rolling_validation

__all__ = [
    'RobustStatistic',
    'GrowthVectorBuilder',
    'find_comparable_pair',
    'quarterly_growth',
    'Interpolator',
    'ForecastEngine',
    'ModelVersion',
    'TrainingPair',
    'TrainingResult',
    'save_engine',
    'load_engine',
    'run_rolling_validation',
]
