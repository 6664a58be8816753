# src/filing_forecast/data/__init__.py
"""
Filing Data Module

Filing records and access to the SEC Financial Statement Data Sets.
"""

from .data_structures import Fact, FilerStatus, FilingSnapshot, FiscalPeriod, Quantity
from .repository import FilingRepository, SECDatasetRepository
from .sec_downloader import download_quarter

__all__ = [
    'Fact',
    'FilerStatus',
    'FilingSnapshot',
    'FiscalPeriod',
    'Quantity',
    'FilingRepository',
    'SECDatasetRepository',
    'download_quarter',
]
