"""
data_structures.py

Records for filings, reported facts and taxonomy tags.

These mirror the SEC Financial Statement Data Sets: a submission (sub.txt)
carries many numbers (num.txt), each number refers to a tag (tag.txt).
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


class FilerStatus(Enum):
    """Filer status with the SEC at the time of submission, largest first."""
    LARGE_ACCELERATED = "1-LAF"
    ACCELERATED = "2-ACC"
    SMALLER_REPORTING_ACCELERATED = "3-SRA"
    NON_ACCELERATED = "4-NON"
    SMALLER_REPORTING_FILER = "5-SML"

    @property
    def ordinal(self) -> int:
        return list(FilerStatus).index(self)

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["FilerStatus"]:
        """Parse the `afs` column; unknown or blank codes give None."""
        if code is None:
            return None
        code = str(code).strip()
        for status in cls:
            if status.value == code:
                return status
        return None


# Encoded value for filings whose status is unknown: the middle tier.
UNKNOWN_FILER_STATUS = (len(FilerStatus) - 1) / 2.0


class FiscalPeriod(Enum):
    """Fiscal period focus (EFM ch. 6) within the fiscal year."""
    FY = "FY"
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    H1 = "H1"
    H2 = "H2"
    M9 = "M9"
    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
    M8 = "M8"
    CY = "CY"

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["FiscalPeriod"]:
        if code is None:
            return None
        try:
            return cls(str(code).strip().upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class Fact:
    """One reported value of a tag: a dated, duration-tagged number."""
    end_date: date
    duration: int  # quarters covered, 0 for point-in-time values
    value: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class Quantity:
    """Taxonomy metadata for a tag."""
    name: str
    version: Optional[str] = None
    datatype: Optional[str] = None
    iord: Optional[str] = None   # I = instant, D = duration
    crdr: Optional[str] = None   # C = credit, D = debit
    label: Optional[str] = None
    custom: bool = False
    abstract: bool = False


@dataclass(frozen=True, eq=False)
class FilingSnapshot:
    """
    One regulatory submission for one entity.

    Two snapshots are equal when they share an accession number, regardless
    of how many facts were loaded into them.
    """
    accession: str
    filing_date: date
    cik: int
    sic: Optional[int] = None
    form: Optional[str] = None
    fiscal_period: Optional[FiscalPeriod] = None
    filer_status: Optional[FilerStatus] = None
    facts: Mapping[str, Tuple[Fact, ...]] = field(default_factory=dict)

    def facts_for(self, quantity: str) -> Tuple[Fact, ...]:
        return tuple(self.facts.get(quantity, ()))

    @property
    def filer_status_feature(self) -> float:
        """Filer status as a numeric network input."""
        if self.filer_status is None:
            return UNKNOWN_FILER_STATUS
        return float(self.filer_status.ordinal)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FilingSnapshot):
            return NotImplemented
        return self.accession == other.accession

    def __hash__(self) -> int:
        return hash(self.accession)

    def __repr__(self) -> str:
        return (
            f"FilingSnapshot(accession={self.accession!r}, cik={self.cik}, "
            f"filing_date={self.filing_date}, form={self.form!r})"
        )


def group_facts(facts: Dict[str, list]) -> Dict[str, Tuple[Fact, ...]]:
    """Freeze a quantity -> list-of-facts mapping into tuples."""
    return {name: tuple(values) for name, values in facts.items()}
