"""
repository.py

Filing access for the forecasting engine.

`SECDatasetRepository` serves filings out of the SEC Financial Statement Data
Sets. Each quarterly archive holds tab-separated files:

    sub.txt  one row per submission (adsh, cik, sic, form, afs, filed, ...)
    num.txt  one row per reported number (adsh, tag, version, ddate, qtrs, value, ...)
    tag.txt  one row per taxonomy tag (tag, version, custom, abstract, ...)
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..config import DEFAULT_FORMS
from ..exceptions import DatasetError
from .data_structures import (
    Fact,
    FilerStatus,
    FilingSnapshot,
    FiscalPeriod,
    Quantity,
)

logger = logging.getLogger(__name__)


SUBMISSION_COLUMNS = ["adsh", "cik", "sic", "form", "filed"]
NUMBER_COLUMNS = ["adsh", "tag", "version", "ddate", "qtrs", "value"]
TAG_COLUMNS = ["tag", "version", "custom", "abstract"]


class FilingRepository(ABC):
    """Read access to filings, their facts and tag metadata."""

    @abstractmethod
    def fetch_filings(
        self,
        sic: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        quantities: Sequence[str] = (),
        forms: Optional[Sequence[str]] = None
    ) -> List[FilingSnapshot]:
        """Filings of an industry ordered by entity, then filing date."""

    @abstractmethod
    def fetch_filing(self, accession: str, quantities: Sequence[str] = ()) -> FilingSnapshot:
        """A single filing by accession number; DatasetError if it is unknown."""

    @abstractmethod
    def fetch_facts(self, accession: str, quantities: Sequence[str]) -> Dict[str, Tuple[Fact, ...]]:
        """Facts reported in one filing for the given quantities."""

    @abstractmethod
    def resolve_quantities(self, names: Sequence[str]) -> List[Quantity]:
        """Tag metadata for each name, in the same order."""

    @abstractmethod
    def most_common_quantities(
        self,
        sic: int,
        limit: int,
        forms: Optional[Sequence[str]] = None
    ) -> List[str]:
        """Standard tags reported by the most distinct filings in an industry."""


def _parse_dates(series: pd.Series) -> pd.Series:
    text = series.astype(str).str.replace(r"\.0$", "", regex=True)
    return pd.to_datetime(text, format="%Y%m%d", errors="coerce").dt.date


def _require(df: pd.DataFrame, columns: Iterable[str], name: str):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DatasetError(f"{name} is missing columns: {missing}")


class SECDatasetRepository(FilingRepository):
    """
    Repository over SEC Financial Statement Data Set frames.

    Args:
        submissions: sub.txt rows
        numbers: num.txt rows
        tags: tag.txt rows (optional; without it every tag counts as standard)
    """

    def __init__(
        self,
        submissions: pd.DataFrame,
        numbers: pd.DataFrame,
        tags: Optional[pd.DataFrame] = None
    ):
        _require(submissions, SUBMISSION_COLUMNS, "submissions")
        _require(numbers, NUMBER_COLUMNS, "numbers")
        if tags is not None:
            _require(tags, TAG_COLUMNS, "tags")

        self.submissions = self._prepare_submissions(submissions)
        self.numbers = self._prepare_numbers(numbers)
        self.tags = self._prepare_tags(tags) if tags is not None else None

        logger.info(
            "Loaded %d submissions, %d numbers, %s tags",
            len(self.submissions), len(self.numbers),
            len(self.tags) if self.tags is not None else "no"
        )

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "SECDatasetRepository":
        """
        Read one extracted quarter, or a folder of extracted quarters.

        Args:
            path: Directory containing sub.txt/num.txt[/tag.txt], or whose
                subdirectories do (e.g. 2014q1/, 2014q2/)
        """
        path = Path(path)
        if (path / "sub.txt").exists():
            folders = [path]
        elif path.is_dir():
            folders = sorted(p for p in path.iterdir() if p.is_dir() and (p / "sub.txt").exists())
        else:
            folders = []

        if not folders:
            raise DatasetError(f"No sub.txt found in {path} or its subdirectories")

        subs, nums, tags = [], [], []
        for folder in folders:
            subs.append(_read_table(folder / "sub.txt"))
            nums.append(_read_table(folder / "num.txt"))
            if (folder / "tag.txt").exists():
                tags.append(_read_table(folder / "tag.txt"))

        tag_frame = pd.concat(tags, ignore_index=True).drop_duplicates(["tag", "version"]) if tags else None
        return cls(
            pd.concat(subs, ignore_index=True).drop_duplicates("adsh"),
            pd.concat(nums, ignore_index=True),
            tag_frame,
        )

    # ------------------------------------------------------------------
    # Normalization of raw frames
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare_submissions(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["cik"] = pd.to_numeric(df["cik"], errors="coerce")
        df["sic"] = pd.to_numeric(df["sic"], errors="coerce")
        df["filed"] = _parse_dates(df["filed"])
        df = df.dropna(subset=["cik", "filed"]).copy()
        df["cik"] = df["cik"].astype(int)

        # Only detailed, non-superseded submissions carry usable numbers.
        if "prevrpt" in df.columns:
            df = df[pd.to_numeric(df["prevrpt"], errors="coerce").fillna(0) == 0]
        if "detail" in df.columns:
            df = df[pd.to_numeric(df["detail"], errors="coerce").fillna(1) == 1]

        return df.sort_values(["cik", "filed", "adsh"]).reset_index(drop=True)

    @staticmethod
    def _prepare_numbers(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df["qtrs"] = pd.to_numeric(df["qtrs"], errors="coerce")
        df["ddate"] = _parse_dates(df["ddate"])
        df = df.dropna(subset=["value", "qtrs", "ddate"])

        # Values reported for a co-registrant or a dimensional segment are not
        # the filer's own consolidated figures.
        for column in ("coreg", "segments"):
            if column in df.columns:
                df = df[df[column].isna() | (df[column].astype(str).str.strip() == "")]

        df = df.copy()
        df["qtrs"] = df["qtrs"].astype(int)
        return df.reset_index(drop=True)

    @staticmethod
    def _prepare_tags(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for column in ("custom", "abstract"):
            df[column] = pd.to_numeric(df[column], errors="coerce").fillna(0).astype(int).astype(bool)
        return df

    # ------------------------------------------------------------------
    # FilingRepository
    # ------------------------------------------------------------------

    def _industry(self, sic: int, forms: Optional[Sequence[str]]) -> pd.DataFrame:
        forms = tuple(forms) if forms else DEFAULT_FORMS
        subs = self.submissions
        return subs[(subs["sic"] == sic) & subs["form"].isin(forms)]

    def fetch_filings(
        self,
        sic: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        quantities: Sequence[str] = (),
        forms: Optional[Sequence[str]] = None
    ) -> List[FilingSnapshot]:
        subs = self._industry(sic, forms)
        if start is not None:
            subs = subs[subs["filed"] >= start]
        if end is not None:
            subs = subs[subs["filed"] <= end]

        facts = self._facts_by_filing(subs["adsh"], quantities)
        filings = [self._snapshot(row, facts.get(row["adsh"], {})) for _, row in subs.iterrows()]

        logger.debug("Fetched %d filings for SIC %s", len(filings), sic)
        return filings

    def fetch_filing(self, accession: str, quantities: Sequence[str] = ()) -> FilingSnapshot:
        rows = self.submissions[self.submissions["adsh"] == accession]
        if rows.empty:
            raise DatasetError(f"Unknown accession number: {accession}")
        return self._snapshot(rows.iloc[0], self.fetch_facts(accession, quantities))

    def fetch_facts(self, accession: str, quantities: Sequence[str]) -> Dict[str, Tuple[Fact, ...]]:
        return self._facts_by_filing([accession], quantities).get(accession, {})

    def resolve_quantities(self, names: Sequence[str]) -> List[Quantity]:
        resolved = []
        for name in names:
            rows = self.tags[self.tags["tag"] == name] if self.tags is not None else pd.DataFrame()
            if rows.empty:
                resolved.append(Quantity(name=name))
                continue

            # Prefer the standard taxonomy entry, then the newest version.
            rows = rows.sort_values(["custom", "version"], ascending=[True, False])
            row = rows.iloc[0]
            resolved.append(Quantity(
                name=name,
                version=_optional_str(row.get("version")),
                datatype=_optional_str(row.get("datatype")),
                iord=_optional_str(row.get("iord")),
                crdr=_optional_str(row.get("crdr")),
                label=_optional_str(row.get("tlabel")),
                custom=bool(row["custom"]),
                abstract=bool(row["abstract"]),
            ))
        return resolved

    def most_common_quantities(
        self,
        sic: int,
        limit: int,
        forms: Optional[Sequence[str]] = None
    ) -> List[str]:
        adsh = self._industry(sic, forms)["adsh"]
        nums = self.numbers[self.numbers["adsh"].isin(adsh)]

        if self.tags is not None:
            standard = self.tags[~self.tags["custom"] & ~self.tags["abstract"]][["tag", "version"]]
            nums = nums.merge(standard, on=["tag", "version"], how="inner")
        else:
            # Custom tags are versioned by the accession number of their filing.
            nums = nums[nums["version"] != nums["adsh"]]

        counts = (
            nums.groupby("tag")["adsh"].nunique()
            .reset_index(name="count")
            .sort_values(["count", "tag"], ascending=[False, True])
        )
        return counts["tag"].head(limit).tolist()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _facts_by_filing(
        self,
        accessions: Iterable[str],
        quantities: Sequence[str]
    ) -> Dict[str, Dict[str, Tuple[Fact, ...]]]:
        if not quantities:
            return {}

        nums = self.numbers
        nums = nums[nums["adsh"].isin(set(accessions)) & nums["tag"].isin(set(quantities))]

        grouped: Dict[str, Dict[str, List[Fact]]] = {}
        unit_col = "uom" if "uom" in nums.columns else None
        for row in nums.itertuples(index=False):
            fact = Fact(
                end_date=row.ddate,
                duration=int(row.qtrs),
                value=float(row.value),
                unit=_optional_str(getattr(row, unit_col)) if unit_col else None,
            )
            grouped.setdefault(row.adsh, {}).setdefault(row.tag, []).append(fact)

        return {
            adsh: {tag: tuple(facts) for tag, facts in by_tag.items()}
            for adsh, by_tag in grouped.items()
        }

    @staticmethod
    def _snapshot(row: pd.Series, facts: Dict[str, Tuple[Fact, ...]]) -> FilingSnapshot:
        sic = row.get("sic")
        return FilingSnapshot(
            accession=row["adsh"],
            filing_date=row["filed"],
            cik=int(row["cik"]),
            sic=int(sic) if pd.notna(sic) else None,
            form=row.get("form"),
            fiscal_period=FiscalPeriod.from_code(_optional_str(row.get("fp"))),
            filer_status=FilerStatus.from_code(_optional_str(row.get("afs"))),
            facts=facts,
        )


def _optional_str(value) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _read_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise DatasetError(f"Missing data set file: {path}")
    return pd.read_csv(
        path,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        na_values=[""],
        encoding="utf-8",
        encoding_errors="replace",
        low_memory=False,
    )
