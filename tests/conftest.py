"""
Shared fixtures: synthetic industries of filings. No network or real data.
"""

from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from filing_forecast.data.data_structures import Fact, FilerStatus, FilingSnapshot


INPUTS = ['Revenues', 'CostsAndExpenses', 'AssetsCurrent', 'LiabilitiesCurrent']
OUTPUTS = ['Revenues', 'CostsAndExpenses']

# Balance sheet tags are point-in-time (0 quarters), the rest cover a quarter.
DURATIONS = {
    'Revenues': 1,
    'CostsAndExpenses': 1,
    'AssetsCurrent': 0,
    'LiabilitiesCurrent': 0,
}

SIC = 1311


def quarter_end(year: int, quarter: int) -> date:
    month = quarter * 3
    next_month = date(year + (month == 12), month % 12 + 1, 1)
    return next_month - timedelta(days=1)


def yyyymmdd(d: date) -> int:
    return int(d.strftime("%Y%m%d"))


def make_filing(accession, cik, filed, facts=None, status=FilerStatus.ACCELERATED, sic=SIC):
    return FilingSnapshot(
        accession=accession,
        filing_date=filed,
        cik=cik,
        sic=sic,
        form="10-Q",
        filer_status=status,
        facts={name: tuple(values) for name, values in (facts or {}).items()},
    )


def generate_industry(n_entities=8, n_quarters=6, seed=7, start_year=2012):
    """
    Rows shaped like sub.txt / num.txt for a synthetic industry.

    Every entity files once per quarter, 45 days after quarter end, reporting
    each tag for the current and the prior quarter end.
    """
    rng = np.random.default_rng(seed)
    statuses = list(FilerStatus)
    ends = [quarter_end(start_year + (q // 4), q % 4 + 1) for q in range(n_quarters + 1)]

    sub_rows, num_rows = [], []
    for e in range(n_entities):
        cik = 1000 + e
        levels = {}
        for name in INPUTS:
            series = [rng.uniform(50, 500)]
            for _ in range(n_quarters):
                series.append(series[-1] * (1 + rng.normal(0.02, 0.04)))
            levels[name] = series

        for t in range(1, n_quarters + 1):
            adsh = f"{cik:010d}-{t:02d}-000001"
            filed = ends[t] + timedelta(days=45)
            sub_rows.append({
                'adsh': adsh, 'cik': cik, 'sic': SIC, 'form': '10-Q',
                'afs': statuses[e % len(statuses)].value, 'fp': 'Q1',
                'filed': yyyymmdd(filed), 'prevrpt': 0, 'detail': 1,
            })
            for name in INPUTS:
                for offset in (0, 1):
                    num_rows.append({
                        'adsh': adsh, 'tag': name, 'version': 'us-gaap/2012',
                        'coreg': None, 'ddate': yyyymmdd(ends[t - offset]),
                        'qtrs': DURATIONS[name], 'uom': 'USD',
                        'value': round(levels[name][t - offset], 4),
                    })

    return pd.DataFrame(sub_rows), pd.DataFrame(num_rows)


def filings_from_frames(subs: pd.DataFrame, nums: pd.DataFrame):
    filings = []
    for _, sub in subs.iterrows():
        rows = nums[nums['adsh'] == sub['adsh']]
        facts = {}
        for _, num in rows.iterrows():
            end = pd.to_datetime(str(num['ddate']), format="%Y%m%d").date()
            facts.setdefault(num['tag'], []).append(
                Fact(end_date=end, duration=int(num['qtrs']), value=float(num['value']))
            )
        filings.append(FilingSnapshot(
            accession=sub['adsh'],
            filing_date=pd.to_datetime(str(sub['filed']), format="%Y%m%d").date(),
            cik=int(sub['cik']),
            sic=int(sub['sic']),
            form=sub['form'],
            filer_status=FilerStatus.from_code(sub['afs']),
            facts={name: tuple(values) for name, values in facts.items()},
        ))
    return filings


@pytest.fixture
def industry_frames():
    return generate_industry()


@pytest.fixture
def industry_filings(industry_frames):
    return filings_from_frames(*industry_frames)


@pytest.fixture
def tag_frame():
    rows = [
        {'tag': name, 'version': 'us-gaap/2012', 'custom': 0, 'abstract': 0,
         'datatype': 'monetary', 'iord': 'I' if DURATIONS[name] == 0 else 'D',
         'crdr': 'D', 'tlabel': name}
        for name in INPUTS
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def dataset_dir(tmp_path, industry_frames, tag_frame):
    """Synthetic industry written as an extracted quarterly data set."""
    subs, nums = industry_frames
    folder = tmp_path / "2013q1"
    folder.mkdir()
    subs.to_csv(folder / "sub.txt", sep="\t", index=False)
    nums.to_csv(folder / "num.txt", sep="\t", index=False)
    tag_frame.to_csv(folder / "tag.txt", sep="\t", index=False)
    return tmp_path
