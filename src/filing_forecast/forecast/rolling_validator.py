"""
rolling_validator.py

Rolling validation for the growth forecasting engine.

Filings are grouped into calendar quarters by filing date. For each quarter k:
    1. Train on filings of quarters k-1 and k (pairs ending in quarter k)
    2. Predict for every filing of quarter k whose entity files again in k+1
    3. Compare to the growth actually reported in that next filing
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, Hashable, Iterable, List, Optional

import numpy as np
from sklearn.metrics import mean_absolute_error

from ..data.data_structures import FilingSnapshot
from ..exceptions import InsufficientSampleError
from .engine import ForecastEngine, pair_consecutive

logger = logging.getLogger(__name__)


def calendar_quarter(filing: FilingSnapshot) -> str:
    """Period key such as '2014Q2'."""
    d = filing.filing_date
    return f"{d.year}Q{(d.month - 1) // 3 + 1}"


def run_rolling_validation(
    engine: ForecastEngine,
    filings: Iterable[FilingSnapshot],
    period_of: Callable[[FilingSnapshot], Hashable] = calendar_quarter,
    confidence: Optional[float] = None,
    learning_rate: Optional[float] = None
) -> List[Dict]:
    """
    Walk forward through the periods, training then predicting out of sample.

    Args:
        engine: Engine to train; it keeps learning across rounds
        filings: Filings of one industry across several periods
        period_of: Maps a filing to a sortable period key
        confidence: Passed to `engine.train`
        learning_rate: Passed to `engine.train`

    Returns:
        One dict per round: period, n_train, n_eval, mae (per output quantity)
        and overall_mae. Rounds whose statistics cannot be built are reported
        with `skipped` set.
    """
    filings = list(filings)
    by_period = defaultdict(list)
    for filing in filings:
        by_period[period_of(filing)].append(filing)
    periods = sorted(by_period)

    following = {current.accession: nxt for current, nxt in pair_consecutive(filings)}

    results = []
    for k in range(1, len(periods) - 1):
        period = periods[k]
        batch = by_period[periods[k - 1]] + by_period[period]

        try:
            trained = engine.train(batch, confidence=confidence, learning_rate=learning_rate)
        except InsufficientSampleError as e:
            logger.warning("Skipping round %s: %s", period, e)
            results.append({'period': period, 'skipped': str(e)})
            continue

        actual = {name: [] for name in engine.output_quantities}
        predicted = {name: [] for name in engine.output_quantities}
        n_eval = 0

        for filing in by_period[period]:
            nxt = following.get(filing.accession)
            if nxt is None or period_of(nxt) != periods[k + 1]:
                continue

            realized = engine.output_builder.build(nxt)
            forecast = engine.predict(filing, trained.version)
            n_eval += 1
            for name, real, pred in zip(engine.output_quantities, realized, forecast):
                if real is not None:
                    actual[name].append(real)
                    predicted[name].append(pred)

        mae = {
            name: float(mean_absolute_error(actual[name], predicted[name]))
            for name in engine.output_quantities if actual[name]
        }
        results.append({
            'period': period,
            'n_train': len(trained.used),
            'n_eval': n_eval,
            'mae': mae,
            'overall_mae': float(np.mean(list(mae.values()))) if mae else None,
        })

        logger.info("Round %s: trained on %d, evaluated %d", period, len(trained.used), n_eval)

    return results
