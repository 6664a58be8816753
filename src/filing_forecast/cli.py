"""
cli.py - Command line interface for the growth forecasting engine.

Usage:
    filing-forecast download 2014 1 --dest data/
    filing-forecast train --data data/ --sic 1311 --outputs Revenues Assets --model models/oil
    filing-forecast predict --data data/ --model models/oil --accession 0000311471-14-000006
    filing-forecast validate --data data/ --sic 1311 --outputs Revenues
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from .config import ForecastConfig
from .data.repository import SECDatasetRepository
from .data.sec_downloader import DEFAULT_USER_AGENT, download_quarter
from .exceptions import ForecastError
from .forecast.engine import ForecastEngine
from .forecast.persistence import load_engine, save_engine
from .forecast.rolling_validator import run_rolling_validation

logger = logging.getLogger("filing_forecast")


def _date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got '{text}'")


def _load_config(args) -> ForecastConfig:
    config = ForecastConfig.from_yaml(args.config) if args.config else ForecastConfig()
    if getattr(args, "input_count", None):
        config.input_count = args.input_count
    return config


def _build_engine(args, repository, config: ForecastConfig) -> ForecastEngine:
    if args.inputs:
        return ForecastEngine(args.inputs, args.outputs, config)
    return ForecastEngine.for_industry(repository, args.sic, args.outputs, config)


def cmd_download(args) -> int:
    target = download_quarter(args.year, args.quarter, args.dest, user_agent=args.user_agent)
    print(f"Data set extracted to {target}")
    return 0


def cmd_train(args) -> int:
    config = _load_config(args)
    repository = SECDatasetRepository.from_directory(args.data)
    engine = _build_engine(args, repository, config)

    filings = repository.fetch_filings(
        args.sic,
        start=args.start,
        end=args.end,
        quantities=engine.input_quantities + engine.output_quantities,
        forms=config.forms,
    )
    result = engine.train(filings, confidence=args.confidence, learning_rate=args.learning_rate)
    save_engine(engine, args.model)

    print("=" * 70)
    print(f"TRAINED GROWTH FORECAST FOR SIC {args.sic}")
    print("=" * 70)
    print(f"  Filings:        {len(filings)}")
    print(f"  Pairs:          {result.n_pairs}")
    print(f"  Used:           {len(result.used)}")
    print(f"  Too sparse:     {result.n_sparse}")
    print(f"  Outliers:       {result.n_outliers}")
    print(f"  Model version:  {result.version.number}")
    print(f"  Saved to:       {args.model}")
    return 0


def cmd_predict(args) -> int:
    engine = load_engine(args.model)
    repository = SECDatasetRepository.from_directory(args.data)
    filing = repository.fetch_filing(args.accession, engine.input_quantities)

    predictions = engine.predict_by_quantity(filing, engine.current_version)

    print(f"Expected quarterly growth for {filing.accession} (CIK {filing.cik})")
    for name, growth in predictions.items():
        print(f"  {name:<45} {growth:10.4f}")
    return 0


def cmd_validate(args) -> int:
    config = _load_config(args)
    repository = SECDatasetRepository.from_directory(args.data)
    engine = _build_engine(args, repository, config)

    filings = repository.fetch_filings(
        args.sic,
        quantities=engine.input_quantities + engine.output_quantities,
        forms=config.forms,
    )
    results = run_rolling_validation(engine, filings, confidence=args.confidence)

    print("=" * 70)
    print("ROLLING VALIDATION")
    print("=" * 70)
    for round_result in results:
        if 'skipped' in round_result:
            print(f"  {round_result['period']}: skipped ({round_result['skipped']})")
            continue
        overall = round_result['overall_mae']
        overall_text = f"{overall:.4f}" if overall is not None else "n/a"
        print(
            f"  {round_result['period']}: trained {round_result['n_train']:>5}, "
            f"evaluated {round_result['n_eval']:>5}, MAE {overall_text}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filing-forecast",
        description="Forecast quarter-over-quarter growth of financial statement line items",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("download", help="Download an SEC financial statement data set")
    p.add_argument("year", type=int)
    p.add_argument("quarter", type=int, choices=[1, 2, 3, 4])
    p.add_argument("--dest", default="data", help="Parent directory for extracted files")
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.set_defaults(func=cmd_download)

    for name, func, help_text in (
        ("train", cmd_train, "Train a forecast for one industry"),
        ("validate", cmd_validate, "Walk-forward validation for one industry"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--data", required=True, help="Extracted data set directory")
        p.add_argument("--sic", type=int, required=True, help="Standard industrial classification")
        p.add_argument("--outputs", nargs="+", required=True, help="Tags to predict")
        p.add_argument("--inputs", nargs="*", help="Input tags (default: most common in industry)")
        p.add_argument("--input-count", type=int, help="Number of input tags to select")
        p.add_argument("--config", help="YAML config file")
        p.add_argument("--confidence", type=float)
        p.set_defaults(func=func)
        if name == "train":
            p.add_argument("--start", type=_date, help="First filing date (YYYY-MM-DD)")
            p.add_argument("--end", type=_date, help="Last filing date (YYYY-MM-DD)")
            p.add_argument("--learning-rate", type=float)
            p.add_argument("--model", required=True, help="Output path prefix")

    p = sub.add_parser("predict", help="Predict growth for one filing")
    p.add_argument("--data", required=True, help="Extracted data set directory")
    p.add_argument("--model", required=True, help="Saved model path prefix")
    p.add_argument("--accession", required=True, help="Accession number (adsh)")
    p.set_defaults(func=cmd_predict)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (ForecastError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
