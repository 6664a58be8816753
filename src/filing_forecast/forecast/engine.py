"""
engine.py

Growth forecasting engine.

Training consumes a batch of filings from one industry, pairs each filing with
the same entity's next filing, and teaches one small network per output
quantity to map the current filing's input growth onto the next filing's
output growth. Inference replays the same pipeline with the statistics of the
latest training call.

Forecasts should be trained chronologically: each training call replaces the
column statistics wholesale, while the network weights keep learning. The
ModelVersion returned by `train` carries those statistics and must be passed
back to `predict`, so a prediction can never mix statistics and weights from
different training calls.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..config import ForecastConfig
from ..data.data_structures import FilingSnapshot
from ..exceptions import ModelNotTrainedError, StaleModelError
from ..neural.network import NeuralNetwork
from .growth import GrowthVector, GrowthVectorBuilder, missing_fraction
from .interpolation import Interpolator
from .statistic import RobustStatistic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelVersion:
    """Statistics produced by one training call of one engine."""
    engine_id: str
    number: int
    input_quantities: Tuple[str, ...]
    output_quantities: Tuple[str, ...]
    input_statistics: Tuple[RobustStatistic, ...] = field(compare=False, repr=False)
    output_statistics: Tuple[RobustStatistic, ...] = field(compare=False, repr=False)
    deviation_ceiling: float = field(compare=False, default=2.2)
    trained_on: FrozenSet[str] = field(compare=False, repr=False, default=frozenset())


@dataclass(frozen=True)
class TrainingPair:
    """Input growth of filing t and output growth of the entity's filing t+1."""
    current: FilingSnapshot
    following: FilingSnapshot
    inputs: GrowthVector
    outputs: GrowthVector


@dataclass(frozen=True)
class TrainingResult:
    """Outcome of one training call."""
    version: ModelVersion
    used: FrozenSet[FilingSnapshot]
    n_pairs: int = 0
    n_sparse: int = 0
    n_outliers: int = 0

    def __len__(self) -> int:
        return len(self.used)

    def __iter__(self):
        return iter(self.used)

    def __contains__(self, filing) -> bool:
        return filing in self.used


def to_unit_interval(norm: float, ceiling: float) -> float:
    """Network target for a normalized value; the mean maps to 0.5."""
    return norm / ceiling + 0.5


def from_unit_interval(value: float, ceiling: float) -> float:
    """Inverse of `to_unit_interval`."""
    return (value - 0.5) * ceiling


def pair_consecutive(filings: Iterable[FilingSnapshot]) -> List[Tuple[FilingSnapshot, FilingSnapshot]]:
    """
    Consecutive (t, t+1) filings of the same entity.

    Filings are ordered by entity, then filing date. Neighbours belonging to
    different entities are never paired.
    """
    ordered = sorted(filings, key=lambda f: (f.cik, f.filing_date, f.accession))
    return [
        (current, following)
        for current, following in zip(ordered, ordered[1:])
        if current.cik == following.cik
    ]


class ForecastEngine:
    """
    Predicts next-period growth of output quantities from input quantities.

    Args:
        input_quantities: Tag names used as network inputs, in order
        output_quantities: Tag names to predict; one network each
        config: Engine hyperparameters
    """

    def __init__(
        self,
        input_quantities: Sequence[str],
        output_quantities: Sequence[str],
        config: Optional[ForecastConfig] = None
    ):
        if not input_quantities:
            raise ValueError("At least one input quantity is required")
        if not output_quantities:
            raise ValueError("At least one output quantity is required")
        if len(set(output_quantities)) != len(output_quantities):
            raise ValueError(f"Duplicate output quantities: {list(output_quantities)}")

        self.config = config or ForecastConfig()
        self.input_quantities = tuple(input_quantities)
        self.output_quantities = tuple(output_quantities)

        self.input_builder = GrowthVectorBuilder(self.input_quantities, self.config.days_per_year)
        self.output_builder = GrowthVectorBuilder(self.output_quantities, self.config.days_per_year)

        self.engine_id = uuid.uuid4().hex
        self._version: Optional[ModelVersion] = None

        # Leading average-deviation feature + inputs + trailing filer status.
        topology = (len(self.input_quantities) + 2, *self.config.hidden_layers, 1)
        self.networks: Dict[str, NeuralNetwork] = {
            name: NeuralNetwork(topology, random_state=self.config.random_state + i)
            for i, name in enumerate(self.output_quantities)
        }

    @classmethod
    def for_industry(
        cls,
        repository,
        sic: int,
        output_quantities: Sequence[str],
        config: Optional[ForecastConfig] = None
    ) -> "ForecastEngine":
        """
        Engine whose inputs are the industry's most commonly reported tags.

        Args:
            repository: FilingRepository to query
            sic: Standard industrial classification code
            output_quantities: Tag names to predict
            config: Engine hyperparameters; `input_count` tags are selected
        """
        config = config or ForecastConfig()
        inputs = repository.most_common_quantities(sic, config.input_count, forms=config.forms)
        logger.info("Selected %d input quantities for SIC %s", len(inputs), sic)
        return cls(inputs, output_quantities, config)

    @property
    def current_version(self) -> Optional[ModelVersion]:
        return self._version

    @property
    def is_trained(self) -> bool:
        return self._version is not None

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def build_training_pairs(self, filings: Iterable[FilingSnapshot]) -> List[TrainingPair]:
        """Raw growth-vector pairs for every consecutive same-entity filing pair."""
        return [
            TrainingPair(
                current=current,
                following=following,
                inputs=self.input_builder.build(current),
                outputs=self.output_builder.build(following),
            )
            for current, following in pair_consecutive(filings)
        ]

    def train(
        self,
        filings: Iterable[FilingSnapshot],
        confidence: Optional[float] = None,
        learning_rate: Optional[float] = None
    ) -> TrainingResult:
        """
        Train every output network on one batch of filings.

        Args:
            filings: Filings of one industry covering the training period
            confidence: Minimum fraction of reported (non-missing) input
                growth values for a pair to be used
            learning_rate: Backpropagation step size

        Returns:
            TrainingResult with the new ModelVersion and the filings used

        Raises:
            InsufficientSampleError: a column has fewer than two usable values
        """
        confidence = self.config.confidence if confidence is None else confidence
        rate = self.config.learning_rate if learning_rate is None else learning_rate
        ceiling = self.config.deviation_ceiling

        pairs = self.build_training_pairs(filings)
        dense_pairs = [p for p in pairs if missing_fraction(p.inputs) <= 1.0 - confidence]
        n_sparse = len(pairs) - len(dense_pairs)

        input_stats = self._column_statistics([p.inputs for p in dense_pairs], self.input_quantities)
        output_stats = self._column_statistics([p.outputs for p in dense_pairs], self.output_quantities)
        input_interpolator = Interpolator(input_stats)
        output_interpolator = Interpolator(output_stats)

        used = set()
        n_outliers = 0
        for pair in dense_pairs:
            nin = input_interpolator.interpolate(pair.inputs)
            nout = output_interpolator.interpolate(pair.outputs)

            if self._exceeds_ceiling(nin, input_stats) or self._exceeds_ceiling(nout, output_stats):
                n_outliers += 1
                logger.debug("Skipping %s: growth beyond %.1f deviations", pair.current.accession, ceiling)
                continue

            nin.append(pair.current.filer_status_feature)
            for j, name in enumerate(self.output_quantities):
                target = to_unit_interval(output_stats[j].normalize(nout[j + 1]), ceiling)
                self.networks[name].backpropagate(nin, [target], rate)

            used.add(pair.current)

        number = self._version.number + 1 if self._version else 1
        self._version = ModelVersion(
            engine_id=self.engine_id,
            number=number,
            input_quantities=self.input_quantities,
            output_quantities=self.output_quantities,
            input_statistics=tuple(input_stats),
            output_statistics=tuple(output_stats),
            deviation_ceiling=ceiling,
            trained_on=frozenset(f.accession for f in used),
        )

        logger.info(
            "Trained version %d on %d of %d pairs (%d sparse, %d outliers)",
            number, len(used), len(pairs), n_sparse, n_outliers
        )

        return TrainingResult(
            version=self._version,
            used=frozenset(used),
            n_pairs=len(pairs),
            n_sparse=n_sparse,
            n_outliers=n_outliers,
        )

    def _column_statistics(
        self,
        vectors: Sequence[GrowthVector],
        names: Sequence[str]
    ) -> List[RobustStatistic]:
        statistics = []
        for j, name in enumerate(names):
            sample = [v[j] for v in vectors if v[j] is not None]
            statistics.append(RobustStatistic(sample, self.config.trim_factor, name=name))
        return statistics

    def _exceeds_ceiling(self, dense: Sequence[float], stats: Sequence[RobustStatistic]) -> bool:
        ceiling = self.config.deviation_ceiling
        return any(abs(stat.normalize(value)) > ceiling for value, stat in zip(dense[1:], stats))

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def predict(self, filing: FilingSnapshot, version: ModelVersion) -> List[float]:
        """
        Predict next-period growth of each output quantity.

        Args:
            filing: Filing whose facts describe the current period
            version: ModelVersion returned by the latest `train` call

        Returns:
            Per-quarter growth factors, ordered as `output_quantities`

        Raises:
            ModelNotTrainedError: the engine has never been trained
            StaleModelError: `version` is not this engine's current version
        """
        self._check_version(version)

        raw = self.input_builder.build(filing)
        nin = Interpolator(version.input_statistics).interpolate(raw)
        nin.append(filing.filer_status_feature)

        predictions = []
        for name, stat in zip(self.output_quantities, version.output_statistics):
            out = self.networks[name].execute(nin)[0]
            predictions.append(stat.denormalize(from_unit_interval(out, version.deviation_ceiling)))
        return predictions

    def predict_by_quantity(self, filing: FilingSnapshot, version: ModelVersion) -> Dict[str, float]:
        return dict(zip(self.output_quantities, self.predict(filing, version)))

    def _check_version(self, version: ModelVersion):
        if self._version is None:
            raise ModelNotTrainedError("Engine has not been trained. Call train() first.")
        if version != self._version:
            raise StaleModelError(
                f"Model version {version.engine_id[:8]}#{version.number} does not match "
                f"current version {self._version.engine_id[:8]}#{self._version.number}"
            )

    def _restore(self, networks: Dict[str, NeuralNetwork], version: ModelVersion):
        """Reinstate trained state, used when loading a saved engine."""
        missing = set(self.output_quantities) - set(networks)
        if missing:
            raise ValueError(f"Saved engine has no network for {sorted(missing)}")
        self.engine_id = version.engine_id
        self.networks = {name: networks[name] for name in self.output_quantities}
        self._version = version

    def __repr__(self) -> str:
        number = self._version.number if self._version else None
        return (
            f"ForecastEngine(inputs={len(self.input_quantities)}, "
            f"outputs={list(self.output_quantities)}, version={number})"
        )
