"""
config.py

Configuration for the growth forecasting engine.

Defaults mirror the values the engine was tuned with: one hidden layer of 10
nodes, learning rate 1.2 and 70% confidence (at most 30% of input growth
values may be interpolated for a filing to be trained on).
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml


DEFAULT_FORMS = ("10-K", "10-K/A", "10-Q", "10-Q/A")


@dataclass
class ForecastConfig:
    """Hyperparameters for the growth forecasting engine."""

    # Network
    hidden_layers: Tuple[int, ...] = (10,)
    learning_rate: float = 1.2
    random_state: int = 42

    # Data preparation
    confidence: float = 0.7
    deviation_ceiling: float = 2.2
    trim_factor: float = 1.8
    days_per_year: float = 365.569

    # Input selection
    input_count: int = 15
    forms: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_FORMS)

    def __post_init__(self):
        self.hidden_layers = tuple(int(n) for n in self.hidden_layers)
        self.forms = tuple(self.forms)

        if any(n < 1 for n in self.hidden_layers):
            raise ValueError(f"Hidden layer sizes must be positive, got {self.hidden_layers}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be between 0 and 1, got {self.confidence}")
        if self.deviation_ceiling <= 0:
            raise ValueError(f"Deviation ceiling must be positive, got {self.deviation_ceiling}")
        if self.learning_rate <= 0:
            raise ValueError(f"Learning rate must be positive, got {self.learning_rate}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain-JSON representation (tuples become lists)."""
        data = asdict(self)
        data["hidden_layers"] = list(self.hidden_layers)
        data["forms"] = list(self.forms)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ForecastConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown forecast config keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path],
        section: str = "forecast"
    ) -> "ForecastConfig":
        """
        Load a config from a YAML file.

        Args:
            path: YAML file path
            section: Top-level key holding the forecast settings. If the key
                is absent the whole document is used.

        Returns:
            ForecastConfig with file values overriding the defaults
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if section and section in data:
            data = data[section] or {}

        return cls.from_dict(data)
