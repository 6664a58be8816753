"""
persistence.py

Save and load trained engines.

An engine is written as two files next to each other:
    {path}_model.pkl      networks and the current ModelVersion
    {path}_metadata.json  human-readable summary and config
"""

import json
import logging
import pickle
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

from ..config import ForecastConfig
from .engine import ForecastEngine

logger = logging.getLogger(__name__)


def _paths(path: Union[str, Path]):
    path = str(path)
    return Path(f"{path}_model.pkl"), Path(f"{path}_metadata.json")


def save_engine(engine: ForecastEngine, path: Union[str, Path]) -> Dict[str, Any]:
    """
    Save a trained engine.

    Args:
        engine: Trained ForecastEngine
        path: Path prefix for the model and metadata files

    Returns:
        The metadata written alongside the model
    """
    version = engine.current_version
    if version is None:
        raise ValueError("No trained engine to save")

    model_path, metadata_path = _paths(path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    with open(model_path, "wb") as f:
        pickle.dump({"networks": engine.networks, "version": version}, f)

    metadata = {
        "engine_id": version.engine_id,
        "version": version.number,
        "input_quantities": list(engine.input_quantities),
        "output_quantities": list(engine.output_quantities),
        "trained_on": sorted(version.trained_on),
        "saved_at": datetime.now().isoformat(timespec="seconds"),
        "config": engine.config.to_dict(),
    }
    with open(metadata_path, "w") as f:
        json.dump(metadata, f, indent=2)

    logger.info("Saved engine version %d to %s", version.number, model_path)
    return metadata


def load_engine(path: Union[str, Path]) -> ForecastEngine:
    """Load an engine saved with `save_engine`; its current version is the saved one."""
    model_path, metadata_path = _paths(path)

    with open(metadata_path, "r") as f:
        metadata = json.load(f)

    with open(model_path, "rb") as f:
        state = pickle.load(f)

    engine = ForecastEngine(
        metadata["input_quantities"],
        metadata["output_quantities"],
        ForecastConfig.from_dict(metadata["config"]),
    )
    engine._restore(state["networks"], state["version"])

    logger.info("Loaded engine version %d from %s", engine.current_version.number, model_path)
    return engine
