"""Reading scenarios and writing painted model fields."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from geosetup.config import ScenarioConfig
from geosetup.errors import ConfigurationError
from geosetup.grid import CartesianGrid


def resolve_output_dir(out_root: str | Path, name: str, *, overwrite: bool) -> Path:
    """Create and return the output directory for one model setup."""

    target = Path(out_root) / name
    if target.exists() and any(target.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists and is not empty: {target}. Use --overwrite to replace files."
        )
    target.mkdir(parents=True, exist_ok=True)
    return target


def load_scenario(path: str | Path) -> ScenarioConfig:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Scenario file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Scenario file {path} must hold a JSON object")
    return ScenarioConfig.from_dict(payload)


def write_fields_npz(
    path: str | Path,
    grid: CartesianGrid,
    phase: np.ndarray,
    temp: np.ndarray,
    *,
    topography: np.ndarray | None = None,
) -> None:
    arrays = {
        "x": grid.x.astype(np.float32),
        "y": grid.y.astype(np.float32),
        "z": grid.z.astype(np.float32),
        "phase": phase.astype(np.int32),
        "temperature": temp.astype(np.float32),
    }
    if topography is not None:
        arrays["topography"] = topography.astype(np.float32)
    np.savez_compressed(Path(path), **arrays)


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    Path(path).write_text(text + "\n", encoding="utf-8")
