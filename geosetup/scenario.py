"""Build a painted model from a declarative scenario description."""

from __future__ import annotations

from dataclasses import dataclass
import inspect
import logging
from typing import Any, Callable

import numpy as np

from geosetup.config import ScenarioConfig
from geosetup.errors import ConfigurationError
from geosetup.geometry import add_box, add_cylinder, add_ellipsoid, add_layer, add_sphere
from geosetup.grid import CartesianGrid
from geosetup.lithosphere import LithosphericTemp
from geosetup.materials import MaterialParams, MaterialTable
from geosetup.phase import ConstantPhase, LithosphericPhases, PhasePolicy
from geosetup.thermal import ConstantTemp, HalfspaceCoolingTemp, LinearTemp, SpreadingRateTemp, ThermalPolicy
from geosetup.topography import volcano_on_grid

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, Callable[..., int]] = {
    "box": add_box,
    "layer": add_layer,
    "sphere": add_sphere,
    "ellipsoid": add_ellipsoid,
    "cylinder": add_cylinder,
}


@dataclass(frozen=True)
class ModelSetup:
    grid: CartesianGrid
    phase: np.ndarray
    temperature: np.ndarray
    topography: np.ndarray | None
    placed_counts: tuple[int, ...]


def _build(kind: str, factory: Callable[..., Any], params: dict[str, Any]) -> Any:
    try:
        return factory(**params)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid parameters for {kind}: {exc}") from exc


def _material_table(payload: dict[str, Any]) -> MaterialTable:
    return MaterialTable(
        {int(pid): _build(f"material {pid}", MaterialParams, dict(params)) for pid, params in payload.items()}
    )


def parse_phase_policy(payload: dict[str, Any]) -> PhasePolicy:
    params = dict(payload)
    kind = params.pop("type", "constant")
    if kind == "constant":
        return _build("constant phase", ConstantPhase, params)
    if kind == "lithospheric":
        for key in ("layers", "phases"):
            if key in params:
                params[key] = tuple(params[key])
        return _build("lithospheric phases", LithosphericPhases, params)
    raise ConfigurationError(f"Unknown phase policy type '{kind}'")


def parse_thermal_policy(payload: dict[str, Any]) -> ThermalPolicy:
    params = dict(payload)
    kind = params.pop("type", None)
    if kind == "constant":
        return _build("constant temperature", ConstantTemp, params)
    if kind == "linear":
        return _build("linear temperature", LinearTemp, params)
    if kind == "halfspace":
        return _build("half-space cooling", HalfspaceCoolingTemp, params)
    if kind == "spreading_rate":
        return _build("spreading rate", SpreadingRateTemp, params)
    if kind == "lithospheric":
        if "materials" in params:
            params["materials"] = _material_table(params["materials"])
        return _build("lithospheric temperature", LithosphericTemp, params)
    raise ConfigurationError(f"Unknown thermal policy type '{kind}'")


def apply_primitive(phase: np.ndarray, temp: np.ndarray, grid: CartesianGrid, primitive: dict[str, Any]) -> int:
    params = dict(primitive)
    kind = params.pop("type", None)
    add = _PRIMITIVES.get(kind)
    if add is None:
        raise ConfigurationError(f"Unknown primitive type '{kind}', expected one of {sorted(_PRIMITIVES)}")

    params["phase_policy"] = parse_phase_policy(params.pop("phase", {}))
    thermal = params.pop("thermal", None)
    params["thermal"] = parse_thermal_policy(thermal) if thermal is not None else None

    try:
        inspect.signature(add).bind(phase, temp, grid, **params)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid parameters for {kind}: {exc}") from exc
    return add(phase, temp, grid, **params)


def build_model(config: ScenarioConfig) -> ModelSetup:
    """Create the grid and fields, then paint every primitive in order."""

    grid = CartesianGrid.from_config(config.grid)
    phase = grid.empty_phase(config.background_phase)
    temp = grid.empty_temperature(config.background_temperature)

    counts = []
    for number, primitive in enumerate(config.primitives):
        count = apply_primitive(phase, temp, grid, primitive)
        logger.info("Primitive %d (%s): %d nodes", number, primitive.get("type"), count)
        counts.append(count)

    topography = None
    for volcano in config.volcanoes:
        params = dict(volcano)
        if topography is not None:
            params["background"] = topography
        try:
            topography = volcano_on_grid(grid, **params)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid parameters for volcano: {exc}") from exc

    return ModelSetup(grid=grid, phase=phase, temperature=temp, topography=topography, placed_counts=tuple(counts))
