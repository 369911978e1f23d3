"""Closed-form thermal structures and the evaluator dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

import numpy as np
from scipy.special import erfc

from geosetup.config import KAPPA, SECONDS_PER_YEAR
from geosetup.errors import ConfigurationError
from geosetup.lithosphere import LithosphericTemp, lithospheric_temperature

RIDGE_SIDES = ("left", "right", "front", "back")


@dataclass(frozen=True)
class ConstantTemp:
    """Constant temperature [C]."""

    t: float = 1000.0


@dataclass(frozen=True)
class LinearTemp:
    """Linear temperature from ``t_top`` to ``t_bot`` [C].

    The gradient follows |z| as a fraction of the vertical extent, so the field
    is symmetric about z = 0 and meant for solids lying below z = 0.
    """

    t_top: float = 0.0
    t_bot: float = 1350.0


@dataclass(frozen=True)
class HalfspaceCoolingTemp:
    """Half-space cooling profile of a plate with uniform thermal age.

    t_surface, t_mantle: [C]; age: [Myr]; adiabat: mantle adiabat [K/km].
    """

    t_surface: float = 0.0
    t_mantle: float = 1350.0
    age: float = 60.0
    adiabat: float = 0.0

    def __post_init__(self) -> None:
        if self.age < 0.0:
            raise ConfigurationError(f"age must be non-negative, got {self.age}")


@dataclass(frozen=True)
class SpreadingRateTemp:
    """Half-space cooling with plate age growing away from a spreading ridge.

    mor_side: side of the solid holding the ridge, one of left/right/front/back.
    spreading_vel: [cm/yr]; age_ridge and max_age: [Myr].
    """

    t_surface: float = 0.0
    t_mantle: float = 1350.0
    adiabat: float = 0.0
    mor_side: str = "left"
    spreading_vel: float = 3.0
    age_ridge: float = 0.0
    max_age: float = 60.0

    def __post_init__(self) -> None:
        if self.mor_side not in RIDGE_SIDES:
            raise ConfigurationError(f"mor_side must be one of {RIDGE_SIDES}, got '{self.mor_side}'")
        if self.spreading_vel <= 0.0:
            raise ConfigurationError(f"spreading_vel must be positive, got {self.spreading_vel}")


ThermalPolicy = Union[ConstantTemp, LinearTemp, HalfspaceCoolingTemp, SpreadingRateTemp, LithosphericTemp]
ThermalEvaluator = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray, object], np.ndarray]


def halfspace_temperature(
    z: np.ndarray,
    age_seconds: np.ndarray | float,
    *,
    t_surface: float,
    t_mantle: float,
    adiabat: float,
) -> np.ndarray:
    """Half-space cooling solution plus a mantle adiabat; z in km."""

    depth_km = np.abs(z)
    denom = np.broadcast_to(2.0 * np.sqrt(KAPPA * np.asarray(age_seconds, dtype=np.float64)), depth_km.shape)
    # Zero age: infinite argument, erfc -> 0.
    arg = np.divide(depth_km * 1.0e3, denom, out=np.full(depth_km.shape, np.inf), where=denom > 0.0)
    return (t_surface - t_mantle) * erfc(arg) + t_mantle + adiabat * depth_km


def ridge_distance(x: np.ndarray, y: np.ndarray, side: str) -> np.ndarray:
    """Horizontal distance (km) of each point from the given side of the point set."""

    if side == "left":
        return x - np.min(x)
    if side == "right":
        return np.max(x) - x
    if side == "front":
        return y - np.min(y)
    if side == "back":
        return np.max(y) - y
    raise ConfigurationError(f"Unknown ridge side '{side}', expected one of {RIDGE_SIDES}")


def _constant_temp(temp, x, y, z, phase, policy: ConstantTemp) -> np.ndarray:
    temp[...] = policy.t
    return temp


def _linear_temp(temp, x, y, z, phase, policy: LinearTemp) -> np.ndarray:
    if z.size == 0:
        return temp
    dz = float(np.max(z) - np.min(z))
    if dz == 0.0:
        temp[...] = policy.t_top
        return temp
    temp[...] = np.abs(z / dz) * (policy.t_bot - policy.t_top) + policy.t_top
    return temp


def _halfspace_cooling_temp(temp, x, y, z, phase, policy: HalfspaceCoolingTemp) -> np.ndarray:
    age_seconds = policy.age * 1.0e6 * SECONDS_PER_YEAR
    temp[...] = halfspace_temperature(
        z,
        age_seconds,
        t_surface=policy.t_surface,
        t_mantle=policy.t_mantle,
        adiabat=policy.adiabat,
    )
    return temp


def _spreading_rate_temp(temp, x, y, z, phase, policy: SpreadingRateTemp) -> np.ndarray:
    if z.size == 0:
        return temp
    distance = ridge_distance(x, y, policy.mor_side)
    age_years = np.abs(distance * 1.0e3 * 1.0e2) / policy.spreading_vel + policy.age_ridge * 1.0e6
    age_years = np.minimum(age_years, policy.max_age * 1.0e6)
    temp[...] = halfspace_temperature(
        z,
        age_years * SECONDS_PER_YEAR,
        t_surface=policy.t_surface,
        t_mantle=policy.t_mantle,
        adiabat=policy.adiabat,
    )
    return temp


def _lithospheric_temp(temp, x, y, z, phase, policy: LithosphericTemp) -> np.ndarray:
    return lithospheric_temperature(temp, z, phase, policy)


_EVALUATORS: dict[type, ThermalEvaluator] = {
    ConstantTemp: _constant_temp,
    LinearTemp: _linear_temp,
    HalfspaceCoolingTemp: _halfspace_cooling_temp,
    SpreadingRateTemp: _spreading_rate_temp,
    LithosphericTemp: _lithospheric_temp,
}


def register_thermal_structure(policy_type: type, evaluator: ThermalEvaluator) -> None:
    """Register an evaluator ``(temp, x, y, z, phase, policy) -> temp`` for a custom policy."""

    if policy_type in (ConstantTemp, LinearTemp, HalfspaceCoolingTemp, SpreadingRateTemp, LithosphericTemp):
        raise ConfigurationError(f"Built-in thermal policy {policy_type.__name__} cannot be replaced")
    _EVALUATORS[policy_type] = evaluator


def compute_thermal_structure(
    temp: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    phase: np.ndarray,
    policy: ThermalPolicy,
) -> np.ndarray:
    """Evaluate ``policy`` at the given points, writing into ``temp``."""

    evaluator = _EVALUATORS.get(type(policy))
    if evaluator is None:
        raise ConfigurationError(f"Unsupported thermal policy: {type(policy).__name__}")
    return evaluator(temp, x, y, z, phase, policy)
