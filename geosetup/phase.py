"""Phase (rock type) assignment policies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

import numpy as np

from geosetup.errors import ConfigurationError
from geosetup.grid import CartesianGrid


@dataclass(frozen=True)
class ConstantPhase:
    """Sets one phase label everywhere inside the solid."""

    phase: int = 1


@dataclass(frozen=True)
class LithosphericPhases:
    """Layered lithosphere, defined top-down from a reference elevation.

    ``layers`` holds layer thicknesses (km) and ``phases`` the matching labels;
    ``phases`` may carry one more entry than ``layers``, the unmatched last
    label being the mantle/background phase. When ``t_lab`` is set, every point
    hotter than it is reassigned to the last label.
    """

    layers: tuple[float, ...] = (10.0, 20.0, 15.0)
    phases: tuple[int, ...] = (1, 2, 3, 4)
    t_lab: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", tuple(float(v) for v in self.layers))
        object.__setattr__(self, "phases", tuple(int(v) for v in self.phases))
        if not self.phases:
            raise ConfigurationError("LithosphericPhases requires at least one phase label")
        if len(self.layers) > len(self.phases):
            raise ConfigurationError(
                f"Got {len(self.layers)} layer thicknesses but only {len(self.phases)} phase labels"
            )
        if any(thickness < 0.0 for thickness in self.layers):
            raise ConfigurationError(f"Layer thicknesses must be non-negative, got {self.layers}")


PhasePolicy = Union[ConstantPhase, LithosphericPhases]
PhaseRule = Callable[..., np.ndarray]


def _constant_phase(
    phase: np.ndarray,
    temp: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    policy: ConstantPhase,
    *,
    z_top: float = 0.0,
) -> np.ndarray:
    phase[...] = policy.phase
    return phase


def _lithospheric_phases(
    phase: np.ndarray,
    temp: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    policy: LithosphericPhases,
    *,
    z_top: float = 0.0,
) -> np.ndarray:
    mantle = policy.phases[-1]
    phase[...] = mantle

    top = float(z_top)
    for thickness, label in zip(policy.layers, policy.phases):
        bottom = top - thickness
        phase[(z >= bottom) & (z <= top)] = label
        top = bottom

    if policy.t_lab is not None:
        phase[temp > policy.t_lab] = mantle
    return phase


_PHASE_RULES: dict[type, PhaseRule] = {
    ConstantPhase: _constant_phase,
    LithosphericPhases: _lithospheric_phases,
}


def register_phase_rule(policy_type: type, rule: PhaseRule) -> None:
    """Register a phase rule for a custom policy type.

    ``rule(phase, temp, x, y, z, policy, *, z_top)`` must write into ``phase``
    and return it.
    """

    if policy_type in (ConstantPhase, LithosphericPhases):
        raise ConfigurationError(f"Built-in phase policy {policy_type.__name__} cannot be replaced")
    _PHASE_RULES[policy_type] = rule


def compute_phase(
    phase: np.ndarray,
    temp: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    z: np.ndarray,
    policy: PhasePolicy,
    *,
    z_top: float = 0.0,
) -> np.ndarray:
    """Assign phase labels in place according to ``policy``."""

    rule = _PHASE_RULES.get(type(policy))
    if rule is None:
        raise ConfigurationError(f"Unsupported phase policy: {type(policy).__name__}")
    return rule(phase, temp, x, y, z, policy, z_top=z_top)


def compute_phase_on_grid(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    policy: PhasePolicy,
) -> np.ndarray:
    """Apply ``policy`` to a whole grid, layering down from the grid's top."""

    _, z_max = grid.extent("z")
    return compute_phase(phase, temp, grid.x, grid.y, grid.z, policy, z_top=z_max)
