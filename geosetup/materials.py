"""Per-phase thermal material properties used by the lithosphere solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

from geosetup.errors import ConfigurationError


@dataclass(frozen=True)
class MaterialParams:
    """Thermal parameters of one phase.

    Radiogenic heat is volumetric (W/m^3); use ``from_specific_heat`` when a
    value per unit mass (W/kg) is at hand.
    """

    density: float
    heat_capacity: float
    conductivity: float
    radioactive_heat: float = 0.0

    @classmethod
    def from_specific_heat(
        cls,
        *,
        density: float,
        heat_capacity: float,
        conductivity: float,
        heat_per_mass: float,
    ) -> "MaterialParams":
        return cls(density, heat_capacity, conductivity, heat_per_mass * density)


@dataclass(frozen=True)
class MaterialTable:
    """Lookup of material parameters keyed by integer phase id."""

    phases: Mapping[int, MaterialParams] = field(default_factory=dict)

    def _lookup(self, phases: np.ndarray, attribute: str) -> np.ndarray:
        ids = np.asarray(phases, dtype=np.int64)
        unique_ids = np.unique(ids)
        missing = [int(pid) for pid in unique_ids if int(pid) not in self.phases]
        if missing:
            raise ConfigurationError(
                f"No material parameters for phase(s) {missing}; known phases: {sorted(self.phases)}"
            )

        out = np.zeros(ids.shape, dtype=np.float64)
        for pid in unique_ids:
            out[ids == pid] = getattr(self.phases[int(pid)], attribute)
        return out

    def compute_density(self, phases: np.ndarray, args: Mapping[str, Any] | None = None) -> np.ndarray:
        return self._lookup(phases, "density")

    def compute_heat_capacity(self, phases: np.ndarray, args: Mapping[str, Any] | None = None) -> np.ndarray:
        return self._lookup(phases, "heat_capacity")

    def compute_conductivity(self, phases: np.ndarray, args: Mapping[str, Any] | None = None) -> np.ndarray:
        return self._lookup(phases, "conductivity")

    def compute_radioactive_heat(self, phases: np.ndarray, args: Mapping[str, Any] | None = None) -> np.ndarray:
        return self._lookup(phases, "radioactive_heat")


def default_crust_mantle_table(
    *,
    rho_mantle: float = 3.0e3,
    cp_mantle: float = 1.0e3,
    k_mantle: float = 2.3,
    h_mantle: float = 0.0,
    rho_upper_crust: float = 2.7e3,
    cp_upper_crust: float = 1.0e3,
    k_upper_crust: float = 3.0,
    h_upper_crust: float = 617.0e-12,
    rho_lower_crust: float = 2.9e3,
    cp_lower_crust: float = 1.0e3,
    k_lower_crust: float = 2.0,
    h_lower_crust: float = 43.0e-12,
) -> MaterialTable:
    """Three-phase table: 1 upper crust, 2 lower crust, 3 lithospheric mantle.

    Radiogenic heat arguments are per unit mass (W/kg).
    """

    return MaterialTable(
        {
            1: MaterialParams.from_specific_heat(
                density=rho_upper_crust,
                heat_capacity=cp_upper_crust,
                conductivity=k_upper_crust,
                heat_per_mass=h_upper_crust,
            ),
            2: MaterialParams.from_specific_heat(
                density=rho_lower_crust,
                heat_capacity=cp_lower_crust,
                conductivity=k_lower_crust,
                heat_per_mass=h_lower_crust,
            ),
            3: MaterialParams.from_specific_heat(
                density=rho_mantle,
                heat_capacity=cp_mantle,
                conductivity=k_mantle,
                heat_per_mass=h_mantle,
            ),
        }
    )
