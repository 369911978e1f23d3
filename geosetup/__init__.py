"""Geometric and thermal model setup for geodynamic simulations."""

from .errors import ConfigurationError, GeosetupError, NumericDegeneracyError
from .geometry import add_box, add_cylinder, add_ellipsoid, add_layer, add_sphere
from .grid import CartesianGrid
from .lithosphere import LithosphericTemp
from .materials import MaterialParams, MaterialTable, default_crust_mantle_table
from .phase import ConstantPhase, LithosphericPhases, compute_phase, compute_phase_on_grid
from .thermal import (
    ConstantTemp,
    HalfspaceCoolingTemp,
    LinearTemp,
    SpreadingRateTemp,
    compute_thermal_structure,
)
from .topography import make_volcano_topography

__all__ = [
    "GeosetupError",
    "ConfigurationError",
    "NumericDegeneracyError",
    "CartesianGrid",
    "add_box",
    "add_layer",
    "add_sphere",
    "add_ellipsoid",
    "add_cylinder",
    "ConstantPhase",
    "LithosphericPhases",
    "compute_phase",
    "compute_phase_on_grid",
    "ConstantTemp",
    "LinearTemp",
    "HalfspaceCoolingTemp",
    "SpreadingRateTemp",
    "LithosphericTemp",
    "compute_thermal_structure",
    "MaterialParams",
    "MaterialTable",
    "default_crust_mantle_table",
    "make_volcano_topography",
]
