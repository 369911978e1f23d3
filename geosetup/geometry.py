"""Rasterize primitive solids onto phase and temperature fields.

Each ``*_indices`` function returns a ``Selection``: the index set of grid
nodes inside the solid together with the coordinates the phase and thermal
policies are evaluated on (rotated local coordinates for boxes and
ellipsoids, world coordinates otherwise). The ``add_*`` functions paint a
selection onto caller-owned arrays. All of the work happens on gathered
copies, so a failing policy leaves the caller's fields untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

import numpy as np

from geosetup.errors import ConfigurationError, NumericDegeneracyError
from geosetup.grid import CartesianGrid
from geosetup.lithosphere import LithosphericTemp
from geosetup.phase import ConstantPhase, PhasePolicy, compute_phase
from geosetup.thermal import ThermalPolicy, compute_thermal_structure
from geosetup.transform import rotate_3d

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """Grid nodes inside a solid and their evaluation coordinates."""

    index: tuple[np.ndarray, ...]
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray

    @property
    def count(self) -> int:
        return int(self.x.size)


def _pair(values: Sequence[float], name: str) -> tuple[float, float]:
    if len(values) != 2:
        raise ConfigurationError(f"{name} must hold two values, got {values!r}")
    return float(values[0]), float(values[1])


def _triple(values: Sequence[float], name: str) -> np.ndarray:
    if len(values) != 3:
        raise ConfigurationError(f"{name} must hold three values, got {values!r}")
    return np.asarray(values, dtype=np.float64)


def _select(mask: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> Selection:
    index = np.nonzero(mask)
    return Selection(index=index, x=x[index], y=y[index], z=z[index])


def _rotated_coordinates(
    grid: CartesianGrid,
    origin: np.ndarray,
    strike_angle: float,
    dip_angle: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    x_rot = grid.x - origin[0]
    y_rot = grid.y - origin[1]
    z_rot = grid.z - origin[2]
    rotate_3d(x_rot, y_rot, z_rot, strike_angle, dip_angle)
    return x_rot, y_rot, z_rot


def box_indices(
    grid: CartesianGrid,
    *,
    xlim: Sequence[float],
    ylim: Sequence[float] | None = None,
    zlim: Sequence[float],
    origin: Sequence[float] | None = None,
    strike_angle: float = 0.0,
    dip_angle: float = 0.0,
) -> Selection:
    """Nodes inside a box, optionally rotated about ``origin``.

    ``ylim`` defaults to the full Y extent and ``origin`` to the
    (xlim[0], ylim[0], zlim[1]) corner.
    """

    x0, x1 = _pair(xlim, "xlim")
    y0, y1 = _pair(ylim, "ylim") if ylim is not None else grid.extent("y")
    z0, z1 = _pair(zlim, "zlim")
    o = _triple(origin, "origin") if origin is not None else np.array([x0, y0, z1])

    x_rot, y_rot, z_rot = _rotated_coordinates(grid, o, strike_angle, dip_angle)
    mask = (
        (x_rot >= x0 - o[0])
        & (x_rot <= x1 - o[0])
        & (y_rot >= y0 - o[1])
        & (y_rot <= y1 - o[1])
        & (z_rot >= z0 - o[2])
        & (z_rot <= z1 - o[2])
    )
    return _select(mask, x_rot, y_rot, z_rot)


def layer_indices(
    grid: CartesianGrid,
    *,
    xlim: Sequence[float] | None = None,
    ylim: Sequence[float] | None = None,
    zlim: Sequence[float] | None = None,
) -> Selection:
    """Nodes inside an axis-aligned layer; omitted limits span the whole grid."""

    if xlim is None and ylim is None and zlim is None:
        raise ConfigurationError("A layer needs at least one of xlim, ylim, zlim")

    x0, x1 = _pair(xlim, "xlim") if xlim is not None else grid.extent("x")
    y0, y1 = _pair(ylim, "ylim") if ylim is not None else grid.extent("y")
    z0, z1 = _pair(zlim, "zlim") if zlim is not None else grid.extent("z")

    x, y, z = grid.coordinates()
    mask = (x >= x0) & (x <= x1) & (y >= y0) & (y <= y1) & (z >= z0) & (z <= z1)
    return _select(mask, x, y, z)


def sphere_indices(grid: CartesianGrid, *, center: Sequence[float], radius: float) -> Selection:
    """Nodes strictly closer to ``center`` than ``radius``."""

    c = _triple(center, "center")
    if radius <= 0.0:
        raise NumericDegeneracyError(f"Sphere radius must be positive, got {radius}")

    x, y, z = grid.coordinates()
    distance = np.sqrt((x - c[0]) ** 2 + (y - c[1]) ** 2 + (z - c[2]) ** 2)
    return _select(distance < radius, x, y, z)


def ellipsoid_indices(
    grid: CartesianGrid,
    *,
    center: Sequence[float],
    axes: Sequence[float],
    origin: Sequence[float] | None = None,
    strike_angle: float = 0.0,
    dip_angle: float = 0.0,
) -> Selection:
    """Nodes inside an ellipsoid with semi-axes ``axes``, rotated about ``origin`` (default: center)."""

    c = _triple(center, "center")
    semi = _triple(axes, "axes")
    if np.any(semi <= 0.0):
        raise NumericDegeneracyError(f"Ellipsoid semi-axes must be positive, got {tuple(semi)}")
    o = _triple(origin, "origin") if origin is not None else c

    x_rot, y_rot, z_rot = _rotated_coordinates(grid, o, strike_angle, dip_angle)
    c_rot = c - o
    form = (
        (x_rot - c_rot[0]) ** 2 / semi[0] ** 2
        + (y_rot - c_rot[1]) ** 2 / semi[1] ** 2
        + (z_rot - c_rot[2]) ** 2 / semi[2] ** 2
    )
    return _select(form <= 1.0, x_rot, y_rot, z_rot)


def cylinder_indices(
    grid: CartesianGrid,
    *,
    base: Sequence[float],
    cap: Sequence[float],
    radius: float,
) -> Selection:
    """Nodes inside a flat-ended cylinder running from ``base`` to ``cap``."""

    b = _triple(base, "base")
    axis = _triple(cap, "cap") - b
    axis_len2 = float(np.dot(axis, axis))
    if axis_len2 == 0.0:
        raise NumericDegeneracyError("Cylinder base and cap must differ")
    if radius <= 0.0:
        raise NumericDegeneracyError(f"Cylinder radius must be positive, got {radius}")

    x, y, z = grid.coordinates()
    dx_b = x - b[0]
    dy_b = y - b[1]
    dz_b = z - b[2]
    t = (axis[0] * dx_b + axis[1] * dy_b + axis[2] * dz_b) / axis_len2
    dx = dx_b - t * axis[0]
    dy = dy_b - t * axis[1]
    dz = dz_b - t * axis[2]
    perpendicular = np.sqrt(dx**2 + dy**2 + dz**2)
    mask = (t >= 0.0) & (t <= 1.0) & (perpendicular <= radius)
    return _select(mask, x, y, z)


def apply_selection(
    phase: np.ndarray,
    temp: np.ndarray,
    selection: Selection,
    *,
    phase_policy: PhasePolicy,
    thermal: ThermalPolicy | None = None,
) -> int:
    """Evaluate policies on a selection and write the results into the fields."""

    if phase.shape != temp.shape:
        raise ConfigurationError(f"Phase {phase.shape} and temperature {temp.shape} shapes differ")
    if selection.count == 0:
        return 0

    index = selection.index
    x, y, z = selection.x, selection.y, selection.z
    phase_sel = phase[index].copy()
    temp_sel = temp[index].astype(np.float64)

    if thermal is not None:
        if isinstance(thermal, LithosphericTemp):
            compute_phase(phase_sel, temp_sel, x, y, z, phase_policy)
        compute_thermal_structure(temp_sel, x, y, z, phase_sel, thermal)
    compute_phase(phase_sel, temp_sel, x, y, z, phase_policy)

    phase[index] = phase_sel
    temp[index] = temp_sel
    return selection.count


def _check_fields(phase: np.ndarray, temp: np.ndarray, grid: CartesianGrid) -> None:
    if phase.shape != grid.shape or temp.shape != grid.shape:
        raise ConfigurationError(
            f"Phase {phase.shape} and temperature {temp.shape} must match the grid shape {grid.shape}"
        )


def add_box(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    *,
    xlim: Sequence[float],
    ylim: Sequence[float] | None = None,
    zlim: Sequence[float],
    origin: Sequence[float] | None = None,
    strike_angle: float = 0.0,
    dip_angle: float = 0.0,
    phase_policy: PhasePolicy = ConstantPhase(1),
    thermal: ThermalPolicy | None = None,
) -> int:
    """Add a (possibly rotated) box; returns the number of nodes painted."""

    _check_fields(phase, temp, grid)
    selection = box_indices(
        grid,
        xlim=xlim,
        ylim=ylim,
        zlim=zlim,
        origin=origin,
        strike_angle=strike_angle,
        dip_angle=dip_angle,
    )
    count = apply_selection(phase, temp, selection, phase_policy=phase_policy, thermal=thermal)
    logger.debug("add_box: %d nodes (strike=%.1f, dip=%.1f)", count, strike_angle, dip_angle)
    return count


def add_layer(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    *,
    xlim: Sequence[float] | None = None,
    ylim: Sequence[float] | None = None,
    zlim: Sequence[float] | None = None,
    phase_policy: PhasePolicy = ConstantPhase(1),
    thermal: ThermalPolicy | None = None,
) -> int:
    """Add an axis-aligned layer, e.g. a lithosphere slab spanning the model."""

    _check_fields(phase, temp, grid)
    selection = layer_indices(grid, xlim=xlim, ylim=ylim, zlim=zlim)
    count = apply_selection(phase, temp, selection, phase_policy=phase_policy, thermal=thermal)
    logger.debug("add_layer: %d nodes", count)
    return count


def add_sphere(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    *,
    center: Sequence[float],
    radius: float,
    phase_policy: PhasePolicy = ConstantPhase(1),
    thermal: ThermalPolicy | None = None,
) -> int:
    _check_fields(phase, temp, grid)
    selection = sphere_indices(grid, center=center, radius=radius)
    count = apply_selection(phase, temp, selection, phase_policy=phase_policy, thermal=thermal)
    logger.debug("add_sphere: %d nodes (radius=%.3f)", count, radius)
    return count


def add_ellipsoid(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    *,
    center: Sequence[float],
    axes: Sequence[float],
    origin: Sequence[float] | None = None,
    strike_angle: float = 0.0,
    dip_angle: float = 0.0,
    phase_policy: PhasePolicy = ConstantPhase(1),
    thermal: ThermalPolicy | None = None,
) -> int:
    _check_fields(phase, temp, grid)
    selection = ellipsoid_indices(
        grid,
        center=center,
        axes=axes,
        origin=origin,
        strike_angle=strike_angle,
        dip_angle=dip_angle,
    )
    count = apply_selection(phase, temp, selection, phase_policy=phase_policy, thermal=thermal)
    logger.debug("add_ellipsoid: %d nodes", count)
    return count


def add_cylinder(
    phase: np.ndarray,
    temp: np.ndarray,
    grid: CartesianGrid,
    *,
    base: Sequence[float],
    cap: Sequence[float],
    radius: float,
    phase_policy: PhasePolicy = ConstantPhase(1),
    thermal: ThermalPolicy | None = None,
) -> int:
    _check_fields(phase, temp, grid)
    selection = cylinder_indices(grid, base=base, cap=cap, radius=radius)
    count = apply_selection(phase, temp, selection, phase_policy=phase_policy, thermal=thermal)
    logger.debug("add_cylinder: %d nodes", count)
    return count
