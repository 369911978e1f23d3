"""1D explicit finite-difference geotherm for a layered lithosphere.

The solver builds a depth column spanning the vertical extent of the points it
is given, ties each depth sample to the phase layering already painted on
those points, diffuses an adiabatic start profile for the lithosphere's age
with radiogenic heating, and interpolates the result back by depth alone.
Depths are in metres and temperatures in Kelvin internally; the public entry
point ``lithospheric_temperature`` works in km and degrees Celsius.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

import numpy as np

from geosetup.config import KELVIN_OFFSET, SECONDS_PER_JULIAN_YEAR
from geosetup.errors import ConfigurationError, NumericDegeneracyError
from geosetup.materials import MaterialTable, default_crust_mantle_table

logger = logging.getLogger(__name__)

BOUNDARY_KINDS = ("const", "flux")
INTERFACE_MEANS = ("harmonic", "arithmetic")


@dataclass(frozen=True)
class LithosphericTemp:
    """Diffused 1D lithospheric geotherm with variable thermal parameters.

    t_surface, t_pot: surface and potential mantle temperature [C].
    dt_adi: adiabatic gradient [K/km].
    ubound, lbound: "const" (fixed temperature) or "flux" (fixed heat flux).
    utbf, ltbf: upper/lower heat flux [W/m^2], used with "flux" boundaries.
    age: lithosphere age [Myr].
    dtfac: fraction of the explicit stability limit used as time step.
    nz: number of samples in the 1D column.
    """

    t_surface: float = 0.0
    t_pot: float = 1350.0
    dt_adi: float = 0.5
    ubound: str = "const"
    lbound: str = "const"
    utbf: float = 50.0e-3
    ltbf: float = 10.0e-3
    age: float = 120.0
    dtfac: float = 0.9
    nz: int = 201
    materials: MaterialTable = field(default_factory=default_crust_mantle_table)
    interface_mean: str = "harmonic"

    def __post_init__(self) -> None:
        for name in ("ubound", "lbound"):
            kind = getattr(self, name)
            if kind not in BOUNDARY_KINDS:
                raise ConfigurationError(f"{name} must be one of {BOUNDARY_KINDS}, got '{kind}'")
        if self.interface_mean not in INTERFACE_MEANS:
            raise ConfigurationError(
                f"interface_mean must be one of {INTERFACE_MEANS}, got '{self.interface_mean}'"
            )
        if int(self.nz) < 3:
            raise ConfigurationError(f"nz must be at least 3, got {self.nz}")
        if self.dtfac <= 0.0:
            raise ConfigurationError(f"dtfac must be positive, got {self.dtfac}")
        if self.age < 0.0:
            raise ConfigurationError(f"age must be non-negative, got {self.age}")


@dataclass(frozen=True)
class ThermalParameters:
    """Per-sample material properties of the 1D column."""

    rho: np.ndarray
    cp: np.ndarray
    k: np.ndarray
    rho_cp: np.ndarray
    h: np.ndarray


@dataclass(frozen=True)
class LithosphericProfile:
    """Result of one 1D solve: depths [m], temperatures [K], phase per sample."""

    depth_m: np.ndarray
    temperature_k: np.ndarray
    phase: np.ndarray
    n_iter: int
    dt: float


def profile_phases(depth_m: np.ndarray, z: np.ndarray, phase: np.ndarray) -> np.ndarray:
    """Label each depth sample from the vertical extent of every phase present.

    Phases are stacked in order of their lowest point; nodes of a phase lying
    above that point do not move it up the column.
    """

    bottoms = []
    for label in np.unique(phase):
        bottoms.append((int(label), float(np.min(z[phase == label])) * 1.0e3))
    bottoms.sort(key=lambda item: item[1], reverse=True)

    out = np.full(depth_m.shape, bottoms[-1][0], dtype=np.int64)

    top = float(np.max(z)) * 1.0e3
    for label, bottom in bottoms:
        out[(depth_m >= bottom) & (depth_m <= top)] = label
        top = bottom
    return out


def initial_profile(depth_m: np.ndarray, t_surface: float, t_pot: float, dt_adi: float) -> np.ndarray:
    """Adiabatic start profile in Kelvin with the surface sample pinned."""

    temperature = (t_pot + KELVIN_OFFSET) + np.abs(depth_m / 1.0e3) * dt_adi
    temperature[0] = t_surface + KELVIN_OFFSET
    return temperature


def thermal_parameters(phases: np.ndarray, materials: MaterialTable) -> ThermalParameters:
    args: dict = {}
    rho = materials.compute_density(phases, args)
    cp = materials.compute_heat_capacity(phases, args)
    k = materials.compute_conductivity(phases, args)
    h = materials.compute_radioactive_heat(phases, args)
    return ThermalParameters(rho=rho, cp=cp, k=k, rho_cp=rho * cp, h=h)


def diffusivity(params: ThermalParameters) -> float:
    """Upper bound of the column's thermal diffusivity, max(k)/min(rho)/min(cp)."""

    rho_min = float(np.min(params.rho))
    cp_min = float(np.min(params.cp))
    if rho_min <= 0.0 or cp_min <= 0.0:
        raise NumericDegeneracyError(
            f"Density and heat capacity must be positive, got min rho={rho_min}, min cp={cp_min}"
        )
    kappa = float(np.max(params.k)) / rho_min / cp_min
    if kappa <= 0.0:
        raise NumericDegeneracyError(f"Thermal diffusivity must be positive, got {kappa}")
    return kappa


def interface_conductivity(k_a: np.ndarray, k_b: np.ndarray, mean: str = "harmonic") -> np.ndarray:
    """Conductivity on the interface between two neighbouring samples."""

    k_a = np.asarray(k_a, dtype=np.float64)
    k_b = np.asarray(k_b, dtype=np.float64)
    if mean == "arithmetic":
        return (k_a + k_b) / 2.0
    if mean == "harmonic":
        total = k_a + k_b
        return np.divide(2.0 * k_a * k_b, total, out=np.zeros(np.broadcast(k_a, k_b).shape), where=total > 0.0)
    raise ConfigurationError(f"interface mean must be one of {INTERFACE_MEANS}, got '{mean}'")


@dataclass(frozen=True)
class StepCoefficients:
    """Constant weights of one explicit step for a fixed column, dz and dt."""

    lower_weight: np.ndarray
    upper_weight: np.ndarray
    heat: np.ndarray
    ubound: str
    lbound: str
    top_weight: float = 0.0
    top_source: float = 0.0
    bottom_weight: float = 0.0
    bottom_source: float = 0.0


def step_coefficients(
    params: ThermalParameters,
    dz: float,
    dt: float,
    *,
    ubound: str = "const",
    lbound: str = "const",
    utbf: float = 0.0,
    ltbf: float = 0.0,
    interface_mean: str = "harmonic",
) -> StepCoefficients:
    """Precompute the stencil weights; ``dz`` is signed (negative top to bottom)."""

    for name, kind in (("ubound", ubound), ("lbound", lbound)):
        if kind not in BOUNDARY_KINDS:
            raise ConfigurationError(f"{name} must be one of {BOUNDARY_KINDS}, got '{kind}'")

    k = params.k
    rho_cp = params.rho_cp
    h = params.h
    dz2 = dz * dz

    k_a = interface_conductivity(k[:-2], k[1:-1], interface_mean)
    k_b = interface_conductivity(k[1:-1], k[2:], interface_mean)
    scale = dt / (dz2 * rho_cp[1:-1])

    boundary = {}
    if ubound == "flux":
        k_top = interface_conductivity(k[0], k[0], interface_mean)
        k_top = k_top + interface_conductivity(k[1], k[0], interface_mean)
        boundary["top_weight"] = float(dt * k_top / (dz2 * rho_cp[0]))
        boundary["top_source"] = float(dt * 2.0 * utbf / (dz * rho_cp[0]) + h[0] * dt / rho_cp[0])
    if lbound == "flux":
        k_bot = interface_conductivity(k[-1], k[-2], interface_mean)
        k_bot = k_bot + interface_conductivity(k[-1], k[-1], interface_mean)
        boundary["bottom_weight"] = float(dt * k_bot / (dz2 * rho_cp[-1]))
        boundary["bottom_source"] = float(-dt * 2.0 * ltbf / (dz * rho_cp[-1]))

    return StepCoefficients(
        lower_weight=k_a * scale,
        upper_weight=k_b * scale,
        heat=h[1:-1] * dt / rho_cp[1:-1],
        ubound=ubound,
        lbound=lbound,
        **boundary,
    )


def diffuse_step(
    temperature: np.ndarray,
    params: ThermalParameters,
    dz: float,
    dt: float,
    *,
    ubound: str = "const",
    lbound: str = "const",
    utbf: float = 0.0,
    ltbf: float = 0.0,
    interface_mean: str = "harmonic",
    coefficients: StepCoefficients | None = None,
) -> np.ndarray:
    """Advance the column by one explicit step; returns a new array.

    ``dz`` is signed (negative for a column ordered top to bottom), which fixes
    the direction of the flux boundary terms. Pass ``coefficients`` from
    ``step_coefficients`` to reuse the weights across steps; the remaining
    keyword arguments are then ignored.
    """

    if coefficients is None:
        coefficients = step_coefficients(
            params,
            dz,
            dt,
            ubound=ubound,
            lbound=lbound,
            utbf=utbf,
            ltbf=ltbf,
            interface_mean=interface_mean,
        )
    c = coefficients

    old = temperature
    new = old.copy()
    if c.ubound == "flux":
        new[0] = c.top_weight * old[1] + (1.0 - c.top_weight) * old[0] + c.top_source
    if c.lbound == "flux":
        new[-1] = c.bottom_weight * old[-2] + (1.0 - c.bottom_weight) * old[-1] + c.bottom_source

    new[1:-1] = (
        c.upper_weight * old[2:]
        + (1.0 - c.lower_weight - c.upper_weight) * old[1:-1]
        + c.lower_weight * old[:-2]
        + c.heat
    )
    return new


def solve_lithospheric_profile(z: np.ndarray, phase: np.ndarray, policy: LithosphericTemp) -> LithosphericProfile:
    """Diffuse a 1D column spanning ``z`` (km) for ``policy.age``."""

    z_top = float(np.max(z))
    z_bottom = float(np.min(z))
    if z_top == z_bottom:
        raise NumericDegeneracyError("Lithospheric profile needs a nonzero vertical extent")

    depth_m = np.linspace(z_top, z_bottom, int(policy.nz)) * 1.0e3
    dz = float(depth_m[1] - depth_m[0])

    phases_1d = profile_phases(depth_m, z, phase)
    temperature = initial_profile(depth_m, policy.t_surface, policy.t_pot, policy.dt_adi)
    params = thermal_parameters(phases_1d, policy.materials)
    kappa = diffusivity(params)

    age_seconds = policy.age * 1.0e6 * SECONDS_PER_JULIAN_YEAR
    dt = policy.dtfac * dz**2 / 2.0 / kappa
    n_iter = int(np.ceil(age_seconds / dt))
    logger.info(
        "Lithospheric profile: nz=%d, dz=%.1f m, kappa=%.3e m^2/s, dt=%.3e s, iterations=%d",
        policy.nz,
        abs(dz),
        kappa,
        dt,
        n_iter,
    )

    coefficients = step_coefficients(
        params,
        dz,
        dt,
        ubound=policy.ubound,
        lbound=policy.lbound,
        utbf=policy.utbf,
        ltbf=policy.ltbf,
        interface_mean=policy.interface_mean,
    )
    for _ in range(n_iter):
        temperature = diffuse_step(temperature, params, dz, dt, coefficients=coefficients)

    return LithosphericProfile(depth_m=depth_m, temperature_k=temperature, phase=phases_1d, n_iter=n_iter, dt=dt)


def lithospheric_temperature(
    temp: np.ndarray,
    z: np.ndarray,
    phase: np.ndarray,
    policy: LithosphericTemp,
) -> np.ndarray:
    """Fill ``temp`` (C) from a diffused profile, interpolated by depth."""

    if z.size == 0:
        return temp
    profile = solve_lithospheric_profile(z, phase, policy)
    temp[...] = np.interp(-z, -profile.depth_m / 1.0e3, profile.temperature_k - KELVIN_OFFSET)
    return temp
