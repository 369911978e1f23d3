"""Physical constants and scenario configuration for model setups."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from geosetup.errors import ConfigurationError


KAPPA = 1.0e-6
SECONDS_PER_YEAR = 3600.0 * 24.0 * 365.0
SECONDS_PER_JULIAN_YEAR = 3600.0 * 24.0 * 365.25
KELVIN_OFFSET = 273.15

DEFAULT_SHAPE = (33, 33, 33)
DEFAULT_XLIM = (-3.0, 3.0)
DEFAULT_YLIM = (-2.0, 2.0)
DEFAULT_ZLIM = (-2.0, 0.0)


@dataclass(frozen=True)
class GridConfig:
    """Regular grid extent in kilometres and node counts per axis."""

    xlim: tuple[float, float] = DEFAULT_XLIM
    ylim: tuple[float, float] = DEFAULT_YLIM
    zlim: tuple[float, float] = DEFAULT_ZLIM
    shape: tuple[int, int, int] = DEFAULT_SHAPE

    def __post_init__(self) -> None:
        for name in ("xlim", "ylim", "zlim"):
            lo, hi = getattr(self, name)
            if not lo <= hi:
                raise ConfigurationError(f"{name} must be ordered (min, max), got ({lo}, {hi})")
        if len(self.shape) != 3 or any(int(n) < 1 for n in self.shape):
            raise ConfigurationError(f"shape must hold three positive node counts, got {self.shape}")


@dataclass(frozen=True)
class ScenarioConfig:
    """A full model setup: grid, background fields, primitives and volcano cones, applied in order."""

    grid: GridConfig = field(default_factory=GridConfig)
    background_phase: int = 0
    background_temperature: float = 0.0
    primitives: tuple[dict[str, Any], ...] = ()
    volcanoes: tuple[dict[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ScenarioConfig":
        unknown = set(payload) - {"grid", "background_phase", "background_temperature", "primitives", "volcanoes"}
        if unknown:
            raise ConfigurationError(f"Unknown scenario keys: {sorted(unknown)}")
        grid_payload = dict(payload.get("grid", {}))
        unknown_grid = set(grid_payload) - {"xlim", "ylim", "zlim", "shape"}
        if unknown_grid:
            raise ConfigurationError(f"Unknown grid keys: {sorted(unknown_grid)}")
        grid = GridConfig(**{key: tuple(value) for key, value in grid_payload.items()})
        return cls(
            grid=grid,
            background_phase=int(payload.get("background_phase", 0)),
            background_temperature=float(payload.get("background_temperature", 0.0)),
            primitives=tuple(dict(item) for item in payload.get("primitives", ())),
            volcanoes=tuple(dict(item) for item in payload.get("volcanoes", ())),
        )
