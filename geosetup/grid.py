"""Structured 3D grids of node coordinates."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from geosetup.config import GridConfig
from geosetup.errors import ConfigurationError

_AXES = {"x": 0, "y": 1, "z": 2}


@dataclass(frozen=True)
class CartesianGrid:
    """Three same-shaped coordinate arrays, one value per grid node (km)."""

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray

    def __post_init__(self) -> None:
        if not (self.x.shape == self.y.shape == self.z.shape):
            raise ConfigurationError(
                f"Coordinate arrays must share a shape, got {self.x.shape}, {self.y.shape}, {self.z.shape}"
            )
        if self.x.ndim != 3:
            raise ConfigurationError(f"Grid coordinates must be 3D arrays, got ndim={self.x.ndim}")

    @classmethod
    def from_axes(cls, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> "CartesianGrid":
        """Build a grid from three 1D node coordinate vectors."""

        xx, yy, zz = np.meshgrid(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
            indexing="ij",
        )
        return cls(xx, yy, zz)

    @classmethod
    def regular(
        cls,
        xlim: tuple[float, float],
        ylim: tuple[float, float],
        zlim: tuple[float, float],
        shape: tuple[int, int, int],
    ) -> "CartesianGrid":
        nx, ny, nz = (int(n) for n in shape)
        return cls.from_axes(
            np.linspace(xlim[0], xlim[1], nx),
            np.linspace(ylim[0], ylim[1], ny),
            np.linspace(zlim[0], zlim[1], nz),
        )

    @classmethod
    def from_config(cls, config: GridConfig) -> "CartesianGrid":
        return cls.regular(config.xlim, config.ylim, config.zlim, config.shape)

    @property
    def shape(self) -> tuple[int, ...]:
        return self.x.shape

    def coordinates(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.x, self.y, self.z

    def extent(self, axis: str) -> tuple[float, float]:
        """Return (min, max) of one coordinate axis."""

        if axis not in _AXES:
            raise ConfigurationError(f"Unknown axis '{axis}', expected one of {sorted(_AXES)}")
        values = self.coordinates()[_AXES[axis]]
        return float(np.min(values)), float(np.max(values))

    def surface(self) -> tuple[np.ndarray, np.ndarray]:
        """Return 2D (x, y) node arrays of the top Z-layer."""

        return self.x[:, :, -1], self.y[:, :, -1]

    def empty_phase(self, fill: int = 0) -> np.ndarray:
        return np.full(self.shape, int(fill), dtype=np.int64)

    def empty_temperature(self, fill: float = 0.0) -> np.ndarray:
        return np.full(self.shape, float(fill), dtype=np.float64)
