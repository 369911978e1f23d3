"""Synthetic volcano topography (cones and truncated cones)."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from geosetup.errors import ConfigurationError, NumericDegeneracyError
from geosetup.grid import CartesianGrid


def make_volcano_topography(
    x: np.ndarray,
    y: np.ndarray,
    *,
    center: Sequence[float],
    height: float,
    radius: float,
    crater: float = 0.0,
    base: float = 0.0,
    background: np.ndarray | None = None,
) -> np.ndarray:
    """Return a 2D surface holding a cone of ``radius`` rising from ``base`` to ``height``.

    A positive ``crater`` flattens the top out to that radius. With
    ``background`` the cone is drawn over that surface instead of the flat
    ``base`` plain, so cones can be stacked to build volcanoes with several
    slopes.
    """

    if x.ndim != 2 or x.shape != y.shape:
        raise ConfigurationError(f"x and y must be matching 2D node arrays, got {x.shape} and {y.shape}")
    if radius <= crater:
        raise NumericDegeneracyError(f"Volcano radius ({radius}) must exceed the crater radius ({crater})")

    if background is None:
        topo = np.full(x.shape, float(base), dtype=np.float64)
    else:
        bg = np.asarray(background, dtype=np.float64)
        if bg.shape == x.shape + (1,):
            bg = bg[:, :, 0]
        if bg.shape != x.shape:
            raise ConfigurationError(f"Background must have shape {x.shape}, got {bg.shape}")
        topo = bg.copy()

    rim_distance = np.hypot(x - center[0], y - center[1]) - crater
    pos = 1.0 - rim_distance / (radius - crater)

    slope = (pos >= 0.0) & (pos < 1.0)
    topo[slope] = pos[slope] * (height - base) + base
    topo[pos >= 1.0] = height
    return topo


def volcano_on_grid(grid: CartesianGrid, **kwargs: Any) -> np.ndarray:
    """Volcano topography on the top node layer of ``grid``."""

    x, y = grid.surface()
    return make_volcano_topography(x, y, **kwargs)
