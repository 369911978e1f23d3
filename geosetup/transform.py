"""Rigid rotations used to orient boxes and ellipsoids."""

from __future__ import annotations

import numpy as np


def rotation_matrix(strike_angle: float, dip_angle: float) -> np.ndarray:
    """Return R_y(-dip) @ R_z(strike) for angles given in degrees."""

    strike = np.deg2rad(float(strike_angle))
    dip = np.deg2rad(-float(dip_angle))

    rot_z = np.array(
        [
            [np.cos(strike), -np.sin(strike), 0.0],
            [np.sin(strike), np.cos(strike), 0.0],
            [0.0, 0.0, 1.0],
        ]
    )
    rot_y = np.array(
        [
            [np.cos(dip), 0.0, np.sin(dip)],
            [0.0, 1.0, 0.0],
            [-np.sin(dip), 0.0, np.cos(dip)],
        ]
    )
    return rot_y @ rot_z


def rotate_3d(x: np.ndarray, y: np.ndarray, z: np.ndarray, strike_angle: float, dip_angle: float) -> None:
    """Rotate points about the origin by strike, then by negated dip, in place."""

    matrix = rotation_matrix(strike_angle, dip_angle)
    coords = np.stack((x.ravel(), y.ravel(), z.ravel()))
    rotated = matrix @ coords

    x[...] = rotated[0].reshape(x.shape)
    y[...] = rotated[1].reshape(y.shape)
    z[...] = rotated[2].reshape(z.shape)
