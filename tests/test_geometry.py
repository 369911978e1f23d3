from __future__ import annotations

import numpy as np
import pytest

from geosetup.errors import ConfigurationError, NumericDegeneracyError
from geosetup.geometry import (
    Selection,
    add_box,
    add_cylinder,
    add_ellipsoid,
    add_layer,
    add_sphere,
    box_indices,
    cylinder_indices,
    ellipsoid_indices,
    layer_indices,
    sphere_indices,
)
from geosetup.grid import CartesianGrid
from geosetup.lithosphere import LithosphericTemp
from geosetup.phase import ConstantPhase
from geosetup.thermal import ConstantTemp, LinearTemp


def _grid() -> CartesianGrid:
    # Node spacing of 0.5 km on every axis.
    return CartesianGrid.regular((-3.0, 3.0), (-2.0, 2.0), (-2.0, 0.0), (13, 9, 5))


def _mask(grid: CartesianGrid, selection: Selection) -> np.ndarray:
    mask = np.zeros(grid.shape, dtype=bool)
    mask[selection.index] = True
    return mask


def _node(grid: CartesianGrid, x: float, y: float, z: float) -> tuple[int, int, int]:
    hits = np.argwhere(np.isclose(grid.x, x) & np.isclose(grid.y, y) & np.isclose(grid.z, z))
    assert len(hits) == 1
    return tuple(int(v) for v in hits[0])


def test_box_without_rotation_matches_axis_aligned_bounds_for_any_origin() -> None:
    grid = _grid()
    xlim, ylim, zlim = (-1.0, 1.5), (-0.75, 1.0), (-1.5, -0.5)
    expected = (
        (grid.x >= xlim[0]) & (grid.x <= xlim[1])
        & (grid.y >= ylim[0]) & (grid.y <= ylim[1])
        & (grid.z >= zlim[0]) & (grid.z <= zlim[1])
    )

    for origin in (None, (0.0, 0.0, 0.0), (1.0, 1.0, -1.0), (-2.5, 0.5, -2.0)):
        selection = box_indices(grid, xlim=xlim, ylim=ylim, zlim=zlim, origin=origin)
        assert np.array_equal(_mask(grid, selection), expected)


def test_box_ylim_defaults_to_full_extent_and_coordinates_are_local() -> None:
    grid = _grid()
    selection = box_indices(grid, xlim=(0.0, 1.0), zlim=(-1.0, 0.0))

    assert selection.count == 3 * 9 * 3
    # Default origin is the (xmin, ymin, ztop) corner of the box.
    assert float(np.min(selection.x)) == 0.0
    assert float(np.min(selection.y)) == 0.0
    assert float(np.max(selection.z)) == 0.0


def test_dipping_box_is_tilted() -> None:
    grid = _grid()
    flat = _mask(grid, box_indices(grid, xlim=(0.0, 2.0), zlim=(-1.0, 0.0)))
    steep = _mask(grid, box_indices(grid, xlim=(0.0, 2.0), zlim=(-1.0, 0.0), dip_angle=90.0))

    assert flat[_node(grid, 1.0, 0.0, -0.5)]
    assert not steep[_node(grid, 1.0, 0.0, -0.5)]
    assert steep[_node(grid, -0.5, 0.0, -1.5)]
    assert not flat[_node(grid, -0.5, 0.0, -1.5)]


def test_layer_with_full_extent_selects_every_node_once() -> None:
    grid = _grid()
    selection = layer_indices(grid, xlim=grid.extent("x"), ylim=grid.extent("y"), zlim=grid.extent("z"))

    assert selection.count == grid.x.size
    flat = np.ravel_multi_index(selection.index, grid.shape)
    assert np.unique(flat).size == grid.x.size


def test_layer_defaults_missing_limits_and_requires_one() -> None:
    grid = _grid()
    selection = layer_indices(grid, zlim=(-1.0, 0.0))

    assert selection.count == 13 * 9 * 3
    assert np.array_equal(selection.z, grid.z[selection.index])

    with pytest.raises(ConfigurationError):
        layer_indices(grid)


def test_sphere_membership_is_monotonic_in_radius() -> None:
    grid = _grid()
    small = _mask(grid, sphere_indices(grid, center=(0.2, -0.1, -1.0), radius=0.8))
    large = _mask(grid, sphere_indices(grid, center=(0.2, -0.1, -1.0), radius=1.7))

    assert small.sum() > 0
    assert np.all(large[small])
    assert large.sum() > small.sum()


def test_sphere_excludes_nodes_exactly_on_the_surface() -> None:
    grid = _grid()
    mask = _mask(grid, sphere_indices(grid, center=(0.0, 0.0, -1.0), radius=1.0))

    assert mask[_node(grid, 0.5, 0.0, -1.0)]
    assert not mask[_node(grid, 1.0, 0.0, -1.0)]


def test_ellipsoid_boundary_is_inclusive() -> None:
    grid = _grid()
    mask = _mask(grid, ellipsoid_indices(grid, center=(0.0, 0.0, -1.0), axes=(1.0, 0.5, 0.5)))

    assert mask[_node(grid, 1.0, 0.0, -1.0)]
    assert mask[_node(grid, 0.0, 0.5, -1.0)]
    assert not mask[_node(grid, 0.5, 0.5, -1.0)]


def test_ellipsoid_strike_swaps_horizontal_axes() -> None:
    grid = _grid()
    plain = _mask(grid, ellipsoid_indices(grid, center=(0.0, 0.0, -1.0), axes=(1.5, 0.5, 0.5)))
    turned = _mask(
        grid,
        ellipsoid_indices(grid, center=(0.0, 0.0, -1.0), axes=(1.5, 0.5, 0.5), strike_angle=90.0),
    )

    assert plain[_node(grid, 1.0, 0.0, -1.0)]
    assert not plain[_node(grid, 0.0, 1.0, -1.0)]
    assert turned[_node(grid, 0.0, 1.0, -1.0)]
    assert not turned[_node(grid, 1.0, 0.0, -1.0)]


def test_cylinder_end_caps_are_flat_and_inclusive() -> None:
    grid = CartesianGrid.from_axes(
        np.array([0.0]),
        np.array([0.0]),
        np.array([-1.01, -1.0, -0.5, 0.0, 0.01]),
    )
    mask = _mask(grid, cylinder_indices(grid, base=(0.0, 0.0, -1.0), cap=(0.0, 0.0, 0.0), radius=0.3))

    assert mask[0, 0].tolist() == [False, True, True, True, False]


def test_cylinder_radius_is_inclusive() -> None:
    grid = _grid()
    mask = _mask(grid, cylinder_indices(grid, base=(0.0, 0.0, -2.0), cap=(0.0, 0.0, 0.0), radius=1.0))

    assert mask[_node(grid, 1.0, 0.0, -1.0)]
    assert mask[_node(grid, 0.0, -1.0, -2.0)]
    assert not mask[_node(grid, 1.0, 0.5, -1.0)]


def test_degenerate_solids_are_rejected() -> None:
    grid = _grid()
    with pytest.raises(NumericDegeneracyError):
        cylinder_indices(grid, base=(0.0, 0.0, -1.0), cap=(0.0, 0.0, -1.0), radius=1.0)
    with pytest.raises(NumericDegeneracyError):
        cylinder_indices(grid, base=(0.0, 0.0, -1.0), cap=(0.0, 0.0, 0.0), radius=0.0)
    with pytest.raises(NumericDegeneracyError):
        sphere_indices(grid, center=(0.0, 0.0, -1.0), radius=-1.0)
    with pytest.raises(NumericDegeneracyError):
        ellipsoid_indices(grid, center=(0.0, 0.0, -1.0), axes=(1.0, 0.0, 1.0))
    with pytest.raises(ConfigurationError):
        box_indices(grid, xlim=(0.0,), zlim=(-1.0, 0.0))


def test_add_box_paints_phase_and_temperature() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(20.0)

    count = add_box(
        phase,
        temp,
        grid,
        xlim=(-1.0, 1.0),
        zlim=(-1.0, 0.0),
        phase_policy=ConstantPhase(4),
        thermal=ConstantTemp(900.0),
    )

    inside = phase == 4
    assert count == int(inside.sum()) == 5 * 9 * 3
    assert np.all(temp[inside] == 900.0)
    assert np.all(temp[~inside] == 20.0)
    assert np.all(phase[~inside] == 0)


def test_constant_phase_is_idempotent() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(0.0)

    add_sphere(phase, temp, grid, center=(0.0, 0.0, -1.0), radius=1.2, phase_policy=ConstantPhase(2))
    once = phase.copy()
    add_sphere(phase, temp, grid, center=(0.0, 0.0, -1.0), radius=1.2, phase_policy=ConstantPhase(2))

    assert np.array_equal(phase, once)


def test_later_placements_override_earlier_ones() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(0.0)

    add_layer(phase, temp, grid, zlim=(-2.0, 0.0), phase_policy=ConstantPhase(1), thermal=LinearTemp(0.0, 1000.0))
    add_cylinder(
        phase,
        temp,
        grid,
        base=(0.0, 0.0, -2.0),
        cap=(0.0, 0.0, 0.0),
        radius=0.5,
        phase_policy=ConstantPhase(5),
        thermal=ConstantTemp(1200.0),
    )

    assert phase[_node(grid, 0.0, 0.0, -1.0)] == 5
    assert temp[_node(grid, 0.0, 0.0, -1.0)] == 1200.0
    assert phase[_node(grid, 2.0, 0.0, -1.0)] == 1
    assert temp[_node(grid, 2.0, 0.0, -1.0)] == pytest.approx(500.0)


def test_ellipsoid_placement_uses_rotated_coordinates() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(0.0)

    add_ellipsoid(
        phase,
        temp,
        grid,
        center=(0.0, 0.0, -1.0),
        axes=(1.0, 1.0, 1.0),
        phase_policy=ConstantPhase(3),
        thermal=LinearTemp(0.0, 100.0),
    )

    # Local z runs from -1 to 1 about the center, so the extent is 2 km.
    assert temp[_node(grid, 0.0, 0.0, -1.0)] == pytest.approx(0.0)
    assert temp[_node(grid, 0.0, 0.0, 0.0)] == pytest.approx(50.0)
    assert temp[_node(grid, 0.0, 0.0, -2.0)] == pytest.approx(50.0)


def test_failed_placement_leaves_fields_untouched() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(10.0)

    with pytest.raises(ConfigurationError):
        add_box(
            phase,
            temp,
            grid,
            xlim=(-1.0, 1.0),
            zlim=(-1.0, 0.0),
            phase_policy=ConstantPhase(7),
            thermal=LithosphericTemp(age=1.0, nz=11),
        )

    assert np.all(phase == 0)
    assert np.all(temp == 10.0)


def test_field_shape_must_match_grid() -> None:
    grid = _grid()
    with pytest.raises(ConfigurationError):
        add_layer(np.zeros((2, 2, 2), dtype=int), np.zeros((2, 2, 2)), grid, zlim=(-1.0, 0.0))


def test_empty_selection_is_a_no_op() -> None:
    grid = _grid()
    phase = grid.empty_phase(0)
    temp = grid.empty_temperature(0.0)

    count = add_sphere(phase, temp, grid, center=(50.0, 50.0, 50.0), radius=1.0, thermal=ConstantTemp(5.0))

    assert count == 0
    assert np.all(phase == 0)
    assert np.all(temp == 0.0)
