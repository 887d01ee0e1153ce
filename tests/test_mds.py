"""
Tests for classical multidimensional scaling (mds.classical_mds and helpers).
"""

from __future__ import annotations

import numpy as np
import pytest

from perceptual_map.config import EigenSolver
from perceptual_map.distances import distance_matrix
from perceptual_map.mds import classical_mds, double_center, power_iteration, project_points

# Planar configuration with well separated principal variances
POINTS = np.array([[-4.0, 0.5], [0.0, -1.0], [5.0, 1.0], [1.0, 2.0], [-2.0, -2.5]])


def _pairwise(coords: np.ndarray) -> np.ndarray:
    return distance_matrix(coords)


def test_double_centered_rows_and_columns_sum_to_zero():
    gram = double_center(_pairwise(POINTS))

    assert np.allclose(gram.sum(axis=0), 0.0)
    assert np.allclose(gram.sum(axis=1), 0.0)
    assert np.allclose(gram, gram.T)


def test_double_center_recovers_inner_products():
    centered = POINTS - POINTS.mean(axis=0)
    assert np.allclose(double_center(_pairwise(POINTS)), centered @ centered.T)


@pytest.mark.parametrize("solver", [EigenSolver.POWER_ITERATION, EigenSolver.EXACT])
def test_two_points_are_placed_their_distance_apart(solver):
    d = 3.0
    coords, _, _ = classical_mds(np.array([[0.0, d], [d, 0.0]]), solver)

    assert coords.shape == (2, 2)
    assert np.hypot(*(coords[0] - coords[1])) == pytest.approx(d)
    assert np.allclose(coords[:, 1], 0.0, atol=1e-6)
    assert coords[0, 0] == pytest.approx(-coords[1, 0])


@pytest.mark.parametrize("solver", [EigenSolver.POWER_ITERATION, EigenSolver.EXACT])
def test_planar_configuration_is_recovered_up_to_rotation(solver):
    dist = _pairwise(POINTS)

    coords, eigenvalues, _ = classical_mds(dist, solver)

    assert np.allclose(_pairwise(coords), dist, atol=1e-6)
    assert eigenvalues[0] >= eigenvalues[1] > 0


def test_solvers_agree_on_orientation():
    dist = _pairwise(POINTS)

    power, _, _ = classical_mds(dist, EigenSolver.POWER_ITERATION)
    exact, _, _ = classical_mds(dist, EigenSolver.EXACT)

    assert np.allclose(power, exact, atol=1e-6)


def test_degenerate_sizes():
    empty, _, _ = classical_mds(np.zeros((0, 0)))
    single, _, _ = classical_mds(np.zeros((1, 1)))

    assert empty.shape == (0, 2)
    assert single.tolist() == [[0.0, 0.0]]


def test_all_zero_distances_give_origin():
    coords, _, _ = classical_mds(np.zeros((4, 4)))

    assert coords.shape == (4, 2)
    assert np.all(coords == 0.0)


def test_non_euclidean_input_is_clamped_not_rejected():
    # Violates the triangle inequality
    dist = np.array([[0.0, 1.0, 5.0], [1.0, 0.0, 1.0], [5.0, 1.0, 0.0]])

    coords, _, _ = classical_mds(dist)

    assert np.all(np.isfinite(coords))


def test_power_iteration_on_zero_matrix_stops_without_dividing_by_zero():
    value, vector = power_iteration(np.zeros((3, 3)))

    assert value == 0.0
    assert np.linalg.norm(vector) == pytest.approx(1.0)


def test_power_iteration_is_deterministic():
    gram = double_center(_pairwise(POINTS))
    first = power_iteration(gram)
    second = power_iteration(gram)

    assert first[0] == second[0]
    assert np.array_equal(first[1], second[1])


def test_asymmetric_matrix_is_rejected():
    with pytest.raises(ValueError, match="symmetric"):
        classical_mds(np.array([[0.0, 1.0], [2.0, 0.0]]))


def test_non_square_matrix_is_rejected():
    with pytest.raises(ValueError, match="square"):
        classical_mds(np.zeros((2, 3)))


def test_projected_point_keeps_its_distances():
    fitted = POINTS[:4]
    extra = POINTS[4:]
    dist = _pairwise(fitted)
    coords, eigenvalues, eigenvectors = classical_mds(dist, EigenSolver.EXACT)
    extra_dist = np.linalg.norm(extra[:, np.newaxis, :] - fitted[np.newaxis, :, :], axis=2)

    projected = project_points(dist, extra_dist, eigenvalues, eigenvectors)

    recovered = np.linalg.norm(projected[:, np.newaxis, :] - coords[np.newaxis, :, :], axis=2)
    assert np.allclose(recovered, extra_dist, atol=1e-6)


@pytest.mark.parametrize("solver", [EigenSolver.POWER_ITERATION, EigenSolver.EXACT])
def test_brands_in_identical_pairs_are_separated(solver):
    """Two pairs of coincident points give a block-shaped dominant eigenvector (1, 1, -1, -1)."""
    pairs = np.array([[1.0, 0.0], [1.0, 0.0], [-1.0, 0.0], [-1.0, 0.0]])

    coords, eigenvalues, _ = classical_mds(_pairwise(pairs), solver)

    recovered = _pairwise(coords)
    assert eigenvalues[0] == pytest.approx(4.0)
    assert recovered[0, 2] == pytest.approx(2.0)
    assert recovered[0, 1] == pytest.approx(0.0, abs=1e-6)
    assert recovered[2, 3] == pytest.approx(0.0, abs=1e-6)


def test_power_iteration_finds_block_shaped_eigenvector():
    vector = np.array([1.0, 1.0, -1.0, -1.0]) / 2.0
    matrix = 3.0 * np.outer(vector, vector)

    value, found = power_iteration(matrix)

    assert value == pytest.approx(3.0)
    assert abs(found @ vector) == pytest.approx(1.0)
