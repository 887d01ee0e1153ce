"""
Classical (Torgerson) multidimensional scaling.

Squared distances are double-centered into a Gram matrix whose two dominant eigenpairs give the
2D configuration. Eigenpairs come either from power iteration with deflation or from an exact
symmetric eigendecomposition.

References:
- Torgerson, W. S. (1952). Multidimensional scaling: I. Theory and method. *Psychometrika*, 17(4), 401–419.
- Gower, J. C. (1968). Adding a point to vector diagrams in multivariate analysis. *Biometrika*, 55(3), 582–585.
"""

import logging
import numpy as np

from perceptual_map._checks import as_distance_matrix
from perceptual_map.config import EigenSolver

LOGGER = logging.getLogger(__name__)

# Norm, relative to the largest matrix entry, below which a power-iteration product is treated as zero
ZERO_NORM = 1e-12
# Eigenvalues at or below this fraction of the largest one are treated as zero when projecting
EIGEN_TOLERANCE = 1e-9
# Fixed power-iteration seeds, tried in order while the first product vanishes
SEED = 7
SEED_ATTEMPTS = 3


def double_center(dist) -> np.ndarray:
    """
    Converts a distance matrix into the inner-product (Gram) matrix of classical MDS.

    B[i][j] = -0.5 * (d2[i][j] - rowMean[i] - colMean[j] + grandMean), with d2 = dist ** 2.
    Every row and column of B sums to (numerically) zero.
    """
    d2 = as_distance_matrix(dist) ** 2
    if d2.size == 0:
        return d2
    row_mean = d2.mean(axis=1, keepdims=True)
    col_mean = d2.mean(axis=0, keepdims=True)
    grand_mean = d2.mean()
    return -0.5 * (d2 - row_mean - col_mean + grand_mean)


def _seed_vector(n: int, attempt: int = 0) -> np.ndarray:
    """
    Fixed pseudo-random unit start vector.
    Structured seeds (uniform, alternating) are exactly orthogonal to the block-shaped eigenvectors
    produced by brands with identical profiles.
    """
    rng = np.random.default_rng(SEED + attempt)
    seed = rng.uniform(-1.0, 1.0, n)
    return seed / np.linalg.norm(seed)


def power_iteration(matrix: np.ndarray, iterations: int = 100):
    """
    Dominant eigenpair of a symmetric matrix by repeated multiplication and renormalization.

    Runs a fixed number of iterations and stops early when the product vanishes relative to the
    matrix scale. A start vector whose first product vanishes is replaced by the next fixed seed.
    The eigenvalue is the Rayleigh quotient of the final vector.
    @return: (eigenvalue, unit eigenvector)
    """
    n = matrix.shape[0]
    cutoff = ZERO_NORM * max(1.0, float(np.abs(matrix).max())) if matrix.size else ZERO_NORM

    for attempt in range(SEED_ATTEMPTS):
        vector = _seed_vector(n, attempt)
        if np.linalg.norm(matrix @ vector) >= cutoff:
            break

    for _ in range(iterations):
        product = matrix @ vector
        norm = np.linalg.norm(product)
        if norm < cutoff:
            break
        vector = product / norm
    eigenvalue = float(vector @ matrix @ vector)
    return eigenvalue, vector


def _orient(vector: np.ndarray) -> np.ndarray:
    """Flips the vector so that its largest-magnitude component is positive."""
    if vector.size and vector[np.argmax(np.abs(vector))] < 0:
        return -vector
    return vector


def top_eigenpairs(gram: np.ndarray, solver: EigenSolver = EigenSolver.POWER_ITERATION, iterations: int = 100):
    """
    The two dominant eigenpairs of a symmetric matrix.

    With power iteration the second pair is extracted from the deflated matrix
    B2 = B - l1 * v1 v1^T. The exact solver returns the two largest eigenvalues.
    @return: (eigenvalues of shape (2,), eigenvectors of shape (n, 2))
    """
    n = gram.shape[0]
    if solver == EigenSolver.EXACT:
        eigenvalues, eigenvectors = np.linalg.eigh(gram)
        order = np.argsort(eigenvalues)[::-1][:2]
        values = np.zeros(2)
        vectors = np.zeros((n, 2))
        values[: len(order)] = eigenvalues[order]
        vectors[:, : len(order)] = eigenvectors[:, order]
    else:
        first_value, first_vector = power_iteration(gram, iterations)
        deflated = gram - first_value * np.outer(first_vector, first_vector)
        second_value, second_vector = power_iteration(deflated, iterations)
        values = np.array([first_value, second_value])
        vectors = np.column_stack([first_vector, second_vector])

    for k in range(vectors.shape[1]):
        vectors[:, k] = _orient(vectors[:, k])
    return values, vectors


def classical_mds(dist, solver: EigenSolver = EigenSolver.POWER_ITERATION, iterations: int = 100):
    """
    2D configuration recovered from a symmetric distance matrix.

    coord[i] = (v1[i] * sqrt(max(l1, 0)), v2[i] * sqrt(max(l2, 0))); negative eigenvalues of a
    non-Euclidean input contribute nothing.

    Returns:
        coords: (n, 2) array
        eigenvalues: (2,) array of the (unclamped) dominant eigenvalues
        eigenvectors: (n, 2) array
    """
    dist = as_distance_matrix(dist)
    n = dist.shape[0]
    if n == 0:
        return np.zeros((0, 2)), np.zeros(2), np.zeros((0, 2))
    if n == 1:
        return np.zeros((1, 2)), np.zeros(2), np.ones((1, 2))

    gram = double_center(dist)
    eigenvalues, eigenvectors = top_eigenpairs(gram, solver, iterations)
    LOGGER.debug(f"Classical MDS on {n} points: eigenvalues {eigenvalues}")
    if np.any(eigenvalues < 0):
        LOGGER.info("Distance matrix is not Euclidean; negative eigenvalues are clamped to zero.")

    coords = eigenvectors * np.sqrt(np.maximum(eigenvalues, 0.0))
    return coords, eigenvalues, eigenvectors


def project_points(dist, extra_dist, eigenvalues, eigenvectors) -> np.ndarray:
    """
    Places points that were left out of the MDS fit, given their distances to the fitted points.

    Uses Gower's add-a-point formula: x_k = (v_k . b_new) / sqrt(l_k), where b_new holds the
    double-centered inner products of the new point with the fitted points. Axes whose eigenvalue
    is negligible relative to the largest one give 0.

    Args:
        dist: (n, n) distances between the fitted points.
        extra_dist: (m, n) distances from each new point to the fitted points.
        eigenvalues, eigenvectors: as returned by `classical_mds`.

    Returns:
        (m, 2) coordinates in the fitted configuration's frame.
    """
    d2 = as_distance_matrix(dist) ** 2
    extra_d2 = np.asarray(extra_dist, dtype=float) ** 2
    if extra_d2.ndim != 2 or extra_d2.shape[1] != d2.shape[0]:
        raise ValueError(f"Distances of projected points must have shape (m, {d2.shape[0]}), got {extra_d2.shape}")
    if d2.shape[0] < 2:
        return np.zeros((extra_d2.shape[0], 2))

    mean_d2 = d2.mean(axis=1)
    inner = -0.5 * ((extra_d2 - extra_d2.mean(axis=1, keepdims=True)) - (mean_d2 - mean_d2.mean()))

    tolerance = EIGEN_TOLERANCE * max(float(np.max(np.abs(eigenvalues))), 1.0)
    coords = np.zeros((extra_d2.shape[0], 2))
    for k in range(2):
        if eigenvalues[k] <= tolerance:
            continue
        coords[:, k] = inner @ eigenvectors[:, k] / np.sqrt(eigenvalues[k])
    return coords
