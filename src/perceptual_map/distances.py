import logging
import numpy as np

from perceptual_map._checks import as_matrix

LOGGER = logging.getLogger(__name__)


def distance_matrix(standardized, active_indices=None) -> np.ndarray:
    """
    Symmetric Euclidean distance matrix between the rows of the standardized matrix.

    Args:
        standardized: brand x attribute z-score matrix.
        active_indices: ordered row indices to include; all rows when None.

    Returns:
        (n, n) array with dist[i][j] == dist[j][i] >= 0 and a zero diagonal, where n is the
        number of active rows.
    """
    rows = as_matrix(standardized, "Standardized matrix")
    if active_indices is not None:
        active = [int(index) for index in active_indices]
        if any(index < 0 or index >= rows.shape[0] for index in active):
            raise ValueError(f"Active brand indices {active} out of range for {rows.shape[0]} brands")
        rows = rows[active]

    # (a - b)**2 == (b - a)**2 exactly, so the result is symmetric bit for bit
    differences = rows[:, np.newaxis, :] - rows[np.newaxis, :, :]
    dist = np.sqrt(np.sum(differences**2, axis=2))
    np.fill_diagonal(dist, 0.0)
    return dist
