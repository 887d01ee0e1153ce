import numpy as np


def as_matrix(values, name: str, columns: int = None) -> np.ndarray:
    """
    Converts nested sequences or an array into a 2D float matrix.
    Ragged input, non-numeric cells and wrong dimensionality fail fast with ValueError.
    @return: 2D float64 array
    """
    try:
        matrix = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as error:
        raise ValueError(f"{name} must be a rectangular numeric matrix: {error}") from error

    if matrix.ndim == 1 and matrix.size == 0:
        matrix = matrix.reshape(0, columns if columns is not None else 0)
    if matrix.ndim != 2:
        raise ValueError(f"{name} must be 2-dimensional, got shape {matrix.shape}")
    if columns is not None and matrix.shape[1] != columns:
        raise ValueError(f"{name} must have {columns} columns, got shape {matrix.shape}")
    return matrix


def as_distance_matrix(values, name: str = "Distance matrix") -> np.ndarray:
    """
    Converts the input into a square, symmetric, non-negative matrix.
    """
    matrix = as_matrix(values, name)
    if matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"{name} must be square, got shape {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise ValueError(f"{name} contains non-finite values")
    if np.any(matrix < 0):
        raise ValueError(f"{name} contains negative distances")
    if not np.allclose(matrix, matrix.T):
        raise ValueError(f"{name} is not symmetric")
    return matrix


def check_index(index, size: int, name: str):
    if index is None:
        return None
    if not 0 <= index < size:
        raise ValueError(f"{name} {index} is out of range for {size} brands")
    return int(index)
