import logging
import numpy as np

from perceptual_map._checks import as_matrix

LOGGER = logging.getLogger(__name__)

# Standard deviation used for constant columns so they become zero columns instead of NaN
SD_EPSILON = 1e-6


def standardize(performance, reference_indices) -> np.ndarray:
    """
    Column-wise z-scores of the performance matrix.

    Mean and population standard deviation are computed over the reference brands only and
    then applied to every brand, so a brand left out of the reference population (typically the
    ideal brand) is still projected against it.

    Args:
        performance: brand x attribute matrix of mean ratings.
        reference_indices: row indices forming the reference population. When empty, all rows are used.

    Returns:
        Standardized matrix with the same shape as `performance`.
    """
    from sklearn.preprocessing import StandardScaler

    perf = as_matrix(performance, "Performance matrix")
    n_brands, n_attributes = perf.shape
    if n_brands == 0 or n_attributes == 0:
        return np.zeros(perf.shape)

    reference = sorted({int(index) for index in reference_indices})
    if any(index < 0 or index >= n_brands for index in reference):
        raise ValueError(f"Reference brand indices {reference} out of range for {n_brands} brands")
    if not reference:
        LOGGER.warning("Empty reference population for standardization; using all brands.")
        reference = list(range(n_brands))

    reference_rows = perf[reference]
    scaler = StandardScaler()
    scaler.fit(reference_rows)

    mean = scaler.mean_.copy()
    scale = scaler.scale_.copy()

    # Exact test for constant columns; the fitted variance may carry rounding noise
    constant = np.ptp(reference_rows, axis=0) == 0
    if np.any(constant):
        LOGGER.debug(f"{int(np.sum(constant))} attribute column(s) have zero variance in the reference population.")
        mean[constant] = reference_rows[0, constant]
        scale[constant] = SD_EPSILON

    return (perf - mean) / scale
