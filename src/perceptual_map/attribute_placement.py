import logging
import numpy as np

from perceptual_map._checks import as_matrix, check_index
from perceptual_map.config import PerceptualMapConfig

LOGGER = logging.getLogger(__name__)

# Separation below which two attributes are treated as coincident
MIN_SEPARATION = 1e-6


def ideal_direction(brand_coords, ideal_index):
    """
    Unit vector from the centroid of the non-ideal brands towards the ideal brand.
    @return: (direction, centroid); direction is (0, 0) without an ideal brand or when it sits on the centroid
    """
    coords = as_matrix(brand_coords, "Brand coordinates", columns=2)
    others = np.ones(coords.shape[0], dtype=bool)
    if ideal_index is not None:
        others[ideal_index] = False

    centroid = coords[others].mean(axis=0) if np.any(others) else np.zeros(2)
    if ideal_index is None:
        return np.zeros(2), centroid

    offset = coords[ideal_index] - centroid
    length = np.hypot(offset[0], offset[1])
    if length == 0:
        return np.zeros(2), centroid
    return offset / length, centroid


def relax_attributes(points, radius: float = 7.0, strength: float = 0.7, passes: int = 3) -> np.ndarray:
    """
    Pairwise repulsion between attribute points.

    In each pass every pair (i, j), i < j, closer than `radius` is pushed apart symmetrically along
    the line joining them by (radius - distance) / radius * strength. Pairs at or beyond the radius
    are left alone. Coincident points are separated along the x axis.
    @return: relaxed copy of `points`
    """
    relaxed = as_matrix(points, "Attribute coordinates", columns=2).copy()
    count = relaxed.shape[0]

    for _ in range(passes):
        for i in range(count):
            for j in range(i + 1, count):
                dx = relaxed[j, 0] - relaxed[i, 0]
                dy = relaxed[j, 1] - relaxed[i, 1]
                dist = np.hypot(dx, dy)
                if dist >= radius:
                    continue
                if dist < MIN_SEPARATION:
                    ux, uy = 1.0, 0.0
                    dist = MIN_SEPARATION
                else:
                    ux, uy = dx / dist, dy / dist

                force = (radius - dist) / radius * strength
                relaxed[i, 0] -= ux * force
                relaxed[i, 1] -= uy * force
                relaxed[j, 0] += ux * force
                relaxed[j, 1] += uy * force
    return relaxed


def place_attributes(performance, brand_coords, ideal_index=None, config: PerceptualMapConfig = None) -> np.ndarray:
    """
    Positions one point per attribute relative to the brand configuration.

    This is a hand-tuned layout heuristic rather than a statistical projection:
    1. Base position: centroid of the non-ideal brands weighted by max(score - 1, floor) ** gamma,
       multiplied by the stretch factor.
    2. With an ideal brand, an offset along the direction from the brand centroid to the ideal brand,
       proportional to (ideal score - mean score of the other brands) * beta.
    3. A few passes of pairwise repulsion between attributes that ended up too close.

    Args:
        performance: brand x attribute matrix of mean ratings (1-5 scale).
        brand_coords: (n_brands, 2) brand coordinates, ideal brand included.
        ideal_index: row of the ideal brand, or None.
        config: placement constants; defaults when None.

    Returns:
        (n_attributes, 2) array of attribute coordinates.
    """
    config = config or PerceptualMapConfig()
    perf = as_matrix(performance, "Performance matrix")
    coords = as_matrix(brand_coords, "Brand coordinates", columns=2)
    n_brands, n_attributes = perf.shape
    if coords.shape[0] != n_brands:
        raise ValueError(f"Got {coords.shape[0]} brand coordinates for a performance matrix with {n_brands} brands")
    ideal_index = check_index(ideal_index, n_brands, "Ideal brand index")

    placed = np.zeros((n_attributes, 2))
    if n_attributes == 0 or n_brands == 0:
        return placed

    others = np.ones(n_brands, dtype=bool)
    if ideal_index is not None:
        others[ideal_index] = False

    direction, _ = ideal_direction(coords, ideal_index)

    if np.any(others):
        weights = np.power(np.maximum(perf[others] - 1.0, config.weight_floor), config.weight_gamma)
        weight_sums = weights.sum(axis=0)
        centroids = (weights.T @ coords[others]) / weight_sums[:, np.newaxis]
        placed = centroids * config.stretch

        if ideal_index is not None:
            gap = perf[ideal_index] - perf[others].mean(axis=0)
            placed = placed + np.outer(gap * config.beta_ideal, direction)
    else:
        LOGGER.warning("No non-ideal brands to place attributes against; attributes start at the origin.")

    return relax_attributes(placed, config.repel_radius, config.repel_strength, config.repel_passes)
