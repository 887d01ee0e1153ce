import logging
import numpy as np

from perceptual_map._checks import as_matrix

LOGGER = logging.getLogger(__name__)

MIN_RADIUS = 1e-6


def normalize_jointly(brand_coords, attr_coords):
    """
    Rescales brand and attribute coordinates by one common factor so the whole layout fits the unit disk.

    The divisor is max(1e-6, largest radius over both point sets), which keeps every angle and every
    relative distance. Both sets share the scale, so a renderer can apply a single linear transform.
    @return: (normalized brand coordinates, normalized attribute coordinates)
    """
    brands = as_matrix(brand_coords, "Brand coordinates", columns=2)
    attributes = as_matrix(attr_coords, "Attribute coordinates", columns=2)

    radii = np.hypot(*np.vstack([brands, attributes]).T)
    max_radius = max(MIN_RADIUS, float(radii.max())) if radii.size else MIN_RADIUS
    LOGGER.debug(f"Normalizing map by radius {max_radius:.6g}")
    return brands / max_radius, attributes / max_radius
