"""
Perceptual map pipeline.

Aggregator -> Standardizer -> Distance Builder -> MDS Solver -> Attribute Placement -> Normalizer.

The pipeline is a deterministic pure function of a Project snapshot and a configuration: it keeps
no state between calls and performs no I/O.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from perceptual_map.aggregation import aggregate_performance
from perceptual_map.attribute_placement import place_attributes
from perceptual_map.biplot import pca_biplot
from perceptual_map.config import BrandPolicy, MapStrategy, PerceptualMapConfig
from perceptual_map.distances import distance_matrix
from perceptual_map.mds import classical_mds, project_points
from perceptual_map.normalization import normalize_jointly
from perceptual_map.project import Project
from perceptual_map.standardization import standardize

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PerceptualMap:
    """
    Coordinates ready for plotting.

    brand_coords and attr_coords share one normalized space (largest radius <= 1), so a renderer
    applies a single linear scale to both. Row order follows the project's brand and attribute order.
    `performance` is the aggregated brand x attribute matrix the map was computed from.
    """

    brand_coords: np.ndarray
    attr_coords: np.ndarray
    ideal_index: Optional[int]
    performance: np.ndarray

    def distances_to_ideal(self) -> Optional[np.ndarray]:
        if self.ideal_index is None:
            return None
        offsets = self.brand_coords - self.brand_coords[self.ideal_index]
        return np.hypot(offsets[:, 0], offsets[:, 1])

    def attribute_sensitivity(self) -> np.ndarray:
        return np.hypot(self.attr_coords[:, 0], self.attr_coords[:, 1])


def select_brands(n_brands: int, ideal_index: Optional[int], policy: BrandPolicy) -> list:
    """
    Brand indices taking part in a stage under the given policy.
    Excluding the ideal brand never leaves the stage empty: without other brands, all brands are kept.
    """
    indices = list(range(n_brands))
    if policy == BrandPolicy.EXCLUDE_IDEAL and ideal_index is not None:
        others = [index for index in indices if index != ideal_index]
        if others:
            return others
        LOGGER.warning("Only the ideal brand is available; it is kept in the brand set.")
    return indices


def mds_brand_coordinates(standardized: np.ndarray, active: list, config: PerceptualMapConfig) -> np.ndarray:
    """
    Brand coordinates by classical MDS over the active brands.
    Inactive brands are added afterwards by out-of-sample projection onto the fitted configuration.
    """
    n_brands = standardized.shape[0]
    coords = np.zeros((n_brands, 2))
    if len(active) < 2:
        return coords

    dist = distance_matrix(standardized, active)
    active_coords, eigenvalues, eigenvectors = classical_mds(dist, config.eigen_solver, config.power_iterations)
    coords[active] = active_coords

    active_set = set(active)
    inactive = [index for index in range(n_brands) if index not in active_set]
    if inactive:
        rows = standardized[inactive][:, np.newaxis, :] - standardized[active][np.newaxis, :, :]
        extra_dist = np.sqrt(np.sum(rows**2, axis=2))
        coords[inactive] = project_points(dist, extra_dist, eigenvalues, eigenvectors)
    return coords


def compute_perceptual_map(project: Project, config: PerceptualMapConfig = None) -> PerceptualMap:
    """
    Computes brand and attribute coordinates for a project.

    Args:
        project: immutable snapshot of brands, attributes, responses and benchmark name.
        config: strategy, brand policies and tuning constants; defaults when None.

    Returns:
        A PerceptualMap whose coordinates are jointly normalized to the unit disk.
    """
    config = config or PerceptualMapConfig()
    n_brands, n_attributes = len(project.brands), len(project.attributes)
    ideal_index = project.ideal_index()
    if ideal_index is None:
        LOGGER.info("No ideal brand found; attributes are placed without an ideal direction.")

    performance = aggregate_performance(project.brands, project.attributes, project.responses)
    if n_brands == 0 or n_attributes == 0:
        LOGGER.warning(f"Degenerate project with {n_brands} brands and {n_attributes} attributes.")
        return PerceptualMap(
            brand_coords=np.zeros((n_brands, 2)),
            attr_coords=np.zeros((n_attributes, 2)),
            ideal_index=ideal_index,
            performance=performance,
        )

    reference = select_brands(n_brands, ideal_index, config.reference_brands)
    active = select_brands(n_brands, ideal_index, config.active_brands)
    standardized = standardize(performance, reference)
    LOGGER.debug(f"Standardized {n_brands}x{n_attributes} matrix over {len(reference)} reference brands")

    if config.strategy == MapStrategy.PCA_BIPLOT:
        brand_raw, attr_raw = pca_biplot(standardized, active)
    else:
        brand_raw = mds_brand_coordinates(standardized, active, config)
        attr_raw = place_attributes(performance, brand_raw, ideal_index, config)

    brand_coords, attr_coords = normalize_jointly(brand_raw, attr_raw)
    return PerceptualMap(
        brand_coords=brand_coords,
        attr_coords=attr_coords,
        ideal_index=ideal_index,
        performance=performance,
    )
