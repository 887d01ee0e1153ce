import logging
from dataclasses import dataclass
from enum import Enum

LOGGER = logging.getLogger(__name__)


class MapStrategy(Enum):
    """How brand and attribute coordinates are derived from the standardized matrix."""

    CLASSICAL_MDS = "Classical MDS"
    PCA_BIPLOT = "PCA Biplot"


class BrandPolicy(Enum):
    """Which brands take part in a pipeline stage."""

    ALL_BRANDS = "All brands"
    EXCLUDE_IDEAL = "All brands except the ideal"


class EigenSolver(Enum):
    POWER_ITERATION = "Power iteration"
    EXACT = "Exact (symmetric eigendecomposition)"


@dataclass(frozen=True)
class PerceptualMapConfig:
    """
    Policies and tuning constants of the perceptual map pipeline.

    The attribute placement constants are hand-tuned layout parameters:
    - weight_gamma: exponent applied to (score - 1) when weighting brands in an attribute centroid.
    - weight_floor: lower bound of (score - 1) so a score of 1 keeps a small weight.
    - stretch: factor pushing attribute centroids away from the brand cloud.
    - beta_ideal: strength of the offset along the direction towards the ideal brand.
    - repel_radius, repel_strength, repel_passes: pairwise attribute repulsion.
    """

    strategy: MapStrategy = MapStrategy.CLASSICAL_MDS
    reference_brands: BrandPolicy = BrandPolicy.ALL_BRANDS
    active_brands: BrandPolicy = BrandPolicy.ALL_BRANDS
    eigen_solver: EigenSolver = EigenSolver.POWER_ITERATION
    power_iterations: int = 100
    weight_gamma: float = 0.5
    weight_floor: float = 1e-4
    stretch: float = 1.15
    beta_ideal: float = 1.0
    repel_radius: float = 7.0
    repel_strength: float = 0.7
    repel_passes: int = 3

    def __post_init__(self):
        for field_name, enum_type in (
            ("strategy", MapStrategy),
            ("reference_brands", BrandPolicy),
            ("active_brands", BrandPolicy),
            ("eigen_solver", EigenSolver),
        ):
            value = getattr(self, field_name)
            if not isinstance(value, enum_type):
                # Accept member names as used by KNIME enum parameters
                try:
                    object.__setattr__(self, field_name, enum_type[value])
                except KeyError:
                    raise ValueError(f"Unknown {field_name} '{value}'. Expected one of {[m.name for m in enum_type]}.")

        if self.power_iterations < 1:
            raise ValueError("power_iterations must be at least 1.")
        if self.weight_gamma < 0:
            raise ValueError("weight_gamma must be non-negative.")
        if self.weight_floor <= 0:
            raise ValueError("weight_floor must be positive.")
        if self.stretch <= 0:
            raise ValueError("stretch must be positive.")
        if self.repel_radius <= 0:
            raise ValueError("repel_radius must be positive.")
        if self.repel_strength < 0:
            raise ValueError("repel_strength must be non-negative.")
        if self.repel_passes < 0:
            raise ValueError("repel_passes must be non-negative.")
