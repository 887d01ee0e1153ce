import logging
import numpy as np

from perceptual_map._checks import as_matrix

LOGGER = logging.getLogger(__name__)

# Attribute loadings are drawn at this fraction of the largest brand radius
LOADING_SCALE = 0.9


def pca_biplot(standardized, active_indices=None):
    """
    Brand scores and attribute loadings on the first two principal components of the standardized matrix.

    The components are fitted on the active brands; every brand is then scored as Z @ components^T.
    Attribute points are the loading vectors, rescaled so the longest one reaches 0.9 times the
    largest brand radius. Missing components (fewer than two brands or attributes) stay at zero.
    @return: (brand coordinates (n_brands, 2), attribute coordinates (n_attributes, 2))
    """
    from sklearn.decomposition import PCA

    Z = as_matrix(standardized, "Standardized matrix")
    n_brands, n_attributes = Z.shape
    brand_coords = np.zeros((n_brands, 2))
    attr_coords = np.zeros((n_attributes, 2))

    fit_rows = Z if active_indices is None else Z[[int(index) for index in active_indices]]
    max_dims = min(2, fit_rows.shape[0] - 1, n_attributes)
    if max_dims < 1:
        LOGGER.warning("PCA biplot needs at least two brands and one attribute; returning a degenerate map.")
        return brand_coords, attr_coords

    pca = PCA(n_components=max_dims, svd_solver="full")
    pca.fit(fit_rows)
    components = pca.components_  # shape: (max_dims, n_attributes)

    brand_coords[:, :max_dims] = Z @ components.T
    attr_coords[:, :max_dims] = components.T

    max_brand_radius = float(np.max(np.hypot(brand_coords[:, 0], brand_coords[:, 1])))
    max_attr_radius = float(np.max(np.hypot(attr_coords[:, 0], attr_coords[:, 1])))
    scale = LOADING_SCALE * max_brand_radius / max_attr_radius if max_attr_radius > 0 else 1.0

    return brand_coords, attr_coords * scale
