import logging
import numpy as np
import pandas as pd

from perceptual_map.aggregation import aggregate_importance

LOGGER = logging.getLogger(__name__)


def performance_means_table(project, performance) -> pd.DataFrame:
    """One row per brand and one column per attribute label, holding mean performance (reversals applied)."""
    labels = [attribute.label(project.lang) for attribute in project.attributes]
    table = pd.DataFrame(np.asarray(performance, dtype=float).reshape(len(project.brands), len(labels)), columns=labels)
    table.insert(0, "Brand", [brand.name for brand in project.brands])
    return table


def attribute_sensitivity_table(project, pmap) -> pd.DataFrame:
    """Attribute vectors of the map and their length ("sensitivity")."""
    return pd.DataFrame(
        {
            "Attribute": [attribute.id for attribute in project.attributes],
            "Label": [attribute.label(project.lang) for attribute in project.attributes],
            "Loading X": pmap.attr_coords[:, 0],
            "Loading Y": pmap.attr_coords[:, 1],
            "Magnitude": pmap.attribute_sensitivity(),
        }
    )


def distances_to_ideal_table(project, pmap) -> pd.DataFrame:
    """Euclidean map distance from every brand to the ideal brand; NaN when there is no ideal brand."""
    distances = pmap.distances_to_ideal()
    if distances is None:
        distances = np.full(len(project.brands), np.nan)
    return pd.DataFrame({"Brand": [brand.name for brand in project.brands], "Distance to Ideal": distances})


def attribute_importance_table(project) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Attribute": [attribute.id for attribute in project.attributes],
            "Label": [attribute.label(project.lang) for attribute in project.attributes],
            "Mean Importance": aggregate_importance(project.attributes, project.responses),
        }
    )


def build_display_tables(project, pmap) -> dict:
    """
    Read-only tables shown next to the map.
    @return: dict with keys performance_means, attribute_sensitivity, distances_to_ideal, attribute_importance
    """
    return {
        "performance_means": performance_means_table(project, pmap.performance),
        "attribute_sensitivity": attribute_sensitivity_table(project, pmap),
        "distances_to_ideal": distances_to_ideal_table(project, pmap),
        "attribute_importance": attribute_importance_table(project),
    }
