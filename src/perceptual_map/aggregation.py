import logging
import numpy as np

LOGGER = logging.getLogger(__name__)

# Midpoint of the 1-5 rating scale, used when a cell has no observations
NEUTRAL_RATING = 3.0
# Reversed attributes are mirrored on the 1-5 scale: effective = 6 - raw
REVERSAL_PIVOT = 6.0


def effective_rating(raw, reversed_attribute: bool) -> float:
    value = float(raw)
    return REVERSAL_PIVOT - value if reversed_attribute else value


def aggregate_performance(brands, attributes, responses) -> np.ndarray:
    """
    Reduces raw per-respondent ratings to a brand x attribute matrix of mean performance.

    Ratings of reversed attributes are mirrored before averaging. A cell nobody rated
    gets the neutral scale midpoint (3.0); sparse data never raises.
    @return: float array of shape (len(brands), len(attributes))
    """
    totals = np.zeros((len(brands), len(attributes)))
    counts = np.zeros((len(brands), len(attributes)))

    for response in responses:
        for b, brand in enumerate(brands):
            for a, attribute in enumerate(attributes):
                raw = response.rating(brand.name, attribute.id)
                if raw is None:
                    continue
                totals[b, a] += effective_rating(raw, attribute.reversed)
                counts[b, a] += 1

    performance = np.full(totals.shape, NEUTRAL_RATING)
    observed = counts > 0
    performance[observed] = totals[observed] / counts[observed]

    empty_cells = int(np.sum(~observed))
    if empty_cells:
        LOGGER.info(f"{empty_cells} brand/attribute cells have no ratings and default to {NEUTRAL_RATING}.")
    return performance


def aggregate_importance(attributes, responses) -> np.ndarray:
    """
    Mean stated importance per attribute. Importance is never reversed.
    @return: float array of shape (len(attributes),)
    """
    totals = np.zeros(len(attributes))
    counts = np.zeros(len(attributes))

    for response in responses:
        for a, attribute in enumerate(attributes):
            raw = response.importance_rating(attribute.id)
            if raw is None:
                continue
            totals[a] += float(raw)
            counts[a] += 1

    importance = np.full(totals.shape, NEUTRAL_RATING)
    observed = counts > 0
    importance[observed] = totals[observed] / counts[observed]
    return importance


def rating_counts(brands, attributes, responses) -> np.ndarray:
    """Number of ratings observed per brand/attribute cell."""
    counts = np.zeros((len(brands), len(attributes)), dtype=int)
    for response in responses:
        for b, brand in enumerate(brands):
            for a, attribute in enumerate(attributes):
                if response.rating(brand.name, attribute.id) is not None:
                    counts[b, a] += 1
    return counts
