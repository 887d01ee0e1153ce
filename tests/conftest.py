"""
Shared fixtures for the perceptual map engine tests.
"""

from __future__ import annotations

import pytest

from perceptual_map.project import Attribute, Brand, Project, Response

JUICE_BRANDS = ["Don Simon", "Hacendado", "Alpiendo", "Granini", "IDEAL"]
JUICE_ATTRIBUTES = [
    ("taste", "Sabor", "Taste", False),
    ("pack", "Envase útil", "Convenient packaging", False),
    ("nat", "Naturalidad (%)", "Naturalness (%)", False),
    ("nopulp", "Sin poso", "No pulp/residue", False),
    ("color", "Color", "Color", False),
    ("price", "Precio", "Price", True),
    ("aroma", "Aroma", "Smell", False),
]


def _juice_responses(count: int) -> list[Response]:
    """Deterministic spread of 1-5 ratings; the ideal brand rates high on everything but price."""
    responses = []
    for r in range(count):
        performance = {}
        for b, brand in enumerate(JUICE_BRANDS):
            ratings = {}
            for a, (attribute_id, _, _, is_reversed) in enumerate(JUICE_ATTRIBUTES):
                if brand == "IDEAL":
                    ratings[attribute_id] = 1 if is_reversed else 5
                else:
                    ratings[attribute_id] = 1 + (b * 3 + a * 2 + r + a * b) % 5
            performance[brand] = ratings
        importance = {attribute_id: 1 + (a + r) % 5 for a, (attribute_id, _, _, _) in enumerate(JUICE_ATTRIBUTES)}
        responses.append(Response.create(performance=performance, importance=importance, ts=1700000000000 + r))
    return responses


@pytest.fixture
def juice_project() -> Project:
    return Project(
        id="demo",
        lang="es",
        brands=[Brand(name, "#2CAFBF" if name == "IDEAL" else None) for name in JUICE_BRANDS],
        attributes=[Attribute(attribute_id, es, en, rev) for attribute_id, es, en, rev in JUICE_ATTRIBUTES],
        benchmark="IDEAL",
        responses=_juice_responses(6),
    )


@pytest.fixture
def taste_price_project() -> Project:
    """Three brands on taste and a reversed price attribute, rated by a single respondent."""
    return Project(
        brands=[Brand("A"), Brand("B"), Brand("IDEAL")],
        attributes=[Attribute("taste"), Attribute("price", reversed=True)],
        responses=[
            Response.create(
                performance={
                    "A": {"taste": 4, "price": 2},
                    "B": {"taste": 2, "price": 4},
                    "IDEAL": {"taste": 5, "price": 1},
                }
            )
        ],
    )
