"""
Immutable snapshot of a perceptual mapping project: brands, attributes and survey responses.

The JSON layout matches the project files exchanged by the survey front end, so that an
exported project re-imports to an equal value.
"""

import hashlib
import json
import logging
import numbers
from dataclasses import dataclass
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

IDEAL_TOKEN = "IDEAL"


@dataclass(frozen=True)
class Brand:
    name: str
    color: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"name": self.name}
        if self.color is not None:
            data["color"] = self.color
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "Brand":
        return cls(name=str(data["name"]), color=data.get("color"))


@dataclass(frozen=True)
class Attribute:
    """
    A rated attribute. When `reversed` is set, lower raw ratings mean better standing (e.g. price).
    """

    id: str
    label_es: str = ""
    label_en: str = ""
    reversed: bool = False

    def label(self, lang: str) -> str:
        text = self.label_es if lang == "es" else self.label_en
        return text or self.id

    def to_dict(self) -> dict:
        data = {"id": self.id, "labelEs": self.label_es, "labelEn": self.label_en}
        if self.reversed:
            data["reversed"] = True
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "Attribute":
        return cls(
            id=str(data["id"]),
            label_es=data.get("labelEs", ""),
            label_en=data.get("labelEn", ""),
            reversed=bool(data.get("reversed", False)),
        )


def _freeze(value, name: str) -> tuple:
    """
    Converts a mapping, or a sequence of (key, value) pairs, into a tuple of pairs with string keys.
    """
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return tuple((str(key), item) for key, item in value.items())
    if isinstance(value, (tuple, list)) and all(isinstance(pair, tuple) and len(pair) == 2 for pair in value):
        return tuple((str(key), item) for key, item in value)
    raise ValueError(f"{name} must be a mapping, got {type(value).__name__}: {value!r}")


def _check_rating(value, name: str):
    if value is not None and (isinstance(value, bool) or not isinstance(value, numbers.Real)):
        raise ValueError(f"{name} must be a number or None, got {value!r}")
    return value


@dataclass(frozen=True)
class Response:
    """
    One respondent's ratings.

    performance: brand name -> attribute id -> rating (1-5)
    importance: attribute id -> stated importance (1-5)
    Both accept mappings or tuples of (key, value) pairs and are stored as tuples.
    Missing entries, or entries set to None, are treated as not rated. Other non-numeric ratings raise ValueError.
    """

    performance: tuple = ()
    importance: tuple = ()
    ts: Optional[int] = None

    def __post_init__(self):
        performance = []
        for brand, ratings in _freeze(self.performance, "Response performance"):
            pairs = _freeze(ratings, f"Ratings of brand '{brand}'")
            performance.append((brand, tuple((key, _check_rating(value, f"Rating of '{brand}'/'{key}'")) for key, value in pairs)))
        importance = tuple(
            (key, _check_rating(value, f"Importance of '{key}'"))
            for key, value in _freeze(self.importance, "Response importance")
        )
        object.__setattr__(self, "performance", tuple(performance))
        object.__setattr__(self, "importance", importance)

    @classmethod
    def create(cls, performance: Mapping = None, importance: Mapping = None, ts: int = None) -> "Response":
        return cls(performance=performance, importance=importance, ts=ts)

    def rating(self, brand: str, attribute_id: str):
        for brand_name, ratings in self.performance:
            if brand_name == brand:
                for key, value in ratings:
                    if key == attribute_id:
                        return value
        return None

    def importance_rating(self, attribute_id: str):
        for key, value in self.importance:
            if key == attribute_id:
                return value
        return None

    def to_dict(self) -> dict:
        data = {
            "importance": dict(self.importance),
            "performance": {brand: dict(ratings) for brand, ratings in self.performance},
        }
        if self.ts is not None:
            data["ts"] = self.ts
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "Response":
        return cls.create(
            performance=data.get("performance") or {},
            importance=data.get("importance") or {},
            ts=data.get("ts"),
        )


@dataclass(frozen=True)
class Project:
    id: str = "project"
    lang: str = "en"
    brands: tuple = ()
    attributes: tuple = ()
    benchmark: Optional[str] = None
    responses: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "brands", tuple(self.brands))
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "responses", tuple(self.responses))

        names = [brand.name for brand in self.brands]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Brand names must be unique. Duplicated: {duplicates}")

        ids = [attribute.id for attribute in self.attributes]
        duplicates = sorted({attribute_id for attribute_id in ids if ids.count(attribute_id) > 1})
        if duplicates:
            raise ValueError(f"Attribute ids must be unique. Duplicated: {duplicates}")

    def ideal_index(self) -> Optional[int]:
        """
        Index of the benchmark ("ideal") brand.
        The configured benchmark name is matched case-insensitively first; otherwise the first brand
        whose name contains the token IDEAL is used.
        @return: brand index or None when no brand qualifies
        """
        if self.benchmark:
            wanted = self.benchmark.upper()
            for index, brand in enumerate(self.brands):
                if brand.name.upper() == wanted:
                    return index
        for index, brand in enumerate(self.brands):
            if IDEAL_TOKEN in brand.name.upper():
                return index
        return None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "lang": self.lang,
            "brands": [brand.to_dict() for brand in self.brands],
            "attributes": [attribute.to_dict() for attribute in self.attributes],
            "responses": [response.to_dict() for response in self.responses],
        }
        if self.benchmark is not None:
            data["benchmark"] = self.benchmark
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "Project":
        if not isinstance(data, Mapping):
            raise ValueError("Project data must be a JSON object.")
        if "prefMap" in data:
            LOGGER.info("Ignoring stored 'prefMap'; the map is recomputed from the responses.")
        return cls(
            id=str(data.get("id", "project")),
            lang=data.get("lang", "en"),
            brands=[Brand.from_dict(item) for item in data.get("brands", [])],
            attributes=[Attribute.from_dict(item) for item in data.get("attributes", [])],
            benchmark=data.get("benchmark"),
            responses=[Response.from_dict(item) for item in data.get("responses", [])],
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "Project":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as error:
            raise ValueError(f"Invalid project JSON: {error}") from error
        return cls.from_dict(data)

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON form; equal projects share a fingerprint."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def project_from_frames(
    ratings,
    brand_column: str,
    attribute_column: str,
    rating_column: str,
    reversed_attributes=(),
    benchmark: str = None,
    lang: str = "en",
) -> Project:
    """
    Builds a Project from a long-format pandas DataFrame holding one rating per row.

    Brands and attributes are ordered by first appearance. Each row becomes a single-rating
    response, so duplicated (brand, attribute) pairs all contribute to the mean.
    Rows with a missing brand, attribute or rating are dropped.
    """
    import pandas as pd

    for column in (brand_column, attribute_column, rating_column):
        if column not in ratings.columns:
            raise ValueError(f"Column '{column}' not available in ratings table.")

    frame = ratings[[brand_column, attribute_column, rating_column]]
    complete = frame.dropna()
    dropped = len(frame.index) - len(complete.index)
    if dropped:
        LOGGER.warning(f"Dropped {dropped} rating rows with missing values.")

    brand_names = pd.unique(complete[brand_column].astype(str))
    attribute_ids = pd.unique(complete[attribute_column].astype(str))
    reversed_ids = {str(item).strip() for item in reversed_attributes if str(item).strip()}

    unknown = sorted(reversed_ids.difference(attribute_ids))
    if unknown:
        LOGGER.warning(f"Reversed attributes without ratings: {unknown}")

    responses = [
        Response.create(performance={str(brand): {str(attribute): float(rating)}})
        for brand, attribute, rating in complete.itertuples(index=False, name=None)
    ]

    return Project(
        lang=lang,
        brands=[Brand(name=name) for name in brand_names],
        attributes=[Attribute(id=attribute_id, reversed=attribute_id in reversed_ids) for attribute_id in attribute_ids],
        benchmark=benchmark or None,
        responses=responses,
    )
