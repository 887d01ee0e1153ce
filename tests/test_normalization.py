"""
Tests for the joint rescaling into the unit disk (normalization.normalize_jointly).
"""

from __future__ import annotations

import numpy as np
import pytest

from perceptual_map.normalization import normalize_jointly


def _max_radius(*sets):
    stacked = np.vstack(sets)
    return float(np.max(np.hypot(stacked[:, 0], stacked[:, 1])))


def test_largest_radius_becomes_one():
    brands = np.array([[3.0, 4.0], [-1.0, 0.5]])
    attributes = np.array([[0.0, 2.0]])

    norm_brands, norm_attributes = normalize_jointly(brands, attributes)

    assert _max_radius(norm_brands, norm_attributes) == pytest.approx(1.0)
    assert norm_brands[0].tolist() == pytest.approx([0.6, 0.8])


def test_scale_is_shared_between_brands_and_attributes():
    brands = np.array([[1.0, 0.0]])
    attributes = np.array([[0.0, 10.0], [5.0, 0.0]])

    norm_brands, norm_attributes = normalize_jointly(brands, attributes)

    assert norm_brands[0].tolist() == pytest.approx([0.1, 0.0])
    assert norm_attributes[1].tolist() == pytest.approx([0.5, 0.0])


def test_angles_and_ratios_are_preserved():
    brands = np.array([[2.0, 1.0], [-3.0, 2.0]])
    attributes = np.array([[1.0, -4.0]])

    norm_brands, norm_attributes = normalize_jointly(brands, attributes)

    before = np.arctan2(brands[:, 1], brands[:, 0])
    after = np.arctan2(norm_brands[:, 1], norm_brands[:, 0])
    assert np.allclose(before, after)
    ratio = np.linalg.norm(brands[0] - attributes[0]) / np.linalg.norm(norm_brands[0] - norm_attributes[0])
    assert ratio == pytest.approx(_max_radius(brands, attributes))


def test_all_zero_layout_stays_at_origin():
    norm_brands, norm_attributes = normalize_jointly(np.zeros((3, 2)), np.zeros((2, 2)))

    assert np.all(norm_brands == 0.0)
    assert np.all(norm_attributes == 0.0)


def test_empty_sets():
    norm_brands, norm_attributes = normalize_jointly(np.zeros((0, 2)), np.zeros((0, 2)))
    assert norm_brands.shape == (0, 2)
    assert norm_attributes.shape == (0, 2)


def test_wrong_width_is_rejected():
    with pytest.raises(ValueError, match="2 columns"):
        normalize_jointly(np.zeros((2, 3)), np.zeros((1, 2)))
