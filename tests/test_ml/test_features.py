"""Tests for placement_predictor.ml.features — normalizers and feature vectors."""

from __future__ import annotations

import pytest

from placement_predictor.ml.features import (
    FeatureVector,
    build_feature_vector,
    normalize_cgpa,
    normalize_projects,
    normalize_skill,
)
from placement_predictor.models.attributes import AttributeSet


class TestNormalizeCgpa:
    def test_endpoints(self):
        assert normalize_cgpa(0.0) == 0.0
        assert normalize_cgpa(10.0) == 1.0

    def test_monotonic_and_bounded(self):
        values = [normalize_cgpa(c / 2) for c in range(0, 21)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)


class TestNormalizeSkill:
    def test_endpoints(self):
        assert normalize_skill(1) == 0.0
        assert normalize_skill(10) == 1.0

    def test_all_ratings_in_unit_interval(self):
        for s in range(1, 11):
            assert 0.0 <= normalize_skill(s) <= 1.0


class TestNormalizeProjects:
    def test_zero(self):
        assert normalize_projects(0) == 0.0

    def test_linear_below_cap(self):
        assert normalize_projects(5) == pytest.approx(0.5)

    @pytest.mark.parametrize("p", [10, 11, 25, 1000])
    def test_clamped_at_ten(self, p):
        assert normalize_projects(p) == 1.0


class TestBuildFeatureVector:
    def test_scaled_values(self, high_profile):
        fv = build_feature_vector(high_profile)
        assert fv.cgpa == pytest.approx(8.5)
        assert fv.projects == pytest.approx(2.5)
        assert fv.internship == 2.0
        assert fv.programming == pytest.approx(7 / 9 * 4)
        assert fv.communication == pytest.approx(6 / 9 * 2)
        assert fv.certifications == 1.0
        assert fv.bias == 1.0

    def test_flags_off_give_zero(self, low_profile):
        fv = build_feature_vector(low_profile)
        assert fv.internship == 0.0
        assert fv.certifications == 0.0

    def test_maximum_profile_hits_upper_ranges(self):
        attrs = AttributeSet(
            cgpa=10, num_projects=50, has_internship=True,
            programming_skill=10, communication_skill=10, has_certifications=True,
        )
        fv = build_feature_vector(attrs)
        assert fv.features() == pytest.approx((10.0, 5.0, 2.0, 4.0, 2.0, 1.0))

    def test_features_excludes_bias(self, high_profile):
        fv = build_feature_vector(high_profile)
        assert len(fv.features()) == 6

    def test_features_in_coefficient_order(self):
        fv = FeatureVector(1.0, 2.0, 3.0, 4.0, 5.0, 6.0, bias=9.0)
        values = fv.features()
        assert type(values) is tuple
        assert values == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)

    def test_deterministic(self, low_profile):
        assert build_feature_vector(low_profile) == build_feature_vector(low_profile)

    def test_is_frozen(self, low_profile):
        fv = build_feature_vector(low_profile)
        with pytest.raises(AttributeError):
            fv.cgpa = 1.0  # type: ignore[misc]

    def test_default_bias(self):
        assert FeatureVector(1, 1, 0, 0, 0, 0).bias == 1.0
