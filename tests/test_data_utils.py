"""
Tests for region name and GeoJSON helpers.
"""

import math

import pytest

from conftest import square_feature
from fra_atlas.utils.data_utils import (
    feature_bounds, feature_property, features_bounds, geometry_positions,
    is_feature_collection, is_null_or_empty, normalize_lookup_name, normalize_region_key,
    safe_string_conversion
)


class TestNormalizeRegionKey:

    @pytest.mark.parametrize('name, key', [
        ('Odisha', 'ODISHA'),
        ('Madhya Pradesh', 'MADHYA_PRADESH'),
        ('Jammu & Kashmir', 'JAMMU__KASHMIR'),
        ('  Tamil Nadu ', 'TAMIL_NADU'),
        ('Dadra-Nagar Haveli', 'DADRANAGAR_HAVELI'),
        ('', ''),
        (None, ''),
    ])
    def test_examples(self, name, key):
        assert normalize_region_key(name) == key

    @pytest.mark.parametrize('name', [
        'Odisha', 'Madhya Pradesh', 'Jammu & Kashmir', 'andaman and nicobar islands',
        'Dadra-Nagar Haveli', 'Puducherry (UT)', '  ',
    ])
    def test_idempotent(self, name):
        once = normalize_region_key(name)
        assert normalize_region_key(once) == once


class TestNullHandling:

    def test_is_null_or_empty(self):
        assert is_null_or_empty(None)
        assert is_null_or_empty('   ')
        assert is_null_or_empty(math.nan)
        assert not is_null_or_empty('Bihar')
        assert not is_null_or_empty(0)
        assert not is_null_or_empty([])

    def test_safe_string_conversion(self):
        assert safe_string_conversion('  Gaya ') == 'Gaya'
        assert safe_string_conversion(None) == ''
        assert safe_string_conversion(12) == '12'

    def test_normalize_lookup_name(self):
        assert normalize_lookup_name('  Indore ') == 'indore'


def test_feature_property_skips_blank_candidates():
    feature = square_feature(0, 0, STNAME='', st_nm='Bihar')
    assert feature_property(feature, ('STNAME', 'st_nm')) == 'Bihar'
    assert feature_property(feature, ('NAME_1',)) is None


def test_geometry_positions_for_multipolygon():
    geometry = {
        'type': 'MultiPolygon',
        'coordinates': [
            [[[0, 0], [1, 0], [1, 1], [0, 0]]],
            [[[5, 5], [6, 5], [6, 6], [5, 5]]],
        ]
    }
    assert len(geometry_positions(geometry)) == 8


def test_features_bounds():
    features = [square_feature(80, 20, 2), square_feature(84, 24, 1)]
    assert features_bounds(features) == ((20.0, 80.0), (25.0, 85.0))
    assert feature_bounds({'type': 'Feature', 'geometry': None}) is None


def test_is_feature_collection():
    assert is_feature_collection({'type': 'FeatureCollection', 'features': []})
    assert not is_feature_collection({'type': 'Feature'})
    assert not is_feature_collection([])
