"""
Utility functions and helpers.
"""

from .data_utils import (
    is_null_or_empty,
    safe_string_conversion,
    normalize_region_key,
    normalize_lookup_name,
    feature_property,
    feature_name,
    feature_bounds,
    features_bounds,
    feature_collection,
    is_feature_collection
)

__all__ = [
    'is_null_or_empty',
    'safe_string_conversion',
    'normalize_region_key',
    'normalize_lookup_name',
    'feature_property',
    'feature_name',
    'feature_bounds',
    'features_bounds',
    'feature_collection',
    'is_feature_collection'
]
