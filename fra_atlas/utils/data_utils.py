"""
Data utility functions for region names and GeoJSON features.

This module provides utility functions for normalising region names into
cache/URL keys, reading feature properties safely, and computing feature
bounds for viewport fitting.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


Bounds = Tuple[Tuple[float, float], Tuple[float, float]]

_NON_KEY_CHARS = re.compile(r'[^A-Z0-9_]')


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    if value is None:
        return True

    if isinstance(value, str):
        return not value.strip()

    if isinstance(value, (list, tuple, set, dict)):
        return False

    return bool(pd.isna(value))


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if is_null_or_empty(value):
        return ""

    return str(value).strip()


def normalize_region_key(name: Any) -> str:
    """
    Normalize a human-readable region name into a region key.

    The key is uppercase, spaces become underscores and every character
    outside ``A-Z``, ``0-9`` and ``_`` is dropped. Applying it twice gives
    the same result as applying it once.

    Args:
        name: Region name such as ``"Madhya Pradesh"``

    Returns:
        Region key such as ``"MADHYA_PRADESH"``, or ``""`` for blank input

    Example:
        >>> normalize_region_key("Jammu & Kashmir")
        'JAMMU__KASHMIR'
    """
    name = safe_string_conversion(name)
    if not name:
        return ""

    return _NON_KEY_CHARS.sub('', name.upper().replace(' ', '_'))


def normalize_lookup_name(name: Any) -> str:
    """Lowercase and trim a name for case-insensitive comparison."""
    return safe_string_conversion(name).lower()


def feature_property(feature: Dict[str, Any], candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first non-empty property among ``candidates``.

    Args:
        feature: GeoJSON feature dict
        candidates: Property names to try, in order

    Returns:
        Cleaned property value or None if no candidate is present
    """
    properties = feature.get('properties') or {}
    for key in candidates:
        value = properties.get(key)
        if not is_null_or_empty(value):
            return safe_string_conversion(value)
    return None


def feature_name(feature: Dict[str, Any], candidates: Sequence[str], placeholder: str) -> str:
    """Return the feature's display name, or ``placeholder`` when it has none."""
    return feature_property(feature, candidates) or placeholder


def _iter_positions(coordinates: Any) -> Iterable[Sequence[float]]:
    # Positions are the innermost lists of numbers at any nesting depth.
    if not coordinates:
        return
    if isinstance(coordinates[0], (int, float)):
        yield coordinates
        return
    for item in coordinates:
        yield from _iter_positions(item)


def geometry_positions(geometry: Optional[Dict[str, Any]]) -> List[Sequence[float]]:
    """Collect every ``[lon, lat]`` position of a GeoJSON geometry."""
    if not geometry:
        return []

    if geometry.get('type') == 'GeometryCollection':
        positions = []
        for part in geometry.get('geometries') or []:
            positions.extend(geometry_positions(part))
        return positions

    return list(_iter_positions(geometry.get('coordinates') or []))


def features_bounds(features: Iterable[Dict[str, Any]]) -> Optional[Bounds]:
    """
    Compute the Leaflet-style bounds ``((south, west), (north, east))``.

    Args:
        features: GeoJSON feature dicts

    Returns:
        Bounds tuple, or None when the features carry no coordinates
    """
    positions = []
    for feature in features:
        positions.extend(geometry_positions(feature.get('geometry')))

    if not positions:
        return None

    coords = np.asarray([position[:2] for position in positions], dtype=float)
    west, south = coords.min(axis=0)
    east, north = coords.max(axis=0)
    return ((float(south), float(west)), (float(north), float(east)))


def feature_bounds(feature: Dict[str, Any]) -> Optional[Bounds]:
    """Compute the bounds of a single feature."""
    return features_bounds([feature])


def feature_collection(features: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap features into a GeoJSON FeatureCollection dict."""
    return {'type': 'FeatureCollection', 'features': list(features)}


def is_feature_collection(document: Any) -> bool:
    """Check that a parsed document is a GeoJSON FeatureCollection."""
    return isinstance(document, dict) and document.get('type') == 'FeatureCollection'
