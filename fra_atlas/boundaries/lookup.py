"""
Region lookup inside fetched boundary documents.

Names are matched exactly after trimming and lowercasing; when nothing
matches, close names are offered as suggestions using rapidfuzz.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from rapidfuzz import fuzz, process

from ..exceptions import create_region_not_found_error
from ..utils.data_utils import is_null_or_empty, normalize_lookup_name, safe_string_conversion
from .layers import DISTRICT_NAME_FIELDS


logger = logging.getLogger(__name__)

SUGGESTION_LIMIT = 3
SUGGESTION_THRESHOLD = 70


def _candidate_names(feature: Dict[str, Any], name_fields: Sequence[str]) -> List[str]:
    properties = feature.get('properties') or {}
    return [
        safe_string_conversion(properties[key])
        for key in name_fields
        if not is_null_or_empty(properties.get(key))
    ]


def suggest_names(name: str, document: Dict[str, Any],
                  name_fields: Sequence[str] = DISTRICT_NAME_FIELDS,
                  limit: int = SUGGESTION_LIMIT,
                  threshold: int = SUGGESTION_THRESHOLD) -> List[str]:
    """
    Find names in ``document`` that resemble ``name``.

    Args:
        name: Name that failed to match
        document: Boundary FeatureCollection
        name_fields: Feature properties holding names
        limit: Maximum number of suggestions
        threshold: Minimum similarity score (0-100)

    Returns:
        Suggested names, best first
    """
    choices = {
        normalize_lookup_name(candidate): candidate
        for feature in document.get('features') or []
        for candidate in _candidate_names(feature, name_fields)
    }
    if not choices or not normalize_lookup_name(name):
        return []

    matches = process.extract(
        normalize_lookup_name(name),
        list(choices),
        scorer=fuzz.ratio,
        limit=limit,
        score_cutoff=threshold
    )
    return [choices[match] for match, _score, _index in matches]


def find_feature(document: Dict[str, Any], name: str,
                 name_fields: Sequence[str] = DISTRICT_NAME_FIELDS) -> Optional[Dict[str, Any]]:
    """
    Locate the first feature whose name matches ``name``.

    Every candidate property is tried; comparison ignores case and
    surrounding whitespace.

    Returns:
        The matching feature, or None
    """
    wanted = normalize_lookup_name(name)
    if not wanted:
        return None

    for feature in document.get('features') or []:
        for candidate in _candidate_names(feature, name_fields):
            if normalize_lookup_name(candidate) == wanted:
                return feature
    return None


def find_district_feature(document: Dict[str, Any], district_name: str,
                          state_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Locate a district feature in a districts document.

    Args:
        document: Districts FeatureCollection of one state
        district_name: District to look up
        state_name: State the document belongs to, used in the error message

    Returns:
        The matching feature

    Raises:
        RegionNotFound: If no feature carries the district name
    """
    feature = find_feature(document, district_name)
    if feature is not None:
        return feature

    suggestions = suggest_names(district_name, document)
    logger.warning(
        f"District '{district_name}' not found in {state_name or 'document'}"
        f"{'; suggestions: ' + ', '.join(suggestions) if suggestions else ''}"
    )
    raise create_region_not_found_error(district_name, parent=state_name, suggestions=suggestions)
