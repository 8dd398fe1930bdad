"""
Location search over the claims dataset.

Locations are the distinct states, districts and villages named by the
claims. Selecting one narrows the claim filters to it and yields the area
the viewport should be fitted to.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..models import FilterState
from ..utils.data_utils import features_bounds, is_null_or_empty, safe_string_conversion, Bounds


MIN_SEARCH_LENGTH = 2
MAX_SEARCH_RESULTS = 8

LOCATION_TYPES = ('state', 'district', 'village')


@dataclass(frozen=True)
class Location:
    """A named place referenced by at least one claim."""

    name: str
    type: str

    @property
    def full_name(self) -> str:
        return f"{self.name} ({self.type.capitalize()})"


def list_locations(claims: List[Dict[str, Any]]) -> List[Location]:
    """
    Collect the distinct locations named by the claims, sorted by name.

    A name used at several levels appears once per level.
    """
    seen = set()
    for claim in claims:
        properties = claim.get('properties') or {}
        for location_type in LOCATION_TYPES:
            value = properties.get(location_type)
            if not is_null_or_empty(value):
                seen.add(Location(safe_string_conversion(value), location_type))

    return sorted(seen, key=lambda location: (location.name.lower(), LOCATION_TYPES.index(location.type)))


def search_locations(claims: List[Dict[str, Any]], term: str,
                     limit: int = MAX_SEARCH_RESULTS) -> List[Location]:
    """
    Find locations whose name contains ``term``, ignoring case.

    Args:
        claims: Claim features
        term: Search text; shorter than two characters yields no results
        limit: Maximum number of results

    Returns:
        Matching locations sorted by name
    """
    term = safe_string_conversion(term).lower()
    if len(term) < MIN_SEARCH_LENGTH:
        return []

    matches = [location for location in list_locations(claims) if term in location.name.lower()]
    return matches[:limit]


def select_location(claims: List[Dict[str, Any]], location: Location,
                    filters: Optional[FilterState] = None) -> Tuple[FilterState, Optional[Bounds]]:
    """
    Narrow the claim filters to a selected location.

    Selecting a state clears the district and village filters; selecting a
    district keeps its claim's state and clears the village; selecting a
    village keeps its claim's state and district. Other filter fields are
    left as they are.

    Args:
        claims: Claim features
        location: Selected search result
        filters: Current filters

    Returns:
        Tuple of (updated filters, bounds of the claims at the location);
        the filters are returned unchanged with no bounds when no claim
        names the location
    """
    filters = filters or FilterState()
    matching = [
        claim for claim in claims
        if safe_string_conversion((claim.get('properties') or {}).get(location.type)) == location.name
    ]
    if not matching:
        return filters, None

    properties = matching[0].get('properties') or {}
    if location.type == 'state':
        updated = filters.update(state=location.name, district='', village='')
    elif location.type == 'district':
        updated = filters.update(state=properties.get('state'), district=location.name, village='')
    else:
        updated = filters.update(
            state=properties.get('state'),
            district=properties.get('district'),
            village=location.name
        )

    return updated, features_bounds(matching)
