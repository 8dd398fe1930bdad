"""
Forest-rights claims: dataset, filtering, rendering and location search.
"""

from .data import SAMPLE_CLAIMS, load_claims, sample_claims
from .filters import filter_claims
from .renderer import ClaimsRenderer, recommend_schemes, status_color, summarize_by_status
from .search import Location, search_locations, select_location

__all__ = [
    'SAMPLE_CLAIMS', 'load_claims', 'sample_claims', 'filter_claims',
    'ClaimsRenderer', 'recommend_schemes', 'status_color', 'summarize_by_status',
    'Location', 'search_locations', 'select_location'
]
