"""
Claims rendering.

This module provides the ClaimsRenderer class that keeps a single claims
layer on the viewport in step with the active claim filters, together with
the per-claim presentation helpers: status colours, popup text and scheme
recommendations.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ..models import FilterState
from ..utils.data_utils import feature_collection, features_bounds, is_null_or_empty, Bounds
from ..utils.error_handler import ErrorHandler
from .data import claims_frame
from .filters import filter_claims


STATUS_COLORS = {
    'Approved': '#2e7d32',
    'Pending': '#f9a825',
    'Under Review': '#1565c0',
    'Rejected': '#c62828',
}
DEFAULT_STATUS = 'Pending'

CLAIM_STYLE = {'weight': 2, 'fillOpacity': 0.4}


def status_color(status: Any) -> str:
    """Display colour of a claim status; unknown statuses use the Pending colour."""
    return STATUS_COLORS.get(status, STATUS_COLORS[DEFAULT_STATUS])


def recommend_schemes(feature: Dict[str, Any]) -> List[str]:
    """
    Suggest government schemes a claim may be eligible for.

    Args:
        feature: Claim feature

    Returns:
        Scheme names, or ``["None"]`` when no rule applies
    """
    properties = feature.get('properties') or {}
    status = properties.get('status')
    feature_type = properties.get('featureType')
    density = properties.get('density')

    schemes = []
    if status == 'Approved' or feature_type == 'Agricultural':
        schemes.append('PM-KISAN')
    if (isinstance(density, (int, float)) and density < 0.5) \
            or feature_type == 'Water':
        schemes.append('Jal Jeevan Mission')
    if feature_type in ('CR', 'CFR') and status in ('Approved', 'Pending'):
        schemes.append('MGNREGA')
    if not is_null_or_empty(properties.get('tribalGroup')):
        schemes.append('DAJGUA')

    return schemes or ['None']


def claim_popup_text(feature: Dict[str, Any]) -> str:
    """HTML popup body for a claim."""
    properties = feature.get('properties') or {}
    location = ', '.join(
        str(properties[key]) for key in ('village', 'district', 'state')
        if not is_null_or_empty(properties.get(key))
    )
    lines = [
        f"<b>{properties.get('claimId', 'Unknown claim')}</b>",
        f"Claimant: {properties.get('claimantName', '')}",
        f"Type: {properties.get('featureType', '')}",
        f"Status: {properties.get('status', DEFAULT_STATUS)}",
        f"Filed: {properties.get('dateFiled', '')}",
        f"Location: {location}",
        f"Eligible schemes: {', '.join(recommend_schemes(feature))}",
    ]
    return '<br>'.join(lines)


def summarize_by_status(claims: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Count claims per status for the map legend.

    Every known status is present, with zero when no claim has it; claims
    with another status are counted under that status name.
    """
    counts = {status: 0 for status in STATUS_COLORS}
    if not claims:
        return counts

    statuses = claims_frame(claims)['status'].fillna(DEFAULT_STATUS).replace('', DEFAULT_STATUS)
    for status, count in statuses.value_counts().items():
        counts[str(status)] = int(count)
    return counts


class ClaimsLayer:
    """Vector layer of claim polygons coloured by status."""

    name = 'claims'

    def __init__(self, features: List[Dict[str, Any]], filters: FilterState):
        self.features = list(features)
        self.filters = filters

    def style_for(self, feature: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        status = ((feature or {}).get('properties') or {}).get('status')
        color = status_color(status)
        return {'color': color, 'fillColor': color, **CLAIM_STYLE}

    def render_document(self) -> Dict[str, Any]:
        features = []
        for feature in self.features:
            properties = dict(feature.get('properties') or {})
            properties['_label'] = properties.get('claimId') or 'Claim'
            properties['_popup'] = claim_popup_text(feature)
            features.append({**feature, 'properties': properties})
        return feature_collection(features)

    def bounds(self) -> Optional[Bounds]:
        return features_bounds(self.features)

    def __len__(self) -> int:
        return len(self.features)

    def __repr__(self) -> str:
        return f"ClaimsLayer({len(self.features)} claims)"


class ClaimsRenderer:
    """
    Keeps exactly one claims layer on the viewport.

    Every ``update`` re-derives the filtered subset from the full dataset and
    swaps the attached layer for a new one.
    """

    def __init__(self, viewport, claims: List[Dict[str, Any]],
                 error_handler: Optional[ErrorHandler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the renderer.

        Args:
            viewport: MapViewport the claims layer is attached to
            claims: Full claims dataset
            error_handler: Handler used to detach layers safely
            logger: Optional logger instance
        """
        self.viewport = viewport
        self.claims = list(claims)
        self.logger = logger or logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.layer: Optional[ClaimsLayer] = None

    @property
    def filters(self) -> FilterState:
        return self.layer.filters if self.layer is not None else FilterState()

    def update(self, filters: Optional[FilterState] = None) -> ClaimsLayer:
        """
        Render the claims passing ``filters``.

        Args:
            filters: Claim filters; no filtering when omitted

        Returns:
            The newly attached claims layer
        """
        filters = filters or FilterState()
        visible = filter_claims(self.claims, filters)

        if self.layer is not None:
            self.error_handler.safe_remove_layer(self.viewport, self.layer)
            self.layer = None

        layer = ClaimsLayer(visible, filters)
        self.viewport.add_layer(layer)
        self.layer = layer

        self.logger.info(f"Showing {len(visible)} of {len(self.claims)} claims")
        return layer

    def status_summary(self) -> Dict[str, int]:
        """Counts per status of the claims currently shown."""
        return summarize_by_status(self.layer.features if self.layer is not None else [])

    def summary_frame(self) -> pd.DataFrame:
        """Visible claims as a table of their main properties."""
        features = self.layer.features if self.layer is not None else []
        frame = claims_frame(features)
        return frame[['claimId', 'claimantName', 'featureType', 'status', 'state', 'district', 'village']]
