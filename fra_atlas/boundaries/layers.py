"""
Boundary layer handles.

A BoundaryLayer is the unit attached to and detached from the viewport: a
GeoJSON document, a style, a display label per feature and at most one click
handler per feature.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..models import LayerSpec
from ..utils.data_utils import (
    feature_bounds, features_bounds, feature_collection, feature_property,
    normalize_lookup_name, Bounds
)


# Property names tried, in order, when labelling features
STATE_NAME_FIELDS = ('STNAME', 'st_nm', 'STATE', 'state', 'NAME_1', 'name')
DISTRICT_NAME_FIELDS = ('dtname', 'DISTRICT', 'district', 'NAME_2', 'name')

UNKNOWN_STATE = 'Unknown State'
UNKNOWN_DISTRICT = 'Unknown District'

ClickHandler = Callable[[Dict[str, Any], str], None]


class BoundaryLayer:
    """Vector layer handle with per-feature labels and click handlers."""

    def __init__(self, spec: LayerSpec, style: Dict[str, Any],
                 name_fields: Sequence[str], placeholder: str,
                 popup_prefix: str = '',
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the layer.

        Args:
            spec: Layer spec carrying the slot, key and GeoJSON document
            style: Leaflet path style applied to every feature
            name_fields: Feature properties tried for the display label
            placeholder: Label used for features without a name
            popup_prefix: Text shown before the label in the popup
            logger: Optional logger instance
        """
        self.spec = spec
        self.style = dict(style)
        self.name_fields = tuple(name_fields)
        self.placeholder = placeholder
        self.popup_prefix = popup_prefix
        self.logger = logger or logging.getLogger(__name__)

        self.features: List[Dict[str, Any]] = list(spec.document.get('features') or [])
        self.labels: List[str] = [self._label(feature) for feature in self.features]
        self._handlers: Dict[int, ClickHandler] = {}

    @property
    def name(self) -> str:
        return f"{self.spec.slot.value}:{self.spec.key}"

    @property
    def document(self) -> Dict[str, Any]:
        return self.spec.document

    def _label(self, feature: Dict[str, Any]) -> str:
        label = feature_property(feature, self.name_fields)
        if label is None:
            self.logger.warning(
                f"No name in feature properties of layer {self.spec.key}: "
                f"{feature.get('properties')}"
            )
            return self.placeholder
        return label

    def style_for(self, feature: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Return the style for a feature; every feature shares the layer style."""
        return dict(self.style)

    def popup_text(self, index: int) -> str:
        label = self.labels[index]
        return f"{self.popup_prefix}: {label}" if self.popup_prefix else label

    def render_document(self) -> Dict[str, Any]:
        """Copy of the document with ``_label``/``_popup`` properties for the widget."""
        features = []
        for index, feature in enumerate(self.features):
            properties = dict(feature.get('properties') or {})
            properties['_label'] = self.labels[index]
            properties['_popup'] = self.popup_text(index)
            features.append({**feature, 'properties': properties})
        return feature_collection(features)

    def bind_click(self, index: int, handler: ClickHandler) -> None:
        """Attach the click handler of feature ``index``; one per feature."""
        if index in self._handlers:
            raise ValueError(f"Feature {index} of {self.name} already has a click handler")
        self._handlers[index] = handler

    def handler_count(self, index: Optional[int] = None) -> int:
        if index is None:
            return len(self._handlers)
        return 1 if index in self._handlers else 0

    def find_feature(self, name: str) -> Optional[int]:
        """Index of the first feature labelled ``name`` (case-insensitive)."""
        wanted = normalize_lookup_name(name)
        for index, label in enumerate(self.labels):
            if normalize_lookup_name(label) == wanted:
                return index
        return None

    def click(self, target: Union[int, str]) -> bool:
        """
        Dispatch a click on a feature, given by index or label.

        Returns:
            True if a handler ran, False if the feature has none
        """
        index = target if isinstance(target, int) else self.find_feature(target)
        if index is None or index not in self._handlers:
            self.logger.debug(f"Click on {target!r} in {self.name} has no handler")
            return False

        self._handlers[index](self.features[index], self.labels[index])
        return True

    def bounds_of(self, index: int) -> Optional[Bounds]:
        return feature_bounds(self.features[index])

    def bounds(self) -> Optional[Bounds]:
        return features_bounds(self.features)

    def __repr__(self) -> str:
        return f"BoundaryLayer({self.name}, {len(self.features)} features)"
