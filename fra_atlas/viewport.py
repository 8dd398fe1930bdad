"""
Map viewport abstraction and its folium implementation.

The viewport is the external map widget: it pans and zooms, fits bounds,
and attaches or detaches vector layers. ``FoliumViewport`` renders to a
standalone Leaflet HTML page and also carries the basemap switcher and the
drawing tools.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import folium
from folium import plugins

from .config import AtlasConfig, BASEMAPS
from .exceptions import ConfigurationError, LayerRemovalError
from .utils.data_utils import Bounds


DRAW_SHAPE_OPTIONS = {'color': '#3388ff', 'fillOpacity': 0.5, 'weight': 2}


class MapViewport(ABC):
    """Interface of the map widget the atlas drives."""

    @abstractmethod
    def set_view(self, center: Tuple[float, float], zoom: int, **options) -> None:
        """Center the map on ``center`` at ``zoom``."""

    @abstractmethod
    def fit_bounds(self, bounds: Bounds, **options) -> None:
        """Pan and zoom so that ``bounds`` is fully visible."""

    @abstractmethod
    def add_layer(self, layer) -> None:
        """Attach a vector layer."""

    @abstractmethod
    def remove_layer(self, layer) -> None:
        """
        Detach a vector layer.

        Raises:
            LayerRemovalError: If the layer is not attached
        """

    @abstractmethod
    def has_layer(self, layer) -> bool:
        """Check whether ``layer`` is attached."""


class FoliumViewport(MapViewport):
    """MapViewport backed by a ``folium.Map``."""

    def __init__(self, config: Optional[AtlasConfig] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the viewport at the configured country-wide view.

        Args:
            config: Atlas configuration; defaults are used when omitted
            logger: Optional logger instance
        """
        self.config = config or AtlasConfig()
        self.logger = logger or logging.getLogger(__name__)

        self.center = self.config.default_center
        self.zoom = self.config.default_zoom
        self.map = folium.Map(
            location=list(self.center),
            zoom_start=self.zoom,
            tiles=None,
            control_scale=True
        )

        self.basemap: Optional[str] = None
        self._tile_layer: Optional[folium.TileLayer] = None
        self._fit: Optional[folium.FitBounds] = None
        self._draw: Optional[plugins.Draw] = None
        self._layers: Dict[int, Tuple[Any, folium.GeoJson]] = {}

        self.set_basemap(self.config.basemap)
        if self.config.enable_drawing:
            self.enable_drawing()

    def _detach_element(self, element) -> None:
        """
        Drop ``element`` from the map's children.

        folium offers no public way to remove a child once added, so the
        element is popped from ``Map._children`` by its unique name.
        """
        self.map._children.pop(element.get_name(), None)

    def set_basemap(self, key: str) -> None:
        """Replace the basemap tile layer with one of ``BASEMAPS``."""
        if key not in BASEMAPS:
            raise ConfigurationError(
                f"Unknown basemap: {key}",
                config_key='basemap',
                config_value=key,
                valid_values=list(BASEMAPS)
            )

        if self._tile_layer is not None:
            self._detach_element(self._tile_layer)

        source = BASEMAPS[key]
        self._tile_layer = folium.TileLayer(
            tiles=source['url'],
            attr=source['attribution'],
            name=source['name']
        )
        self._tile_layer.add_to(self.map)
        self.basemap = key
        self.logger.debug(f"Basemap set to {source['name']}")

    def enable_drawing(self) -> None:
        """Add the polygon, rectangle, circle and marker drawing tools."""
        if self._draw is not None:
            return

        self._draw = plugins.Draw(
            export=True,
            draw_options={
                'polyline': False,
                'circlemarker': False,
                'polygon': {
                    'allowIntersection': False,
                    'drawError': {
                        'color': '#e1e100',
                        'message': 'Cannot draw overlapping polygons'
                    },
                    'shapeOptions': DRAW_SHAPE_OPTIONS
                },
                'rectangle': {'shapeOptions': DRAW_SHAPE_OPTIONS},
                'circle': {'shapeOptions': DRAW_SHAPE_OPTIONS},
                'marker': True
            },
            edit_options={'edit': True, 'remove': True}
        )
        self._draw.add_to(self.map)

    @property
    def drawing_enabled(self) -> bool:
        return self._draw is not None

    def set_view(self, center: Tuple[float, float], zoom: int, **options) -> None:
        if self._fit is not None:
            self._detach_element(self._fit)
            self._fit = None

        self.center = (float(center[0]), float(center[1]))
        self.zoom = zoom
        self.map.location = list(self.center)
        self.map.options['zoom'] = zoom

    def fit_bounds(self, bounds: Bounds, **options) -> None:
        if self._fit is not None:
            self._detach_element(self._fit)

        (south, west), (north, east) = bounds
        self._fit = folium.FitBounds(
            [[south, west], [north, east]],
            padding=options.get('padding')
        )
        self.map.add_child(self._fit)

    def add_layer(self, layer) -> None:
        if self.has_layer(layer):
            raise ValueError(f"Layer {layer.name} is already attached")

        document = layer.render_document()
        details = {}
        # folium reads tooltip fields from the first feature
        if document['features']:
            details = {
                'tooltip': folium.GeoJsonTooltip(fields=['_label'], labels=False),
                'popup': folium.GeoJsonPopup(fields=['_popup'], labels=False),
            }

        element = folium.GeoJson(
            document,
            name=layer.name,
            style_function=lambda feature, layer=layer: layer.style_for(feature),
            **details
        )
        element.add_to(self.map)
        self._layers[id(layer)] = (layer, element)
        self.logger.debug(f"Attached layer {layer.name}")

    def remove_layer(self, layer) -> None:
        entry = self._layers.pop(id(layer), None)
        if entry is None:
            raise LayerRemovalError(
                f"Layer {getattr(layer, 'name', layer)} is not attached",
                layer_name=getattr(layer, 'name', None)
            )

        self._detach_element(entry[1])
        self.logger.debug(f"Detached layer {layer.name}")

    def has_layer(self, layer) -> bool:
        return id(layer) in self._layers

    def layer_names(self) -> List[str]:
        return [layer.name for layer, _element in self._layers.values()]

    def to_html(self) -> str:
        """Render the map as a standalone HTML page."""
        return self.map.get_root().render()

    def save(self, path: str) -> None:
        self.map.save(path)
        self.logger.info(f"Map written to {path}")
