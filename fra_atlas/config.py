"""
Configuration management for the FRA atlas application.

This module provides dataclasses for the atlas configuration (boundary host,
viewport defaults, layer styles, logging) and for the session statistics
reported when a session completes.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Any

from .exceptions import ConfigurationError


DEFAULT_BOUNDARY_BASE_URL = (
    "https://raw.githubusercontent.com/datta07/INDIAN-SHAPEFILES/master"
)

# Tile sources offered by the basemap switcher
BASEMAPS: Dict[str, Dict[str, str]] = {
    'openstreetmap': {
        'name': 'Street Map',
        'url': 'https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png',
        'attribution': '&copy; <a href="https://osm.org/copyright">OpenStreetMap</a> contributors',
    },
    'satellite': {
        'name': 'Satellite',
        'url': 'https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}',
        'attribution': 'Tiles &copy; Esri',
    },
    'terrain': {
        'name': 'Terrain',
        'url': 'https://server.arcgisonline.com/ArcGIS/rest/services/World_Topo_Map/MapServer/tile/{z}/{y}/{x}',
        'attribution': 'Tiles &copy; Esri',
    },
}

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class AtlasConfig:
    """Configuration class for the atlas session."""

    # Boundary data source
    boundary_base_url: str = DEFAULT_BOUNDARY_BASE_URL
    request_timeout: Optional[float] = None
    max_fetch_workers: int = 4

    # Default country-wide view
    default_center: Tuple[float, float] = (20.5937, 78.9629)
    default_zoom: int = 8

    # Padding applied when fitting the viewport to a clicked state
    state_fit_padding: Tuple[int, int] = (50, 50)

    # Boundary layer styles
    state_style: Dict[str, Any] = field(
        default_factory=lambda: {'color': '#3388ff', 'weight': 2, 'fillOpacity': 0}
    )
    district_style: Dict[str, Any] = field(
        default_factory=lambda: {'color': '#ff7733', 'weight': 1.5, 'fillOpacity': 0}
    )
    search_style: Dict[str, Any] = field(
        default_factory=lambda: {'color': '#e6194b', 'weight': 3, 'fillOpacity': 0.1}
    )

    # Map widget options
    basemap: str = 'openstreetmap'
    enable_drawing: bool = False

    # Data and output
    claims_file: Optional[str] = None
    output_file: Optional[str] = None

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_source()
        self._validate_view()
        self._validate_options()

    def _validate_source(self):
        """Validate the boundary host settings."""
        if not self.boundary_base_url:
            raise ConfigurationError(
                "Boundary base URL must not be empty",
                config_key='boundary_base_url',
                config_value=self.boundary_base_url
            )
        self.boundary_base_url = self.boundary_base_url.rstrip('/')

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigurationError(
                f"Request timeout must be positive: {self.request_timeout}",
                config_key='request_timeout',
                config_value=self.request_timeout
            )

        if self.max_fetch_workers < 1:
            raise ConfigurationError(
                f"At least one fetch worker is required: {self.max_fetch_workers}",
                config_key='max_fetch_workers',
                config_value=self.max_fetch_workers
            )

    def _validate_view(self):
        """Validate the default viewport."""
        lat, lon = self.default_center
        if not -90 <= lat <= 90 or not -180 <= lon <= 180:
            raise ConfigurationError(
                f"Default center is not a valid coordinate: {self.default_center}",
                config_key='default_center',
                config_value=self.default_center
            )
        self.default_center = (float(lat), float(lon))

        if not 0 <= self.default_zoom <= 20:
            raise ConfigurationError(
                f"Default zoom must be between 0 and 20: {self.default_zoom}",
                config_key='default_zoom',
                config_value=self.default_zoom
            )

    def _validate_options(self):
        """Validate basemap and logging options."""
        if self.basemap not in BASEMAPS:
            raise ConfigurationError(
                f"Unknown basemap: {self.basemap}",
                config_key='basemap',
                config_value=self.basemap,
                valid_values=list(BASEMAPS)
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=list(LOG_LEVELS)
            )

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'AtlasConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary."""
        return {
            'boundary_base_url': self.boundary_base_url,
            'request_timeout': self.request_timeout,
            'max_fetch_workers': self.max_fetch_workers,
            'default_center': self.default_center,
            'default_zoom': self.default_zoom,
            'state_fit_padding': self.state_fit_padding,
            'state_style': dict(self.state_style),
            'district_style': dict(self.district_style),
            'search_style': dict(self.search_style),
            'basemap': self.basemap,
            'enable_drawing': self.enable_drawing,
            'claims_file': self.claims_file,
            'output_file': self.output_file,
            'log_level': self.log_level,
            'log_file': self.log_file
        }


@dataclass
class SessionStats:
    """Statistics tracking for an atlas session."""

    fetches_issued: int = 0
    cache_hits: int = 0
    fetch_failures: int = 0
    stale_results_discarded: int = 0
    layers_attached: int = 0
    layers_detached: int = 0

    def get_cache_hit_rate(self) -> float:
        """Calculate the share of boundary lookups served from the cache."""
        lookups = self.fetches_issued + self.cache_hits
        if lookups == 0:
            return 0.0

        return (self.cache_hits / lookups) * 100
