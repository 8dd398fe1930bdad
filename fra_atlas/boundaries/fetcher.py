"""
Remote boundary fetcher.

Downloads country-level (states) and state-level (districts) GeoJSON
boundary documents from the public INDIAN-SHAPEFILES file host. The fetcher
neither retries nor caches; callers decide both.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ..config import DEFAULT_BOUNDARY_BASE_URL
from ..exceptions import BoundaryNotFound, InvalidFormat, NetworkFailure
from ..utils.data_utils import feature_property, is_feature_collection, normalize_region_key
from .layers import STATE_NAME_FIELDS


class BoundaryFetcher:
    """
    Fetches boundary documents keyed by normalized region name.

    The host's folder names diverge from the normalized state key for a few
    states, so a small override table maps those keys to the folder actually
    used on the host.
    """

    # Region key -> folder name on the host
    FOLDER_OVERRIDES = {
        'ODISHA': 'ORISSA',
        'ORISSA': 'ORISSA',
        'BIHAR': 'BIHAR',
        'MADHYA_PRADESH': 'MADHYA PRADESH',
        'JAMMU_AND_KASHMIR': 'JAMMU KASHMIR',
    }

    # Region key -> file prefix on the host
    FILE_OVERRIDES = {
        'ORISSA': 'ODISHA',
    }

    def __init__(self, base_url: str = DEFAULT_BOUNDARY_BASE_URL,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the fetcher.

        Args:
            base_url: Root URL of the boundary file host
            timeout: Optional request timeout in seconds; None waits indefinitely
            session: Optional requests session to reuse
            logger: Optional logger instance
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def state_folder_name(self, state_name: str) -> str:
        """Return the host folder holding the districts file of ``state_name``."""
        key = normalize_region_key(state_name)
        return self.FOLDER_OVERRIDES.get(key, key.replace('_', ' '))

    def states_url(self) -> str:
        return f"{self.base_url}/INDIA/INDIA_STATES.geojson"

    def districts_url(self, state_name: str) -> str:
        key = normalize_region_key(state_name)
        folder = quote(self.state_folder_name(state_name))
        file_prefix = self.FILE_OVERRIDES.get(key, key)
        return f"{self.base_url}/STATES/{folder}/{file_prefix}_DISTRICTS.geojson"

    def fetch_states(self) -> Dict[str, Any]:
        """
        Fetch the states-of-India boundary document.

        Returns:
            GeoJSON FeatureCollection dict

        Raises:
            NetworkFailure: If the request fails or the host answers non-success
            InvalidFormat: If the body is not a GeoJSON FeatureCollection
        """
        return self._fetch_document(self.states_url(), region='India')

    def fetch_districts(self, state_name: str) -> Dict[str, Any]:
        """
        Fetch the districts boundary document of one state.

        Args:
            state_name: Human-readable state name, e.g. ``"Odisha"``

        Returns:
            GeoJSON FeatureCollection dict

        Raises:
            NetworkFailure: If the request fails or the host answers non-success
            InvalidFormat: If the body is not a GeoJSON FeatureCollection
        """
        return self._fetch_document(self.districts_url(state_name), region=state_name)

    def list_known_states(self, states_document: Optional[Dict[str, Any]] = None) -> List[str]:
        """
        List the state names present in a states document.

        Args:
            states_document: Previously fetched states document; fetched when omitted

        Returns:
            Sorted, de-duplicated state names
        """
        if states_document is None:
            states_document = self.fetch_states()

        names = {
            feature_property(feature, STATE_NAME_FIELDS)
            for feature in states_document.get('features', [])
        }
        names.discard(None)
        return sorted(names)

    def close(self) -> None:
        self.session.close()

    def _fetch_document(self, url: str, region: str) -> Dict[str, Any]:
        self.logger.info(f"Fetching boundaries for {region}: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Request for {region} boundaries failed: {e}")
            raise NetworkFailure(
                f"Failed to load boundaries for {region}: {e}",
                region=region,
                url=url,
                original_error=e
            ) from e

        if not response.ok:
            self.logger.error(
                f"Boundary host answered HTTP {response.status_code} for {region}"
            )
            raise BoundaryNotFound(
                f"Failed to load boundaries for {region}: HTTP {response.status_code}",
                region=region,
                url=url,
                status_code=response.status_code
            )

        try:
            document = response.json()
        except ValueError as e:
            raise InvalidFormat(
                f"Boundaries for {region} are not valid JSON",
                region=region,
                url=url,
                original_error=e
            ) from e

        if not is_feature_collection(document):
            found_type = document.get('type') if isinstance(document, dict) else type(document).__name__
            raise InvalidFormat(
                f"Boundaries for {region} are not a GeoJSON FeatureCollection (got {found_type})",
                region=region,
                url=url,
                found_type=found_type
            )

        self.logger.info(
            f"Boundaries for {region} loaded ({len(document.get('features', [])):,} features)"
        )
        return document
