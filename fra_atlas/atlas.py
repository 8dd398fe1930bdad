"""
Atlas session orchestration.

This module provides the AtlasSession class that wires the configuration,
logging, boundary fetching and layer management, claims rendering and the
map viewport into one object driven by user events.
"""

from concurrent.futures import Executor
from typing import Any, Dict, Iterable, List, Optional

from tqdm import tqdm

from .boundaries import BoundaryCache, BoundaryFetcher, BoundaryLayerManager, STATES_KEY
from .claims import ClaimsRenderer, Location, load_claims, search_locations, select_location
from .config import AtlasConfig, SessionStats
from .exceptions import AtlasError
from .logging_config import AtlasLogger, setup_logging
from .models import AtlasState, FilterState
from .utils.data_utils import normalize_region_key
from .utils.error_handler import ErrorHandler, Notifier, create_error_context
from .viewport import FoliumViewport


class AtlasSession:
    """
    One interactive atlas: boundaries, claims and the map they are drawn on.

    User-actionable errors (failed fetches, unknown regions) never propagate
    out of the event methods; they are logged, kept on ``last_error`` and
    passed to the optional notifier.
    """

    def __init__(self, config: Optional[AtlasConfig] = None,
                 viewport=None, fetcher=None,
                 executor: Optional[Executor] = None,
                 claims: Optional[List[Dict[str, Any]]] = None,
                 logger: Optional[AtlasLogger] = None,
                 notifier: Optional[Notifier] = None):
        """
        Initialize the session and render the unfiltered claims.

        Args:
            config: Atlas configuration; defaults are used when omitted
            viewport: MapViewport to draw on; a FoliumViewport when omitted
            fetcher: Boundary fetcher; a BoundaryFetcher on the configured
                host when omitted
            executor: Executor for boundary fetches
            claims: Claim features; loaded from ``config.claims_file`` (or
                the bundled sample) when omitted
            logger: AtlasLogger; built from the configuration when omitted
            notifier: Callable shown every user-actionable error

        Raises:
            ConfigurationError: If the claims file does not exist
            InvalidFormat: If the claims file is not a FeatureCollection
        """
        self.config = config or AtlasConfig()
        self.logger = logger or setup_logging(self.config)
        self.stats = SessionStats()
        self.last_error: Optional[AtlasError] = None
        self._notifier = notifier

        log = self.logger.logger
        self.error_handler = ErrorHandler(log, notifier=self._notify)
        self.viewport = viewport or FoliumViewport(self.config, log)
        self.fetcher = fetcher or BoundaryFetcher(
            self.config.boundary_base_url,
            timeout=self.config.request_timeout,
            logger=log
        )
        self.cache = BoundaryCache(log)
        self.boundaries = BoundaryLayerManager(
            self.viewport,
            self.fetcher,
            cache=self.cache,
            config=self.config,
            executor=executor,
            error_handler=self.error_handler,
            stats=self.stats,
            logger=log
        )

        self.claims = claims if claims is not None else load_claims(self.config.claims_file)
        self.claims_renderer = ClaimsRenderer(self.viewport, self.claims, self.error_handler, log)
        self.filters = FilterState()
        self.claims_renderer.update(self.filters)

        self.logger.log_session_start(len(self.claims), self.config.basemap)

    def _notify(self, error: AtlasError) -> None:
        self.last_error = error
        self.logger.error(f"{error.error_code}: {error.message}")
        if self._notifier is not None:
            self._notifier(error)

    @property
    def state(self) -> AtlasState:
        return self.boundaries.state

    @property
    def loading(self) -> bool:
        return self.boundaries.loading

    # Boundary events

    def set_boundaries_enabled(self, enabled: bool) -> None:
        self.boundaries.set_boundaries_enabled(enabled)

    def toggle_boundaries(self) -> None:
        self.boundaries.toggle_boundaries()

    def click_state(self, state_name: str) -> None:
        self.boundaries.click_state(state_name)

    def click_district(self, district_name: str) -> None:
        self.boundaries.click_district(district_name)

    def search_district(self, state_name: str, district_name: str) -> None:
        self.boundaries.search(state_name, district_name)

    def reset_to_country(self) -> None:
        """Return to the country view and drop the location claim filters."""
        self.boundaries.reset_to_country()
        self.set_filters(state='', district='', village='')

    def process_completed_fetches(self) -> int:
        return self.boundaries.process_completed_fetches()

    def wait_for_pending(self, timeout: Optional[float] = None) -> None:
        self.boundaries.wait_for_pending(timeout)

    # Claims

    def set_filters(self, **changes) -> FilterState:
        """
        Update the claim filters and re-render the claims layer.

        Args:
            **changes: FilterState fields to replace

        Returns:
            The new filters
        """
        self.filters = self.filters.update(**changes)
        self.claims_renderer.update(self.filters)
        return self.filters

    def search_locations(self, term: str) -> List[Location]:
        return search_locations(self.claims, term)

    def select_location(self, location: Location) -> FilterState:
        """Filter the claims to a search result and fit the viewport to it."""
        filters, bounds = select_location(self.claims, location, self.filters)
        if filters != self.filters:
            self.filters = filters
            self.claims_renderer.update(self.filters)
        if bounds is not None:
            self.viewport.fit_bounds(bounds, animate=True, duration=0.8)
        return self.filters

    def status_summary(self) -> Dict[str, int]:
        return self.claims_renderer.status_summary()

    # Map widget

    def set_basemap(self, key: str) -> None:
        self.viewport.set_basemap(key)

    def enable_drawing(self) -> None:
        self.viewport.enable_drawing()

    def prefetch_districts(self, state_names: Optional[Iterable[str]] = None,
                           show_progress: bool = True) -> int:
        """
        Warm the boundary cache with the districts of many states.

        Fetches run one after another on the calling thread; failures are
        reported and skipped.

        Args:
            state_names: States to fetch; every state in the states document
                when omitted
            show_progress: Whether to display a progress bar

        Returns:
            Number of districts documents added to the cache
        """
        if state_names is None:
            states_document = self.cache.get(STATES_KEY)
            if states_document is None:
                try:
                    states_document = self.fetcher.fetch_states()
                except AtlasError as e:
                    self.stats.fetch_failures += 1
                    self.error_handler.handle_error(e, create_error_context('prefetch', region='India'))
                    return 0
                self.stats.fetches_issued += 1
                self.cache.put(STATES_KEY, states_document)
            state_names = self.fetcher.list_known_states(states_document)

        pending = [name for name in state_names if normalize_region_key(name) not in self.cache]
        added = 0
        for name in tqdm(pending, desc="Prefetching districts", disable=not show_progress):
            try:
                document = self.fetcher.fetch_districts(name)
            except AtlasError as e:
                self.stats.fetch_failures += 1
                self.error_handler.handle_error(e, create_error_context('prefetch', region=name))
                continue
            self.stats.fetches_issued += 1
            self.cache.put(normalize_region_key(name), document)
            added += 1

        self.logger.info(f"Prefetched districts of {added} of {len(pending)} state(s)")
        return added

    def save(self, path: Optional[str] = None) -> str:
        """
        Write the map as an HTML page.

        Args:
            path: Output path; ``config.output_file`` when omitted

        Returns:
            The path written
        """
        path = path or self.config.output_file or 'fra_atlas.html'
        self.viewport.save(path)
        return path

    def close(self) -> None:
        """Release the fetch workers and HTTP session and log the statistics."""
        self.boundaries.close()
        close_fetcher = getattr(self.fetcher, 'close', None)
        if close_fetcher is not None:
            close_fetcher()
        self.logger.log_session_complete(self.stats)

    def __enter__(self) -> 'AtlasSession':
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.close()
