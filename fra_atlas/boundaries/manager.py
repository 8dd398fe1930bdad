"""
Boundary layer manager for the FRA atlas.

This module provides the BoundaryLayerManager class that drives the
drill-down over administrative boundaries: it reacts to user events, issues
boundary fetches in the background, applies completed fetches on the calling
thread and keeps the viewport's layers in step with the atlas state.
"""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait, FIRST_COMPLETED
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, List, Optional

from ..config import AtlasConfig, SessionStats
from ..exceptions import AtlasError, RegionNotFound, create_region_not_found_error
from ..models import ActiveLayers, AtlasState, DrillLevel, LayerOpKind, LayerSlot, LayerSpec, SearchResult
from ..utils.data_utils import feature_bounds, normalize_region_key, Bounds
from ..utils.error_handler import ErrorHandler, create_error_context
from .cache import BoundaryCache, STATES_KEY
from .layers import (
    BoundaryLayer, STATE_NAME_FIELDS, DISTRICT_NAME_FIELDS, UNKNOWN_STATE, UNKNOWN_DISTRICT
)
from .lookup import find_district_feature
from . import transitions


@dataclass
class PendingFetch:
    """A boundary fetch in flight, tagged with the cache key it fills."""

    key: str
    region: str
    future: Future


@dataclass
class PendingSearch:
    """A district search waiting for its state's districts document."""

    state_name: str
    district_name: str
    key: str


class BoundaryLayerManager:
    """
    Coordinates boundary fetches, the atlas state and the viewport layers.

    Events (toggle, clicks, reset, search) are handled synchronously and
    return immediately; boundary documents are fetched on an executor and
    take effect when ``process_completed_fetches`` or ``wait_for_pending``
    is called. When several fetches race, the last selection wins: a
    districts document arriving for a state that is no longer selected is
    cached but never attached.
    """

    def __init__(self, viewport, fetcher, cache: Optional[BoundaryCache] = None,
                 config: Optional[AtlasConfig] = None,
                 executor: Optional[Executor] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 stats: Optional[SessionStats] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the manager with boundaries disabled at the country level.

        Args:
            viewport: MapViewport the layers are attached to
            fetcher: BoundaryFetcher (or any object with ``fetch_states`` and
                ``fetch_districts``)
            cache: Boundary cache shared with other components
            config: Atlas configuration; defaults are used when omitted
            executor: Executor running the fetches; a thread pool is created
                and owned by the manager when omitted
            error_handler: Handler surfacing fetch and lookup failures
            stats: Session statistics to update
            logger: Optional logger instance
        """
        self.viewport = viewport
        self.fetcher = fetcher
        self.config = config or AtlasConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.cache = cache if cache is not None else BoundaryCache(self.logger)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.stats = stats if stats is not None else SessionStats()

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_fetch_workers,
            thread_name_prefix='boundary-fetch'
        )

        self.state = AtlasState()
        self.active = ActiveLayers()
        self._pending: Dict[str, PendingFetch] = {}
        self._pending_search: Optional[PendingSearch] = None

    # ------------------------------------------------------------------
    # User events
    # ------------------------------------------------------------------

    def set_boundaries_enabled(self, enabled: bool) -> None:
        """
        Turn the administrative boundaries on or off.

        Enabling shows the states layer, fetching it on first use. Disabling
        removes the boundary layers and clears the drill-down selection; a
        search result on display is kept.
        """
        new_state = transitions.set_boundaries_enabled(self.state, enabled)
        if new_state is self.state:
            return

        self._supersede_search()
        self.logger.info(f"Boundaries {'enabled' if enabled else 'disabled'}")
        self._transition(new_state)
        self._request_documents()

    def toggle_boundaries(self) -> None:
        self.set_boundaries_enabled(not self.state.boundaries_enabled)

    def click_state(self, state_name: str, feature: Optional[Dict[str, Any]] = None) -> None:
        """
        Drill into a state.

        The previous districts layer is detached before anything else, the
        viewport is fitted to the state and its districts are requested.

        Args:
            state_name: Display name of the clicked state
            feature: Clicked state feature; looked up in the states layer
                when omitted
        """
        if not self.state.boundaries_enabled:
            self.logger.debug(f"Ignoring click on state {state_name}: boundaries are disabled")
            return

        self._supersede_search()
        self.logger.info(f"State selected: {state_name}")
        self._transition(transitions.select_state(self.state, state_name))

        bounds = self._bounds_for(feature, self.active.states_layer, state_name)
        if bounds is not None:
            self.viewport.fit_bounds(bounds, padding=self.config.state_fit_padding)

        self._request_documents()

    def click_district(self, district_name: str, feature: Optional[Dict[str, Any]] = None) -> None:
        """
        Focus a district of the selected state.

        Args:
            district_name: Display name of the clicked district
            feature: Clicked district feature; looked up in the selected
                state's districts document when omitted

        A name that matches no district of a loaded districts document is
        reported as RegionNotFound and leaves the selection unchanged.
        """
        if not self.state.boundaries_enabled or self.state.level not in (DrillLevel.STATE, DrillLevel.DISTRICT):
            self.logger.debug(f"Ignoring click on district {district_name} at level {self.state.level.value}")
            return

        document = self.cache.get(self.state.selection.state_key)
        if feature is None and document is not None:
            try:
                feature = find_district_feature(document, district_name, self.state.selected_state)
            except RegionNotFound as e:
                self._report(e, 'select_district', state=self.state.selected_state, district=district_name)
                return

        self._supersede_search()
        self.logger.info(f"District selected: {district_name}")
        self._transition(transitions.select_district(self.state, district_name))

        bounds = self._bounds_for(feature, self.active.districts_layer, district_name)
        if bounds is not None:
            self.viewport.fit_bounds(bounds)

    def reset_to_country(self) -> None:
        """Return to the country-wide view, leaving search mode if active."""
        self._supersede_search()
        self.logger.info("Reset to country view")
        self._transition(transitions.reset_to_country(self.state))
        self.viewport.set_view(
            self.config.default_center,
            self.config.default_zoom,
            animate=True,
            duration=0.8
        )
        self._request_documents()

    def search(self, state_name: str, district_name: str) -> None:
        """
        Show a single district looked up by state and district name.

        The state's districts document is taken from the cache or fetched.
        When the district is missing the user is notified and the displayed
        layers are left untouched.

        Args:
            state_name: State containing the district
            district_name: District to show
        """
        self._supersede_search()

        key = normalize_region_key(state_name)
        if not key or not (district_name or '').strip():
            self._report(
                create_region_not_found_error(district_name or '', parent=state_name or None),
                'search', state=state_name, district=district_name
            )
            return

        self.logger.info(f"Searching for district {district_name} in {state_name}")
        search = PendingSearch(state_name.strip(), district_name.strip(), key)

        document = self.cache.get(key)
        if document is not None:
            self.stats.cache_hits += 1
            self._complete_search(search, document)
            return

        self._pending_search = search
        self._ensure_fetch(key, search.state_name)

    # ------------------------------------------------------------------
    # Fetch completion
    # ------------------------------------------------------------------

    def process_completed_fetches(self) -> int:
        """
        Apply every fetch that has finished since the last call.

        Successful documents are cached; they are attached only if the
        current state still wants them. Failures are reported once through
        the error handler.

        Returns:
            Number of fetches applied
        """
        completed = [pending for pending in self._pending.values() if pending.future.done()]

        for pending in completed:
            del self._pending[pending.key]
            try:
                document = pending.future.result()
            except AtlasError as e:
                self._fail_fetch(pending, e)
                continue

            self.cache.put(pending.key, document)
            self.logger.debug(f"Boundaries for {pending.region} received")

            if pending.key != STATES_KEY and pending.key not in transitions.required_documents(self.state):
                if self._pending_search is None or self._pending_search.key != pending.key:
                    self.stats.stale_results_discarded += 1
                    self.logger.info(
                        f"Discarding districts of {pending.region}: "
                        f"selection is now {self.state.selected_state or self.state.level.value}"
                    )
                    continue

            search = self._pending_search
            if search is not None and search.key == pending.key:
                self._pending_search = None
                if self._complete_search(search, document):
                    continue

            # a failed search may share its document with the drill-down
            self._sync_layers()

        return len(completed)

    def wait_for_pending(self, timeout: Optional[float] = None) -> None:
        """
        Block until every in-flight fetch has been applied.

        Args:
            timeout: Maximum seconds to wait for each completion; None waits
                indefinitely
        """
        while self._pending:
            futures = [pending.future for pending in self._pending.values()]
            done, _not_done = wait(futures, timeout=timeout, return_when=FIRST_COMPLETED)
            if not done:
                self.logger.warning(f"Timed out waiting for {len(futures)} boundary fetch(es)")
                return
            self.process_completed_fetches()

    @property
    def loading(self) -> bool:
        return bool(self._pending)

    def pending_keys(self) -> List[str]:
        return list(self._pending)

    def close(self) -> None:
        """Shut down the owned executor, abandoning queued fetches."""
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, new_state: AtlasState) -> None:
        self.state = new_state
        self._sync_layers()

    def _sync_layers(self) -> None:
        """Bring the attached layers in line with the current state."""
        desired = transitions.plan_layers(self.state, self.cache)
        operations = transitions.reconcile(self.active.specs(), desired)

        for operation in operations:
            if operation.kind == LayerOpKind.DETACH:
                layer = self.active.detach(operation.slot)
                if layer is not None:
                    self.error_handler.safe_remove_layer(self.viewport, layer)
                    self.stats.layers_detached += 1
            else:
                layer = self._build_layer(operation.spec)
                self.viewport.add_layer(layer)
                self.active.attach(layer)
                self.stats.layers_attached += 1

    def _build_layer(self, spec: LayerSpec) -> BoundaryLayer:
        if spec.slot == LayerSlot.STATES:
            layer = BoundaryLayer(spec, self.config.state_style, STATE_NAME_FIELDS,
                                  UNKNOWN_STATE, popup_prefix='State', logger=self.logger)
            handler = self._on_state_click
        elif spec.slot == LayerSlot.DISTRICTS:
            layer = BoundaryLayer(spec, self.config.district_style, DISTRICT_NAME_FIELDS,
                                  UNKNOWN_DISTRICT, popup_prefix='District', logger=self.logger)
            handler = self._on_district_click
        else:
            return BoundaryLayer(spec, self.config.search_style, DISTRICT_NAME_FIELDS,
                                 UNKNOWN_DISTRICT, popup_prefix='District', logger=self.logger)

        for index in range(len(layer.features)):
            layer.bind_click(index, handler)
        return layer

    def _on_state_click(self, feature: Dict[str, Any], label: str) -> None:
        self.click_state(label, feature)

    def _on_district_click(self, feature: Dict[str, Any], label: str) -> None:
        self.click_district(label, feature)

    def _request_documents(self) -> None:
        """Fetch whatever boundary documents the current state lacks."""
        for key in transitions.required_documents(self.state):
            if key in self.cache:
                self.stats.cache_hits += 1
                continue
            region = 'India' if key == STATES_KEY else self.state.selected_state
            self._ensure_fetch(key, region)

    def _ensure_fetch(self, key: str, region: str) -> None:
        if key in self._pending:
            self.logger.debug(f"Fetch for {region} already in flight")
            return

        if key == STATES_KEY:
            task = self.fetcher.fetch_states
        else:
            task = partial(self.fetcher.fetch_districts, region)

        self._pending[key] = PendingFetch(key, region, self.executor.submit(task))
        self.stats.fetches_issued += 1

    def _fail_fetch(self, pending: PendingFetch, error: AtlasError) -> None:
        self.stats.fetch_failures += 1
        if self._pending_search is not None and self._pending_search.key == pending.key:
            self._pending_search = None
        self._report(error, 'fetch_boundaries', region=pending.region, key=pending.key)

    def _complete_search(self, search: PendingSearch, document: Dict[str, Any]) -> bool:
        """Enter search mode on the matched district; False if it is missing."""
        try:
            feature = find_district_feature(document, search.district_name, search.state_name)
        except RegionNotFound as e:
            self._report(e, 'search', state=search.state_name, district=search.district_name)
            return False

        result = SearchResult(search.state_name, search.district_name, feature)
        self._transition(transitions.enter_search(self.state, result))

        bounds = feature_bounds(feature)
        if bounds is not None:
            self.viewport.fit_bounds(bounds)
        return True

    def _supersede_search(self) -> None:
        if self._pending_search is not None:
            self.logger.info(
                f"Search for {self._pending_search.district_name} superseded by a newer selection"
            )
            self._pending_search = None

    def _bounds_for(self, feature: Optional[Dict[str, Any]],
                    layer: Optional[BoundaryLayer], name: str) -> Optional[Bounds]:
        if feature is None and layer is not None:
            index = layer.find_feature(name)
            if index is not None:
                feature = layer.features[index]

        bounds = feature_bounds(feature) if feature is not None else None
        if bounds is None:
            self.logger.warning(f"Could not determine bounds of {name}; viewport left unchanged")
        return bounds

    def _report(self, error: AtlasError, operation: str, **details) -> None:
        self.error_handler.handle_error(error, create_error_context(operation, **details))
