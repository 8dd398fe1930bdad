"""
Shared fixtures for the FRA atlas tests.
"""

from concurrent.futures import Executor, Future

import pytest

from fra_atlas.boundaries.cache import BoundaryCache
from fra_atlas.boundaries.manager import BoundaryLayerManager
from fra_atlas.config import AtlasConfig
from fra_atlas.exceptions import BoundaryNotFound, LayerRemovalError
from fra_atlas.models import LayerSlot
from fra_atlas.utils.data_utils import feature_collection, normalize_region_key
from fra_atlas.utils.error_handler import ErrorHandler
from fra_atlas.viewport import MapViewport


def square_feature(west, south, size=1.0, **properties):
    """Feature with a square polygon whose south-west corner is (west, south)."""
    east, north = west + size, south + size
    return {
        'type': 'Feature',
        'properties': properties,
        'geometry': {
            'type': 'Polygon',
            'coordinates': [[
                [west, south], [east, south], [east, north], [west, north], [west, south]
            ]]
        }
    }


STATES_DOCUMENT = feature_collection([
    square_feature(81.0, 17.5, 5.0, STNAME='Odisha'),
    square_feature(83.0, 24.0, 4.0, STNAME='Bihar'),
    square_feature(74.0, 21.0, 8.0, STNAME='Madhya Pradesh'),
])

DISTRICT_DOCUMENTS = {
    'ODISHA': feature_collection([
        square_feature(85.0, 20.0, 0.5, dtname='Khordha'),
        square_feature(85.5, 20.3, 0.5, dtname='Cuttack'),
    ]),
    'BIHAR': feature_collection([
        square_feature(85.0, 25.4, 0.5, dtname='Patna'),
        square_feature(84.8, 24.6, 0.5, dtname='Gaya'),
    ]),
    'MADHYA_PRADESH': feature_collection([
        square_feature(75.7, 22.4, 0.6, dtname='Indore'),
        square_feature(77.2, 23.1, 0.6, dtname='Bhopal'),
    ]),
}


class RecordingViewport(MapViewport):
    """Viewport fake that records every call and the attached layers."""

    def __init__(self):
        self.layers = []
        self.calls = []
        self.view = None
        self.fits = []
        self.basemap = 'openstreetmap'
        self.drawing_enabled = False
        self.saved_to = None

    def set_view(self, center, zoom, **options):
        self.view = (tuple(center), zoom)
        self.calls.append(('set_view', tuple(center), zoom))

    def fit_bounds(self, bounds, **options):
        self.fits.append((bounds, options))
        self.calls.append(('fit_bounds', bounds))

    def add_layer(self, layer):
        if self.has_layer(layer):
            raise ValueError(f"Layer {layer.name} is already attached")
        self.layers.append(layer)
        self.calls.append(('add', layer.name))

    def remove_layer(self, layer):
        if not self.has_layer(layer):
            raise LayerRemovalError(f"Layer {layer.name} is not attached", layer_name=layer.name)
        self.layers = [attached for attached in self.layers if attached is not layer]
        self.calls.append(('remove', layer.name))

    def has_layer(self, layer):
        return any(attached is layer for attached in self.layers)

    def set_basemap(self, key):
        self.basemap = key

    def enable_drawing(self):
        self.drawing_enabled = True

    def save(self, path):
        self.saved_to = path

    def layer_names(self):
        return [layer.name for layer in self.layers]

    def boundary_layers(self, slot=None):
        layers = [layer for layer in self.layers if hasattr(layer, 'spec')]
        if slot is not None:
            layers = [layer for layer in layers if layer.spec.slot == slot]
        return layers

    def districts_layers(self):
        return self.boundary_layers(LayerSlot.DISTRICTS)


class DeferredExecutor(Executor):
    """Executor that only runs submitted work when a test asks it to."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.submitted.append((future, fn, args, kwargs))
        return future

    def run(self, index=0):
        future, fn, args, kwargs = self.submitted.pop(index)
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def run_all(self):
        while self.submitted:
            self.run(0)

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.submitted.clear()


class FakeFetcher:
    """Boundary fetcher serving canned documents and counting requests."""

    def __init__(self, states=STATES_DOCUMENT, districts=None):
        self.states = states
        self.districts = dict(DISTRICT_DOCUMENTS if districts is None else districts)
        self.calls = []
        self.failures = {}
        self.closed = False

    def fetch_states(self):
        self.calls.append('states')
        if 'states' in self.failures:
            raise self.failures['states']
        return self.states

    def fetch_districts(self, state_name):
        key = normalize_region_key(state_name)
        self.calls.append(key)
        if key in self.failures:
            raise self.failures[key]
        if key not in self.districts:
            raise BoundaryNotFound(
                f"No districts for {state_name}", region=state_name,
                url=f"https://example.test/{key}", status_code=404
            )
        return self.districts[key]

    def list_known_states(self, states_document=None):
        document = states_document or self.states
        return sorted(feature['properties']['STNAME'] for feature in document['features'])

    def close(self):
        self.closed = True


@pytest.fixture
def viewport():
    return RecordingViewport()


@pytest.fixture
def executor():
    return DeferredExecutor()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def config():
    return AtlasConfig()


@pytest.fixture
def manager(viewport, fetcher, executor, notifications, config):
    return BoundaryLayerManager(
        viewport,
        fetcher,
        cache=BoundaryCache(),
        config=config,
        executor=executor,
        error_handler=ErrorHandler(notifier=notifications.append)
    )


def settle(manager, executor):
    """Run every queued fetch and apply the results."""
    executor.run_all()
    return manager.process_completed_fetches()


@pytest.fixture
def enabled_manager(manager, executor):
    """Manager with boundaries enabled and the states layer attached."""
    manager.set_boundaries_enabled(True)
    settle(manager, executor)
    return manager
