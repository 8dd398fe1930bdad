"""
Data models for the FRA atlas application.

This module defines the state that drives the map: the drill-down selection,
the explicit atlas state container, the claim filters, the layer plan types
exchanged with the reconciler and the registry of layers attached to the
viewport.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Dict, Any, FrozenSet, Iterable, List, TYPE_CHECKING

from .utils.data_utils import normalize_region_key, safe_string_conversion

if TYPE_CHECKING:
    from .boundaries.layers import BoundaryLayer


class DrillLevel(str, Enum):
    """Granularity the user is currently navigating at."""

    COUNTRY = 'country'
    STATE = 'state'
    DISTRICT = 'district'
    SEARCH = 'search'


class LayerSlot(str, Enum):
    """Viewport slots that hold at most one boundary layer each."""

    STATES = 'states'
    DISTRICTS = 'districts'
    SEARCH = 'search'


class LayerOpKind(str, Enum):
    ATTACH = 'attach'
    DETACH = 'detach'


@dataclass(frozen=True)
class SelectionState:
    """Drill-down selection with the level/name invariants enforced."""

    level: DrillLevel = DrillLevel.COUNTRY
    selected_state: Optional[str] = None
    selected_district: Optional[str] = None

    def __post_init__(self):
        """Validate the combination of level and selected names."""
        if self.level == DrillLevel.DISTRICT:
            if not (self.selected_state and self.selected_district):
                raise ValueError("District level requires both a state and a district")
        elif self.level == DrillLevel.STATE:
            if not self.selected_state:
                raise ValueError("State level requires a selected state")
            if self.selected_district:
                raise ValueError("State level must not carry a selected district")
        elif self.selected_state or self.selected_district:
            raise ValueError(f"{self.level.value.capitalize()} level must not carry selected names")

    @property
    def state_key(self) -> str:
        """Region key of the selected state, or ``""``."""
        return normalize_region_key(self.selected_state)


@dataclass(frozen=True)
class SearchResult:
    """District located by an explicit search."""

    state: str
    district: str
    feature: Dict[str, Any] = field(compare=False, repr=False)

    @property
    def key(self) -> str:
        return f"{normalize_region_key(self.state)}/{normalize_region_key(self.district)}"


@dataclass(frozen=True)
class AtlasState:
    """
    Explicit state container for boundary navigation.

    Every user event is expressed as a pure transition from one AtlasState to
    the next; the layers on the viewport are derived from it.
    """

    selection: SelectionState = field(default_factory=SelectionState)
    boundaries_enabled: bool = False
    search_result: Optional[SearchResult] = None

    def __post_init__(self):
        in_search = self.selection.level == DrillLevel.SEARCH
        if in_search != (self.search_result is not None):
            raise ValueError("A search result is present exactly when the level is search")

    @property
    def level(self) -> DrillLevel:
        return self.selection.level

    @property
    def selected_state(self) -> Optional[str]:
        return self.selection.selected_state

    @property
    def selected_district(self) -> Optional[str]:
        return self.selection.selected_district


@dataclass(frozen=True)
class LayerSpec:
    """Description of one boundary layer the viewport should show."""

    slot: LayerSlot
    key: str
    document: Dict[str, Any] = field(compare=False, repr=False)
    label: str = ''

    @property
    def identity(self):
        return (self.slot, self.key)


@dataclass(frozen=True)
class LayerOp:
    """A single attach or detach applied to the viewport."""

    kind: LayerOpKind
    spec: LayerSpec

    @property
    def slot(self) -> LayerSlot:
        return self.spec.slot


@dataclass(frozen=True)
class FilterState:
    """Claim filters, combined by logical AND over the non-empty fields."""

    state: str = ''
    district: str = ''
    village: str = ''
    tribal_group: str = ''
    claim_statuses: FrozenSet[str] = frozenset()
    feature_type: str = ''

    def __post_init__(self):
        # Accept any iterable of statuses and blank/None text fields
        object.__setattr__(self, 'claim_statuses', frozenset(self.claim_statuses or ()))
        for name in ('state', 'district', 'village', 'tribal_group', 'feature_type'):
            object.__setattr__(self, name, safe_string_conversion(getattr(self, name)))

    def is_empty(self) -> bool:
        """Check whether no filter field is set."""
        return not any([
            self.state, self.district, self.village, self.tribal_group,
            self.claim_statuses, self.feature_type
        ])

    def update(self, **changes) -> 'FilterState':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def with_statuses(self, statuses: Iterable[str]) -> 'FilterState':
        return replace(self, claim_statuses=frozenset(statuses))


@dataclass
class ActiveLayers:
    """
    Registry of the boundary layers currently attached to the viewport.

    Each slot holds at most one layer; a slot must be emptied before a new
    layer is placed in it.
    """

    layers: Dict[LayerSlot, 'BoundaryLayer'] = field(default_factory=dict)

    def get(self, slot: LayerSlot) -> Optional['BoundaryLayer']:
        return self.layers.get(slot)

    def attach(self, layer: 'BoundaryLayer') -> None:
        """Record ``layer`` in its slot; the slot must be empty."""
        if layer.spec.slot in self.layers:
            raise ValueError(f"Slot '{layer.spec.slot.value}' already holds a layer")
        self.layers[layer.spec.slot] = layer

    def detach(self, slot: LayerSlot) -> Optional['BoundaryLayer']:
        """Remove and return the layer in ``slot``, if any."""
        return self.layers.pop(slot, None)

    def specs(self) -> Dict[LayerSlot, LayerSpec]:
        """Return the spec of every attached layer, keyed by slot."""
        return {slot: layer.spec for slot, layer in self.layers.items()}

    def all(self) -> List['BoundaryLayer']:
        return list(self.layers.values())

    @property
    def states_layer(self) -> Optional['BoundaryLayer']:
        return self.layers.get(LayerSlot.STATES)

    @property
    def districts_layer(self) -> Optional['BoundaryLayer']:
        return self.layers.get(LayerSlot.DISTRICTS)

    @property
    def search_layer(self) -> Optional['BoundaryLayer']:
        return self.layers.get(LayerSlot.SEARCH)
