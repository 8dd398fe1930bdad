"""
Pure state transitions and layer reconciliation.

Every user event maps an AtlasState to a new AtlasState. The layers the
viewport should show are derived from the state with ``plan_layers`` and
compared against what is attached with ``reconcile``; nothing in this module
touches the viewport or the network.
"""

from typing import Any, Dict, List, Mapping

from ..models import (
    AtlasState, DrillLevel, LayerOp, LayerOpKind, LayerSlot, LayerSpec,
    SearchResult, SelectionState
)
from ..utils.data_utils import feature_collection
from .cache import STATES_KEY


# Detach the topmost layers first and attach the states layer beneath the rest
_DETACH_ORDER = (LayerSlot.SEARCH, LayerSlot.DISTRICTS, LayerSlot.STATES)
_ATTACH_ORDER = (LayerSlot.STATES, LayerSlot.DISTRICTS, LayerSlot.SEARCH)


def set_boundaries_enabled(state: AtlasState, enabled: bool) -> AtlasState:
    """
    Apply the boundary toggle.

    Disabling outside search mode clears the drill-down; disabling in search
    mode keeps the search result. Enabling from search mode leaves search and
    returns to the country level.
    """
    if enabled == state.boundaries_enabled:
        return state

    if enabled:
        if state.level == DrillLevel.SEARCH:
            return AtlasState(boundaries_enabled=True)
        return AtlasState(selection=state.selection, boundaries_enabled=True)

    if state.level == DrillLevel.SEARCH:
        return AtlasState(
            selection=state.selection,
            boundaries_enabled=False,
            search_result=state.search_result
        )
    return AtlasState(boundaries_enabled=False)


def select_state(state: AtlasState, state_name: str) -> AtlasState:
    """Drill into ``state_name``; ignored while boundaries are disabled."""
    if not state.boundaries_enabled:
        return state

    return AtlasState(
        selection=SelectionState(DrillLevel.STATE, selected_state=state_name),
        boundaries_enabled=True
    )


def select_district(state: AtlasState, district_name: str) -> AtlasState:
    """Drill into a district of the selected state."""
    if not state.boundaries_enabled or state.level not in (DrillLevel.STATE, DrillLevel.DISTRICT):
        return state

    return AtlasState(
        selection=SelectionState(
            DrillLevel.DISTRICT,
            selected_state=state.selected_state,
            selected_district=district_name
        ),
        boundaries_enabled=True
    )


def reset_to_country(state: AtlasState) -> AtlasState:
    """Return to the country level, keeping the boundary toggle as it is."""
    return AtlasState(boundaries_enabled=state.boundaries_enabled)


def enter_search(state: AtlasState, result: SearchResult) -> AtlasState:
    """Switch to search mode showing ``result``; drill-down names are cleared."""
    return AtlasState(
        selection=SelectionState(DrillLevel.SEARCH),
        boundaries_enabled=state.boundaries_enabled,
        search_result=result
    )


def plan_layers(state: AtlasState,
                documents: Mapping[str, Dict[str, Any]]) -> Dict[LayerSlot, LayerSpec]:
    """
    Derive the layer each viewport slot should hold.

    Args:
        state: Current atlas state
        documents: Boundary documents available so far (the boundary cache)

    Returns:
        Mapping of slot to the desired layer spec; slots absent from the
        mapping should be empty
    """
    desired: Dict[LayerSlot, LayerSpec] = {}

    if state.level == DrillLevel.SEARCH:
        result = state.search_result
        desired[LayerSlot.SEARCH] = LayerSpec(
            slot=LayerSlot.SEARCH,
            key=result.key,
            document=feature_collection([result.feature]),
            label=f"{result.district}, {result.state}"
        )
        return desired

    if not state.boundaries_enabled:
        return desired

    states_document = documents.get(STATES_KEY)
    if states_document is not None:
        desired[LayerSlot.STATES] = LayerSpec(
            slot=LayerSlot.STATES,
            key=STATES_KEY,
            document=states_document,
            label='India'
        )

    if state.level in (DrillLevel.STATE, DrillLevel.DISTRICT):
        state_key = state.selection.state_key
        districts_document = documents.get(state_key)
        if districts_document is not None:
            desired[LayerSlot.DISTRICTS] = LayerSpec(
                slot=LayerSlot.DISTRICTS,
                key=state_key,
                document=districts_document,
                label=state.selected_state
            )

    return desired


def reconcile(previous: Mapping[LayerSlot, LayerSpec],
              desired: Mapping[LayerSlot, LayerSpec]) -> List[LayerOp]:
    """
    Diff the attached layers against the desired ones.

    A slot whose layer identity (slot, key) is unchanged produces no
    operation. Every detach is ordered before every attach, so a slot is
    always emptied before it is refilled.

    Args:
        previous: Specs of the layers currently attached, keyed by slot
        desired: Specs the viewport should hold, keyed by slot

    Returns:
        Ordered list of layer operations
    """
    operations: List[LayerOp] = []

    for slot in _DETACH_ORDER:
        current = previous.get(slot)
        wanted = desired.get(slot)
        if current is not None and (wanted is None or wanted.identity != current.identity):
            operations.append(LayerOp(LayerOpKind.DETACH, current))

    for slot in _ATTACH_ORDER:
        current = previous.get(slot)
        wanted = desired.get(slot)
        if wanted is not None and (current is None or current.identity != wanted.identity):
            operations.append(LayerOp(LayerOpKind.ATTACH, wanted))

    return operations


def required_documents(state: AtlasState) -> List[str]:
    """
    List the boundary documents the state's layers are built from.

    Returns:
        Cache keys: ``"states"`` and, below country level, the selected
        state's key
    """
    if not state.boundaries_enabled or state.level == DrillLevel.SEARCH:
        return []

    needed = [STATES_KEY]
    if state.level in (DrillLevel.STATE, DrillLevel.DISTRICT) and state.selection.state_key:
        needed.append(state.selection.state_key)
    return needed
