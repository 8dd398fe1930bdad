"""
Tests for the pure state transitions and layer reconciliation.
"""

import pytest

from conftest import DISTRICT_DOCUMENTS, STATES_DOCUMENT, square_feature
from fra_atlas.boundaries import transitions
from fra_atlas.boundaries.cache import STATES_KEY
from fra_atlas.models import (
    AtlasState, DrillLevel, LayerOpKind, LayerSlot, LayerSpec, SearchResult, SelectionState
)


DOCUMENTS = {STATES_KEY: STATES_DOCUMENT, **DISTRICT_DOCUMENTS}


def enabled(level=DrillLevel.COUNTRY, state=None, district=None):
    return AtlasState(SelectionState(level, state, district), boundaries_enabled=True)


def search_state(enabled_flag=True):
    result = SearchResult('Bihar', 'Patna', square_feature(85.0, 25.4, dtname='Patna'))
    return AtlasState(SelectionState(DrillLevel.SEARCH), enabled_flag, result)


class TestModels:

    def test_state_level_requires_name(self):
        with pytest.raises(ValueError):
            SelectionState(DrillLevel.STATE)

    def test_country_level_rejects_names(self):
        with pytest.raises(ValueError):
            SelectionState(DrillLevel.COUNTRY, selected_state='Bihar')

    def test_search_level_requires_result(self):
        with pytest.raises(ValueError):
            AtlasState(SelectionState(DrillLevel.SEARCH))


class TestTransitions:

    def test_disable_clears_selection(self):
        state = enabled(DrillLevel.DISTRICT, 'Odisha', 'Cuttack')
        new_state = transitions.set_boundaries_enabled(state, False)

        assert new_state == AtlasState()

    def test_disable_in_search_keeps_result(self):
        state = search_state()
        new_state = transitions.set_boundaries_enabled(state, False)

        assert new_state.level == DrillLevel.SEARCH
        assert new_state.search_result == state.search_result
        assert not new_state.boundaries_enabled

    def test_enable_from_search_returns_to_country(self):
        new_state = transitions.set_boundaries_enabled(search_state(False), True)
        assert new_state == AtlasState(boundaries_enabled=True)

    def test_unchanged_toggle_returns_same_state(self):
        state = enabled()
        assert transitions.set_boundaries_enabled(state, True) is state

    def test_select_state_clears_district(self):
        state = enabled(DrillLevel.DISTRICT, 'Odisha', 'Cuttack')
        new_state = transitions.select_state(state, 'Bihar')

        assert new_state.level == DrillLevel.STATE
        assert new_state.selected_state == 'Bihar'
        assert new_state.selected_district is None

    def test_select_state_ignored_when_disabled(self):
        state = AtlasState()
        assert transitions.select_state(state, 'Bihar') is state

    def test_select_district_requires_state_level(self):
        state = enabled()
        assert transitions.select_district(state, 'Patna') is state

        new_state = transitions.select_district(enabled(DrillLevel.STATE, 'Bihar'), 'Patna')
        assert new_state.selected_district == 'Patna'
        assert new_state.selected_state == 'Bihar'

    def test_reset_keeps_toggle(self):
        assert transitions.reset_to_country(enabled(DrillLevel.STATE, 'Bihar')) == enabled()
        assert transitions.reset_to_country(search_state(False)) == AtlasState()

    def test_enter_search_clears_selection(self):
        result = SearchResult('Bihar', 'Gaya', square_feature(84.8, 24.6, dtname='Gaya'))
        new_state = transitions.enter_search(enabled(DrillLevel.STATE, 'Odisha'), result)

        assert new_state.level == DrillLevel.SEARCH
        assert new_state.selected_state is None
        assert new_state.search_result is result


class TestPlanLayers:

    def test_country_level_plans_states_only(self):
        desired = transitions.plan_layers(enabled(), DOCUMENTS)
        assert list(desired) == [LayerSlot.STATES]
        assert desired[LayerSlot.STATES].key == STATES_KEY

    def test_state_level_plans_districts_of_selected_state(self):
        desired = transitions.plan_layers(enabled(DrillLevel.STATE, 'Madhya Pradesh'), DOCUMENTS)
        assert desired[LayerSlot.DISTRICTS].key == 'MADHYA_PRADESH'
        assert desired[LayerSlot.DISTRICTS].document is DISTRICT_DOCUMENTS['MADHYA_PRADESH']

    def test_missing_documents_are_not_planned(self):
        desired = transitions.plan_layers(enabled(DrillLevel.STATE, 'Goa'), {})
        assert desired == {}

    def test_disabled_plans_nothing(self):
        assert transitions.plan_layers(AtlasState(), DOCUMENTS) == {}

    def test_search_plans_single_feature_layer(self):
        desired = transitions.plan_layers(search_state(), DOCUMENTS)

        assert list(desired) == [LayerSlot.SEARCH]
        spec = desired[LayerSlot.SEARCH]
        assert spec.key == 'BIHAR/PATNA'
        assert len(spec.document['features']) == 1
        assert spec.label == 'Patna, Bihar'

    def test_required_documents(self):
        assert transitions.required_documents(AtlasState()) == []
        assert transitions.required_documents(enabled()) == [STATES_KEY]
        assert transitions.required_documents(enabled(DrillLevel.STATE, 'Odisha')) == [STATES_KEY, 'ODISHA']
        assert transitions.required_documents(search_state()) == []


class TestReconcile:

    def spec(self, slot, key):
        return LayerSpec(slot, key, {'type': 'FeatureCollection', 'features': []})

    def test_unchanged_identity_produces_no_ops(self):
        layers = {LayerSlot.STATES: self.spec(LayerSlot.STATES, STATES_KEY)}
        assert transitions.reconcile(layers, dict(layers)) == []

    def test_detaches_precede_attaches(self):
        previous = {
            LayerSlot.STATES: self.spec(LayerSlot.STATES, STATES_KEY),
            LayerSlot.DISTRICTS: self.spec(LayerSlot.DISTRICTS, 'BIHAR'),
        }
        desired = {
            LayerSlot.STATES: self.spec(LayerSlot.STATES, STATES_KEY),
            LayerSlot.DISTRICTS: self.spec(LayerSlot.DISTRICTS, 'ODISHA'),
        }

        operations = transitions.reconcile(previous, desired)

        assert [(op.kind, op.spec.key) for op in operations] == [
            (LayerOpKind.DETACH, 'BIHAR'),
            (LayerOpKind.ATTACH, 'ODISHA'),
        ]

    def test_entering_search_detaches_all_boundaries(self):
        previous = {
            LayerSlot.STATES: self.spec(LayerSlot.STATES, STATES_KEY),
            LayerSlot.DISTRICTS: self.spec(LayerSlot.DISTRICTS, 'BIHAR'),
        }
        desired = {LayerSlot.SEARCH: self.spec(LayerSlot.SEARCH, 'BIHAR/PATNA')}

        operations = transitions.reconcile(previous, desired)

        assert [(op.kind, op.slot) for op in operations] == [
            (LayerOpKind.DETACH, LayerSlot.DISTRICTS),
            (LayerOpKind.DETACH, LayerSlot.STATES),
            (LayerOpKind.ATTACH, LayerSlot.SEARCH),
        ]

    def test_reconcile_from_plan_reaches_plan(self):
        previous = transitions.plan_layers(enabled(DrillLevel.STATE, 'Bihar'), DOCUMENTS)
        desired = transitions.plan_layers(search_state(), DOCUMENTS)

        applied = dict(previous)
        for operation in transitions.reconcile(previous, desired):
            if operation.kind == LayerOpKind.DETACH:
                del applied[operation.slot]
            else:
                assert operation.slot not in applied
                applied[operation.slot] = operation.spec

        assert {slot: spec.identity for slot, spec in applied.items()} == \
            {slot: spec.identity for slot, spec in desired.items()}
