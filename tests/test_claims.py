"""
Tests for the claims dataset, filtering and rendering.
"""

import json

import pytest

from conftest import RecordingViewport, square_feature
from fra_atlas.claims.data import SAMPLE_CLAIMS, claims_frame, load_claims, sample_claims
from fra_atlas.claims.filters import filter_claims
from fra_atlas.claims.renderer import (
    STATUS_COLORS, ClaimsRenderer, claim_popup_text, recommend_schemes, status_color,
    summarize_by_status
)
from fra_atlas.exceptions import ConfigurationError, InvalidFormat
from fra_atlas.models import FilterState


def claim_ids(claims):
    return [claim['properties']['claimId'] for claim in claims]


@pytest.fixture
def claims():
    return sample_claims()


class TestDataset:

    def test_sample_has_six_claims(self, claims):
        assert len(claims) == 6
        assert {claim['properties']['state'] for claim in claims} == {
            'Madhya Pradesh', 'Tripura', 'Odisha', 'Telangana'
        }

    def test_sample_copy_is_independent(self, claims):
        claims[0]['properties']['status'] = 'Rejected'
        assert SAMPLE_CLAIMS['features'][0]['properties']['status'] == 'Pending'

    def test_load_claims_defaults_to_sample(self):
        assert claim_ids(load_claims()) == claim_ids(SAMPLE_CLAIMS['features'])

    def test_load_claims_from_file(self, tmp_path):
        path = tmp_path / 'claims.geojson'
        path.write_text(json.dumps({
            'type': 'FeatureCollection',
            'features': [square_feature(80, 20, claimId='X1', status='Approved')]
        }), encoding='utf-8')

        assert claim_ids(load_claims(str(path))) == ['X1']

    def test_missing_file_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError) as excinfo:
            load_claims(str(tmp_path / 'absent.geojson'))
        assert excinfo.value.config_key == 'claims_file'

    def test_non_feature_collection_is_invalid(self, tmp_path):
        path = tmp_path / 'claims.json'
        path.write_text(json.dumps({'type': 'Feature'}), encoding='utf-8')

        with pytest.raises(InvalidFormat):
            load_claims(str(path))

    def test_malformed_json_is_invalid(self, tmp_path):
        path = tmp_path / 'claims.json'
        path.write_text('{not json', encoding='utf-8')

        with pytest.raises(InvalidFormat):
            load_claims(str(path))

    def test_claims_frame_has_all_columns(self):
        frame = claims_frame([square_feature(0, 0, claimId='X1')])
        assert list(frame['claimId']) == ['X1']
        assert list(frame['status']) == ['']


class TestFilterClaims:

    def test_approved_status_returns_exactly_approved_claims(self, claims):
        result = filter_claims(claims, FilterState(claim_statuses={'Approved'}))

        expected = [claim for claim in claims if claim['properties']['status'] == 'Approved']
        assert result == expected
        assert claim_ids(result) == ['CLM002', 'CLM005']

    def test_empty_filters_match_all(self, claims):
        assert filter_claims(claims, FilterState()) == claims

    def test_text_filters_are_case_insensitive_substrings(self, claims):
        assert claim_ids(filter_claims(claims, FilterState(state='madhya'))) == ['CLM001', 'CLM005']
        assert claim_ids(filter_claims(claims, FilterState(district='AGAR'))) == ['CLM002']
        assert claim_ids(filter_claims(claims, FilterState(village='village e'))) == ['CLM003']
        assert claim_ids(filter_claims(claims, FilterState(tribal_group='trip'))) == ['CLM006', 'CLM002']

    def test_feature_type_is_exact(self, claims):
        assert claim_ids(filter_claims(claims, FilterState(feature_type='CFR'))) == ['CLM002', 'CLM005']
        assert filter_claims(claims, FilterState(feature_type='cfr')) == []

    def test_fields_combine_with_and(self, claims):
        filters = FilterState(state='Tripura', claim_statuses={'Pending', 'Rejected'})
        assert claim_ids(filter_claims(claims, filters)) == ['CLM006']

    def test_regex_characters_are_literal(self, claims):
        assert filter_claims(claims, FilterState(village='Village (A')) == []

    @pytest.mark.parametrize('filters', [
        FilterState(),
        FilterState(state='a'),
        FilterState(claim_statuses={'Pending', 'Approved'}, feature_type='CR'),
        FilterState(district='o', tribal_group='i'),
    ])
    def test_filtering_is_idempotent(self, claims, filters):
        once = filter_claims(claims, filters)
        assert filter_claims(once, filters) == once

    def test_input_is_not_modified(self, claims):
        before = claim_ids(claims)
        filter_claims(claims, FilterState(state='Odisha'))
        assert claim_ids(claims) == before


class TestPresentation:

    def test_status_colors(self):
        assert status_color('Approved') == STATUS_COLORS['Approved']
        assert status_color('Unknown') == STATUS_COLORS['Pending']
        assert status_color(None) == STATUS_COLORS['Pending']

    def test_scheme_recommendations(self, claims):
        by_id = {claim['properties']['claimId']: claim for claim in claims}

        assert recommend_schemes(by_id['CLM002']) == ['PM-KISAN', 'MGNREGA', 'DAJGUA']
        assert recommend_schemes(by_id['CLM003']) == ['DAJGUA']
        assert recommend_schemes(square_feature(0, 0, featureType='Water', density=0.2)) == ['Jal Jeevan Mission']
        assert recommend_schemes(square_feature(0, 0, featureType='IFR', status='Rejected')) == ['None']

    def test_popup_text(self, claims):
        text = claim_popup_text(claims[0])

        assert '<b>CLM001</b>' in text
        assert 'Claimant: John Doe' in text
        assert 'Location: Village A, Bhopal, Madhya Pradesh' in text
        assert 'Eligible schemes: DAJGUA' in text

    def test_summarize_by_status(self, claims):
        assert summarize_by_status(claims) == {
            'Approved': 2, 'Pending': 2, 'Under Review': 1, 'Rejected': 1
        }
        assert summarize_by_status([]) == {
            'Approved': 0, 'Pending': 0, 'Under Review': 0, 'Rejected': 0
        }


class TestClaimsRenderer:

    def test_update_swaps_single_layer(self, claims):
        viewport = RecordingViewport()
        renderer = ClaimsRenderer(viewport, claims)

        first = renderer.update()
        second = renderer.update(FilterState(claim_statuses={'Rejected'}))

        assert viewport.layers == [second]
        assert not viewport.has_layer(first)
        assert claim_ids(second.features) == ['CLM003']
        assert renderer.filters == FilterState(claim_statuses={'Rejected'})

    def test_layer_styles_by_status(self, claims):
        renderer = ClaimsRenderer(RecordingViewport(), claims)
        layer = renderer.update()

        rendered = layer.render_document()['features']
        styles = [layer.style_for(feature)['color'] for feature in rendered]

        assert styles[0] == STATUS_COLORS['Pending']
        assert styles[1] == STATUS_COLORS['Under Review']
        assert rendered[0]['properties']['_label'] == 'CLM001'

    def test_status_summary_of_visible_claims(self, claims):
        renderer = ClaimsRenderer(RecordingViewport(), claims)
        renderer.update(FilterState(state='Tripura'))

        assert renderer.status_summary()['Approved'] == 1
        assert renderer.status_summary()['Pending'] == 1
        assert list(renderer.summary_frame()['claimId']) == ['CLM006', 'CLM002']
