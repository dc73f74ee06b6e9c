"""
Integration tests for the health check and the validation discovery and
dry-run endpoints.
"""

import pytest

from cashheros import __version__
from cashheros.validation import RULE_SETS, SCHEMAS


@pytest.mark.integration
class TestHealth:

    def test_health_reports_compiled_rule_sets(self, client):
        response = client.get('/health')
        body = response.get_json()
        assert response.status_code == 200
        assert body['success'] is True
        assert body['data'] == {'status': 'healthy', 'version': __version__, 'rule_sets': len(RULE_SETS)}


@pytest.mark.integration
class TestRuleSetEndpoints:

    def test_list_rule_sets(self, client):
        response = client.get('/api/validation/rule-sets')
        rule_sets = response.get_json()['data']['rule_sets']

        assert set(rule_sets) == set(RULE_SETS)
        assert rule_sets['common.pagination'][0] == {
            'field': 'page',
            'location': 'query',
            'message': 'Page must be a positive integer',
            'checks': ['isInt', 'min'],
        }

    def test_dry_run_valid_payload(self, client, valid_coupon):
        response = client.post('/api/validation/rule-sets/coupon.create', json=valid_coupon)
        assert response.status_code == 200
        assert response.get_json()['data'] == {'rule_set': 'coupon.create', 'valid': True}

    def test_dry_run_invalid_payload(self, client):
        response = client.post('/api/validation/rule-sets/coupon.create', json={'discount': -5})
        errors = response.get_json()['error']['details']['validation_errors']
        assert response.status_code == 422
        assert errors['discount'] == ['Discount must be a positive number']

    def test_dry_run_reads_query_arguments(self, client):
        response = client.post('/api/validation/rule-sets/common.pagination?limit=0')
        assert response.status_code == 422

    def test_dry_run_unknown_rule_set(self, client):
        response = client.post('/api/validation/rule-sets/coupon.delete', json={})
        assert response.status_code == 404
        assert response.get_json()['error']['message'] == 'Rule set "coupon.delete" does not exist'


@pytest.mark.integration
class TestSchemaEndpoints:

    def test_list_schemas(self, client):
        response = client.get('/api/validation/schemas')
        assert response.get_json()['data']['schemas'] == sorted(SCHEMAS)

    def test_describe_schema(self, client):
        response = client.get('/api/validation/schemas/storeCreate')
        schema = response.get_json()['data']['schema']

        assert schema['schema_name'] == 'storeCreate'
        assert set(schema['required_fields']) == {'name', 'logo'}
        assert 'website' in schema['optional_fields']
        assert schema['fields']['name'] == {'type': 'Text', 'required': True, 'allow_none': False}
        assert schema['fields']['socialMedia']['fields'] == ['facebook', 'instagram', 'pinterest', 'twitter']

    def test_describe_unknown_schema(self, client):
        assert client.get('/api/validation/schemas/couponDelete').status_code == 404

    def test_dry_run_returns_normalized_payload(self, client):
        response = client.post('/api/validation/schemas/couponCreate', json={
            'code': ' summer24 ',
            'title': 'Summer sale',
            'discount': '15',
            'store': '507f1f77bcf86cd799439011',
            'expiryDate': '2099-01-01T00:00:00Z',
            'clicks': 10,
        })
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['schema'] == 'couponCreate'
        assert data['data'] == {
            'code': 'SUMMER24',
            'title': 'Summer sale',
            'discount': 15.0,
            'store': '507f1f77bcf86cd799439011',
            'expiryDate': '2099-01-01T00:00:00+00:00',
        }

    def test_dry_run_reports_every_violation(self, client):
        response = client.post('/api/validation/schemas/reviewCreate', json={'itemType': 'blog', 'rating': 9})
        errors = response.get_json()['error']['details']['validation_errors']
        assert response.status_code == 422
        assert set(errors) == {'itemType', 'itemId', 'rating'}

    def test_dry_run_unknown_schema(self, client):
        assert client.post('/api/validation/schemas/couponDelete', json={}).status_code == 404
