"""
Unit tests for payload schemas and the SchemaValidator.

Covers normalization (trimming, case folding, defaults, unknown keys),
every-violation reporting with dotted field keys, and a minimal valid payload
for each registered schema.
"""

from datetime import datetime, timezone

import pytest
from marshmallow import Schema, fields

from cashheros.utils.error_handling import ConfigurationError
from cashheros.validation import SCHEMAS, SchemaValidator, flatten_errors
from cashheros.validation.schemas import UserRegistrationSchema

OBJECT_ID = '507f1f77bcf86cd799439011'

MINIMAL_PAYLOADS = {
    'userRegistration': {'email': 'jane@example.com', 'password': 'password123'},
    'userLogin': {'email': 'jane@example.com', 'password': 'x'},
    'userUpdate': {},
    'couponCreate': {'code': 'save10', 'title': 'Save 10', 'discount': 10, 'store': OBJECT_ID},
    'couponUpdate': {},
    'cashbackCreate': {'title': 'Cashback', 'amount': 5, 'store': OBJECT_ID},
    'cashbackUpdate': {},
    'storeCreate': {'name': 'Shop', 'logo': 'https://cdn.example.com/logo.png'},
    'storeUpdate': {},
    'transactionCreate': {
        'user': OBJECT_ID,
        'store': OBJECT_ID,
        'amount': 100,
        'cashbackAmount': 5,
        'cashbackPercentage': 5,
    },
    'transactionUpdate': {},
    'reviewCreate': {'itemType': 'store', 'itemId': OBJECT_ID, 'rating': 4},
    'reviewUpdate': {},
    'pagination': {},
}


@pytest.mark.unit
class TestSchemaRegistry:

    def test_every_schema_has_a_minimal_payload(self):
        assert set(SCHEMAS) == set(MINIMAL_PAYLOADS)

    @pytest.mark.parametrize('name', sorted(MINIMAL_PAYLOADS))
    def test_minimal_payload_is_valid(self, name):
        result = SchemaValidator(name).validate(MINIMAL_PAYLOADS[name])
        assert result.valid, result.outcome.errors_by_field


@pytest.mark.unit
class TestSchemaValidatorConstruction:

    def test_accepts_name_class_and_instance(self):
        assert SchemaValidator('userRegistration').schema_class is UserRegistrationSchema
        assert SchemaValidator(UserRegistrationSchema).schema_class is UserRegistrationSchema
        assert SchemaValidator(UserRegistrationSchema()).schema_class is UserRegistrationSchema

    def test_unknown_schema_name_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SchemaValidator('couponDelete')
        assert exc_info.value.error_code == 'SCHEMA_CONFIGURATION_ERROR'
        assert 'couponCreate' in exc_info.value.details['available_schemas']

    def test_unsupported_schema_type(self):
        with pytest.raises(ConfigurationError):
            SchemaValidator(42)


@pytest.mark.unit
class TestNormalization:

    def test_registration_email_is_trimmed_and_lowercased(self):
        result = SchemaValidator('userRegistration').validate({
            'email': '  Jane.Doe@Example.COM ',
            'password': 'password123',
            'role': 'admin',
        })
        assert result.valid
        assert result.data == {'email': 'jane.doe@example.com', 'password': 'password123'}

    def test_coupon_code_is_uppercased(self):
        payload = dict(MINIMAL_PAYLOADS['couponCreate'], code=' summer24 ')
        result = SchemaValidator('couponCreate').validate(payload)
        assert result.data['code'] == 'SUMMER24'

    def test_pagination_defaults(self):
        result = SchemaValidator('pagination').validate({})
        assert result.data == {'page': 1, 'limit': 20, 'order': 'desc'}

    def test_pagination_parses_query_strings(self):
        result = SchemaValidator('pagination').validate({'page': '3', 'limit': '50', 'order': 'asc'})
        assert result.data['page'] == 3
        assert result.data['limit'] == 50
        assert result.data['order'] == 'asc'

    def test_dates_load_as_aware_datetimes(self):
        result = SchemaValidator('pagination').validate({'startDate': '2024-01-01'})
        assert result.data['startDate'] == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.unit
class TestViolations:

    def test_every_violation_is_reported(self):
        result = SchemaValidator('userRegistration').validate({'email': 'nope', 'password': 'short'})
        assert not result.valid
        assert result.data == {}
        assert set(result.outcome.errors_by_field) == {'email', 'password'}

    def test_missing_required_fields(self):
        result = SchemaValidator('couponCreate').validate({})
        assert set(result.outcome.errors_by_field) == {'code', 'title', 'discount', 'store'}

    def test_whitespace_only_text_is_rejected(self):
        result = SchemaValidator('storeCreate').validate({'name': '   ', 'logo': 'logo.png'})
        assert result.outcome.messages_for('name') == ['Field may not be empty.']

    @pytest.mark.parametrize('payload,field_name', [
        ({'page': '0'}, 'page'),
        ({'limit': 101}, 'limit'),
        ({'page': 1.5}, 'page'),
        ({'order': 'up'}, 'order'),
    ])
    def test_pagination_bounds(self, payload, field_name):
        result = SchemaValidator('pagination').validate(payload)
        assert list(result.outcome.errors_by_field) == [field_name]

    def test_end_date_before_start_date(self):
        result = SchemaValidator('pagination').validate({'startDate': '2024-02-01', 'endDate': '2024-01-01'})
        assert result.outcome.errors_by_field == {'endDate': ['endDate must be on or after startDate']}

    def test_coupon_expiry_must_be_in_the_future(self):
        payload = dict(MINIMAL_PAYLOADS['couponCreate'], expiryDate='2000-01-01T00:00:00Z')
        result = SchemaValidator('couponCreate').validate(payload)
        assert list(result.outcome.errors_by_field) == ['expiryDate']

        payload['expiryDate'] = '2099-01-01T00:00:00Z'
        assert SchemaValidator('couponCreate').validate(payload).valid

    def test_discount_range(self):
        payload = dict(MINIMAL_PAYLOADS['couponCreate'], discount=150)
        result = SchemaValidator('couponCreate').validate(payload)
        assert list(result.outcome.errors_by_field) == ['discount']

    def test_nested_errors_use_dotted_keys(self):
        result = SchemaValidator('storeUpdate').validate({
            'categories': ['food', ''],
            'socialMedia': {'twitter': 'not a url'},
            'contactInfo': {'email': 'broken'},
        })
        assert set(result.outcome.errors_by_field) == {
            'categories.1',
            'socialMedia.twitter',
            'contactInfo.email',
        }

    def test_review_rating_must_be_whole(self):
        payload = dict(MINIMAL_PAYLOADS['reviewCreate'], rating=4.5)
        result = SchemaValidator('reviewCreate').validate(payload)
        assert list(result.outcome.errors_by_field) == ['rating']

    def test_validating_twice_gives_equal_results(self):
        validator = SchemaValidator('couponCreate')
        payload = {'code': ' save10 ', 'discount': 150, 'isActive': 'yes', 'extra': [1]}
        snapshot = {'code': ' save10 ', 'discount': 150, 'isActive': 'yes', 'extra': [1]}

        first = validator.validate(payload)
        second = validator.validate(payload)

        assert first == second
        assert not first.valid
        assert payload == snapshot

    @pytest.mark.parametrize('value', ['yes', 'on', '1', 1, 0, 'TRUE'])
    def test_booleans_accept_only_true_and_false(self, value):
        result = SchemaValidator('couponUpdate').validate({'isActive': value})
        assert result.outcome.errors_by_field == {'isActive': ['Not a valid boolean.']}

    @pytest.mark.parametrize('value,expected', [(True, True), (False, False), ('true', True), ('false', False)])
    def test_boolean_values_and_their_string_forms(self, value, expected):
        result = SchemaValidator('couponUpdate').validate({'isActive': value})
        assert result.data == {'isActive': expected}

    def test_huge_numbers_are_reported(self):
        payload = dict(MINIMAL_PAYLOADS['couponCreate'], discount=10 ** 400)
        result = SchemaValidator('couponCreate').validate(payload)
        assert list(result.outcome.errors_by_field) == ['discount']

    def test_non_object_payload_is_reported(self):
        result = SchemaValidator('userLogin').validate(['jane@example.com'])
        assert not result.valid
        assert '_schema' in result.outcome.errors_by_field

        assert not SchemaValidator('userLogin').validate(None).valid


@pytest.mark.unit
class TestFlattenErrors:

    def test_flattens_nested_mappings_and_lists(self):
        messages = {
            'address': {'city': ['Not a valid string.'], '_schema': ['Invalid address.']},
            'tags': {1: ['Field may not be empty.']},
            'name': ['Missing data for required field.'],
        }
        assert flatten_errors(messages) == {
            'address.city': ['Not a valid string.'],
            'address': ['Invalid address.'],
            'tags.1': ['Field may not be empty.'],
            'name': ['Missing data for required field.'],
        }

    def test_top_level_schema_errors_keep_their_key(self):
        assert flatten_errors({'_schema': ['Invalid input type.']}) == {'_schema': ['Invalid input type.']}

    def test_custom_schema_classes_are_supported(self):
        class SearchSchema(Schema):
            q = fields.String(required=True)

        result = SchemaValidator(SearchSchema).validate({'q': 'shoes', 'extra': 1})
        assert result.data == {'q': 'shoes'}
