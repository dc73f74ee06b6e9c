"""
Unit tests for FieldRule compilation and field validator execution.
"""

import pytest

from cashheros.utils.error_handling import RuleConfigurationError
from cashheros.validation import FieldRule, Location, compile_field_rule
from cashheros.validation.chain import DEFAULT_MESSAGE
from cashheros.validation.rule_sets import VALIDATION_RULES


def coupon_rule(field_name):
    return next(rule for rule in VALIDATION_RULES['coupon']['create'] if rule.field == field_name)


@pytest.mark.unit
class TestFieldRule:

    def test_rules_are_stored_as_tuple(self):
        rule = FieldRule('body.code', ['notEmpty'], 'Code is required')
        assert rule.rules == ('notEmpty',)

    @pytest.mark.parametrize('rules', ['notEmpty', {'min': 1}])
    def test_rules_must_be_a_list(self, rules):
        with pytest.raises(RuleConfigurationError):
            FieldRule('body.code', rules)

    def test_from_dict(self):
        rule = FieldRule.from_dict({'field': 'query.page', 'rules': ['isInt'], 'message': 'Bad page'})
        assert rule == FieldRule('query.page', ('isInt',), 'Bad page')

    def test_from_dict_rejects_unknown_and_missing_keys(self):
        with pytest.raises(RuleConfigurationError):
            FieldRule.from_dict({'field': 'body.a', 'rules': [], 'msg': 'typo'})
        with pytest.raises(RuleConfigurationError):
            FieldRule.from_dict({'rules': ['isInt']})


@pytest.mark.unit
class TestCompileFieldRule:

    def test_compiled_validator_carries_location_and_bare_name(self):
        validator = compile_field_rule(FieldRule('query.page', ('optional', 'isInt'), 'Bad page'))
        assert validator.location is Location.QUERY
        assert validator.name == 'page'
        assert validator.field == 'query.page'
        assert validator.message == 'Bad page'

    def test_missing_message_uses_default(self):
        validator = compile_field_rule({'field': 'body.name', 'rules': ['notEmpty']})
        assert validator.message == DEFAULT_MESSAGE

    def test_empty_and_optional_only_chains_are_rejected(self):
        with pytest.raises(RuleConfigurationError):
            compile_field_rule(FieldRule('body.name', ()))
        with pytest.raises(RuleConfigurationError):
            compile_field_rule(FieldRule('body.name', ('optional',)))

    def test_compilation_is_idempotent(self):
        rule = coupon_rule('body.discount')
        first, second = compile_field_rule(rule), compile_field_rule(rule)
        assert [c.name for c in first.checks] == [c.name for c in second.checks]
        assert first.message == second.message


@pytest.mark.unit
class TestFieldValidatorRun:

    def test_negative_discount_reports_the_message_once(self, make_request):
        validator = compile_field_rule(coupon_rule('body.discount'))
        messages = validator.run(make_request(body={'discount': -5}))
        assert messages == ['Discount must be a positive number']

    def test_missing_required_discount_reports_the_message_once(self, make_request):
        validator = compile_field_rule(coupon_rule('body.discount'))
        assert validator.run(make_request(body={})) == ['Discount must be a positive number']

    def test_optional_field_absent_passes(self, make_request):
        validator = compile_field_rule(coupon_rule('body.expiryDate'))
        assert validator.run(make_request(body={})) == []
        assert validator.run(make_request(body={'expiryDate': None})) == []
        assert validator.run(make_request(body={'expiryDate': ''})) == []

    def test_optional_field_present_is_checked(self, make_request):
        validator = compile_field_rule(coupon_rule('body.expiryDate'))
        assert validator.run(make_request(body={'expiryDate': 'next week'})) == [
            'Expiry date must be in ISO 8601 format'
        ]

    def test_checks_before_optional_always_run(self, make_request):
        validator = compile_field_rule(FieldRule('body.name', ('notEmpty', 'optional', 'isString'), 'Name is required'))
        assert validator.run(make_request(body={})) == ['Name is required']

    def test_token_messages_are_reported_in_check_order(self, make_request):
        validator = compile_field_rule(FieldRule(
            'body.password',
            ('isString', {'minLength': 8, 'message': 'Too short'}, {'matches': r'\d', 'message': 'Needs a digit'}),
            'Password is invalid',
        ))
        assert validator.run(make_request(body={'password': 'abc'})) == ['Too short', 'Needs a digit']
        assert validator.run(make_request(body={'password': 12})) == ['Password is invalid', 'Too short']

    def test_non_object_body_is_treated_as_empty(self, make_request):
        validator = compile_field_rule(coupon_rule('body.code'))
        assert validator.run(make_request(body=['SAVE10'])) == ['Coupon code is required']

    def test_validate_returns_outcome_keyed_by_bare_name(self, make_request):
        validator = compile_field_rule(FieldRule('params.id', ('isMongoId',), 'Invalid ID format'))
        outcome = validator.validate(make_request(params={'id': 'abc'}))
        assert not outcome.valid
        assert outcome.errors_by_field == {'id': ['Invalid ID format']}
