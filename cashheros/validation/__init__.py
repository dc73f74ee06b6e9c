"""
Request validation for the CashHeros API.

Two complementary validators:

- Rule chains: declarative ``{field, rules, message}`` entries compiled into
  per-field validators (tokens, paths, chain, rules, rule_sets).
- Payload schemas: marshmallow schemas run over a whole request section,
  collecting every violation and returning the normalized payload
  (schemas, schema_validator).

Both produce a ValidationOutcome. The Flask decorators in middleware turn a
failed outcome into the 422 response.
"""

from .outcome import (
    ErrorCollector,
    Location,
    RequestData,
    ValidationOutcome
)
from .checks import MISSING
from .paths import resolve_field_path, lookup
from .tokens import Check, ChainBuilder, interpret
from .chain import FieldRule, FieldValidator, compile_field_rule
from .rules import RuleSetRegistry, compile_rule_set, run_validators
from .rule_sets import RULE_SETS, COMMON_VALIDATION_RULES, VALIDATION_RULES
from .schemas import SCHEMAS
from .schema_validator import SchemaResult, SchemaValidator, flatten_errors
from .middleware import (
    ValidationExtension,
    get_registry,
    validate_rules,
    validate_with_schema,
    validated_data
)

__all__ = [
    'ErrorCollector',
    'Location',
    'RequestData',
    'ValidationOutcome',
    'MISSING',
    'resolve_field_path',
    'lookup',
    'Check',
    'ChainBuilder',
    'interpret',
    'FieldRule',
    'FieldValidator',
    'compile_field_rule',
    'RuleSetRegistry',
    'compile_rule_set',
    'run_validators',
    'RULE_SETS',
    'COMMON_VALIDATION_RULES',
    'VALIDATION_RULES',
    'SCHEMAS',
    'SchemaResult',
    'SchemaValidator',
    'flatten_errors',
    'ValidationExtension',
    'get_registry',
    'validate_rules',
    'validate_with_schema',
    'validated_data'
]
