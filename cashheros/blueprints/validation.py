"""
Validation discovery and dry-run endpoints.

Clients (the web frontend and the browser extension) use these endpoints to
list the registered rule sets and payload schemas and to check a payload
before submitting it. A dry run answers with the same 422 envelope a real
route would, or with the normalized payload when it is valid.

Endpoints:
- GET  /api/validation/rule-sets
- POST /api/validation/rule-sets/<name>
- GET  /api/validation/schemas
- GET  /api/validation/schemas/<name>
- POST /api/validation/schemas/<name>
"""

from typing import Any, Dict

from flask import Blueprint, request

from cashheros.utils.logging import get_logger
from cashheros.utils.response import send_not_found, send_success, send_validation_error
from cashheros.validation.middleware import get_registry
from cashheros.validation.outcome import RequestData
from cashheros.validation.schema_validator import SchemaValidator
from cashheros.validation.schemas import SCHEMAS

logger = get_logger("blueprints.validation")

validation_bp = Blueprint('validation', __name__, url_prefix='/api/validation')


@validation_bp.route('/rule-sets', methods=['GET'])
def list_rule_sets():
    """List registered rule sets with the fields each one checks."""
    registry = get_registry()
    rule_sets = {
        name: [
            {
                'field': validator.name,
                'location': validator.location.value,
                'message': validator.message,
                'checks': [check.name for check in validator.checks],
            }
            for validator in registry.get(name)
        ]
        for name in registry.names()
    }
    return send_success({'rule_sets': rule_sets}, message='Rule sets retrieved successfully')


@validation_bp.route('/rule-sets/<name>', methods=['POST'])
def check_rule_set(name: str):
    """
    Dry-run a rule set.

    The JSON body is validated as the request body; query arguments are
    validated as the query section.
    """
    registry = get_registry()
    if name not in registry:
        return send_not_found(f'Rule set "{name}" does not exist')

    request_data = RequestData.from_request(request)
    outcome = registry.validate(name, request_data)
    if not outcome.valid:
        return send_validation_error(outcome.errors_by_field)

    return send_success({'rule_set': name, 'valid': True}, message='Payload is valid')


@validation_bp.route('/schemas', methods=['GET'])
def list_schemas():
    return send_success({'schemas': sorted(SCHEMAS)}, message='Schemas retrieved successfully')


@validation_bp.route('/schemas/<name>', methods=['GET'])
def get_schema_definition(name: str):
    """
    Describe a payload schema for API documentation.

    Args:
        name: Registered schema name

    Returns:
        JSON response with field types, required and optional fields
    """
    schema_class = SCHEMAS.get(name)
    if schema_class is None:
        return send_not_found(f'Schema "{name}" does not exist')

    return send_success({'schema': describe_schema(name, schema_class())}, message='Schema retrieved successfully')


@validation_bp.route('/schemas/<name>', methods=['POST'])
def check_schema(name: str):
    """Dry-run a payload schema and return the normalized payload when valid."""
    schema_class = SCHEMAS.get(name)
    if schema_class is None:
        return send_not_found(f'Schema "{name}" does not exist')

    result = SchemaValidator(schema_class).validate(RequestData.from_request(request).body)
    if not result.valid:
        return send_validation_error(result.outcome.errors_by_field)

    logger.debug("Schema dry run passed", schema=name)
    return send_success({'schema': name, 'data': schema_class().dump(result.data)}, message='Payload is valid')


def describe_schema(name: str, schema) -> Dict[str, Any]:
    """Extract field definitions from a marshmallow schema instance."""
    definition = {
        'schema_name': name,
        'fields': {},
        'required_fields': [],
        'optional_fields': []
    }

    for field_name, field_obj in schema.fields.items():
        field_info = {
            'type': field_obj.__class__.__name__,
            'required': field_obj.required,
            'allow_none': field_obj.allow_none,
        }
        nested = getattr(field_obj, 'schema', None)
        if nested is not None and hasattr(nested, 'fields'):
            field_info['fields'] = sorted(nested.fields)

        definition['fields'][field_name] = field_info

        if field_obj.required:
            definition['required_fields'].append(field_name)
        else:
            definition['optional_fields'].append(field_name)

    return definition
