"""
Whole-payload validation against a marshmallow schema.

SchemaValidator runs a schema over a payload in one pass, collects every
violation as a flat ``field -> [messages]`` mapping and returns the
normalized payload alongside it. It never raises for bad input; a payload
that is not an object produces an invalid outcome.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Type, Union

from marshmallow import EXCLUDE, Schema, ValidationError

from cashheros.utils.error_handling import ConfigurationError
from cashheros.utils.logging import get_logger
from cashheros.validation.outcome import ErrorCollector, ValidationOutcome
from cashheros.validation.schemas import SCHEMAS

logger = get_logger("validation.schema")

SCHEMA_ERROR_KEY = "_schema"

SchemaLike = Union[str, Schema, Type[Schema]]


@dataclass(frozen=True)
class SchemaResult:
    """Outcome of a schema validation plus the normalized payload (empty when invalid)."""
    outcome: ValidationOutcome
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return self.outcome.valid


class SchemaValidator:
    """
    Validates payloads against one schema.

    Args:
        schema: A registered schema name, a Schema subclass or a Schema
            instance (only its class is kept; each call loads with a fresh
            instance)

    Raises:
        ConfigurationError: if the schema cannot be resolved
    """

    def __init__(self, schema: SchemaLike):
        self.schema_class = resolve_schema(schema)
        self.name = self.schema_class.__name__

    def validate(self, payload: Any) -> SchemaResult:
        """
        Validate and normalize a payload.

        Unknown keys are dropped, defaults applied and strings normalized by
        the schema fields. Every violation is reported.
        """
        schema = self.schema_class(unknown=EXCLUDE)
        try:
            data = schema.load(payload)
        except ValidationError as err:
            outcome = ValidationOutcome(flatten_errors(err.messages))
            logger.debug("Schema validation failed", schema=self.name, fields=list(outcome.errors_by_field))
            return SchemaResult(outcome)

        return SchemaResult(ValidationOutcome.success(), data)


def resolve_schema(schema: SchemaLike) -> Type[Schema]:
    if isinstance(schema, str):
        try:
            return SCHEMAS[schema]
        except KeyError:
            raise ConfigurationError(
                f"Unknown schema '{schema}'",
                error_code="SCHEMA_CONFIGURATION_ERROR",
                details={"available_schemas": sorted(SCHEMAS)},
            ) from None
    if isinstance(schema, Schema):
        return type(schema)
    if isinstance(schema, type) and issubclass(schema, Schema):
        return schema

    raise ConfigurationError(
        f"Unsupported schema of type {type(schema).__name__}",
        error_code="SCHEMA_CONFIGURATION_ERROR",
    )


def flatten_errors(messages: Any, prefix: str = "") -> Dict[str, List[str]]:
    """
    Flatten marshmallow's nested error messages into dotted field keys.

    ``{"address": {"city": ["..."]}}`` becomes ``{"address.city": ["..."]}``
    and list item errors use the index as a segment (``categories.1``).
    A nested ``_schema`` entry is reported on its parent field.
    """
    collector = ErrorCollector()
    _collect(messages, prefix, collector)
    return collector.outcome().errors_by_field


def _collect(messages: Any, prefix: str, collector: ErrorCollector) -> None:
    if isinstance(messages, Mapping):
        for key, value in messages.items():
            if key == SCHEMA_ERROR_KEY:
                path = prefix or SCHEMA_ERROR_KEY
            else:
                path = f"{prefix}.{key}" if prefix else str(key)
            _collect(value, path, collector)
    elif isinstance(messages, (list, tuple)):
        for message in messages:
            if isinstance(message, (Mapping, list, tuple)):
                _collect(message, prefix, collector)
            else:
                collector.add(prefix or SCHEMA_ERROR_KEY, str(message))
    else:
        collector.add(prefix or SCHEMA_ERROR_KEY, str(messages))
