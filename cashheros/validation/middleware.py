"""
Flask integration for request validation.

ValidationExtension builds the RuleSetRegistry when the application starts
and shares it through ``app.extensions['validation']``. The view decorators
run compiled rule chains or a payload schema before the view, answer
failures with the standard 422 response and hand the normalized payload to
the view through validated_data().

Usage:
    @bp.route('/coupons', methods=['POST'])
    @validate_rules('coupon.create')
    def create_coupon():
        ...

    @bp.route('/stores', methods=['POST'])
    @validate_with_schema('storeCreate')
    def create_store():
        store = validated_data()
"""

from functools import wraps
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from flask import Flask, current_app, g, request

from cashheros.utils.error_handling import ConfigurationError, RuleConfigurationError
from cashheros.utils.logging import get_logger, log_validation_failure
from cashheros.utils.response import send_validation_error
from cashheros.validation.outcome import Location, RequestData
from cashheros.validation.rules import RuleSetRegistry, compile_rule_set, run_validators
from cashheros.validation.schema_validator import SchemaLike, SchemaValidator

logger = get_logger("validation.middleware")

EXTENSION_KEY = "validation"
RULE_SET_NAMES_ATTR = "rule_set_names"


class ValidationExtension:
    """
    Flask extension owning the compiled rule sets.

    The registry is compiled in init_app(), so a malformed rule set stops the
    application factory with RuleConfigurationError.
    """

    def __init__(self, app: Optional[Flask] = None, rule_sets: Optional[Mapping[str, Sequence]] = None):
        self.rule_sets = rule_sets
        self.registry: Optional[RuleSetRegistry] = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Compile rule sets and register request teardown."""
        self.registry = RuleSetRegistry(self.rule_sets)
        app.extensions[EXTENSION_KEY] = self
        app.teardown_request(self._teardown_request)

        logger.info("Validation rule sets registered", rule_sets=len(self.registry))

    def check_views(self, app: Flask) -> None:
        """
        Check that every rule-set name used by a validate_rules view is registered.

        Called by the application factory once blueprints are registered, so
        a misspelled name stops startup instead of failing every request.

        Raises:
            RuleConfigurationError: naming the first view with an unknown rule set
        """
        for endpoint, view in app.view_functions.items():
            for name in getattr(view, RULE_SET_NAMES_ATTR, ()):
                if name not in self.registry:
                    raise RuleConfigurationError(
                        f"Unknown rule set '{name}' used by endpoint '{endpoint}'",
                        rule_set=name,
                        details={"endpoint": endpoint},
                    )

    @staticmethod
    def _teardown_request(exception=None) -> None:
        g.pop("validated_data", None)


def get_registry() -> RuleSetRegistry:
    """Return the registry of the current application."""
    extension = current_app.extensions.get(EXTENSION_KEY)
    if extension is None or extension.registry is None:
        raise ConfigurationError(
            "ValidationExtension is not initialized for this application",
            error_code="VALIDATION_NOT_CONFIGURED",
        )
    return extension.registry


def validate_rules(*rule_sets: Union[str, Sequence]) -> Callable:
    """
    Decorator running rule chains against the request before the view.

    Args:
        *rule_sets: Registered rule-set names, or lists of FieldRules /
            rule mappings. Lists are compiled when the decorator is applied.

    Returns:
        Decorator function
    """
    entries: List[Union[str, tuple]] = []
    for item in rule_sets:
        if isinstance(item, str):
            entries.append(item)
        else:
            entries.append(tuple(compile_rule_set(item)))

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            validators = []
            for entry in entries:
                if isinstance(entry, str):
                    validators.extend(get_registry().get(entry))
                else:
                    validators.extend(entry)

            outcome = run_validators(validators, RequestData.from_request(request))
            if not outcome.valid:
                if current_app.config.get("VALIDATION_LOG_FAILURES", True):
                    log_validation_failure(logger, "rules", outcome.errors_by_field, endpoint=request.endpoint)
                return send_validation_error(outcome.errors_by_field)

            return view(*args, **kwargs)

        names = tuple(entry for entry in entries if isinstance(entry, str))
        setattr(wrapper, RULE_SET_NAMES_ATTR, names + tuple(getattr(view, RULE_SET_NAMES_ATTR, ())))
        return wrapper
    return decorator


def validate_with_schema(schema: SchemaLike, location: Union[str, Location] = Location.BODY) -> Callable:
    """
    Decorator validating one request section against a payload schema.

    On success the normalized payload replaces the raw section for the view:
    read it with validated_data(location).

    Args:
        schema: Registered schema name, Schema subclass or instance
        location: Request section to validate (``body``, ``query`` or ``params``)

    Returns:
        Decorator function
    """
    validator = SchemaValidator(schema)
    location = Location(location)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            payload = RequestData.from_request(request).raw(location)
            result = validator.validate(payload)
            if not result.valid:
                if current_app.config.get("VALIDATION_LOG_FAILURES", True):
                    log_validation_failure(
                        logger,
                        "schema",
                        result.outcome.errors_by_field,
                        schema=validator.name,
                        endpoint=request.endpoint,
                    )
                return send_validation_error(result.outcome.errors_by_field)

            g.setdefault("validated_data", {})[location.value] = result.data
            return view(*args, **kwargs)

        return wrapper
    return decorator


def validated_data(location: Union[str, Location] = Location.BODY) -> Optional[Mapping[str, Any]]:
    """Normalized payload stored by validate_with_schema for the current request."""
    return g.get("validated_data", {}).get(Location(location).value)
