"""
Utilities Package

Cross-cutting concerns shared by the validation library and the Flask host:

- logging: structlog configuration and request-context binding
- response: JSON response envelopes, including the 422 validation error
- error_handling: application exception hierarchy and Flask error handlers

Usage:
    from cashheros.utils import get_logger, send_validation_error
    from cashheros.utils.error_handling import RuleConfigurationError
"""

from .logging import (
    StructuredLogger,
    get_logger,
    init_logging,
    log_validation_failure
)

from .response import (
    send_success,
    send_created,
    send_error,
    send_validation_error,
    send_not_found,
    send_server_error,
    format_validation_errors
)

from .error_handling import (
    BaseApplicationError,
    ConfigurationError,
    RuleConfigurationError,
    RequestValidationError,
    FlaskErrorHandler,
    init_error_handling
)

__all__ = [
    'StructuredLogger',
    'get_logger',
    'init_logging',
    'log_validation_failure',
    'send_success',
    'send_created',
    'send_error',
    'send_validation_error',
    'send_not_found',
    'send_server_error',
    'format_validation_errors',
    'BaseApplicationError',
    'ConfigurationError',
    'RuleConfigurationError',
    'RequestValidationError',
    'FlaskErrorHandler',
    'init_error_handling'
]
