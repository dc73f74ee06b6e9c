"""
Error handling and exception management for the CashHeros API.

This module provides:
- The application exception hierarchy, including the configuration errors
  raised when a rule set or schema is malformed
- RequestValidationError for code paths that prefer raising a failed
  validation outcome over returning a response
- Flask error handler registration producing the standard JSON envelope

Integration Points:
- app.py registers handlers through init_error_handling()
- cashheros.utils.response formats every error body
- cashheros.utils.logging records application errors
"""

import traceback
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from flask import Flask, Response, g
from werkzeug.exceptions import HTTPException

from cashheros.utils.logging import get_logger
from cashheros.utils.response import (
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_UNPROCESSABLE_ENTITY,
    VALIDATION_FAILED_MESSAGE,
    send_error,
    send_validation_error,
)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


# ==================== CUSTOM EXCEPTION HIERARCHY ====================

class BaseApplicationError(Exception):
    """
    Base exception class for all application-specific errors.

    Carries a machine-readable error code, an HTTP status for the handler,
    and free-form details for logging.
    """

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        status_code: int = HTTP_INTERNAL_SERVER_ERROR
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.category = category
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format for logging."""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'category': self.category.value,
            'status_code': self.status_code,
            'details': self.details,
            'type': self.__class__.__name__
        }


class ConfigurationError(BaseApplicationError):
    """Raised when static application configuration is invalid."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)


class RuleConfigurationError(ConfigurationError):
    """
    Raised when a rule set contains a token, field path or option that the
    rule compiler does not recognize.

    Raised while compiling, which happens at startup, so a malformed rule set
    stops the application instead of failing open at request time.
    """

    def __init__(
        self,
        message: str,
        rule_set: Optional[str] = None,
        field: Optional[str] = None,
        token: Any = None,
        **kwargs
    ):
        details = kwargs.pop('details', None) or {}
        if rule_set is not None:
            details['rule_set'] = rule_set
        if field is not None:
            details['field'] = field
        if token is not None:
            details['token'] = repr(token)
        kwargs.setdefault('error_code', 'RULE_CONFIGURATION_ERROR')
        super().__init__(message, details=details, **kwargs)
        self.rule_set = rule_set
        self.field = field
        self.token = token

    def with_rule_set(self, rule_set: str) -> 'RuleConfigurationError':
        """Return a copy of this error annotated with the rule set it came from."""
        return RuleConfigurationError(
            f"{self.message} (rule set '{rule_set}')",
            rule_set=rule_set,
            field=self.field,
            token=self.token,
        )


class RequestValidationError(BaseApplicationError):
    """
    Raised with the per-field messages of a failed validation.

    The registered handler answers it with the same 422 envelope that the
    validation decorators return.
    """

    def __init__(
        self,
        errors: Mapping[str, List[str]],
        message: str = VALIDATION_FAILED_MESSAGE,
        **kwargs
    ):
        kwargs.setdefault('error_code', 'VALIDATION_ERROR')
        kwargs.setdefault('category', ErrorCategory.VALIDATION)
        kwargs.setdefault('status_code', HTTP_UNPROCESSABLE_ENTITY)
        super().__init__(message, **kwargs)
        self.errors = {field: list(messages) for field, messages in errors.items()}

    @classmethod
    def from_outcome(cls, outcome, message: str = VALIDATION_FAILED_MESSAGE) -> 'RequestValidationError':
        return cls(outcome.errors_by_field, message=message)


# ==================== ERROR HANDLER REGISTRATION ====================

class FlaskErrorHandler:
    """
    Flask error handler management.

    Registers error handlers with the application factory so that every
    blueprint answers errors with the same JSON envelope.
    """

    def __init__(self, app: Flask = None):
        self.app = app
        self.logger = get_logger("error_handler")

        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        """Initialize error handlers with Flask application factory."""
        self.app = app

        app.register_error_handler(RequestValidationError, self._handle_validation_error)
        app.register_error_handler(BaseApplicationError, self._handle_application_error)
        app.register_error_handler(HTTPException, self._handle_http_error)
        app.register_error_handler(Exception, self._handle_generic_exception)

        app.extensions['error_handler'] = self
        self.logger.debug("Flask error handlers registered")

    def _handle_validation_error(self, error: RequestValidationError) -> Response:
        """Handle raised validation failures with field-level details."""
        self.logger.info(
            "Validation error raised",
            fields=list(error.errors.keys()),
            request_id=getattr(g, 'request_id', None)
        )
        return send_validation_error(error.errors, error.message)

    def _handle_application_error(self, error: BaseApplicationError) -> Response:
        """Handle custom application errors."""
        self.logger.error(
            f"Application error: {error.error_code}",
            **error.to_dict()
        )

        message = error.message
        if error.status_code >= HTTP_INTERNAL_SERVER_ERROR and not self._debug:
            message = "Internal server error"

        return send_error(message, error.status_code)

    def _handle_http_error(self, error: HTTPException) -> Response:
        """Handle standard HTTP errors with consistent formatting."""
        self.logger.warning(
            f"HTTP error {error.code}",
            status_code=error.code,
            description=error.description
        )
        return send_error(error.name, error.code or HTTP_INTERNAL_SERVER_ERROR)

    def _handle_generic_exception(self, error: Exception) -> Response:
        """Handle unexpected exceptions without leaking internals to the client."""
        self.logger.error(
            f"Unhandled {type(error).__name__}",
            error_message=str(error),
            traceback=traceback.format_exc(),
            request_id=getattr(g, 'request_id', None)
        )
        return send_error("Internal server error", HTTP_INTERNAL_SERVER_ERROR)

    @property
    def _debug(self) -> bool:
        return bool(self.app and self.app.debug)


def init_error_handling(app: Flask) -> FlaskErrorHandler:
    """
    Initialize error handling for the Flask application factory.

    Args:
        app: Flask application instance

    Returns:
        FlaskErrorHandler: Configured error handler instance
    """
    return FlaskErrorHandler(app)
