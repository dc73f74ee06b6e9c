"""
Structured logging for the CashHeros validation service.

Wraps structlog on top of the standard library logging module so that every
event carries the request context (request id, correlation id, endpoint,
method) when one is active. Rendering is JSON in production and a readable
console format in development and tests.

Integration Points:
- app.py calls init_logging() from the application factory
- cashheros.utils.error_handling logs application errors through get_logger()
- cashheros.validation logs rule-set compilation and failed validations
"""

import logging
import sys
import uuid
from typing import Any, Dict, Optional

import structlog
from flask import Flask, g, has_request_context, request

LOGGER_NAMESPACE = "cashheros"
DEFAULT_LOG_FORMAT = "%(message)s"


class StructuredLogger:
    """
    Flask-aware structlog configuration.

    Follows the Flask extension pattern: construct once, then call
    init_app() from the application factory. The instance is stored in
    ``app.extensions['structured_logger']``.
    """

    def __init__(self, app: Optional[Flask] = None):
        self.app = app
        self.level = logging.INFO
        self.json_output = False

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Configure logging from the application config and register request hooks."""
        self.app = app

        level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
        self.level = getattr(logging, level_name, logging.INFO)
        self.json_output = bool(app.config.get("LOG_JSON", not (app.debug or app.testing)))

        self._setup_python_logging_integration(app)
        self._configure_structlog(cache=not app.testing)

        app.before_request(self._setup_request_context)
        app.teardown_request(self._cleanup_request_context)

        app.extensions["structured_logger"] = self

    def _configure_structlog(self, cache: bool = True) -> None:
        """Configure structlog processors and the final renderer."""
        shared_processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            self._add_flask_context,
        ]

        if self.json_output:
            processors = shared_processors + [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        else:
            processors = shared_processors + [
                structlog.dev.ConsoleRenderer(colors=False),
            ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(self.level),
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=cache,
        )

    def _setup_python_logging_integration(self, app: Flask) -> None:
        """Route the package loggers to stdout with a message-only format."""
        package_logger = logging.getLogger(LOGGER_NAMESPACE)
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter(app.config.get("LOG_FORMAT", DEFAULT_LOG_FORMAT)))

        package_logger.addHandler(handler)
        package_logger.setLevel(self.level)

    @staticmethod
    def _add_flask_context(logger, name, event_dict):
        """Add Flask request context to log entries."""
        if has_request_context():
            event_dict.setdefault("endpoint", request.endpoint)
            event_dict.setdefault("method", request.method)
            event_dict.setdefault("path", request.path)
        return event_dict

    @staticmethod
    def _setup_request_context() -> None:
        """Bind a request id and correlation id for the current request."""
        g.request_id = str(uuid.uuid4())
        g.correlation_id = request.headers.get("X-Correlation-ID") or g.request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=g.request_id,
            correlation_id=g.correlation_id,
        )

    @staticmethod
    def _cleanup_request_context(exception=None) -> None:
        structlog.contextvars.clear_contextvars()


def get_logger(name: str = LOGGER_NAMESPACE, **initial_values: Any):
    """
    Return a structlog logger bound to a stdlib logger under the package namespace.

    Args:
        name: Logger name; names outside the package namespace are nested under it
        **initial_values: Key/value pairs bound to every event

    Returns:
        structlog bound logger
    """
    if name != LOGGER_NAMESPACE and not name.startswith(LOGGER_NAMESPACE + "."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return structlog.get_logger(name, **initial_values)


def log_validation_failure(logger, source: str, errors: Dict[str, Any], **context: Any) -> None:
    """Log a failed validation by field name only; values are never logged."""
    logger.info(
        "Request validation failed",
        source=source,
        fields=list(errors.keys()),
        error_count=sum(len(messages) for messages in errors.values()),
        **context,
    )


def init_logging(app: Flask) -> StructuredLogger:
    """
    Initialize structured logging for the Flask application factory.

    Args:
        app: Flask application instance

    Returns:
        StructuredLogger: Configured logger instance
    """
    structured_logger = StructuredLogger(app)

    get_logger("app").info(
        "Structured logging initialized",
        level=logging.getLevelName(structured_logger.level),
        json_output=structured_logger.json_output,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    )

    return structured_logger
