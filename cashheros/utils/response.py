"""
Flask Response Utilities

Standardized JSON response envelopes for the CashHeros API. Every response
carries ``success`` and an ISO-8601 ``timestamp``; error responses nest the
message, status code and optional details under ``error``.

Validation failures use HTTP 422 with the per-field message lists under
``error.details.validation_errors``, which is the shape API clients already
consume.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from flask import Response, has_request_context, jsonify, make_response, request
import structlog

logger = structlog.get_logger("cashheros.response")

# HTTP Status Code Constants for consistency
HTTP_OK = 200
HTTP_CREATED = 201
HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_INTERNAL_SERVER_ERROR = 500

VALIDATION_FAILED_MESSAGE = "Validation failed"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def send_success(
    data: Any = None,
    message: str = "Success",
    status_code: int = HTTP_OK
) -> Response:
    """
    Generate a standardized success response.

    Args:
        data: Response payload, omitted from the body when None
        message: Success message
        status_code: HTTP status code

    Returns:
        Flask Response object with JSON data
    """
    response_data = {
        "success": True,
        "message": message,
        "timestamp": utc_timestamp(),
    }

    if data is not None:
        response_data["data"] = data

    return make_response(jsonify(response_data), status_code)


def send_created(data: Any = None, message: str = "Resource created successfully") -> Response:
    return send_success(data, message, HTTP_CREATED)


def send_error(
    message: str = "An error occurred",
    status_code: int = HTTP_BAD_REQUEST,
    details: Optional[Mapping[str, Any]] = None
) -> Response:
    """
    Generate a standardized error response.

    Args:
        message: Error message
        status_code: HTTP status code, repeated as ``error.code``
        details: Additional error details, omitted when empty

    Returns:
        Flask Response object with JSON error data
    """
    response_data = {
        "success": False,
        "error": {
            "message": message,
            "code": status_code,
        },
        "timestamp": utc_timestamp(),
    }

    if details:
        response_data["error"]["details"] = dict(details)

    logger.info(
        "Error response generated",
        status_code=status_code,
        message=message,
        endpoint=request.endpoint if has_request_context() else None,
    )

    return make_response(jsonify(response_data), status_code)


def send_validation_error(
    errors: Mapping[str, List[str]],
    message: str = VALIDATION_FAILED_MESSAGE
) -> Response:
    """
    Generate the 422 response for a failed request validation.

    Args:
        errors: Field name to ordered list of messages
        message: Top-level error message

    Returns:
        Flask Response object with status 422
    """
    return send_error(
        message,
        HTTP_UNPROCESSABLE_ENTITY,
        {"validation_errors": format_validation_errors(errors)},
    )


def send_not_found(message: str = "Resource not found") -> Response:
    return send_error(message, HTTP_NOT_FOUND)


def send_server_error(message: str = "Internal server error") -> Response:
    return send_error(message, HTTP_INTERNAL_SERVER_ERROR)


def format_validation_errors(errors: Mapping[str, List[str]]) -> Dict[str, List[str]]:
    """
    Copy a field error mapping into plain JSON-serializable lists.

    Field order is preserved; it follows the order in which validators ran.
    """
    return {str(field): [str(message) for message in messages] for field, messages in errors.items()}
