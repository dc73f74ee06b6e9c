"""
Value predicates behind the rule tokens.

Each predicate takes one request value and answers whether it passes. Query
and route values arrive as strings, so the numeric and boolean checks accept
their string forms as well as native Python values. A value that is not
present in the request is represented by ``MISSING``.
"""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email


class _Missing:
    """Sentinel for a field that is not present in its request section."""

    def __repr__(self) -> str:
        return "<missing>"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_MONGO_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")
_BOOLEAN_STRINGS = frozenset({"true", "false", "0", "1"})
_URL_SCHEMES = frozenset({"http", "https", "ftp"})


def is_absent(value: Any) -> bool:
    """True for a missing field, ``None`` or the empty string."""
    return value is MISSING or value is None or (isinstance(value, str) and value == "")


def not_empty(value: Any) -> bool:
    if value is MISSING or value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_array(value: Any) -> bool:
    return isinstance(value, list)


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, str):
        return _INT_PATTERN.fullmatch(value) is not None
    return False


def is_float(value: Any) -> bool:
    return to_number(value) is not None


def is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return value in _BOOLEAN_STRINGS
    return False


def is_email(value: Any) -> bool:
    """Syntax check through email_validator; no DNS lookups."""
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_url(value: Any) -> bool:
    """Absolute http(s) or ftp URL whose host has a top-level domain."""
    if not isinstance(value, str) or not value or any(ch.isspace() for ch in value):
        return False
    try:
        parsed = urlparse(value)
        hostname = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme.lower() not in _URL_SCHEMES or not hostname:
        return False
    return "." in hostname.strip(".")


def is_iso8601(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    return parse_iso8601(value) is not None


def is_mongo_id(value: Any) -> bool:
    return isinstance(value, str) and _MONGO_ID_PATTERN.fullmatch(value) is not None


def to_number(value: Any) -> Optional[float]:
    """
    Parse a finite number from a native number or a numeric string.

    Returns None for booleans, non-numeric strings, NaN, infinities and
    integers too large for a float.
    """
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)) and not (isinstance(value, str) and _FLOAT_PATTERN.fullmatch(value)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def length_of(value: Any) -> int:
    if isinstance(value, (str, list, tuple, dict)):
        return len(value)
    if value is MISSING or value is None:
        return 0
    return len(str(value))


def parse_iso8601(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or date-time string.

    A trailing ``Z`` is read as UTC. Values without an offset are taken as
    UTC so that parsed dates always compare with each other.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
