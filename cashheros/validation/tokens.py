"""
Rule token interpretation.

A rule token is one entry of a FieldRule's ``rules`` list:

- an identifier string such as ``"notEmpty"`` or ``"isEmail"``;
- a mapping of options such as ``{"min": 1, "max": 100}``, optionally with
  its own ``"message"``;
- a callable predicate.

interpret() turns one token into checks appended to a ChainBuilder. Any token
outside the closed vocabulary raises RuleConfigurationError, so a typo in a
rule set fails when the rule set is compiled instead of silently passing
every request.
"""

import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Union

from cashheros.utils.error_handling import RuleConfigurationError
from cashheros.validation import checks
from cashheros.validation.checks import MISSING

Predicate = Callable[[Any], bool]
RuleToken = Union[str, Mapping[str, Any], Callable[[Any], Any]]

OPTIONAL = "optional"

IDENTIFIER_CHECKS: Dict[str, Predicate] = {
    "notEmpty": checks.not_empty,
    "isString": checks.is_string,
    "isInt": checks.is_int,
    "isFloat": checks.is_float,
    "isBoolean": checks.is_boolean,
    "isArray": checks.is_array,
    "isObject": checks.is_object,
    "isEmail": checks.is_email,
    "isURL": checks.is_url,
    "isISO8601": checks.is_iso8601,
    "isMongoId": checks.is_mongo_id,
}

# Declaring one of these makes later min/max options numeric bounds.
NUMERIC_IDENTIFIERS = frozenset({"isInt", "isFloat"})

# Application order for option keys within one mapping token.
OPTION_KEYS = ("min", "max", "minLength", "maxLength", "isIn", "matches")
MESSAGE_KEY = "message"


@dataclass(frozen=True)
class Check:
    """One compiled step of a field chain."""
    name: str
    predicate: Predicate
    skip_when_absent: bool = False
    message: Optional[str] = None

    def passes(self, value: Any) -> bool:
        return bool(self.predicate(value))


class ChainBuilder:
    """Builder state for one field chain while its tokens are interpreted."""

    def __init__(self, field: str):
        self.field = field
        self.checks: List[Check] = []
        self.optional = False
        self.numeric = False

    def append(self, name: str, predicate: Predicate, message: Optional[str] = None) -> "ChainBuilder":
        self.checks.append(Check(name, predicate, skip_when_absent=self.optional, message=message))
        return self

    def mark_optional(self) -> "ChainBuilder":
        self.optional = True
        return self


def interpret(token: RuleToken, builder: ChainBuilder) -> ChainBuilder:
    """
    Append the checks for one rule token to a chain.

    Args:
        token: Identifier string, option mapping or callable predicate
        builder: Chain under construction

    Returns:
        The same builder, with the token's checks appended

    Raises:
        RuleConfigurationError: for unknown identifiers, unknown or malformed
            options, and tokens of any other type
    """
    if isinstance(token, str):
        return _interpret_identifier(token, builder)
    if isinstance(token, Mapping):
        return _interpret_options(token, builder)
    if callable(token):
        name = getattr(token, "__name__", "custom")
        return builder.append(name, _custom_check(token))

    raise RuleConfigurationError(
        f"Unsupported rule token of type {type(token).__name__}",
        field=builder.field,
        token=token,
    )


def _interpret_identifier(token: str, builder: ChainBuilder) -> ChainBuilder:
    if token == OPTIONAL:
        return builder.mark_optional()

    predicate = IDENTIFIER_CHECKS.get(token)
    if predicate is None:
        raise RuleConfigurationError(
            f"Unknown rule token '{token}'",
            field=builder.field,
            token=token,
        )

    if token in NUMERIC_IDENTIFIERS:
        builder.numeric = True
    return builder.append(token, predicate)


def _interpret_options(token: Mapping[str, Any], builder: ChainBuilder) -> ChainBuilder:
    unknown = [key for key in token if key not in OPTION_KEYS and key != MESSAGE_KEY]
    if unknown:
        raise RuleConfigurationError(
            f"Unknown rule option(s) {', '.join(sorted(map(str, unknown)))}",
            field=builder.field,
            token=dict(token),
        )
    if not any(key in token for key in OPTION_KEYS):
        raise RuleConfigurationError("Rule option token declares no check", field=builder.field, token=dict(token))

    message = token.get(MESSAGE_KEY)
    if message is not None and not isinstance(message, str):
        raise RuleConfigurationError("Rule option message must be a string", field=builder.field, token=dict(token))

    for key in OPTION_KEYS:
        if key not in token:
            continue
        option = token[key]
        if key in ("min", "max"):
            limit = _limit(option, key, builder)
            compare = operator.ge if key == "min" else operator.le
            if builder.numeric:
                builder.append(key, _numeric_bound(limit, compare), message)
            else:
                builder.append(key, _length_bound(limit, compare), message)
        elif key in ("minLength", "maxLength"):
            limit = _limit(option, key, builder)
            compare = operator.ge if key == "minLength" else operator.le
            builder.append(key, _length_bound(limit, compare), message)
        elif key == "isIn":
            builder.append(key, _membership(option, builder), message)
        else:
            builder.append(key, _pattern_match(option, builder), message)

    return builder


def _limit(option: Any, key: str, builder: ChainBuilder) -> float:
    if isinstance(option, bool) or not isinstance(option, (int, float)):
        raise RuleConfigurationError(f"Rule option '{key}' must be a number", field=builder.field, token={key: option})
    return option


def _numeric_bound(limit: float, compare) -> Predicate:
    def check(value: Any) -> bool:
        number = checks.to_number(value)
        return number is not None and compare(number, limit)
    return check


def _length_bound(limit: float, compare) -> Predicate:
    def check(value: Any) -> bool:
        return compare(checks.length_of(value), limit)
    return check


def _membership(option: Any, builder: ChainBuilder) -> Predicate:
    if isinstance(option, (str, bytes)) or not isinstance(option, (list, tuple, set, frozenset)):
        raise RuleConfigurationError("Rule option 'isIn' must be a list of values", field=builder.field, token={"isIn": option})

    allowed = tuple(option)
    allowed_strings = frozenset(str(item) for item in allowed)

    def check(value: Any) -> bool:
        if value is MISSING:
            return False
        return value in allowed or str(value) in allowed_strings
    return check


def _pattern_match(option: Any, builder: ChainBuilder) -> Predicate:
    if isinstance(option, str):
        try:
            pattern: Pattern = re.compile(option)
        except re.error as exc:
            raise RuleConfigurationError(
                f"Rule option 'matches' is not a valid pattern: {exc}",
                field=builder.field,
                token={"matches": option},
            ) from exc
    elif isinstance(option, re.Pattern):
        pattern = option
    else:
        raise RuleConfigurationError("Rule option 'matches' must be a pattern", field=builder.field, token={"matches": option})

    def check(value: Any) -> bool:
        if value is MISSING or value is None:
            return False
        return pattern.search(str(value)) is not None
    return check


def _custom_check(predicate: Callable[[Any], Any]) -> Predicate:
    """Wrap a caller-supplied predicate; ValueError or TypeError counts as a failure."""
    def check(value: Any) -> bool:
        try:
            return bool(predicate(None if value is MISSING else value))
        except (ValueError, TypeError):
            return False
    return check
