"""
Value types shared by the rule compiler and the schema validator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping


class Location(Enum):
    """Addressable sections of an incoming request."""
    BODY = "body"
    QUERY = "query"
    PARAMS = "params"


@dataclass(frozen=True)
class RequestData:
    """
    The three request sections a validator can read.

    ``body`` keeps whatever the client sent, so that the schema validator can
    report a body that is not a JSON object. Rule chains read sections
    through section(), which treats such a body as empty.
    """
    body: Any = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)

    def raw(self, location: Location) -> Any:
        return getattr(self, location.value)

    def section(self, location: Location) -> Mapping[str, Any]:
        value = self.raw(location)
        return value if isinstance(value, Mapping) else {}

    @classmethod
    def from_request(cls, flask_request) -> "RequestData":
        """
        Build request data from a Flask request.

        JSON bodies are parsed silently; malformed JSON becomes ``None``.
        Form posts become a flat mapping. Query arguments keep their first
        value.
        """
        if flask_request.is_json:
            body = flask_request.get_json(silent=True)
        else:
            body = flask_request.form.to_dict()

        return cls(
            body=body,
            query=flask_request.args.to_dict(),
            params=dict(flask_request.view_args or {}),
        )


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of validating one request.

    ``errors_by_field`` maps the bare field name to the messages that fired
    for it, in the order the validators ran. The outcome is valid exactly
    when that mapping is empty.
    """
    errors_by_field: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors_by_field

    def messages_for(self, field_name: str) -> List[str]:
        return list(self.errors_by_field.get(field_name, []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": {name: list(messages) for name, messages in self.errors_by_field.items()},
        }

    @classmethod
    def success(cls) -> "ValidationOutcome":
        return cls({})


class ErrorCollector:
    """Accumulates field messages in first-failure order, without repeats."""

    def __init__(self):
        self._errors: Dict[str, List[str]] = {}

    def add(self, field_name: str, message: str) -> None:
        messages = self._errors.setdefault(field_name, [])
        if message not in messages:
            messages.append(message)

    def extend(self, field_name: str, messages) -> None:
        for message in messages:
            self.add(field_name, message)

    def outcome(self) -> ValidationOutcome:
        return ValidationOutcome({name: list(messages) for name, messages in self._errors.items()})
