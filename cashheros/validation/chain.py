"""
Compilation of one FieldRule into a runnable field validator.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Tuple, Union

from cashheros.utils.error_handling import RuleConfigurationError
from cashheros.validation.checks import is_absent
from cashheros.validation.outcome import ErrorCollector, Location, RequestData, ValidationOutcome
from cashheros.validation.paths import lookup, resolve_field_path
from cashheros.validation.tokens import Check, ChainBuilder, RuleToken, interpret

DEFAULT_MESSAGE = "Invalid value"


@dataclass(frozen=True)
class FieldRule:
    """
    Declarative validation rule for one request field.

    Attributes:
        field: Dotted descriptor whose first segment names the request
            section (``body``, ``query`` or ``params``)
        rules: Ordered rule tokens
        message: Message reported when any check of the chain fails
    """
    field: str
    rules: Tuple[RuleToken, ...]
    message: str = ""

    def __post_init__(self):
        if isinstance(self.rules, (str, bytes, Mapping)) or not isinstance(self.rules, Sequence):
            raise RuleConfigurationError("Field rule tokens must be a list", field=self.field, token=self.rules)
        object.__setattr__(self, "rules", tuple(self.rules))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "FieldRule":
        """Build a rule from the ``{field, rules, message}`` mapping form."""
        unknown = set(config) - {"field", "rules", "message"}
        if unknown:
            raise RuleConfigurationError(
                f"Unknown field rule key(s) {', '.join(sorted(unknown))}",
                field=config.get("field"),
            )
        if "field" not in config or "rules" not in config:
            raise RuleConfigurationError("Field rule requires 'field' and 'rules'", field=config.get("field"))
        return cls(config["field"], config["rules"], config.get("message") or "")

    @classmethod
    def coerce(cls, rule: Union["FieldRule", Mapping[str, Any]]) -> "FieldRule":
        if isinstance(rule, cls):
            return rule
        if isinstance(rule, Mapping):
            return cls.from_dict(rule)
        raise RuleConfigurationError(f"Unsupported field rule of type {type(rule).__name__}", token=rule)


@dataclass(frozen=True)
class FieldValidator:
    """
    Compiled chain for one field.

    Every check runs on every request; checks appended after an ``optional``
    marker are skipped when the field is absent. The failure messages come
    back in check order with repeats collapsed, so a chain sharing one
    message reports it once.
    """
    field: str
    location: Location
    name: str
    checks: Tuple[Check, ...]
    message: str

    def run(self, request: RequestData) -> List[str]:
        value = lookup(request.section(self.location), self.name)
        absent = is_absent(value)

        messages: List[str] = []
        for check in self.checks:
            if check.skip_when_absent and absent:
                continue
            if not check.passes(value):
                message = check.message or self.message
                if message not in messages:
                    messages.append(message)
        return messages

    def validate(self, request: RequestData) -> ValidationOutcome:
        collector = ErrorCollector()
        collector.extend(self.name, self.run(request))
        return collector.outcome()


def compile_field_rule(rule: Union[FieldRule, Mapping[str, Any]]) -> FieldValidator:
    """
    Compile a FieldRule into a FieldValidator.

    Resolves the request location, interprets each token in order and
    attaches the rule message to the chain.

    Raises:
        RuleConfigurationError: if the descriptor or any token is invalid
    """
    rule = FieldRule.coerce(rule)
    location, name = resolve_field_path(rule.field)

    if not rule.rules:
        raise RuleConfigurationError("Field rule declares no rule tokens", field=rule.field)

    builder = ChainBuilder(rule.field)
    for token in rule.rules:
        interpret(token, builder)

    if not builder.checks:
        raise RuleConfigurationError("Field rule declares no checks besides 'optional'", field=rule.field)

    return FieldValidator(
        field=rule.field,
        location=location,
        name=name,
        checks=tuple(builder.checks),
        message=rule.message or DEFAULT_MESSAGE,
    )
