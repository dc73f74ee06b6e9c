"""
Rule-set compilation and the rule-set registry.

compile_rule_set() compiles an ordered list of field rules element-wise.
run_validators() evaluates compiled validators against a request and
collects every failure into a ValidationOutcome. RuleSetRegistry holds the
compiled form of every named rule set; the application factory builds one at
startup and shares it through the Flask app.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from cashheros.utils.error_handling import RuleConfigurationError
from cashheros.utils.logging import get_logger
from cashheros.validation.chain import FieldRule, FieldValidator, compile_field_rule
from cashheros.validation.outcome import ErrorCollector, RequestData, ValidationOutcome
from cashheros.validation.rule_sets import RULE_SETS

logger = get_logger("validation.rules")

RuleLike = Union[FieldRule, Mapping[str, Any]]


def compile_rule_set(rules: Iterable[RuleLike], name: Optional[str] = None) -> List[FieldValidator]:
    """
    Compile field rules into validators, preserving order.

    Args:
        rules: Ordered FieldRules or ``{field, rules, message}`` mappings
        name: Rule-set name, added to configuration errors

    Returns:
        One FieldValidator per rule, in input order

    Raises:
        RuleConfigurationError: if any rule is malformed
    """
    if isinstance(rules, (str, bytes, Mapping)):
        raise RuleConfigurationError("Rule set must be a list of field rules", rule_set=name)

    try:
        return [compile_field_rule(rule) for rule in rules]
    except RuleConfigurationError as exc:
        if name is None or exc.rule_set is not None:
            raise
        raise exc.with_rule_set(name) from exc


def run_validators(validators: Iterable[FieldValidator], request: RequestData) -> ValidationOutcome:
    """
    Run validators in registration order and collect every failure.

    Field keys appear in the order of their first failure; a message already
    recorded for a field is not repeated.
    """
    collector = ErrorCollector()
    for validator in validators:
        collector.extend(validator.name, validator.run(request))

    outcome = collector.outcome()
    if not outcome.valid:
        logger.debug("Rule validation failed", fields=list(outcome.errors_by_field))
    return outcome


class RuleSetRegistry:
    """
    Compiled, read-only collection of named rule sets.

    Every rule set is compiled in the constructor, so a malformed entry raises
    RuleConfigurationError while the application starts.
    """

    def __init__(self, rule_sets: Optional[Mapping[str, Sequence[RuleLike]]] = None):
        if rule_sets is None:
            rule_sets = RULE_SETS

        self._compiled: Dict[str, Tuple[FieldValidator, ...]] = {}
        for name, rules in rule_sets.items():
            self._compiled[name] = tuple(compile_rule_set(rules, name=name))

        logger.debug(
            "Rule sets compiled",
            rule_sets=len(self._compiled),
            validators=sum(len(validators) for validators in self._compiled.values()),
        )

    def names(self) -> List[str]:
        return list(self._compiled)

    def get(self, name: str) -> Tuple[FieldValidator, ...]:
        try:
            return self._compiled[name]
        except KeyError:
            raise KeyError(f"Unknown rule set '{name}'") from None

    def validators_for(self, *names: str) -> List[FieldValidator]:
        validators: List[FieldValidator] = []
        for name in names:
            validators.extend(self.get(name))
        return validators

    def validate(self, names: Union[str, Sequence[str]], request: RequestData) -> ValidationOutcome:
        """Validate a request against one rule set or several, in the order given."""
        if isinstance(names, str):
            names = [names]
        return run_validators(self.validators_for(*names), request)

    def __contains__(self, name: object) -> bool:
        return name in self._compiled

    def __len__(self) -> int:
        return len(self._compiled)
