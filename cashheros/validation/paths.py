"""
Field path resolution for rule descriptors.

A descriptor such as ``query.page`` names the request section in its first
segment and the field in the rest. Descriptors without a recognized section
prefix address the request body.
"""

from typing import Any, Mapping, Tuple

from cashheros.utils.error_handling import RuleConfigurationError
from cashheros.validation.checks import MISSING
from cashheros.validation.outcome import Location

LOCATION_PREFIXES = (
    ("body.", Location.BODY),
    ("query.", Location.QUERY),
    ("params.", Location.PARAMS),
)


def resolve_field_path(descriptor: str) -> Tuple[Location, str]:
    """
    Split a field descriptor into its request location and bare field name.

    >>> resolve_field_path("query.page")
    (<Location.QUERY: 'query'>, 'page')
    >>> resolve_field_path("title")
    (<Location.BODY: 'body'>, 'title')

    Raises:
        RuleConfigurationError: if the descriptor, or the name after a
            section prefix, is empty
    """
    if not isinstance(descriptor, str) or not descriptor:
        raise RuleConfigurationError("Field descriptor must be a non-empty string", field=descriptor)

    for prefix, location in LOCATION_PREFIXES:
        if descriptor.startswith(prefix):
            name = descriptor[len(prefix):]
            if not name:
                raise RuleConfigurationError(
                    f"Field descriptor '{descriptor}' has no field name after its location",
                    field=descriptor,
                )
            return location, name

    return Location.BODY, descriptor


def lookup(section: Mapping[str, Any], name: str) -> Any:
    """
    Read a possibly dotted field name from a request section.

    An exact key match wins over nested lookup. Numeric segments index into
    lists. Returns MISSING when any segment is absent.
    """
    if name in section:
        return section[name]

    current: Any = section
    for segment in name.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return MISSING
    return current
