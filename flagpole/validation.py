r"""
Flagpole value validation.

Every candidate value, whatever its source (default, config, environment,
command line), goes through validate() before it is stored. The checks run in
a fixed order and the first failure wins:

1. bypass   - an explicitly optional flag (required=False) may be cleared to "".
2. kind     - bool: true|false|0|1|yes|no (any case); int: ^[+-]?[0-9]+$,
              empty rejected; string: always valid.
3. choices  - exact, case-sensitive membership.
4. pattern  - EMAIL_PATTERN and PHONE_PATTERN get dedicated structural checks,
              any other pattern is searched with re.search (grep -E semantics).

Faults raised here are InvalidValueError instances whose options carry the
flag name, the rejected value, the violated rule and the source.

Example:
    >>> from flagpole import Flag
    >>> canonical(Flag("debug", "bool"), "YES")
    'true'
"""
import functools
import re

from .faults import *
from .utils import *

EMAIL_PATTERN = (
    r"^[a-zA-Z0-9]([a-zA-Z0-9_%+-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9_%+-]*[a-zA-Z0-9])?)*"
    r"@[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)*\.[a-zA-Z]{2,}$"
)
PHONE_PATTERN = r"^[0-9]{3}-[0-9]{3}-[0-9]{4}$"

_BOOLEANS = {
    "true": "true",
    "1": "true",
    "yes": "true",
    "false": "false",
    "0": "false",
    "no": "false",
}


@functools.cache
def _compile(pattern):
    return re.compile(pattern)


def validate_email(value, /):
    """
    Structural email checks applied on top of EMAIL_PATTERN.

    Returns the violated rule as a short sentence, or None when the address is
    acceptable.
    """
    local, at, domain = value.partition("@")
    if not at or "@" in domain:
        return "email address must contain exactly one '@'"
    if ".." in local or ".." in domain:
        return "email address cannot contain consecutive dots"
    if any(part.startswith((".", "-")) or part.endswith((".", "-")) for part in (local, domain)):
        return "email parts cannot start or end with dots or hyphens"
    if not re.fullmatch(r"[a-zA-Z0-9][a-zA-Z0-9._%+-]*[a-zA-Z0-9]", local):
        return "email local part must start and end with alphanumeric characters"
    if not re.fullmatch(r"[a-zA-Z0-9][a-zA-Z0-9.-]*[a-zA-Z0-9]\.[a-zA-Z]{2,}", domain):
        return "email domain must end with a top-level label of at least two letters"
    return None


def _check_pattern(pattern, value):
    """
    Internal: return the violated pattern rule, or None.
    """
    if pattern == EMAIL_PATTERN:
        return validate_email(value)
    if pattern == PHONE_PATTERN:
        if not re.fullmatch(r"[0-9]{3}-[0-9]{3}-[0-9]{4}", value):
            return "phone number must be in format: ###-###-####"
        return None
    try:
        if _compile(pattern).search(value) is None:
            return "value does not match required pattern: %s" % pattern
    except re.error:
        return "invalid pattern: %s" % pattern
    return None


def validate(flag, value, /, *, source=Unset):
    """
    Check a candidate value against a flag's kind and constraints.

    Parameters
    - flag: Flag
      The definition the value is destined for.
    - value: str
      Raw candidate value (not yet canonicalized).
    - source: Unset | str
      Where the value came from ("default", "config", "environment",
      "command line"); carried in the fault payload and message.

    Raises
    - InvalidValueError with options flag, value, rule ("bool", "int",
      "choices", "pattern") and source.
    """
    if not isinstance(value, str):
        raise TypeError("validate() value must be a string")

    if value == "" and flag.required is False:
        return

    origin = " (from %s)" % source if source else ""

    def fault(rule, message, hint):
        return InvalidValueError(
            message + origin,
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint=hint,
            flag=flag.name,
            value=value,
            rule=rule,
            source=coalesce(source),
        )

    match flag.kind:
        case "bool":
            if value.lower() not in _BOOLEANS:
                raise fault(
                    "bool",
                    "flag %r requires a boolean value, got %r" % (flag.name, value),
                    "use one of: true, false, 0, 1, yes, no",
                )
        case "int":
            if not re.fullmatch(r"[+-]?[0-9]+", value):
                raise fault(
                    "int",
                    "flag %r requires an integer value, got %r" % (flag.name, value),
                    "use a whole number such as 42 or -5",
                )

    if flag.choices and value not in flag.choices:
        raise fault(
            "choices",
            "flag %r must be one of: %s, got %r" % (flag.name, ", ".join(flag.choices), value),
            "values are compared exactly and case-sensitively",
        )

    if flag.pattern is not None and (rule := _check_pattern(flag.pattern, value)) is not None:
        raise fault(
            "pattern",
            "flag %r value %r is rejected: %s" % (flag.name, value, rule),
            "check the value format",
        )


def canonical(flag, value, /):
    """
    Normalize a validated value for storage: bool values become "true" or
    "false" (a cleared bool reads "false"), everything else is returned
    unchanged.
    """
    if flag.kind == "bool":
        return _BOOLEANS.get(value.lower(), "false")
    return value


__all__ = (
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "validate",
    "validate_email",
    "canonical",
)
