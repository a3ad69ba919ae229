"""
Flagpole utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the definitions, contexts and resolver layers.
- Public-but-internal leaning: importable, but designed to support the higher
  level registry/resolution API rather than to be used on their own.

Overview
- UnsetType / Unset
  • Singleton sentinel for “argument not provided”, distinct from None and "".
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/""/0 are preserved.

- @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers are
    returned as fresh copies so callers cannot mutate a registered definition.

- pluralize(text, count)
  • English pluralization for fault messages (“1 positional argument”,
    “2 positional arguments”).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce("", "fallback")
    ''
    >>> pluralize("positional argument", 2)
    'positional arguments'
"""
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Flag metadata uses it so that an explicit empty string ("no default") or an
    explicit False ("required=False") stays distinguishable from “not given”.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a process-wide singleton.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like None, "", 0 or False are returned unchanged; only the
    sentinel itself is replaced.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving a generated callable a stable __name__/__qualname__.

    Used for the wrappers built by _alive, mirror() and the definition
    metaclass, so tracebacks and reprs show the attribute they stand for.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _immortalize(object):
    """
    Recursively copy container values.

    Sequences (other than str) become tuples, mappings become dicts and sets
    become frozensets; anything else is returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are copied on every read (see _immortalize), so the public
    view of a registered definition cannot be mutated in place.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def _plural(word, /):
    lower = word.lower()
    irregulars = {
        "entry": "entries",
        "person": "people",
        "child": "children",
        "analysis": "analyses",
    }
    if lower in irregulars:
        plural = irregulars[lower]
    elif lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if word.isupper():
        return plural.upper()
    if word[:1].isupper():
        return plural[:1].upper() + plural[1:]
    return plural


def pluralize(text, count=2, /):
    """
    Pluralize the last word of a phrase unless count is exactly one.

    Examples
    - pluralize("flag")                     -> "flags"
    - pluralize("positional argument", 1)   -> "positional argument"
    - pluralize("entry", 3)                 -> "entries"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")
    if count == 1 or not (match := re.search(r'(\S+)(\s*)$', text)):
        return text
    return text[:match.start(1)] + _plural(match.group(1)) + match.group(2)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None or "" are meaningful values but “no input”
still has to be told apart. Materialize with coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
