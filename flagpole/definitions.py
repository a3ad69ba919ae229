r"""
Flagpole flag definitions and namespace constraints.

Overview
- Specs
  • Flag: a named, typed value (bool | int | string) settable from the command
    line, an environment variable, a config file or a default.
  • MutexGroup: an ordered set of bool flag names of which at most one may
    resolve to "true".
  • PositionalSpec: minimum number of positional arguments (plus an optional
    human-readable description).
  • Kind: the three supported value kinds.

- Introspection & representation
  • DefinitionType metaclass provides stable __repr__/__rich_repr__ and exposes
    the fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction, in this order)
- name: r"[A-Za-z][A-Za-z0-9_-]*", unique within the target namespace.
- kind: Kind | "bool" | "int" | "string" | bool | int | str.
- shorthand: a single character other than '-', unique within the namespace.
- env: r"[A-Z][A-Z0-9_]*".
- descr/group: optional non-empty strings.
- choices: iterable of strings, duplicates rejected unless a Set.
- pattern: optional regular expression (see flagpole.validation for the two
  built-in patterns that receive stricter checks).
- required: Unset (not declared) | bool.
- default: str | int | bool; it must itself pass validation. An empty
  string means "no default".

Immutability
- Every field is a read-only property; containers are returned as copies.

Quick example:
    >>> verbose = Flag("verbose", "bool", "enable verbose output", shorthand="v")
    >>> verbose.switches
    ('-v', '--verbose')
    >>> Flag("count", Kind.INT, default=1).default
    '1'
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping, Set
from enum import StrEnum
from types import MappingProxyType

from rich.text import Text

from .faults import *
from .utils import *
from .validation import canonical, validate


class Kind(StrEnum):
    """
    Supported flag value kinds.

    The member values are the literal spellings accepted at registration.
    """
    BOOL = "bool"
    INT = "int"
    STRING = "string"

    @property
    def empty(self):
        """
        Type-appropriate unset value: "false" for bool, "" otherwise.
        """
        return "false" if self is Kind.BOOL else ""


class DefinitionType(type):
    """
    Metaclass that turns definitions into read-only, introspectable records.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties
      via mirror().
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


_KINDS = MappingProxyType({
    bool: Kind.BOOL,
    int: Kind.INT,
    str: Kind.STRING,
})


def _sanitize_text(cls, metadata, field, /):
    """
    Internal: validate an optional, non-empty text field (descr, group).

    Unset becomes None; strings are trimmed and must not be empty.
    """
    if not isinstance(value := metadata[field], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    metadata[field] = coalesce(value)


def _sanitize_identity(cls, metadata, namespace, /):
    r"""
    Internal: validate name, kind, shorthand and env in registration order.

    Each violated rule raises its own fault so callers can discriminate:
    - name syntax        → InvalidFlagNameError
    - name already taken → DuplicateFlagError
    - kind               → InvalidFlagTypeError
    - shorthand length   → InvalidShorthandError
    - shorthand taken    → DuplicateShorthandError
    - env syntax         → InvalidEnvVarNameError

    Parameters
    - namespace: Mapping[str, Flag]
      flags already registered in the target context; empty for free-standing
      definitions.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not re.fullmatch(r"[A-Za-z][A-Za-z0-9_-]*", name):
        raise InvalidFlagNameError(
            "invalid flag name %r" % name,
            title="invalid flag name",
            code=FaultCode.INVALID_FLAG_NAME,
            hint="flag names start with a letter and contain only letters, digits, '_' and '-'",
            flag=name,
        )
    if name in namespace:
        raise DuplicateFlagError(
            "flag %r is already registered" % name,
            title="duplicate flag",
            code=FaultCode.DUPLICATE_FLAG,
            hint="register each flag once per context",
            flag=name,
        )

    kind = metadata["kind"]
    try:
        metadata["kind"] = _KINDS[kind] if isinstance(kind, type) else Kind(kind)
    except (KeyError, ValueError):
        raise InvalidFlagTypeError(
            "invalid type %r for flag %r" % (kind, name),
            title="invalid flag type",
            code=FaultCode.INVALID_FLAG_TYPE,
            hint="use one of: %s" % ", ".join(Kind),
            flag=name,
            kind=kind,
        ) from None

    if not isinstance(shorthand := metadata["shorthand"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'shorthand' must be a string")
    if isinstance(shorthand, str):
        if len(shorthand) != 1 or shorthand == "-" or shorthand.isspace():
            raise InvalidShorthandError(
                "invalid shorthand %r for flag %r" % (shorthand, name),
                title="invalid shorthand",
                code=FaultCode.INVALID_SHORTHAND,
                hint="a shorthand is exactly one character (for example: -v)",
                flag=name,
                shorthand=shorthand,
            )
        for owner in namespace.values():
            if owner.shorthand == shorthand:
                raise DuplicateShorthandError(
                    "shorthand %r is already used by flag %r" % (shorthand, owner.name),
                    title="duplicate shorthand",
                    code=FaultCode.DUPLICATE_SHORTHAND,
                    hint="pick another character for flag %r" % name,
                    flag=name,
                    shorthand=shorthand,
                    owner=owner.name,
                )
    metadata["shorthand"] = coalesce(shorthand)

    if not isinstance(env := metadata["env"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'env' must be a string")
    if isinstance(env, str) and not re.fullmatch(r"[A-Z][A-Z0-9_]*", env):
        raise InvalidEnvVarNameError(
            "invalid environment variable name %r for flag %r" % (env, name),
            title="invalid environment variable name",
            code=FaultCode.INVALID_ENV_VAR_NAME,
            hint="environment variable names start with an uppercase letter and contain only A-Z, 0-9 and '_'",
            flag=name,
            env=env,
        )
    metadata["env"] = coalesce(env)


def _sanitize_constraints(cls, metadata, /):
    """
    Internal: normalize choices, pattern, required and default.

    - choices: iterable of strings (a bare string is rejected); duplicates are
      rejected unless given as a Set, which is sorted for a stable display.
    - pattern: optional non-empty string compiling as a regular expression.
    - required: Unset stays "not declared" (None); otherwise a bool.
    - default: bool → "true"/"false", int → decimal string, "" → no default.
    """
    choices = metadata["choices"]
    if isinstance(choices, str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    if isinstance(choices, Set):
        choices = sorted(choices)
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)

    if not isinstance(pattern := metadata["pattern"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'pattern' must be a string")
    if isinstance(pattern, str):
        if not pattern:
            raise ValueError(f"{cls.__typename__} 'pattern' cannot be empty")
        try:
            re.compile(pattern)
        except re.error as error:
            raise ValueError(f"{cls.__typename__} 'pattern' is not a valid regular expression: {error}") from None
    metadata["pattern"] = coalesce(pattern)

    if not isinstance(required := metadata["required"], bool | Unset):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")
    metadata["required"] = coalesce(required)

    match default := metadata["default"]:
        case bool():
            default = "true" if default else "false"
        case int():
            default = str(default)
        case str() | UnsetType():
            pass
        case _:
            raise TypeError(f"{cls.__typename__} 'default' must be a string, an integer or a boolean")
    metadata["default"] = default or None


class Flag(metaclass=DefinitionType):
    """
    Named, typed flag definition.

    A Flag is an immutable record: every field is validated once, at
    construction, and then exposed through read-only properties. Flags are
    usually created through Context.register(), which passes the context's
    existing flags as `namespace` so duplicate names and shorthands are caught.

    Properties
    - name, kind, descr, shorthand, default, choices, env, pattern, required,
      group, hidden (see module docstring for their rules).
    - empty: the kind's unset value ("false" or "").
    - initial: the value a resolution starts from (default, else empty).
    - switches: spellings accepted on the command line, short first.
    """

    __introspectable__ = (
        "name",
        "kind",
        "descr",
        "shorthand",
        "default",
        "choices",
        "env",
        "pattern",
        "required",
        "group",
        "hidden",
    )

    def __new__(
            cls,
            name,
            kind,
            descr=Unset,
            /,
            *,
            shorthand=Unset,
            default=Unset,
            choices=(),
            env=Unset,
            pattern=Unset,
            required=Unset,
            group=Unset,
            hidden=False,
            namespace=MappingProxyType({}),
    ):
        """
        Construct a Flag with the provided metadata.

        Parameters
        - name: str
          Long name (used as --name, as the config key and as the result key).
        - kind: Kind | str | type
          Value kind; Python's bool/int/str are accepted as aliases.
        - descr: Unset | str
          Help text. If Unset, becomes None.
        - shorthand: Unset | str
          Single-character alias (-x).
        - default: Unset | str | int | bool
          Starting value; validated like any other source.
        - choices: Iterable[str]
          Exact, case-sensitive allowed values.
        - env: Unset | str
          Environment variable consulted during resolution.
        - pattern: Unset | str
          Regular expression the value must match.
        - required: Unset | bool
          True: the resolved value must not be empty. False: clearing the
          flag to "" is always accepted.
        - group: Unset | str
          Help section name.
        - hidden: bool
          Suppress from help output.
        - namespace: Mapping[str, Flag]
          Flags the new definition must not collide with.

        Raises
        - InvalidFlagNameError, DuplicateFlagError, InvalidFlagTypeError,
          InvalidShorthandError, DuplicateShorthandError,
          InvalidEnvVarNameError, InvalidValueError (default), in that order.
        - TypeError/ValueError for misuse of the Python API itself.
        """
        if not isinstance(namespace, Mapping):
            raise TypeError(f"{cls.__typename__} 'namespace' must be a mapping")

        metadata = {
            "name": name,
            "kind": kind,
            "descr": descr,
            "shorthand": shorthand,
            "default": default,
            "choices": choices,
            "env": env,
            "pattern": pattern,
            "required": required,
            "group": group,
            "hidden": bool(hidden),
        }
        _sanitize_identity(cls, metadata, namespace)
        _sanitize_text(cls, metadata, "descr")
        _sanitize_text(cls, metadata, "group")
        _sanitize_constraints(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.default is not None:
            validate(self, self.default, source="default")
            self._default = canonical(self, self.default)
        return self

    @property
    def empty(self):
        return self.kind.empty

    @property
    def initial(self):
        return self.default or self.empty

    @property
    def switches(self):
        if self.shorthand is None:
            return ("--" + self.name,)
        return ("-" + self.shorthand, "--" + self.name)


class MutexGroup(metaclass=DefinitionType):
    """
    Ordered group of bool flag names of which at most one may be "true".

    Only the shape is checked here (two or more distinct names); whether the
    members exist and are bool flags is checked by Context.mutex().
    """

    __introspectable__ = ("names",)

    def __new__(cls, *names):
        if len(names) < 2:
            raise TypeError(f"{cls.__typename__} needs at least two flag names")
        seen = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            if name in seen:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            seen.append(name)

        self = super().__new__(cls)
        self._names = tuple(seen)
        return self

    def __iter__(self):
        return iter(self._names)

    def __len__(self):
        return len(self._names)

    def __contains__(self, name):
        return name in self._names


class PositionalSpec(metaclass=DefinitionType):
    """
    Minimum positional-argument count with an optional description.
    """

    __introspectable__ = ("count", "descr")

    def __new__(cls, count, descr=Unset, /):
        if not isinstance(count, int) or isinstance(count, bool):
            raise TypeError(f"{cls.__typename__} 'count' must be an integer")
        if count < 0:
            raise ValueError(f"{cls.__typename__} 'count' cannot be negative")
        metadata = {"count": count, "descr": descr}
        _sanitize_text(cls, metadata, "descr")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


__all__ = (
    "Kind",
    "Flag",
    "MutexGroup",
    "PositionalSpec",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del DefinitionType
