r"""
Flagpole command-line tokenizer.

tokenize() walks argv left to right and yields events:
- Assignment(flag, value, token, index): a flag set from the command line.
  The value is raw (not yet validated, except for the `--bool=value` form,
  which only accepts true/false).
- Positional(value, index): a non-flag token, in encounter order.
- HelpRequest(token, index): `--help` or `-h`; iteration stops after it.

Recognized forms
- --name=value       split on the first '='.
- --name [value]     bool: a following literal true/false is consumed;
                     otherwise: the next token is mandatory and may not look
                     like a flag unless it is a (negative) integer.
- -xyz               bool shorthands chain; a non-bool shorthand must be the
                     last character and consumes the next token.
- anything else      positional, including a lone '-' and a lone '--'.
                     '--' does not end flag parsing: flags after it are
                     still recognized.

Indices are 1-based argv positions and feed the "position-first" messages
(for example: "at second position, ...").
"""
import difflib
import functools
import re
from collections.abc import Iterator
from typing import NamedTuple

from .faults import *


class Assignment(NamedTuple):
    flag: object
    value: str
    token: str
    index: int


class Positional(NamedTuple):
    value: str
    index: int


class HelpRequest(NamedTuple):
    token: str
    index: int


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _unknown(token, index, name, candidates):
    matches = difflib.get_close_matches(name, candidates, n=1)
    return UnknownFlagError(
        "at %s position, unknown flag %r" % (_ordinal(index), token),
        title="unknown flag",
        code=FaultCode.UNKNOWN_FLAG,
        hint="did you mean %r?" % matches[0] if matches else "run with --help to list the flags",
        flag=name,
        token=token,
        index=index,
    )


def _missing(flag, token, index):
    return MissingValueError(
        "at %s position, flag %r expects a value" % (_ordinal(index), token),
        title="missing value",
        code=FaultCode.MISSING_VALUE,
        hint="pass a value after %s (negative numbers are allowed)" % token,
        flag=flag.name,
        token=token,
        index=index,
    )


def _takes(token):
    """
    Internal: can `token` be consumed as the value of a non-bool flag?
    """
    return not token.startswith("-") or re.fullmatch(r"-?[0-9]+", token) is not None


class _Cursor:
    """
    Internal: argv walker with one-token lookahead.
    """

    def __init__(self, argv):
        self.argv = list(argv)
        self.position = 0

    def __bool__(self):
        return self.position < len(self.argv)

    def peek(self):
        return self.argv[self.position] if self else None

    def pop(self):
        token = self.argv[self.position]
        self.position += 1
        return token, self.position


def tokenize(argv, context, /) -> Iterator[Assignment | Positional | HelpRequest]:
    """
    Yield command-line events for `argv` against the flags of `context`.

    `context` only needs a `flags` mapping (name -> Flag).

    Raises
    - UnknownFlagError: unknown long name or shorthand character.
    - MissingValueError: a non-bool flag without a usable value.
    - CombinedShorthandError: a non-bool shorthand followed by more characters.
    - InvalidValueError: `--bool=value` with a value other than true/false.
    """
    flags = context.flags
    shorthands = {flag.shorthand: flag for flag in flags.values() if flag.shorthand is not None}
    cursor = _Cursor(argv)

    while cursor:
        token, index = cursor.pop()

        if token in ("--help", "-h"):
            yield HelpRequest(token, index)
            return

        if token.startswith("--") and len(token) > 2:
            name, equal, value = token[2:].partition("=")
            if (flag := flags.get(name)) is None:
                raise _unknown(token, index, name, list(flags))

            if equal:
                if flag.kind == "bool" and value not in ("true", "false"):
                    raise InvalidValueError(
                        "at %s position, flag %r requires true or false, got %r" % (_ordinal(index), name, value),
                        title="invalid value",
                        code=FaultCode.INVALID_VALUE,
                        hint="use --%s=true or --%s=false" % (name, name),
                        flag=name,
                        value=value,
                        rule="bool",
                        source="command line",
                        token=token,
                        index=index,
                    )
                yield Assignment(flag, value, token, index)
            elif flag.kind == "bool":
                if cursor.peek() in ("true", "false"):
                    yield Assignment(flag, cursor.pop()[0], token, index)
                else:
                    yield Assignment(flag, "true", token, index)
            else:
                if cursor.peek() is None or not _takes(cursor.peek()):
                    raise _missing(flag, token, index)
                yield Assignment(flag, cursor.pop()[0], token, index)
            continue

        if token.startswith("-") and len(token) > 1 and token != "--":
            block = token[1:]
            for offset, char in enumerate(block):
                if (flag := shorthands.get(char)) is None:
                    raise _unknown(token, index, char, list(shorthands))
                if flag.kind == "bool":
                    yield Assignment(flag, "true", "-" + char, index)
                    continue
                if offset < len(block) - 1:
                    raise CombinedShorthandError(
                        "at %s position, shorthand '-%s' takes a value and cannot be combined in %r" % (
                            _ordinal(index), char, token
                        ),
                        title="combined shorthand",
                        code=FaultCode.COMBINED_SHORTHAND,
                        hint="put -%s last in the block or pass it separately" % char,
                        flag=flag.name,
                        token=token,
                        index=index,
                    )
                if cursor.peek() is None or not _takes(cursor.peek()):
                    raise _missing(flag, "-" + char, index)
                yield Assignment(flag, cursor.pop()[0], "-" + char, index)
            continue

        yield Positional(token, index)


__all__ = (
    "Assignment",
    "Positional",
    "HelpRequest",
    "tokenize",
)
