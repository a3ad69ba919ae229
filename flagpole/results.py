"""
Flagpole resolution results and their JSON form.

A Resolution is the immutable outcome of one resolution pass:
- flags: read-only mapping name -> canonical value, in alphabetical order;
- positionals: tuple of positional arguments, in encounter order;
- helped: True when --help/-h short-circuited the pass.

dumps()/loads() convert to and from the export format:

    {"flags": {"count": "3", "name": null}, "positionals": ["a", "b"]}

Keys are sorted and empty values are written as null. Escaping of quotes,
backslashes and control characters is left to the json encoder, so any value
survives a round trip.
"""
import json
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from rich.box import ROUNDED
from rich.table import Table
from rich.text import Text


class Resolution:
    """
    Immutable result of resolving a context.

    Supports `name in resolution`, `resolution[name]` and
    `resolution.get(name, default)` over the flag values.
    """

    __slots__ = ("_flags", "_positionals", "_helped")

    def __init__(self, flags, positionals=(), helped=False):
        if not isinstance(flags, Mapping):
            raise TypeError("Resolution flags must be a mapping")
        if isinstance(positionals, str) or not isinstance(positionals, Sequence):
            raise TypeError("Resolution positionals must be a sequence of strings")
        for name, value in flags.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise TypeError("Resolution flags must map strings to strings")
        if not all(isinstance(value, str) for value in positionals):
            raise TypeError("Resolution positionals must be a sequence of strings")

        self._flags = MappingProxyType(dict(sorted(flags.items())))
        self._positionals = tuple(positionals)
        self._helped = bool(helped)

    @property
    def flags(self):
        return self._flags

    @property
    def positionals(self):
        return self._positionals

    @property
    def helped(self):
        return self._helped

    def get(self, name, default=None, /):
        return self._flags.get(name, default)

    def __getitem__(self, name):
        return self._flags[name]

    def __contains__(self, name):
        return name in self._flags

    def __eq__(self, other):
        if not isinstance(other, Resolution):
            return NotImplemented
        return (
            dict(self._flags) == dict(other._flags) and
            self._positionals == other._positionals and
            self._helped == other._helped
        )

    def __hash__(self):
        return hash((tuple(self._flags.items()), self._positionals, self._helped))

    def __repr__(self):
        return "Resolution(flags=%r, positionals=%r, helped=%r)" % (
            dict(self._flags), self._positionals, self._helped
        )

    def __rich__(self):
        table = Table("flag", "value", box=ROUNDED, title="resolution")
        for name, value in self._flags.items():
            table.add_row(Text(name, "bold cyan"), Text(value) if value else Text("(empty)", "dim"))
        for index, value in enumerate(self._positionals, start=1):
            table.add_row(Text("#%d" % index, "bold yellow"), Text(value))
        return table


def dumps(resolution, /, *, indent=None):
    """
    Serialize a Resolution to its JSON export form.
    """
    if not isinstance(resolution, Resolution):
        raise TypeError("dumps() argument must be a Resolution")
    return json.dumps(
        {
            "flags": {name: value or None for name, value in resolution.flags.items()},
            "positionals": list(resolution.positionals),
        },
        sort_keys=True,
        indent=indent,
        ensure_ascii=False,
    )


def loads(text, /):
    """
    Parse the JSON export form back into a Resolution (null becomes "").

    Raises
    - ValueError on malformed JSON or an unexpected payload shape.
    """
    if not isinstance(text, str | bytes | bytearray):
        raise TypeError("loads() argument must be a string")
    payload = json.loads(text)

    if not isinstance(payload, dict) or set(payload) != {"flags", "positionals"}:
        raise ValueError("resolution payload must be an object with 'flags' and 'positionals'")
    flags, positionals = payload["flags"], payload["positionals"]
    if not isinstance(flags, dict) or not all(isinstance(value, str | None) for value in flags.values()):
        raise ValueError("resolution 'flags' must map names to strings or null")
    if not isinstance(positionals, list) or not all(isinstance(value, str) for value in positionals):
        raise ValueError("resolution 'positionals' must be a list of strings")

    return Resolution({name: value or "" for name, value in flags.items()}, positionals)


__all__ = (
    "Resolution",
    "dumps",
    "loads",
)
