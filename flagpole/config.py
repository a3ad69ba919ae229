r"""
Flagpole config file reader.

Format (UTF-8, one assignment per line; only "\n" ends a line, and a
trailing "\r" is dropped)
- blank lines and lines whose first non-blank character is '#' are skipped;
- every other line must read `key = value` where key matches
  [a-zA-Z][a-zA-Z0-9_]*; the value is everything after the first '=';
  both sides are trimmed.

The whole file is parsed before anything is returned, so a malformed line
anywhere rejects the file as a whole.
"""
import logging
import re
from typing import NamedTuple

from .faults import *

logger = logging.getLogger(__name__)

_LINE = re.compile(r"\s*([a-zA-Z][a-zA-Z0-9_]*)\s*=(.*)")


class Entry(NamedTuple):
    key: str
    value: str
    lineno: int


def parse(text, /, *, path=None):
    """
    Parse config text into a tuple of entries, in file order.

    Raises
    - InvalidConfigFormatError with options line, lineno and path.
    """
    entries = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        line = line.removesuffix("\r")
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if (match := _LINE.fullmatch(line)) is None:
            raise InvalidConfigFormatError(
                "invalid config line %d%s: %r" % (lineno, " in %s" % path if path else "", line),
                title="invalid config format",
                code=FaultCode.INVALID_CONFIG_FORMAT,
                hint="config lines read 'key = value'; keys start with a letter",
                line=line,
                lineno=lineno,
                path=path,
            )
        entries.append(Entry(match[1], match[2].strip(), lineno))
    return tuple(entries)


def load(path, /):
    """
    Read and parse a config file.

    Raises
    - ConfigNotFoundError when the file is missing or unreadable.
    - InvalidConfigFormatError on the first malformed line.
    """
    try:
        with open(path, encoding="utf-8", newline="") as file:
            text = file.read()
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigNotFoundError(
            "cannot read config file %r: %s" % (path, getattr(error, "strerror", None) or error),
            title="config not found",
            code=FaultCode.CONFIG_NOT_FOUND,
            hint="check the path passed to configure()",
            path=path,
        ) from None

    entries = parse(text, path=path)
    logger.debug("read %d config %s from %r", len(entries), "entry" if len(entries) == 1 else "entries", path)
    return entries


__all__ = (
    "Entry",
    "parse",
    "load",
)
