"""
Flagpole faults (typed errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the engine
  can report. Codes are grouped by domain (registry, contexts, values,
  constraints, config) so logs and searches stay predictable.
- FlagException: base type that carries message + options and knows how to
  render itself through rich (header, one-sentence body, a single hint).
- trigger(): central entry point used by the front-end to surface a fault,
  honouring shell/fancy/colorful options.

Contract
- The engine (registry, validator, tokenizer, resolver) only raises these
  exceptions; it never prints and never exits. Presentation and exit codes are
  decided by whoever calls trigger() (see flagpole.commands.parse).
- Every fault carries structured payload in `options` (flag, value, rule,
  source, token, index, group, flags, required, actual, line, lineno, path,
  context...) so callers and tests can discriminate without parsing messages.

Customization (via __main__)
- __codes__: mapping FaultCode -> label, replaces numeric codes in headers.
- __styles__: palette overrides for the renderer.
- __prog__: program name shown in headers.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - registry (1110x)
      • INVALID_FLAG_NAME, DUPLICATE_FLAG, INVALID_FLAG_TYPE, INVALID_SHORTHAND,
        DUPLICATE_SHORTHAND, INVALID_ENV_VAR_NAME, DUPLICATE_POSITIONAL_SPEC
    - contexts (1112x)
      • DUPLICATE_CONTEXT, CONTEXT_NOT_FOUND
    - values (1113x)
      • INVALID_VALUE, UNKNOWN_FLAG, MISSING_VALUE, COMBINED_SHORTHAND
    - constraints (1114x)
      • MUTEX_VIOLATION, MISSING_POSITIONALS, MISSING_REQUIRED_FLAG
    - config (1115x)
      • INVALID_CONFIG_FORMAT, CONFIG_NOT_FOUND
    """
    # --- registry errors ---
    INVALID_FLAG_NAME           = 11101
    DUPLICATE_FLAG              = 11102
    INVALID_FLAG_TYPE           = 11103
    INVALID_SHORTHAND           = 11104
    DUPLICATE_SHORTHAND         = 11105
    INVALID_ENV_VAR_NAME        = 11106
    DUPLICATE_POSITIONAL_SPEC   = 11107

    # --- context errors ---
    DUPLICATE_CONTEXT           = 11121
    CONTEXT_NOT_FOUND           = 11122

    # --- value errors ---
    INVALID_VALUE               = 11131
    UNKNOWN_FLAG                = 11132
    MISSING_VALUE               = 11133
    COMBINED_SHORTHAND          = 11134

    # --- constraint errors ---
    MUTEX_VIOLATION             = 11141
    MISSING_POSITIONALS         = 11142
    MISSING_REQUIRED_FLAG       = 11143

    # --- config errors ---
    INVALID_CONFIG_FORMAT       = 11151
    CONFIG_NOT_FOUND            = 11152

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class FlagException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        context = self.options.get("context")
        prog = text(getattr(main, "__prog__", getattr(context, "name", "flagpole")), styler("prog-name"))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", type(self).__name__)).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            width = console.width - 4
            try:
                width = int(width * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(message, hint), title=header, title_align="left", width=width)

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


# registry
class InvalidFlagNameError(FlagException): ...
class DuplicateFlagError(FlagException): ...
class InvalidFlagTypeError(FlagException): ...
class InvalidShorthandError(FlagException): ...
class DuplicateShorthandError(FlagException): ...
class InvalidEnvVarNameError(FlagException): ...
class DuplicatePositionalSpecError(FlagException): ...

# contexts
class DuplicateContextError(FlagException): ...
class ContextNotFoundError(FlagException): ...

# values
class InvalidValueError(FlagException): ...
class UnknownFlagError(FlagException): ...
class MissingValueError(FlagException): ...
class CombinedShorthandError(FlagException): ...

# constraints
class MutexViolationError(FlagException): ...
class MissingRequiredPositionalError(FlagException): ...
class MissingRequiredFlagError(FlagException): ...

# config
class InvalidConfigFormatError(FlagException): ...
class ConfigNotFoundError(FlagException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see FlagException).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode the fault is rendered on stderr and the process exits with
      status 1; otherwise the (merged) fault is raised.

    typical options
    - context, shell, fancy, colorful, ratio.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "FlagException",
    "InvalidFlagNameError",
    "DuplicateFlagError",
    "InvalidFlagTypeError",
    "InvalidShorthandError",
    "DuplicateShorthandError",
    "InvalidEnvVarNameError",
    "DuplicatePositionalSpecError",
    "DuplicateContextError",
    "ContextNotFoundError",
    "InvalidValueError",
    "UnknownFlagError",
    "MissingValueError",
    "CombinedShorthandError",
    "MutexViolationError",
    "MissingRequiredPositionalError",
    "MissingRequiredFlagError",
    "InvalidConfigFormatError",
    "ConfigNotFoundError",
    "trigger",
)
