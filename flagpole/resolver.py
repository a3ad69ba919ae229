"""
Flagpole value resolver.

resolve() computes the value of every flag of a context from four sources,
in this order, each later pass overwriting only the flags it touches:

1. defaults     every flag starts at its kind's empty value, then its default;
2. config       `key = value` lines of the configured file (registered keys
                only);
3. environment  flags declaring `env`, when the variable is set and non-empty;
4. command line tokenizer events, in argv order.

Every value from every source is validated before it is accepted; bool
values are stored canonical ("true"/"false"). Once the passes are done the
global checks run: mutual exclusion, the positional minimum and required
flags.

resolve() works on private copies and never touches the context; committing
the returned Resolution is up to the caller (Context.resolve does it). A
fault therefore never leaves partial state behind.
"""
import logging
import os

from .config import load
from .faults import *
from .results import Resolution
from .tokenizer import Assignment, HelpRequest, Positional, _ordinal, tokenize
from .utils import *
from .validation import canonical, validate

logger = logging.getLogger(__name__)


def _accept(flag, value, source, /, **location):
    """
    Internal: validate a candidate and return its canonical form.

    Command-line faults get the argv position prepended to their message and
    the token/index added to their payload.
    """
    try:
        validate(flag, value, source=source)
    except InvalidValueError as error:
        if not location:
            raise
        raise InvalidValueError(
            "at %s position, %s" % (_ordinal(location["index"]), error.message),
            **(dict(error.options) | location),
        ) from None
    return canonical(flag, value)


def check_mutex(groups, values, /):
    """
    Fail when more than one member of a mutex group resolved to "true".

    Raises
    - MutexViolationError with options group (all members) and flags (the
      members that are set).
    """
    for group in groups:
        if len(conflicts := tuple(name for name in group if values.get(name) == "true")) > 1:
            raise MutexViolationError(
                "flags %s are mutually exclusive" % ", ".join("--" + name for name in conflicts),
                title="mutually exclusive flags",
                code=FaultCode.MUTEX_VIOLATION,
                hint="use only one of: %s" % ", ".join("--" + name for name in group),
                group=tuple(group),
                flags=conflicts,
            )


def check_positionals(spec, positionals, /):
    """
    Fail when fewer positional arguments than required were collected.

    Raises
    - MissingRequiredPositionalError with options required, actual and descr.
    """
    if spec is None or len(positionals) >= spec.count:
        return
    raise MissingRequiredPositionalError(
        "at least %d %s required, got %d%s" % (
            spec.count,
            pluralize("argument", spec.count),
            len(positionals),
            ": %s" % spec.descr if spec.descr else "",
        ),
        title="missing positional arguments",
        code=FaultCode.MISSING_POSITIONALS,
        hint="pass %d more %s" % (
            spec.count - len(positionals), pluralize("argument", spec.count - len(positionals))
        ),
        required=spec.count,
        actual=len(positionals),
        descr=spec.descr,
    )


def check_required(flags, values, /):
    """
    Fail when a flag declared required=True resolved to an empty value.

    Raises
    - MissingRequiredFlagError with option flag.
    """
    for name, flag in flags.items():
        if flag.required is True and not values.get(name):
            raise MissingRequiredFlagError(
                "flag %r is required" % name,
                title="missing required flag",
                code=FaultCode.MISSING_REQUIRED_FLAG,
                hint="pass --%s, set it in the config file%s" % (
                    name, " or export %s" % flag.env if flag.env else ""
                ),
                flag=name,
            )


def resolve(context, argv, /, *, config=Unset, environ=Unset):
    """
    Resolve the flags and positionals of `context` from all sources.

    Parameters
    - context: Context
      Provides flags, groups, spec, config and values.
    - argv: Sequence[str]
      Command-line tokens (program name excluded).
    - config: Unset | None | str | PathLike
      Config file for this pass; Unset uses context.config, None disables it.
    - environ: Unset | Mapping[str, str]
      Environment to read; Unset takes a snapshot of os.environ.

    Returns
    - Resolution. On --help/-h it carries the context's current values,
      no positionals and helped=True; the global checks are skipped.

    Raises
    - InvalidConfigFormatError, ConfigNotFoundError, InvalidValueError,
      UnknownFlagError, MissingValueError, CombinedShorthandError,
      MutexViolationError, MissingRequiredPositionalError,
      MissingRequiredFlagError.
    """
    flags = context.flags

    values = {name: flag.initial for name, flag in flags.items()}
    logger.debug("context %r: seeded %d %s", context.name, len(values), pluralize("flag", len(values)))

    if (path := coalesce(config, context.config)) is not None:
        for entry in load(os.fspath(path)):
            if (flag := flags.get(entry.key)) is None:
                logger.debug("config line %d: ignoring unknown key %r", entry.lineno, entry.key)
                continue
            values[flag.name] = _accept(flag, entry.value, "config")

    environ = dict(coalesce(environ, os.environ))
    for flag in flags.values():
        if flag.env is not None and (value := environ.get(flag.env)):
            logger.debug("flag %r: taking value from $%s", flag.name, flag.env)
            values[flag.name] = _accept(flag, value, "environment")

    positionals = []
    for event in tokenize(argv, context):
        match event:
            case HelpRequest():
                logger.debug("context %r: help requested at position %d", context.name, event.index)
                return Resolution(context.values, (), helped=True)
            case Assignment(flag=flag, value=value, token=token, index=index):
                values[flag.name] = _accept(flag, value, "command line", token=token, index=index)
            case Positional(value=value):
                positionals.append(value)

    check_mutex(context.groups, values)
    check_positionals(context.spec, positionals)
    check_required(flags, values)

    logger.debug(
        "context %r: resolved %d %s and %d %s",
        context.name,
        len(values), pluralize("flag", len(values)),
        len(positionals), pluralize("positional", len(positionals)),
    )
    return Resolution(values, positionals)


__all__ = (
    "resolve",
    "check_mutex",
    "check_positionals",
    "check_required",
)
