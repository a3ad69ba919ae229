"""
Flagpole front-end: module-level API bound to the current context.

Scripts that do not need several namespaces can stay at module level:

    from flagpole import *

    register("verbose", "bool", "enable verbose output", shorthand="v")
    register("count", "int", "how many times", default=1, env="COUNT")
    require(1, "input files")

    resolution = parse()
    if get("verbose") == "true":
        ...

Registration helpers create the context on first use (see autocontext());
accessors read the current context. parse() is the top-level runner and the
only place that decides exit behaviour.
"""
import os
import sys

from .contexts import *
from .faults import *
from .results import Resolution
from .utils import *


def _context():
    """
    Internal: current context, auto-created from the program name if needed.
    """
    try:
        return current()
    except ContextNotFoundError:
        return autocontext()


def register(name, kind, descr=Unset, /, **metadata):
    """
    Register a flag on the current context (see Context.register).
    """
    return _context().register(name, kind, descr, **metadata)


def mutex(*names):
    return _context().mutex(*names)


def require(count, descr=Unset, /):
    return _context().require(count, descr)


def configure(path, /):
    _context().configure(path)


def describe(descr=Unset, /, usage=Unset, examples=()):
    _context().describe(descr, usage=usage, examples=examples)


def fallback(callback, /):
    """
    Register the fault handler of the current context; usable as a decorator.
    """
    return _context().fallback(callback)


def get(name, /):
    return current().get(name)


def positionals():
    return current().positionals


def resolution():
    """
    Snapshot of the current context's live values and positionals.
    """
    context = current()
    return Resolution(context.values, context.positionals)


def parse(argv=Unset, /, *, shell=True, fancy=False, colorful=True, config=Unset, environ=Unset):
    """
    Resolve the current context and handle help and faults.

    Parameters
    - argv: Unset | str | Iterable[str]
      Command line (see Context.resolve); Unset reads sys.argv[1:].
    - shell: bool
      True: print help/faults and exit (0 after help, 1 after a fault).
      False: return after help, re-raise faults.
    - fancy: bool
      Render help and faults inside rich panels.
    - colorful: bool
      Styled output; forced off when NO_COLOR is set.
    - config, environ: forwarded to Context.resolve.

    Behavior
    - A fault goes to the context's fallback when one is registered, and
      parse() then returns None.

    Returns
    - Resolution (helped=True after --help/-h in non-shell mode).
    """
    context = _context()
    colorful = colorful and not os.environ.get("NO_COLOR")

    try:
        resolution = context.resolve(argv, config=config, environ=environ)
    except FlagException as fault:
        context.trigger(fault, shell=shell, fancy=fancy, colorful=colorful)
        return None

    if resolution.helped:
        context.help(colorful=colorful, fancy=fancy)
        if shell:
            sys.exit(0)
    return resolution


__all__ = (
    "register",
    "mutex",
    "require",
    "configure",
    "describe",
    "fallback",
    "get",
    "positionals",
    "resolution",
    "parse",
)
