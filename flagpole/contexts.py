r"""
Flagpole contexts: isolated namespaces of flags and resolved state.

A Context owns everything one script invocation needs: its flag table, the
live (last committed) values, the positional arguments, at most one
PositionalSpec, the mutex groups, an optional config file path, the script
description used by the help screen, and an optional fault fallback.

Registry
- create_context(name)      register a new context and make it current.
- destroy_context(x)        unregister by name or handle; the handle is dead.
- current()                 the current context.
- activate(x)               make an existing context current.
- registered()              registered names, in creation order.
- autocontext(identity)     derive a name from the program (idempotent).

All mutation goes through the Context handle; the registry only maps names to
handles.

Example:
    >>> with create_context("deploy") as context:
    ...     _ = context.register("verbose", "bool", shorthand="v")
    ...     context.resolve(["-v"]).flags["verbose"]
    'true'
"""
import copy
import logging
import os
import re
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from rich.console import Console

from .definitions import *
from .faults import *
from .helper import render_help
from .resolver import resolve
from .utils import *

logger = logging.getLogger(__name__)

_registry = {}
_current = None


def _alive(method):
    """
    Internal: refuse calls on a destroyed context handle.
    """
    @rename(method.__name__)
    def wrapper(self, /, *args, **kwargs):
        if self._destroyed:
            raise ContextNotFoundError(
                "context %r has been destroyed" % self._name,
                title="context not found",
                code=FaultCode.CONTEXT_NOT_FOUND,
                hint="create a new context with create_context()",
                context=self._name,
            )
        return method(self, *args, **kwargs)

    wrapper.__doc__ = method.__doc__
    return wrapper


def _sanitize_name(name):
    if not isinstance(name, str):
        raise TypeError("context name must be a string")
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ValueError("context name %r must match [A-Za-z_][A-Za-z0-9_]*" % name)
    return name


class Context:
    """
    Isolated namespace of flag definitions and resolved state.

    Contexts are normally obtained from create_context() or autocontext(); a
    Context built directly is a free-standing namespace that is not listed in
    the registry and never becomes current.

    The mapping protocol (len, iter, in, []) runs over flag names and yields
    Flag definitions.
    """

    def __init__(self, name, /):
        self._name = _sanitize_name(name)
        self._flags = {}
        self._values = {}
        self._positionals = ()
        self._spec = None
        self._groups = []
        self._config = None
        self._descr = None
        self._usage = None
        self._examples = ()
        self._fallback = Unset
        self._destroyed = False

    def __repr__(self):
        state = "destroyed" if self._destroyed else "%d %s" % (len(self._flags), pluralize("flag", len(self._flags)))
        return "<%s %r (%s)>" % (type(self).__name__, self._name, state)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        if _registry.get(self._name) is self:
            destroy_context(self)

    @property
    def name(self):
        return self._name

    @property
    def destroyed(self):
        return self._destroyed

    @property
    @_alive
    def flags(self):
        return MappingProxyType(dict(self._flags))

    @property
    @_alive
    def values(self):
        """
        Live values (defaults until a resolution commits), sorted by name.
        """
        return MappingProxyType(dict(sorted(self._values.items())))

    @property
    @_alive
    def positionals(self):
        return self._positionals

    @property
    @_alive
    def groups(self):
        return tuple(self._groups)

    @property
    @_alive
    def spec(self):
        return self._spec

    @property
    @_alive
    def config(self):
        return self._config

    @property
    def descr(self):
        return self._descr

    @property
    def usage(self):
        return self._usage

    @property
    def examples(self):
        return self._examples

    @_alive
    def register(
            self,
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
    ):
        """
        Define a flag in this context.

        See Flag for the metadata rules; the context's existing flags are
        passed along so duplicate names and shorthands are rejected. On
        success the live value is the kind's empty value, then the default.

        Returns
        - the registered Flag.
        """
        flag = Flag(
            name,
            kind,
            descr,
            shorthand=shorthand,
            default=default,
            choices=choices,
            env=env,
            pattern=pattern,
            required=required,
            group=group,
            hidden=hidden,
            namespace=self._flags,
        )
        self._flags[flag.name] = flag
        self._values[flag.name] = flag.initial
        logger.debug("registered flag %r of kind %r in context %r", flag.name, str(flag.kind), self._name)
        return flag

    @_alive
    def mutex(self, *names):
        """
        Declare that at most one of the given bool flags may resolve to "true".

        Every member must already be registered and be of kind bool. A flag may
        belong to several groups.
        """
        group = MutexGroup(*names)
        for name in group:
            if name not in self._flags:
                raise UnknownFlagError(
                    "mutex group refers to unknown flag %r" % name,
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint="register the flag before declaring the group",
                    flag=name,
                    group=group.names,
                )
            if self._flags[name].kind != Kind.BOOL:
                raise InvalidFlagTypeError(
                    "mutex group member %r must be a bool flag" % name,
                    title="invalid flag type",
                    code=FaultCode.INVALID_FLAG_TYPE,
                    hint="only bool flags can be mutually exclusive",
                    flag=name,
                    kind=str(self._flags[name].kind),
                    group=group.names,
                )
        self._groups.append(group)
        return group

    @_alive
    def require(self, count, descr=Unset, /):
        """
        Require at least `count` positional arguments (once per context).
        """
        if self._spec is not None:
            raise DuplicatePositionalSpecError(
                "context %r already requires %d positional %s" % (
                    self._name, self._spec.count, pluralize("argument", self._spec.count)
                ),
                title="duplicate positional requirement",
                code=FaultCode.DUPLICATE_POSITIONAL_SPEC,
                hint="declare the positional requirement once",
                context=self._name,
                required=self._spec.count,
            )
        self._spec = PositionalSpec(count, descr)
        return self._spec

    @_alive
    def configure(self, path, /):
        """
        Set the config file read during resolution; None clears it.
        """
        if path is not None and not isinstance(path, str | os.PathLike):
            raise TypeError("configure() argument must be a path or None")
        self._config = os.fspath(path) if path is not None else None

    @_alive
    def describe(self, descr=Unset, /, usage=Unset, examples=()):
        """
        Attach script information shown by the help screen.
        """
        for field, value in (("descr", descr), ("usage", usage)):
            if not isinstance(value, str | Unset):
                raise TypeError(f"describe() {field!r} must be a string")
        if isinstance(examples, str) or not isinstance(examples, Iterable):
            raise TypeError("describe() 'examples' must be an iterable of strings")
        examples = tuple(examples)
        if not all(isinstance(example, str) for example in examples):
            raise TypeError("describe() 'examples' must be an iterable of strings")

        self._descr = coalesce(descr) or None
        self._usage = coalesce(usage) or None
        self._examples = examples

    @_alive
    def fallback(self, fallback, /):
        """
        Register a one-time fault handler used by parse().

        Returns the callable, so it can be used as a decorator.
        """
        if not callable(fallback):
            raise TypeError("fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    @_alive
    def get(self, name, /):
        """
        Canonical live value of a flag (bool flags always read "true"/"false").
        """
        try:
            return self._values[name]
        except KeyError:
            raise UnknownFlagError(
                "unknown flag %r" % name,
                title="unknown flag",
                code=FaultCode.UNKNOWN_FLAG,
                hint="registered flags: %s" % (", ".join(self._flags) or "none"),
                flag=name,
                context=self._name,
            ) from None

    @_alive
    def resolve(self, argv=Unset, /, *, config=Unset, environ=Unset):
        """
        Resolve every flag and commit the result to this context.

        Parameters
        - argv:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        - config: Unset | None | str | PathLike
          Overrides the configured file for this call (None disables it).
        - environ: Unset | Mapping[str, str]
          Environment to read; defaults to a snapshot of os.environ.

        Returns
        - Resolution. When help was requested it has helped=True and the
          context is left untouched.

        Raises
        - any FlagException from the resolver; nothing is committed then.
        """
        if argv is Unset:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("resolve() argument must be a string or an iterable of strings")
        else:
            raise TypeError("resolve() argument must be a string or an iterable of strings")

        resolution = resolve(self, tokens, config=config, environ=environ)
        if not resolution.helped:
            self._values.update(resolution.flags)
            self._positionals = resolution.positionals
        return resolution

    @_alive
    def help(self, *, console=Unset, colorful=True, fancy=False):
        """
        Render the help screen for this context (see flagpole.helper).
        """
        render_help(self, console=console, colorful=colorful, fancy=fancy)

    @_alive
    def trigger(self, fault, /, **options):
        """
        Surface a fault raised while resolving this context.

        The fault receives this context plus the presentation options. In
        shell mode the help screen is printed to stderr first. A registered
        fallback takes over from there; otherwise faults.trigger() decides
        (raise, or print and exit in shell mode).
        """
        fault = copy.replace(fault, **(options | {"context": self}))
        if fault.options.get("shell", False):
            self.help(
                console=Console(stderr=True),
                colorful=fault.options.get("colorful", True),
                fancy=fault.options.get("fancy", False),
            )
        if self._fallback:
            self._fallback(fault)
        else:
            trigger(fault)

    def __getitem__(self, name, /):
        return self._flags[name]

    def __contains__(self, name, /):
        return name in self._flags

    def __iter__(self):
        return iter(tuple(self._flags))

    def __len__(self):
        return len(self._flags)


def create_context(name, /):
    """
    Register a new context under `name` and make it current.

    Raises
    - DuplicateContextError when the name is taken.
    - TypeError/ValueError for a malformed name.
    """
    global _current
    if _sanitize_name(name) in _registry:
        raise DuplicateContextError(
            "context %r already exists" % name,
            title="duplicate context",
            code=FaultCode.DUPLICATE_CONTEXT,
            hint="destroy it first or use autocontext() to reuse it",
            context=name,
        )
    _registry[name] = _current = Context(name)
    logger.debug("created context %r", name)
    return _current


def _lookup(object):
    name = object.name if isinstance(object, Context) else object
    context = _registry.get(name) if isinstance(name, str) else None
    if context is None or (isinstance(object, Context) and context is not object):
        raise ContextNotFoundError(
            "context %r not found" % name,
            title="context not found",
            code=FaultCode.CONTEXT_NOT_FOUND,
            hint="known contexts: %s" % (", ".join(_registry) or "none"),
            context=name,
        )
    return context


def destroy_context(context, /):
    """
    Unregister a context (by name or handle) and release its state.

    Destroying the current context clears the current pointer; the handle
    refuses further use.
    """
    global _current
    context = _lookup(context)
    del _registry[context.name]
    if _current is context:
        _current = None
    context._flags.clear()
    context._values.clear()
    context._groups.clear()
    context._positionals = ()
    context._spec = None
    context._destroyed = True
    logger.debug("destroyed context %r", context.name)


def current():
    """
    Return the current context; ContextNotFoundError when there is none.
    """
    if _current is None:
        raise ContextNotFoundError(
            "no current context",
            title="context not found",
            code=FaultCode.CONTEXT_NOT_FOUND,
            hint="call create_context() or autocontext() first",
        )
    return _current


def activate(context, /):
    """
    Make an existing context (name or handle) current and return it.
    """
    global _current
    _current = _lookup(context)
    return _current


def registered():
    return tuple(_registry)


def autocontext(identity=Unset, /):
    """
    Derive a context name from the program identity and make it current.

    The identity defaults to sys.argv[0]; its basename loses a .py/.sh suffix
    and every character outside [A-Za-z0-9_] becomes '_'. A context with that
    name is reused when it exists, so repeated calls are idempotent.
    """
    if not isinstance(identity := coalesce(identity, sys.argv[0] if sys.argv else ""), str):
        raise TypeError("autocontext() argument must be a string")
    name = re.sub(r"\.(py|sh)$", "", os.path.basename(identity))
    name = re.sub(r"[^A-Za-z0-9_]", "_", name) or "main"
    if name[0].isdigit():
        name = "_" + name
    if name in _registry:
        return activate(name)
    return create_context(name)


__all__ = (
    "Context",
    "create_context",
    "destroy_context",
    "current",
    "activate",
    "registered",
    "autocontext",
)
