"""
Flagpole help screen.

render_help() prints, through rich, everything a context knows about itself:
usage, description, config file, flags by group, the positional requirement,
mutually exclusive flags and examples. Hidden flags are skipped.
"""
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import *

_INDENT = 26


def _meta(flag):
    """
    Internal: the constraint summary shown under a flag, e.g.
    "required, int, default: 3, env: COUNT".
    """
    parts = []
    if flag.required:
        parts.append("required")
    parts.append(str(flag.kind))
    if flag.default is not None:
        parts.append("default: %s" % flag.default)
    if flag.choices:
        parts.append("must be one of: %s" % ", ".join(flag.choices))
    if flag.env is not None:
        parts.append("env: %s" % flag.env)
    if flag.pattern is not None:
        parts.append("pattern: %s" % flag.pattern)
    return ", ".join(parts)


def render_help(context, /, *, console=Unset, colorful=True, fancy=False):
    """
    Render the help screen of a context.

    Palette keys
    - usage-label, program-name, usage-section, description-section
    - config-label, config-path
    - group-label, flag-name, metavar, meta, flag-description
    - arguments-label, argument
    - mutex-label, mutex-dot, mutex
    - examples-label, examples-dot, example
    - panel-title

    Customization
    - Define a mapping named __styles__ in __main__ to override any palette entry.
    - Define __prog__ in __main__ to override the program name (defaults to
      the context name).
    - When colorful is False, styling is suppressed.
    """
    main = __import__("__main__")
    console = coalesce(console, None) or Console()
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "config-label": "bold #FFFFFF",
        "config-path": "#36C5F0",

        # === Flags ===
        "group-label": "bold #FFFFFF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",
        "meta": "#737373",
        "flag-description": "#9CA3AF",

        # === Constraints ===
        "arguments-label": "bold #FFFFFF",
        "argument": "#D1D5DB",
        "mutex-label": "bold #EF4444",
        "mutex-dot": "#EF4444 dim",
        "mutex": "bold #FFD600",

        # === Examples ===
        "examples-label": "bold #22C55E",
        "examples-dot": "#22C55E dim",
        "example": "#E5E7EB",

        # === Fancy panel ===
        "panel-title": "bold #FF4D94",
    } | getattr(main, "__styles__", {}))

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

    def bullets(label, items, kind):
        padding = len(dot := text(" • ", styler(kind + "-dot")))
        section = Text()
        section.append(text(label, styler(kind + "-label"))).append(":\n")
        for item in map(lambda x: text(x, styler(kind)), items):
            for index, segment in enumerate(item.wrap(console, width - padding)):
                section.append(dot if index == 0 else " " * padding).append(segment).append("\n")
        return section

    prog = getattr(main, "__prog__", context.name)
    width = console.width - 4 * fancy
    renders = []

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    if context.usage:
        usage.append(text(context.usage, styler("usage-section")))
    else:
        usage.append(text(prog, styler("program-name"))).append(" [options] [arguments]")
    renders.append(usage.append("\n"))

    if context.descr:
        renders.append(text(context.descr, styler("description-section")).append("\n"))

    if context.config:
        renders.append(Text.assemble(
            text("config file", styler("config-label")), ": ", text(context.config, styler("config-path")), "\n"
        ))

    grouped = defaultdict(list)
    for flag in context.flags.values():
        if not flag.hidden:
            grouped[flag.group or "options"].append(flag)
    order = sorted(name for name in grouped if name != "options") + ["options"] * ("options" in grouped)

    groups = Text()
    for index, name in enumerate(order):
        groups.append(text(name, styler("group-label"))).append(":\n")
        for flag in grouped[name]:
            section = Text("  ")
            section.append(Text(", ").join(text(switch, styler("flag-name")) for switch in flag.switches))
            if flag.kind != "bool":
                section.append(" ").append(text("<%s>" % flag.kind, styler("metavar")))

            lines = []
            if flag.descr:
                lines.extend(text(flag.descr, styler("flag-description")).wrap(console, width - _INDENT))
            lines.extend(text("(%s)" % _meta(flag), styler("meta")).wrap(console, width - _INDENT))

            if len(section) >= _INDENT - 1:
                section.append("\n").append(" " * _INDENT)
            else:
                section.append(" " * (_INDENT - len(section)))
            section.append(lines.pop(0))
            for line in lines:
                section.append("\n").append(" " * _INDENT).append(line)
            groups.append(section).append("\n")
        groups.append("\n" * (index < len(order) - 1))
    if groups:
        renders.append(groups)

    if (spec := context.spec) is not None and spec.count > 0:
        arguments = Text()
        arguments.append(text("arguments", styler("arguments-label"))).append(":\n  ")
        arguments.append(text(
            "at least %d %s required%s" % (
                spec.count, pluralize("argument", spec.count), ": %s" % spec.descr if spec.descr else ""
            ),
            styler("argument"),
        )).append("\n")
        renders.append(arguments)

    if context.groups:
        renders.append(bullets(
            "mutually exclusive flags",
            (", ".join("--" + name for name in group) for group in context.groups),
            "mutex",
        ))

    if context.examples:
        renders.append(bullets("examples", context.examples, "examples"))

    renders[-1].rstrip()

    renderable = Group(*renders)
    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{prog} HELP".upper(), " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    console.print(renderable)


__all__ = (
    "render_help",
)
