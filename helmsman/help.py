"""
Helmsman help rendering.

Pure functions turning already-registered data into rich renderables; they
never touch parsing state. The parser prints the results to its console.

- usage(subcommand): "Usage: build [options] <target> [output]"
- command_help(subcommand): usage, description, then Options, Optional
  options, Flags and Arguments, each entry with its short/long names, type
  tag, description, "(required)" and "[default: ...]".
- global_help(prog, commands): program usage plus a table of commands with
  aliases and descriptions.
- version(prog, version): one line.

Palette
- Define a mapping named __styles__ in __main__ to override any entry below.
- With colorful=False every style is dropped.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Group
from rich.table import Table
from rich.text import Text

from .properties import Option, Flag, OptionalOption, Argument
from .utils import pluralize


def _styler(colorful):
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "argument-description": "#9CA3AF",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "tag": "bold #FFD600",
        "required": "bold #EF4444",
        "default": "#737373",
        "children": "bold #36C5F0",
        "children-table": "#4B5563",
        "epilog-section": "#737373",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    return text


def _heading(kind):
    return pluralize(kind.__typename__.replace("-", " ")).capitalize()


def _names(property, text):
    style = "flag-name" if isinstance(property, Flag) else "option-name"
    short = text("-%s, " % property.short, style) if property.short else Text("    ")
    return Text.assemble(short, text("--" + property.long, style))


def usage(subcommand, /, *, colorful=False):
    text = _styler(colorful)
    line = Text.assemble(text("Usage", "usage-label"), ": ", text(subcommand.name, "program-name"), " [options]")
    for argument in subcommand.arguments:
        line.append(" ")
        line.append(("<%s>" if argument.required else "[%s]") % argument.name)
    return line


def command_help(subcommand, /, *, colorful=False):
    """
    Build the help for one subcommand.
    """
    text = _styler(colorful)
    renders = [usage(subcommand, colorful=colorful)]

    if subcommand.descr:
        renders.append(Text(""))
        renders.append(text(subcommand.descr, "description-section"))

    for kind, registry in (
            (Option, subcommand.options),
            (OptionalOption, subcommand.optionals),
            (Flag, subcommand.flags),
            (Argument, subcommand.arguments),
    ):
        if not registry:
            continue
        renders.append(Text(""))
        renders.append(Text.assemble(text(_heading(kind), "group-label"), ":"))
        for property in registry:
            if isinstance(property, Argument):
                entry = Text.assemble("  ", text(property.name, "option-name"))
            else:
                entry = Text.assemble("  ", _names(property, text))
            tag = "" if isinstance(property, Flag) else property.type.tag
            if tag:
                entry.append(" ")
                entry.append(text(tag, "tag"))
            renders.append(entry)

            details = Text("    " if isinstance(property, Argument) else "        ")
            if property.descr:
                details.append(text(property.descr, "argument-description"))
            if isinstance(property, Argument):
                details.append(text(" (required)" if property.required else " (optional)", "required"))
            elif isinstance(property, Option):
                if property.required:
                    details.append(text(" (required)", "required"))
                if property.value_or_default is not None:
                    details.append(text(" [default: %s]" % property.value_or_default, "default"))
            elif isinstance(property, Flag) and property.default:
                details.append(text(" [default: true]", "default"))
            if details.plain.strip():
                renders.append(details)

    return Group(*renders)


def global_help(prog, commands, /, *, colorful=False):
    """
    Build the program-level help listing every registered command.
    """
    text = _styler(colorful)
    renders = [
        Text.assemble(text("Usage", "usage-label"), ": ", text(prog, "program-name"), " <command> [options]"),
    ]

    if commands:
        table = Table(
            "command", "aliases", "help",
            title=text("Commands", "group-label"),
            title_justify="left",
            box=ROUNDED,
            style="" if not colorful else "#4B5563",
        )
        for command in commands:
            table.add_row(
                text(command.name, "children"),
                Text(", ".join(command.aliases)),
                text(command.descr or "", "argument-description"),
            )
        renders.append(table)

    renders.append(text(
        "Use `%s <command> --help` for more information about a command." % prog,
        "epilog-section"
    ))
    return Group(*renders)


def version(prog, version, /, *, colorful=False):
    text = _styler(colorful)
    return Text.assemble(text(prog, "program-name"), " ", text(version, "tag"))


__all__ = (
    "usage",
    "command_help",
    "global_help",
    "version",
)
