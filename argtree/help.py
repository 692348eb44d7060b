"""
argtree usage and help rendering.

Scope
- Pure builders turning a Command into rich renderables (no printing):
  • render_usage(command, name): the one-line "usage: ..." synopsis.
  • render_help(command, name): usage, description, OPTIONS and COMMANDS tables.
- Text helpers that lay those renderables out off-screen at a fixed width:
  format_usage / format_help.
- Printing helpers for the process boundary: print_usage / print_help, which
  render at min(console width, 79).

Layout
    usage: site serve [OPTIONS] ROOT

    Serve the generated site over HTTP.

    OPTIONS:
      --port, -p PORT  port to listen on
                       (default: "8080")
                       (env var: $PORT)
      --help, -h       show this message and exit

- Table column 1 is padded on the right to its longest entry; column 2 starts
  two spaces later and wraps as a left-aligned block.
- Descriptions are reflowed word by word (any run of whitespace is one break
  opportunity).

Styling
- Plain by default. With colorful=True the palette below applies; a host
  program can override entries with a `__styles__` mapping in `__main__`.
"""
import io
import json
from collections import defaultdict

from rich.console import Console, Group
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from .arguments import OptionalRest
from .utils import *


MAX_WIDTH = 79

_STYLES = {
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "#36C5F0",
    "description-section": "italic #A3A3A3",
    "section-label": "bold #FFFFFF",
    "option-name": "bold #00E6FF",
    "metavar": "bold #FFD600",
    "command-name": "bold #36C5F0",
    "argument-description": "#9CA3AF",
    "fallback-note": "dim",
    "error-label": "bold #FF4DA6",
    "error-message": "#C8C8D0",
}


def styler(colorful=False, /):
    """
    Return a style resolver for the given mode.

    When colorful is False every style resolves to "" so the output is plain.
    """
    styles = defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))

    def style(name):
        return styles[name] if colorful else ""

    return style


def _reflow(text, style=""):
    # Collapse every run of whitespace so rich can soft-wrap word by word.
    return Text(" ".join(text.split()), style)


def placeholders(command, /):
    """
    Positional placeholders for the synopsis, in order.

    Required arguments use their docv or ARG<index>; the rest argument renders
    as "<docv>..." when repeating and "[<docv>]" when optional.
    """
    result = [argument.docv or "ARG%d" % index for index, argument in enumerate(command.arguments)]
    if (rest := command.rest) is not None:
        docv = rest.docv or "ARG"
        result.append("[%s]" % docv if isinstance(rest, OptionalRest) else "%s..." % docv)
    return result


def usage(command, name=Unset, /):
    """
    The synopsis as plain text: "usage: <name> [OPTIONS] [COMMAND] ARGS...".
    """
    return str(render_usage(command, name))


def render_usage(command, name=Unset, /, *, colorful=False):
    style = styler(colorful)

    synopsis = ["[OPTIONS]"]
    if command.commands:
        synopsis.append("COMMAND")
    synopsis.extend(placeholders(command))

    return Text.assemble(
        ("usage", style("usage-label")),
        ": ",
        (coalesce(name, command.name), style("program-name")),
        " ",
        (" ".join(synopsis), style("usage-section")),
    )


def _table(rows):
    # Two-column grid indented by two spaces; only column 2 may wrap.
    table = Table.grid(padding=(0, 2, 0, 0))
    table.add_column(no_wrap=True)
    table.add_column()
    for row in rows:
        table.add_row(*row)
    return Padding(table, (0, 0, 0, 2), expand=False)


def _option_rows(command, style):
    for switch in command.options.values():
        head = Text(", ".join(switch.spellings), style("option-name"))
        if (placeholder := switch.placeholder) is not None:
            head.append(" ").append(placeholder, style("metavar"))

        lines = []
        if switch.doc:
            lines.append(_reflow(switch.doc, style("argument-description")))
        if switch.default is not None:
            lines.append(Text("(default: %s)" % json.dumps(switch.default), style("fallback-note")))
        if switch.env:
            lines.append(Text("(env var: $%s)" % switch.env, style("fallback-note")))

        yield head, Text("\n").join(lines)


def _command_rows(command, style):
    for name, child in command.commands.items():
        yield Text(name, style("command-name")), _reflow(child.doc or "", style("argument-description"))


def render_help(command, name=Unset, /, *, colorful=False):
    """
    Build the full help document for one command level.

    Sections, separated by blank lines: usage line, description (when the
    command has a doc), OPTIONS (always present, --help is injected) and
    COMMANDS (when subcommands exist).
    """
    style = styler(colorful)
    renders = [render_usage(command, name, colorful=colorful)]

    if command.doc:
        renders.extend((Text(""), _reflow(command.doc, style("description-section"))))

    if command.options:
        renders.extend((Text(""), Text("OPTIONS:", style("section-label"))))
        renders.append(_table(_option_rows(command, style)))

    if command.commands:
        renders.extend((Text(""), Text("COMMANDS:", style("section-label"))))
        renders.append(_table(_command_rows(command, style)))

    return Group(*renders)


def display_width(console, /):
    """
    Width used for help output: the console width, capped at 79 columns.
    """
    return min(console.width, MAX_WIDTH)


def _line(segments):
    text = Text.assemble(*((segment.text, segment.style) for segment in segments if not segment.control))
    text.rstrip()
    return text


def _trim(renderable, console, width):
    # Lay out at `width` and drop the trailing blanks left by table cells.
    lines = console.render_lines(renderable, console.options.update(width=width), pad=False)
    return Text("\n").join(_line(line) for line in lines)


def _emit(renderable, console):
    width = display_width(console)
    console.print(_trim(renderable, console, width), width=width)


def _capture(renderable, width):
    console = Console(
        file=io.StringIO(),
        width=width,
        color_system=None,
        force_terminal=False,
        highlight=False,
        legacy_windows=False,
    )
    console.print(_trim(renderable, console, width))
    return console.file.getvalue().rstrip("\n")


def format_usage(command, name=Unset, /, *, width=MAX_WIDTH):
    return _capture(render_usage(command, name), width)


def format_help(command, name=Unset, /, *, width=MAX_WIDTH):
    """
    Render the help document to plain text at `width` columns.

    Lines carry no trailing spaces; print_help() emits the same text.
    """
    return _capture(render_help(command, name), width)


def print_usage(command, name=Unset, /, *, console=Unset, colorful=False):
    console = coalesce(console, Console(highlight=False))
    _emit(render_usage(command, name, colorful=colorful), console)


def print_help(command, name=Unset, /, *, console=Unset, colorful=False):
    console = coalesce(console, Console(highlight=False))
    _emit(render_help(command, name, colorful=colorful), console)


__all__ = (
    # Constants
    "MAX_WIDTH",

    # Builders
    "usage",
    "placeholders",
    "render_usage",
    "render_help",

    # Text and printing
    "display_width",
    "format_usage",
    "format_help",
    "print_usage",
    "print_help",
    "styler",
)
