"""
argtree faults: parse-time errors, the help signal and user errors.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault.
- CommandLineError and subclasses: raised by the resolver while consuming
  tokens. Each carries the command path (root → level where resolution
  stopped) so the boundary can print the usage line of the deepest command
  before the message.
- HelpRequested: control signal raised when a `help` flag is met; carries the
  path whose help must be shown. It is not an error.
- UserError / error(): raised deliberately by actions after a successful parse;
  rendered as "error: <message>" without a usage block.

Rendering
- render(colorful=False) builds a rich renderable; __rich__ renders plainly so
  faults can be handed to Console.print directly.

Typical flow
    try:
        result = parse(tool, argv)
    except CommandLineError as fault:
        console.print(fault)       # usage: tool [OPTIONS] SRC
                                   # error: missing SRC argument
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .help import render_usage, styler


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): UNKNOWN_SUBCOMMAND
    - options (1111x): UNKNOWN_OPTION, FLAG_ASSIGNMENT, MISSING_OPTION_VALUE
    - positionals (1112x): EXTRA_POSITIONAL, MISSING_ARGUMENT
    - conversion (1113x): INVALID_VALUE
    - stream (1114x): OPTION_TERMINATOR
    - actions (1310x): USER_ERROR
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_OPTION_VALUE        = 11117

    # --- positional errors (11xxx) ---
    EXTRA_POSITIONAL            = 11121
    MISSING_ARGUMENT            = 11125

    # --- conversion errors (11xxx) ---
    INVALID_VALUE               = 11131

    # --- token stream errors (11xxx) ---
    OPTION_TERMINATOR           = 11141

    # --- action errors (13xxx) ---
    USER_ERROR                  = 13101


def _route(path):
    return " ".join(command.name for command in path)


class CommandLineError(Exception):
    """
    Base of every parse-time fault.

    Attributes
    - path: tuple of commands from the root to the level being resolved.
    - message: lowercased, one-line description ("unknown option --prot").
    - options: read-only extra context (token, argument, ...).
    - code: the FaultCode of the concrete subclass.
    """
    code = None

    def __init__(self, path, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.path = tuple(path)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def command(self):
        """The deepest command reached when the fault was raised."""
        return self.path[-1]

    @property
    def name(self):
        """Display route of the failing level ("site serve")."""
        return _route(self.path)

    def render(self, *, colorful=False):
        style = styler(colorful)
        return Group(
            render_usage(self.command, self.name, colorful=colorful),
            Text.assemble(("error", style("error-label")), ": ", (self.message, style("error-message"))),
        )

    def __rich__(self):
        return self.render()


class UnknownOptionError(CommandLineError):
    code = FaultCode.UNKNOWN_OPTION


class FlagAssignmentError(CommandLineError):
    code = FaultCode.FLAG_ASSIGNMENT


class MissingOptionValueError(CommandLineError):
    code = FaultCode.MISSING_OPTION_VALUE


class UnknownSubcommandError(CommandLineError):
    code = FaultCode.UNKNOWN_SUBCOMMAND


class ExtraPositionalError(CommandLineError):
    code = FaultCode.EXTRA_POSITIONAL


class MissingArgumentError(CommandLineError):
    code = FaultCode.MISSING_ARGUMENT


class InvalidValueError(CommandLineError):
    code = FaultCode.INVALID_VALUE


class OptionTerminatorError(CommandLineError):
    code = FaultCode.OPTION_TERMINATOR


class HelpRequested(Exception):
    """
    Raised by the resolver when a `help` flag is consumed.

    The resolver stops immediately; the boundary prints the help of `command`
    under `name` and ends the process successfully.
    """

    def __init__(self, path, /):
        self.path = tuple(path)
        super().__init__(_route(self.path))

    @property
    def command(self):
        return self.path[-1]

    @property
    def name(self):
        return _route(self.path)


class UserError(Exception):
    """
    User-facing failure raised by an action after parsing succeeded.
    """
    code = FaultCode.USER_ERROR

    def __init__(self, message, /):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message

    def render(self, *, colorful=False):
        style = styler(colorful)
        return Text.assemble(("error", style("error-label")), ": ", (self.message, style("error-message")))

    def __rich__(self):
        return self.render()


def error(message, /):
    """
    Abort the running action with a user-facing message.

    Prints "error: <message>" at the boundary and exits with status 1.
    """
    raise UserError(message)


__all__ = (
    "FaultCode",
    "CommandLineError",
    "UnknownOptionError",
    "FlagAssignmentError",
    "MissingOptionValueError",
    "UnknownSubcommandError",
    "ExtraPositionalError",
    "MissingArgumentError",
    "InvalidValueError",
    "OptionTerminatorError",
    "HelpRequested",
    "UserError",
    "error",
)
