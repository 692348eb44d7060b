"""
argtree resolver: turn argv into a chain of resolved command levels.

Overview
- parse(command, argv, environ=...) -> CommandResult
  • Raises CommandLineError (path-qualified) on malformed input.
  • Raises HelpRequested when a `help` flag is met at any level.
- resolve(command, argv, environ=...) -> Dispatch | ShowHelp | Fail
  • Same resolution, with the two non-success exits turned into values.
  • Performs no I/O; the process boundary (argtree.dispatcher) decides what to
    print and which status to exit with.

Resolution, per command level
1. Tokens are consumed left to right through one shared Cursor.
2. Options are looked up by full or short name. Flags become True; value
   options take their inline value or the next positional token.
3. Positionals fill required arguments first, then the rest argument, then
   select a subcommand. Selecting a subcommand hands the remaining tokens to
   the child level and ends this level's loop.
4. Unfilled required arguments are an error; an unfilled optional rest binds
   its default.
5. Options not given on the command line fall back, in declaration order, to
   their environment variable and then to their declared default.

Every raw string (token, environment value or default) goes through the
conversion of its option or argument. A conversion failure other than
UserError becomes an InvalidValueError chained to the original exception.

Example:
    >>> result = parse(site, ["serve", "--port", "9000"])
    >>> result.next.command.name, result.next.opts["port"]
    ('serve', 9000)
"""
import logging
import os
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType
from typing import NamedTuple

from .arguments import BooleanOption, RepeatingOption, OptionalRest
from .commands import Command
from .faults import *
from .tokens import TokenKind, tokenize
from .utils import *

logger = logging.getLogger(__name__)


class CommandResult(NamedTuple):
    """
    Resolution of one command level.

    - command: the Command resolved at this level.
    - path: commands from the root to this level.
    - name: the token that selected this level (the command name at the root).
    - args: converted positionals, required first then rest.
    - opts: read-only mapping option key → converted value; value options with
      no CLI, environment or default value are absent.
    - next: resolution of the selected subcommand, or None at the leaf.
    """
    command: Command
    path: tuple
    name: str
    args: tuple
    opts: MappingProxyType
    next: "CommandResult | None" = None


class Dispatch(NamedTuple):
    result: CommandResult


class ShowHelp(NamedTuple):
    path: tuple

    @property
    def command(self):
        return self.path[-1]

    @property
    def name(self):
        return " ".join(command.name for command in self.path)


class Fail(NamedTuple):
    error: CommandLineError


class Cursor:
    """
    Read position over an immutable token tuple, shared by every level of one
    parse so that a subcommand continues exactly where its parent stopped.
    """

    def __init__(self, tokens, /):
        self.tokens = tuple(tokens)
        self.position = 0

    def __bool__(self):
        return self.position < len(self.tokens)

    def peek(self):
        return self.tokens[self.position] if self else None

    def advance(self):
        if not self:
            raise IndexError("cursor is exhausted")
        self.position += 1
        return self.tokens[self.position - 1]


def split_argv(argv=Unset, /):
    """
    Normalize argv: Unset → sys.argv[1:], a string → shlex.split(), any other
    iterable → list of its items.
    """
    if argv is Unset:
        return sys.argv[1:]
    elif isinstance(argv, str):
        return shlex.split(argv)
    elif isinstance(argv, Iterable):
        return list(argv)
    raise TypeError("argv must be a string or an iterable of strings")


def _convert(path, spec, raw, subject):
    try:
        return spec(raw)
    except UserError:
        raise
    except Exception as exception:
        reason = str(exception) or type(exception).__name__
        raise InvalidValueError(
            path,
            "invalid value %r for %s: %s" % (raw, subject, reason),
            value=raw,
        ) from exception


def _bind(opts, key, switch, value):
    if isinstance(switch, RepeatingOption):
        opts.setdefault(key, []).append(value)
    else:
        opts[key] = value


def _consume_option(options, switches, path, token, cursor, opts):
    if (key := switches.get(token.name)) is None:
        raise UnknownOptionError(path, "unknown option %s" % token.spelling, token=token.raw)

    switch = options[key]
    kind = switch.option if isinstance(switch, RepeatingOption) else switch

    if isinstance(switch, BooleanOption) and switch.name == "help":
        raise HelpRequested(path)
    elif isinstance(kind, BooleanOption):
        if token.value is not None:
            raise FlagAssignmentError(path, "option %s does not take a value" % token.spelling, token=token.raw)
        _bind(opts, key, switch, True)
        return

    if token.value is not None:
        raw = token.value
    elif (following := cursor.peek()) is not None and following.kind is TokenKind.POSITIONAL:
        raw = cursor.advance().value
    else:
        raise MissingOptionValueError(path, "missing value for option %s" % token.spelling, token=token.raw)

    _bind(opts, key, switch, _convert(path, switch, raw, "option %s" % token.spelling))


def _fill_options(command, options, path, opts, environ):
    # Declaration order; only keys the command line left untouched.
    for key, switch in options.items():
        if key in opts:
            continue

        raw = environ.get(switch.env) if switch.env else None
        if raw is not None:
            logger.debug("option %r of %r read from $%s", key, command.name, switch.env)
            subject = "environment variable $%s" % switch.env
        else:
            subject = "option %s" % switch.spellings[0]

        match switch:
            case RepeatingOption():
                opts[key] = [_convert(path, switch, raw, subject)] if raw is not None else []
            case BooleanOption():
                opts[key] = switch(raw) if raw is not None else False
            case _ if raw is not None:
                opts[key] = _convert(path, switch, raw, subject)
            case _ if switch.default is not None:
                logger.debug("option %r of %r falls back to its default", key, command.name)
                opts[key] = _convert(path, switch, switch.default, subject)


def _resolve(command, path, name, cursor, environ):
    pending = list(enumerate(command.arguments))
    rest = command.rest
    # Mirrored properties copy on access; read each table once per level.
    options, switches, commands = command.options, command.switches, command.commands
    args = []
    rested = 0
    opts = {}
    next = None

    while next is None and (token := cursor.peek()) is not None:
        match token.kind:
            case TokenKind.OPTION:
                cursor.advance()
                _consume_option(options, switches, path, token, cursor, opts)

            case TokenKind.POSITIONAL if pending:
                cursor.advance()
                index, spec = pending.pop(0)
                subject = "%s argument" % (spec.docv or "ARG%d" % index)
                args.append(_convert(path, spec, token.value, subject))

            case TokenKind.POSITIONAL if rest is not None:
                if isinstance(rest, OptionalRest) and rested:
                    raise ExtraPositionalError(path, "extra position argument", token=token.raw)
                cursor.advance()
                rested += 1
                args.append(_convert(path, rest, token.value, "%s argument" % (rest.docv or "ARG")))

            case TokenKind.POSITIONAL if commands:
                if (child := commands.get(token.value)) is None:
                    raise UnknownSubcommandError(path, "unknown subcommand %s" % token.value, token=token.raw)
                cursor.advance()
                logger.debug("descending from %r into %r", command.name, token.value)
                next = _resolve(child, path + (child,), token.value, cursor, environ)

            case TokenKind.POSITIONAL:
                raise ExtraPositionalError(path, "extra position argument", token=token.raw)

            case TokenKind.TERMINATOR:
                raise OptionTerminatorError(path, "option terminator -- is not supported", token=token.raw)

    if pending:
        index, spec = pending[0]
        raise MissingArgumentError(path, "missing %s argument" % (spec.docv or "ARG%d" % index))

    if isinstance(rest, OptionalRest) and not rested and rest.default is not None:
        args.append(_convert(path, rest, rest.default, "%s argument" % (rest.docv or "ARG")))

    _fill_options(command, options, path, opts, environ)

    return CommandResult(command, path, name, tuple(args), MappingProxyType(opts), next)


def parse(command, argv=Unset, /, environ=Unset):
    """
    Resolve argv against the command tree.

    Parameters
    - command: the root Command.
    - argv: arguments without the program name (see `split_argv`).
    - environ: mapping used for environment fallbacks; defaults to os.environ.

    Raises
    - CommandLineError subclasses for malformed input.
    - HelpRequested when a `help` flag is given.
    - UserError raised by a conversion, unchanged.
    """
    if not isinstance(command, Command):
        raise TypeError("parse() first argument must be a command")
    environ = coalesce(environ, os.environ)
    tokens = tokenize(split_argv(argv))
    logger.debug("resolving %d token(s) against %r", len(tokens), command.name)
    return _resolve(command, (command,), command.name, Cursor(tokens), environ)


def resolve(command, argv=Unset, /, environ=Unset):
    """
    Like parse(), but report help requests and parse failures as values:
    Dispatch(result), ShowHelp(path) or Fail(error).
    """
    try:
        return Dispatch(parse(command, argv, environ))
    except HelpRequested as signal:
        return ShowHelp(signal.path)
    except CommandLineError as fault:
        logger.debug("resolution failed at %r: %s", fault.name, fault.message)
        return Fail(fault)


__all__ = (
    # Results
    "CommandResult",
    "Dispatch",
    "ShowHelp",
    "Fail",

    # Machinery
    "Cursor",
    "split_argv",

    # Entry points
    "parse",
    "resolve",
)
