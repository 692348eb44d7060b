"""
argtree dispatcher: run the selected command and own the process boundary.

Scope
- select(result): the deepest level of a resolution chain.
- dispatch(result) / adispatch(result): call the selected command's action as
  action(opts, *args). Coroutine actions are driven to completion.
- invoke(command, argv, ...): resolve, print help or errors through a rich
  console, dispatch, and return an exit status.
- run(command, argv, ...): invoke() and exit the process with its status.

Exit statuses
- 0: the action returned normally, or help was shown.
- 1: parsing failed (usage + "error: ..."), the action raised UserError
  ("error: ..."), or anything else escaped (traceback).
"""
import asyncio
import inspect
import logging
import sys

from rich.console import Console

from .commands import Command, command as _command
from .faults import UserError
from .help import display_width, print_help
from .resolver import Dispatch, ShowHelp, Fail, resolve
from .utils import *

logger = logging.getLogger(__name__)


def select(result, /):
    """Follow `next` links down to the command the user actually selected."""
    while result.next is not None:
        result = result.next
    return result


async def _complete(awaitable):
    return await awaitable


def dispatch(result, /):
    """
    Call the selected command's action with the resolved opts and args.

    An awaitable outcome is run to completion on a fresh event loop; use
    adispatch() from code that already runs inside a loop.
    """
    leaf = select(result)
    logger.debug("dispatching %r with %d argument(s)", leaf.name, len(leaf.args))
    outcome = leaf.command.action(leaf.opts, *leaf.args)
    if inspect.isawaitable(outcome):
        return asyncio.run(_complete(outcome))
    return outcome


async def adispatch(result, /):
    """
    Coroutine variant of dispatch(): awaits the action in the running loop.
    """
    leaf = select(result)
    logger.debug("dispatching %r with %d argument(s)", leaf.name, len(leaf.args))
    outcome = leaf.command.action(leaf.opts, *leaf.args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


def invoke(command, argv=Unset, /, *, environ=Unset, console=Unset, colorful=False):
    """
    Parse argv against `command`, run the selected action and report.

    Parameters
    - command: a Command, or a plain callable wrapped with command().
    - argv:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: used as is.
    - environ: mapping for environment fallbacks (default os.environ).
    - console: rich Console receiving every message (default: stdout).
    - colorful: style help and errors with the palette.

    Returns
    - The exit status (0 or 1); nothing is raised for parse failures, user
      errors or action exceptions.
    """
    if not isinstance(command, Command):
        if callable(command):
            return invoke(_command(command), argv, environ=environ, console=console, colorful=colorful)
        raise TypeError("invoke() first argument must be a command or a callable")

    console = coalesce(console, Console(highlight=False))

    try:
        match resolve(command, argv, environ):
            case ShowHelp() as outcome:
                print_help(outcome.command, outcome.name, console=console, colorful=colorful)
                return 0
            case Fail(error=fault):
                console.print(fault.render(colorful=colorful), width=display_width(console))
                return 1
            case Dispatch(result=result):
                dispatch(result)
                return 0
    except UserError as fault:
        console.print(fault.render(colorful=colorful), width=display_width(console))
        return 1
    except Exception:
        logger.debug("command %r failed", command.name, exc_info=True)
        console.print_exception()
        return 1


def run(command, argv=Unset, /, **options):
    """
    Entry point for scripts: exit the process with invoke()'s status.
    """
    sys.exit(invoke(command, argv, **options))


__all__ = (
    "select",
    "dispatch",
    "adispatch",
    "invoke",
    "run",
)
