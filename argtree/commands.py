"""
argtree command layer: declare a tree of commands.

What this module provides
- Command: an immutable node of the command tree with
  • ordered required arguments and at most one rest argument,
  • named options (key → Switch), with a `help` flag injected when absent,
  • subcommands (name → Command),
  • an action invoked as action(opts, *args) once resolution selected this node.
- command(...): build a Command from a function, directly or as a decorator.

Core ideas
- Declarative and top-down: children are complete Commands before their parent
  is built, so a tree can never reference itself.
- Everything is validated at construction; the resolver can then dispatch on
  spec kinds without re-checking shapes.
- Options are indexed once (`switches`): every full name and short name maps to
  the key under which the resolved value is stored.

Quick start
    from argtree import Command, command, computed, flag, argument, run

    @command(options=[computed("port", int, short="p", env="PORT", default="8080")])
    def serve(opts):
        \"\"\"Serve the generated site.\"\"\"
        print("listening on", opts["port"])

    @command(arguments=[argument("SRC")], options=[flag("drafts")])
    def build(opts, source):
        \"\"\"Build the site from SRC.\"\"\"

    site = Command("site", doc="Static site toolkit.", commands=[build, serve])

    if __name__ == "__main__":
        run(site)
"""
import functools
import inspect
import operator
import os.path
import re
import sys
from collections.abc import Iterable, Mapping

from rich.console import Console
from rich.pretty import Pretty
from rich.text import Text

from .arguments import Switch, RequiredArgument, RepeatingRest, OptionalRest, flag
from .utils import *


class CommandType(type):
    """
    Metaclass giving commands read-only introspection.

    - __typename__ derived from the class name ("command").
    - Read-only properties for every name in __introspectable__.
    - Compact __repr__/__rich_repr__ limited to __displayable__ when set.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_identity(cls, metadata):
    """
    Internal: resolve and validate name/doc.

    - name defaults to the action's __name__ (underscores become hyphens) or to
      the running program's basename when there is no action.
    - doc defaults to the action's docstring.
    - name must be a non-empty string without whitespace and not start with '-'.
    """
    action = metadata["action"]
    if action is not Unset and not callable(action):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")

    if metadata["name"] is Unset:
        if action is not Unset and hasattr(action, "__name__"):
            metadata["name"] = re.sub(r"_+", "-", action.__name__.strip("_")) or action.__name__
        else:
            metadata["name"] = os.path.basename(sys.argv[0])

    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or re.search(r"\s", name) or name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word not starting with '-'")

    if metadata["doc"] is Unset and action is not Unset:
        metadata["doc"] = inspect.getdoc(action) or Unset
    if not isinstance(doc := metadata["doc"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'doc' must be a string")
    elif isinstance(doc, str) and not doc.strip():
        metadata["doc"] = Unset


def _process_arguments(cls, metadata):
    """
    Internal: required arguments must all be RequiredArgument; the rest spec is
    a RepeatingRest, an OptionalRest, or Unset.
    """
    if not isinstance(metadata["arguments"], Iterable):
        raise TypeError(f"{cls.__typename__} 'arguments' must be iterable")
    arguments = list(metadata["arguments"])
    for argument in arguments:
        if not isinstance(argument, RequiredArgument):
            raise TypeError(f"{cls.__typename__} 'arguments' must contain required arguments only")
    metadata["arguments"] = arguments

    if not isinstance(metadata["rest"], RepeatingRest | OptionalRest | Unset):
        raise TypeError(f"{cls.__typename__} 'rest' must be a repeating or optional rest argument")


def _process_options(cls, metadata):
    """
    Internal: normalize options into an ordered key → Switch mapping and index
    them by name.

    - options may be a mapping (explicit keys) or an iterable of switches keyed
      by their name.
    - every full name and short name must be unique within the command; the
      tokenizer strips dashes, so "--p" and "-p" address the same entry.
    - a `help` flag (short name "h" when free) is appended unless a `help` key
      or option name already exists.
    """
    options = metadata["options"]
    if isinstance(options, Mapping):
        pairs = list(options.items())
    elif isinstance(options, Iterable):
        pairs = [(getattr(switch, "name", None), switch) for switch in options]
    else:
        raise TypeError(f"{cls.__typename__} 'options' must be a mapping or an iterable of options")

    table = {}
    switches = {}
    for key, switch in pairs:
        if not isinstance(switch, Switch):
            raise TypeError(f"{cls.__typename__} 'options' must contain options only")
        elif not isinstance(key, str) or not key:
            raise TypeError(f"{cls.__typename__} option keys must be non-empty strings")
        elif key in table:
            raise ValueError(f"{cls.__typename__} option key {key!r} is declared twice")
        table[key] = switch
        for name in filter(None, (switch.name, switch.short)):
            if name in switches:
                raise ValueError(f"{cls.__typename__} option name {name!r} is declared twice")
            switches[name] = key

    if "help" not in table and "help" not in switches:
        table["help"] = flag("help", short="h" if "h" not in switches else Unset, doc="show this message and exit")
        switches.update(dict.fromkeys(filter(None, ("help", table["help"].short)), "help"))

    metadata["options"] = table
    metadata["switches"] = switches


def _process_commands(cls, metadata):
    """
    Internal: normalize subcommands into an ordered name → Command mapping.

    Subcommands and a rest argument are mutually exclusive.
    """
    commands = metadata["commands"]
    if isinstance(commands, Mapping):
        pairs = list(commands.items())
    elif isinstance(commands, Iterable):
        pairs = [(getattr(child, "name", None), child) for child in commands]
    else:
        raise TypeError(f"{cls.__typename__} 'commands' must be a mapping or an iterable of commands")

    table = {}
    for name, child in pairs:
        if not isinstance(child, Command):
            raise TypeError(f"{cls.__typename__} 'commands' must contain commands only")
        elif not isinstance(name, str) or not name or re.search(r"\s", name) or name.startswith("-"):
            raise ValueError(f"{cls.__typename__} subcommand names must be non-empty words not starting with '-'")
        elif name in table:
            raise ValueError(f"{cls.__typename__} subcommand {name!r} is declared twice")
        table[name] = child

    # A rest argument consumes the positional that would select a subcommand.
    if table and metadata["rest"] is not Unset:
        raise ValueError(f"{cls.__typename__} cannot declare both a rest argument and subcommands")
    metadata["commands"] = table


class Command(metaclass=CommandType):
    """
    One node of the command tree.

    Properties (read-only)
    - name: display name; also the subcommand key when passed in a list.
    - doc: description shown in help, or None.
    - arguments: tuple of RequiredArgument, in consumption order.
    - rest: RepeatingRest | OptionalRest | None.
    - options: mapping key → Switch (includes the injected `help` flag).
    - commands: mapping name → Command.
    - switches: mapping option name or short name → option key.
    - action: callable invoked as action(opts, *args); defaults to a diagnostic
      print of the resolved call.
    """

    __introspectable__ = (
        "name",
        "doc",
        "arguments",
        "rest",
        "options",
        "commands",
        "switches",
    )

    __displayable__ = (
        "name",
        "doc",
        "arguments",
        "rest",
        "options",
        "commands",
    )

    def __new__(
            cls,
            name=Unset,
            doc=Unset,
            arguments=(),
            rest=Unset,
            options=(),
            commands=(),
            action=Unset,
    ):
        metadata = {
            "name": name,
            "doc": doc,
            "arguments": arguments,
            "rest": rest,
            "options": options,
            "commands": commands,
            "action": action,
        }
        _process_identity(cls, metadata)
        _process_arguments(cls, metadata)
        _process_options(cls, metadata)
        _process_commands(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def action(self):
        return coalesce(self._action, self._diagnose)

    def _diagnose(self, opts, *args):
        # Fallback action: show what would have been dispatched.
        console = Console(highlight=False)
        console.print(Text("no action for command %r" % self.name))
        console.print(Pretty({"opts": dict(opts), "args": args}))


def command(action=Unset, /, **metadata):
    """
    Create a Command from a function, or return a decorator that will.

    Invocation modes
    - Direct:     serve = command(serve_site, name="serve")
    - Decorator:  @command(options=[flag("drafts")])
                  def build(opts, source): ...
    - Bare:       @command
                  def clean(opts): ...

    The function becomes the action; its name (underscores → hyphens) and
    docstring are used unless `name`/`doc` are given.
    """
    @rename("command")
    def wrapper(action, /):
        if not callable(action):
            raise TypeError("@command() must be applied to a callable")
        return Command(action=action, **metadata)

    return wrapper(action) if action is not Unset else wrapper


__all__ = (
    "Command",
    "command",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del CommandType
