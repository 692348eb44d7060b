r"""
argtree option and argument specifications.

Overview
- Options (named, common base Switch)
  • StringOption: pass-through string value (--name VALUE / --name=VALUE).
  • BooleanOption: presence-only flag (--verbose); env values parse as booleans.
  • ComputedOption: value option whose raw string goes through an `action` transform.
  • RepeatingOption: wraps one of the above; every occurrence appends to a list.

- Positional arguments (common base Argument)
  • RequiredArgument: exactly one positional, consumed in declaration order.
  • RepeatingRest: zero or more trailing positionals (greedy).
  • OptionalRest: zero or one trailing positional, with an optional default.

- Factories
  • option(), flag(), computed(), repeating(), argument(), rest(), optional().
  • computed() doubles as a decorator that binds the decorated function as the transform.

Conversion
- Every spec is callable: spec(raw) converts one raw string into the resolved value.
  The resolver feeds CLI tokens, environment values and declared defaults through
  the same call, so all three sources produce identically typed results.

Metadata (sanitized on construction)
- name: required for options; letters/digits in hyphen-separated segments
  (r"[^\W\d_](-?[^\W_]+)*"), written without leading dashes.
- short: one non-space character alias, written without the dash.
- doc / docv / env: non-empty strings when provided; default: any string.
- action: callable transform.

Quick example:
    >>> from argtree.arguments import option, flag, computed, repeating, argument
    >>> port = computed("port", int, short="p", docv="PORT", env="PORT", default="8080")
    >>> verbose = flag("verbose", short="v", doc="print more output")
    >>> tags = repeating(option("tag", docv="TAG"))
    >>> source = argument("SRC", doc="source directory")
    >>> port("9000")
    9000
"""
import functools
import operator
import re

from .utils import *


_FALSY = frozenset({"no", "off", "0", "false"})


class SpecType(type):
    """
    Metaclass shared by option and argument specs.

    Responsibilities
    - Derive __typename__ from the class name (StringOption -> "string-option")
      for construction-time diagnostics.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide __repr__/__rich_repr__ built from the introspectable fields.
    - Seal concrete kinds (class keyword sealed=True) so the set of kinds the
      resolver dispatches on stays closed.
    """
    __introspectable__ = ()

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
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_text(cls, metadata, *names):
    """
    Internal: validate optional text fields (doc, docv, env, default).

    Each field must be Unset or a string. Labels are trimmed and must stay
    non-empty; a `default` is kept verbatim since "" is a legitimate value.
    """
    for name in names:
        if not isinstance(text := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif name == "default" or text is Unset:
            continue
        elif not (text := text.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = text


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate the identity of an option.

    - name: required, matches r"[^\W\d_](-?[^\W_]+)*" (no leading dashes).
    - short: Unset or a single non-space character other than '-'.
    - env: Unset or a non-empty string.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid option name without leading dashes")

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and (len(short) != 1 or short.isspace() or short == "-"):
        raise ValueError(f"{cls.__typename__} 'short' must be a single character")

    _sanitize_text(cls, metadata, "env")


def _sanitize_action(cls, metadata, /):
    if metadata["action"] is not Unset and not callable(metadata["action"]):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")


class Switch(metaclass=SpecType):
    """
    Common base of the named option kinds.

    Not instantiated directly; the resolver dispatches on the concrete kinds
    (StringOption, BooleanOption, ComputedOption, RepeatingOption).
    """

    __introspectable__ = (
        "name",
        "short",
        "doc",
        "docv",
        "env",
        "default",
    )

    @property
    def spellings(self):
        """
        Command-line spellings of this option, long form first: ("--port", "-p").
        """
        return ("--" + self._name,) + (("-" + self._short,) if self._short else ())

    @property
    def placeholder(self):
        """
        Value placeholder shown in help (docv, or VALUE when undeclared).
        """
        return coalesce(self._docv, "VALUE")

    def _populate(self, metadata):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class StringOption(Switch, sealed=True):
    """
    Named option carrying a raw string value.
    """

    def __new__(cls, name, /, short=Unset, doc=Unset, docv=Unset, env=Unset, default=Unset):
        metadata = {
            "name": name,
            "short": short,
            "doc": doc,
            "docv": docv,
            "env": env,
            "default": default,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_text(cls, metadata, "doc", "docv", "default")
        return super().__new__(cls)._populate(metadata)

    def __call__(self, value, /):
        return value


class BooleanOption(Switch, sealed=True):
    """
    Presence-only flag.

    On the command line the flag takes no value and resolves to True. Read from
    an environment variable, the string is parsed case-insensitively: "no",
    "off", "0" and "false" are False, anything else is True. A flag has no value
    placeholder and no static default; unset flags resolve to False.
    """

    def __new__(cls, name, /, short=Unset, doc=Unset, env=Unset):
        metadata = {
            "name": name,
            "short": short,
            "doc": doc,
            "docv": Unset,
            "env": env,
            "default": Unset,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_text(cls, metadata, "doc")
        return super().__new__(cls)._populate(metadata)

    @property
    def placeholder(self):
        return None

    def __call__(self, value, /):
        return value.lower() not in _FALSY


class ComputedOption(Switch, sealed=True):
    """
    Named option whose value is computed from the raw string by `action`.

    Whatever `action` raises (other than a UserError) is reported by the
    resolver as an invalid value for this option.
    """

    __introspectable__ = Switch.__introspectable__ + ("action",)

    def __new__(cls, name, action, /, short=Unset, doc=Unset, docv=Unset, env=Unset, default=Unset):
        metadata = {
            "name": name,
            "short": short,
            "doc": doc,
            "docv": docv,
            "env": env,
            "default": default,
            "action": action,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_text(cls, metadata, "doc", "docv", "default")
        if not callable(action):
            raise TypeError(f"{cls.__typename__} 'action' must be callable")
        return super().__new__(cls)._populate(metadata)

    def __call__(self, value, /):
        return self._action(value)


class RepeatingOption(Switch, sealed=True):
    """
    Wraps a non-repeating option so that every occurrence is collected.

    The identity fields (name, short, doc, docv, env) are those of the wrapped
    option. The resolved value is a list in occurrence order; without any
    occurrence it is a single-element list holding the environment value when
    `env` is set and present, and an empty list otherwise. A repeating option
    never falls back to a single static default, so the wrapped option must not
    declare one.
    """

    __introspectable__ = ("option",) + Switch.__introspectable__[:-1]

    def __new__(cls, option, /):
        if not isinstance(option, Switch):
            raise TypeError(f"{cls.__typename__} must wrap an option")
        elif isinstance(option, RepeatingOption):
            raise TypeError(f"{cls.__typename__} cannot wrap another {cls.__typename__}")
        elif option.default is not None:
            raise TypeError(f"{cls.__typename__} cannot wrap an option with a 'default'")

        return super().__new__(cls)._populate({
            "option": option,
            "name": option.name,
            "short": coalesce(option.short, Unset),
            "doc": coalesce(option.doc, Unset),
            "docv": coalesce(option.docv, Unset),
            "env": coalesce(option.env, Unset),
            "default": Unset,
        })

    @property
    def placeholder(self):
        return self._option.placeholder

    def __call__(self, value, /):
        return self._option(value)


class Argument(metaclass=SpecType):
    """
    Common base of the positional kinds.

    Calling an argument spec applies its `action` transform, or returns the raw
    string unchanged when no action was declared.
    """

    __introspectable__ = (
        "docv",
        "doc",
        "action",
    )

    def _populate(self, metadata):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __call__(self, value, /):
        if self._action is Unset:
            return value
        return self._action(value)


class RequiredArgument(Argument, sealed=True):
    """
    One required positional argument.
    """

    def __new__(cls, docv=Unset, /, doc=Unset, action=Unset):
        metadata = {
            "docv": docv,
            "doc": doc,
            "action": action,
        }
        _sanitize_text(cls, metadata, "docv", "doc")
        _sanitize_action(cls, metadata)
        return super().__new__(cls)._populate(metadata)


class RepeatingRest(Argument, sealed=True):
    """
    Trailing capture of zero or more positionals, after the required ones.
    """

    def __new__(cls, docv=Unset, /, doc=Unset, action=Unset):
        metadata = {
            "docv": docv,
            "doc": doc,
            "action": action,
        }
        _sanitize_text(cls, metadata, "docv", "doc")
        _sanitize_action(cls, metadata)
        return super().__new__(cls)._populate(metadata)


class OptionalRest(Argument, sealed=True):
    """
    Trailing capture of at most one positional.

    When no token fills it, a declared `default` is bound instead, transformed
    exactly as a supplied token would be.
    """

    __introspectable__ = Argument.__introspectable__ + ("default",)

    def __new__(cls, docv=Unset, /, doc=Unset, action=Unset, default=Unset):
        metadata = {
            "docv": docv,
            "doc": doc,
            "action": action,
            "default": default,
        }
        _sanitize_text(cls, metadata, "docv", "doc", "default")
        _sanitize_action(cls, metadata)
        return super().__new__(cls)._populate(metadata)


def option(name, /, **metadata):
    """
    Define a string option: option("output", short="o", docv="FILE").
    """
    return StringOption(name, **metadata)


def flag(name, /, **metadata):
    """
    Define a boolean flag: flag("verbose", short="v", env="VERBOSE").
    """
    return BooleanOption(name, **metadata)


def computed(name, action=Unset, /, **metadata):
    """
    Define an option whose value is computed by `action`.

    Usage
    - Direct:
        jobs = computed("jobs", int, short="j", default="1")
    - As a decorator binding the transform:
        @computed("level", docv="LEVEL")
        def level(value):
            return logging.getLevelName(value.upper())

    Returns
    - ComputedOption in direct form, a decorator otherwise.
    """
    if action is not Unset:
        return ComputedOption(name, action, **metadata)

    @rename("computed")
    def wrapper(action, /):
        if not callable(action):
            raise TypeError("@computed() must be applied to a callable")
        return ComputedOption(name, action, **metadata)

    return wrapper


def repeating(option, /):
    """
    Allow an option to be given several times: repeating(option("tag")).
    """
    return RepeatingOption(option)


def argument(docv=Unset, /, **metadata):
    """
    Define a required positional argument: argument("SRC", action=pathlib.Path).
    """
    return RequiredArgument(docv, **metadata)


def rest(docv=Unset, /, **metadata):
    """
    Define a repeating rest argument capturing every remaining positional.
    """
    return RepeatingRest(docv, **metadata)


def optional(docv=Unset, /, **metadata):
    """
    Define an optional rest argument, with an optional default string.
    """
    return OptionalRest(docv, **metadata)


__all__ = (
    # Classes (option kinds)
    "Switch",
    "StringOption",
    "BooleanOption",
    "ComputedOption",
    "RepeatingOption",

    # Classes (positional kinds)
    "Argument",
    "RequiredArgument",
    "RepeatingRest",
    "OptionalRest",

    # Factories
    "option",
    "flag",
    "computed",
    "repeating",
    "argument",
    "rest",
    "optional",
)

# Keep the metaclass out of star-imports; it is not part of the public API.
del SpecType
