"""
argtree utilities (internal helpers shared by the spec and resolver layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for “not declared” where None is not a safe marker
    (a default of "" or an env of None must stay distinguishable from “absent”).
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Materialize Unset into a concrete default; every other value passes through.

- rename(callable, name) / @rename("name")
  • Give generated helpers a stable __name__/__qualname__ for tracebacks and reprs.

- freeze(object)
  • Shallow read-only view of a container: tuple, MappingProxyType, frozenset.

- mirror("attr")
  • Read-only property exposing the private backing field self._attr as a frozen view.

Stability
- Names in __all__ are re-used across the package; everything else is private.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were never declared.

    Characteristics
    - Boolean-false, distinct from None, "" and 0.
    - repr(Unset) -> "Unset".
    - UnsetType() always returns the same instance and cannot be subclassed.
    """

    def __or__(self, other, /):
        # Allow `str | Unset` in isinstance checks.
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is Unset, in which case return `default`.

    Falsey values ("", 0, None, []) are preserved; only the sentinel is replaced.

    Examples
    - coalesce("PORT", "VALUE") -> "PORT"
    - coalesce(Unset, "VALUE")  -> "VALUE"
    - coalesce("", "VALUE")     -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator that will.

    Forms
    - rename(callable, name) -> callable (updated in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def freeze(object, /):
    """
    Return a shallow read-only view of a container.

    Rules
    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType over a private copy (insertion order kept)
    - Set → frozenset
    - Unset → None
    - anything else → unchanged

    Nested containers are not frozen; specs hold only flat collections of other
    immutable specs, so one level is enough.
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    if isinstance(object, Set):
        return frozenset(object)
    return coalesce(object)


def mirror(name, /):
    """
    Define a read-only property over the private backing attribute "_{name}".

    The getter returns freeze(self._{name}) so callers never receive a mutable
    handle on spec internals.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "freeze",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
