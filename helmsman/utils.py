"""
Helmsman utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the argument types, properties, subcommands
  and the parser so that "absent", naming and read-only exposure mean the same
  thing everywhere.

Overview
- UnsetType / Unset
  • Singleton sentinel for “no value yet” without conflating it with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving legitimate falsey values.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- mirror("attr")
  • Read-only property exposing a private backing field (self._attr); containers
    are handed out as frozen snapshots (tuple / mapping proxy / frozenset).

- pluralize(text)
  • Best-effort English pluralization for help headings ("option" → "options").

Usage guidance
- Prefer Unset for parsed-state slots where None could be a user value and
  materialize with coalesce() at the public boundary.
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __ror__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
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

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns `object` unless it is Unset, in which case `default` is returned.
    Falsey values like None, 0, "" or False are preserved as-is.

    Examples
    - coalesce("json", "xml") -> "json"
    - coalesce(Unset, "xml")  -> "xml"
    - coalesce(False, True)   -> False
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

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


def _freeze(object):
    """
    Shallow-freeze common containers so the public API cannot mutate them.

    - Sequence (non-string) → tuple
    - Mapping → read-only MappingProxyType snapshot
    - Set → frozenset
    - anything else is returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Container values are returned as frozen snapshots; the Unset sentinel is
    exposed as None.

    Example
    - Given self._aliases, declare aliases = mirror("aliases").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(coalesce(getattr(self, "_" + name)))

    return property(getter)


@functools.cache
def pluralize(text, /):
    """
    Best-effort English pluralizer for help headings.

    Only the last word of a phrase is pluralized; casing of that word is kept.

    Examples
    - pluralize("option")          -> "options"
    - pluralize("optional option") -> "optional options"
    - pluralize("Flag")            -> "Flags"
    """
    if not isinstance(text, str):
        raise TypeError("pluralize() argument must be a string")

    match = re.search(r"(\S+)(\s*)$", text)
    if not match:
        return text

    head, last, trail = text[:match.start(1)], match.group(1), match.group(2)
    lower = last.lower()

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        plural = lower + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = lower[:-1] + "ies"
    else:
        plural = lower + "s"

    if last.isupper():
        plural = plural.upper()
    elif last[:1].isupper():
        plural = plural[:1].upper() + plural[1:]

    return head + plural + trail


# Module-level singleton. Stands for “not parsed yet” in property slots.
Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
