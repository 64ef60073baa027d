"""
Helmsman subcommands: ordered registries of properties plus an execution hook.

What this module provides
- Subcommand: a named command (with aliases and a description) owning four
  ordered registries (options, flags, positional arguments, optional-value
  options) and a combined registration-order view of all of them.

Registration
- Properties are registered explicitly, either with register(property) or with
  the factories argument(), option(), flag() and optional_option(), which
  build and register in one call. There is no attribute scanning.
- Dispatch into a registry is by the property's concrete kind.
- Ownership is write-once: a property belongs to exactly one subcommand.
- Long names are unique across options, flags and optional options; short
  names are unique within a kind. An option and a flag may share a short
  name: a lone "-x" resolves to the option, a cluster "-xyz" to the flag.

Execution
- execute() runs the business logic: the callback given at construction or
  through @subcommand.handler, or an override in a subclass. The parser calls
  it exactly once per successful parse, after population and validation.

Example
    build = Subcommand("build", "Build the project", aliases=("b",))
    target = build.argument(STRING, "target")
    jobs = build.option(IntRange(1, 64), "jobs", "j", default=4)
    verbose = build.flag("verbose", "v")

    @build.handler
    def run():
        print(target.value, jobs.value, verbose.value)
"""
import functools
import logging
import operator
import re
from collections.abc import Iterable

from .argtypes import OptionalValue
from .properties import Property, Argument, Option, Flag, OptionalOption
from .utils import *

logger = logging.getLogger(__name__)


class SubcommandType(type):
    """
    Metaclass exposing __introspectable__ names as read-only mirrors and
    providing stable __repr__/__rich_repr__ (restricted to __displayable__).
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
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, what, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {what} must be a string")
    elif not name.strip():
        raise ValueError(f"{cls.__typename__} {what} cannot be blank")
    return name


class Subcommand(metaclass=SubcommandType):
    """
    Named command with typed properties and an execution hook.

    Parameters
    - name: str, non-blank.
    - descr: Unset | str, help description.
    - aliases: Iterable[str], alternative names (non-blank, unique).
    - callback: zero-argument callable invoked by execute().

    Registries are exposed as tuples in insertion order:
    options, flags, arguments, optionals and properties (all of them).

    Usage constraint
    - Property values are not reset between parses and are not guarded by
      locks; parse one token sequence at a time per instance, and call
      reset() before reusing an instance.
    """

    __introspectable__ = (
        "name",
        "descr",
        "aliases",
        "options",
        "flags",
        "arguments",
        "optionals",
        "properties",
    )

    __displayable__ = (
        "name",
        "descr",
        "aliases",
    )

    def __init__(self, name, descr=Unset, aliases=(), *, callback=Unset):
        cls = type(self)
        self._name = _sanitize_name(cls, name, "name")

        if descr is None:
            descr = Unset
        if callback is None:
            callback = Unset

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        self._descr = (descr.strip() or Unset) if isinstance(descr, str) else descr

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        self._aliases = []
        for alias in aliases:
            if _sanitize_name(cls, alias, "alias") in self._aliases or alias == name:
                raise ValueError(f"{cls.__typename__} alias {alias!r} is duplicated")
            self._aliases.append(alias)

        if callback is not Unset and not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        self._callback = callback

        self._options = []
        self._flags = []
        self._arguments = []
        self._optionals = []
        self._properties = []

    # ── registration ─────────────────────────────────────────────────────

    def _check_names(self, property, /):
        """
        Reject name clashes before the property is attached anywhere.
        """
        typename = type(self).__typename__
        if isinstance(property, Argument):
            if any(argument.name == property.name for argument in self._arguments):
                raise ValueError(f"{typename} {self._name!r} argument name {property.name!r} is already in use")
            return

        if any(other.long == property.long for other in (*self._options, *self._flags, *self._optionals)):
            raise ValueError(f"{typename} {self._name!r} name '--{property.long}' is already in use")

        if property.short is None:
            return

        for kind, registry in ((Option, self._options), (Flag, self._flags), (OptionalOption, self._optionals)):
            if isinstance(property, kind) and any(other.short == property.short for other in registry):
                raise ValueError(f"{typename} {self._name!r} name '-{property.short}' is already in use")

        # option/flag sharing a short name: lone "-x" picks the option, clusters reach the flag
        other = self._flags if isinstance(property, Option) else self._options if isinstance(property, Flag) else ()
        for peer in other:
            if peer.short == property.short:
                logger.warning(
                    "%s %r: %s and %s share the short name '-%s'",
                    typename, self._name, peer.label, property.label, property.short
                )

    def register(self, property, /):
        """
        Append a property to the registry matching its kind and take ownership.

        Returns the property so registration can be inlined.
        """
        if not isinstance(property, Property):
            raise TypeError(f"{type(self).__typename__} can only register properties")
        if property.owner is not None:
            raise TypeError(f"{property.label} is already registered with {property.owner.name!r}")

        match property:
            case Option():
                registry = self._options
            case Flag():
                registry = self._flags
            case OptionalOption():
                registry = self._optionals
            case Argument():
                registry = self._arguments
            case _:
                raise TypeError(f"{type(self).__typename__} cannot register {type(property).__name__}")

        self._check_names(property)
        property._attach(self)
        registry.append(property)
        self._properties.append(property)
        logger.debug("%s %r registered %s", type(self).__typename__, self._name, property.label)
        return property

    def argument(self, type, name, descr=Unset, required=True):
        return self.register(Argument(type, name, descr, required))

    def option(self, type, long, short=Unset, descr=Unset, required=False, default=Unset):
        return self.register(Option(type, long, short, descr, required, default))

    def flag(self, long, short=Unset, descr=Unset, default=False):
        return self.register(Flag(long, short, descr, default))

    def optional_option(self, long, short=Unset, descr=Unset, type=Unset):
        return self.register(OptionalOption(long, short, descr, coalesce(type, OptionalValue())))

    def handler(self, callback, /):
        """
        Register the execution callback (decorator-friendly, set only once).
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        if self._callback is not Unset:
            raise TypeError(f"{type(self).__typename__} handler cannot be overridden")
        self._callback = callback
        return callback

    # ── lookups ──────────────────────────────────────────────────────────

    @staticmethod
    def _lookup(registry, long, short):
        for property in registry:
            if long is not Unset and property.long == long:
                return property
            if short is not Unset and property.short == short:
                return property
        return None

    def find_option(self, *, long=Unset, short=Unset):
        return self._lookup(self._options, long, short)

    def find_flag(self, *, long=Unset, short=Unset):
        return self._lookup(self._flags, long, short)

    def find_optional(self, *, long=Unset, short=Unset):
        return self._lookup(self._optionals, long, short)

    def matches(self, token, /, *, case_sensitive=True):
        """
        True when `token` is this subcommand's name or one of its aliases.
        """
        if case_sensitive:
            return token == self._name or token in self._aliases
        token = token.casefold()
        return token == self._name.casefold() or token in (alias.casefold() for alias in self._aliases)

    # ── lifecycle ────────────────────────────────────────────────────────

    def validate(self):
        """
        Collect the validation messages of every property, in registration order.

        Returns a list; empty when everything is valid. Never stops at the
        first problem.
        """
        return [error for error in (property.error for property in self._properties) if error]

    def execute(self):
        """
        Run the command's business logic.
        """
        if self._callback is Unset:
            raise NotImplementedError(f"{type(self).__typename__} {self._name!r} has no handler; pass a callback or override execute()")
        return self._callback()

    def reset(self):
        """
        Restore every registered property to its constructed default.
        """
        for property in self._properties:
            property.reset()


__all__ = (
    "Subcommand",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del SubcommandType
