r"""
Helmsman properties: typed options, flags and positional arguments.

Overview
- Property: base abstraction. Wraps one ArgType plus metadata (names,
  required-ness, default, description) and holds the mutable parsed state.
  • parse_value(raw): convert and store; failures raise ConversionError
    naming the property.
  • is_valid() / error: report the property's own validity.
  • explicitly_set: True once a value came from the command line, regardless
    of whether it equals the default.
  • owner: the Subcommand it is registered with (write-once).
  • reset(): restore the constructed default and clear the was-set bit.

- Kinds
  • Argument[_T]: positional, matched by registration order.
  • Option[_T]: named (--long / -s), always consumes the next token.
  • Flag: named boolean, toggled true when present.
  • OptionalOption: named; bare it behaves as a flag, otherwise it takes the
    next token when that token does not start with '-'.

Lifecycle
- Properties are built once, registered once (see Subcommand.register) and
  keep their state between parse calls. Nothing resets them implicitly; call
  reset() (or Subcommand.reset()) before re-parsing the same instances.
- Not thread-safe: one parse at a time against a given Subcommand.

Name rules
- long names: non-blank, no leading '-', no whitespace and no '='.
- short names: exactly one character, not '-' and not whitespace.
"""
import builtins
import functools
import logging
import operator
import re

from rich.text import Text

from .argtypes import ArgType, BOOLEAN, OptionalValue
from .faults import ConversionError
from .utils import *

logger = logging.getLogger(__name__)

class PropertyType(type):
    """
    Metaclass giving properties stable introspection.

    Responsibilities
    - Derive a hyphenated __typename__ from the class name ("optional-option")
      used in messages and help headings.
    - Expose every name listed in a class' own __introspectable__ as a
      read-only property mirroring the private "_{name}" field.
    - Provide __repr__/__rich_repr__ built from __introspectable__.
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
            for name in type(self).__introspectable__:
                if name != "owner":
                    yield name, getattr(self, name)
            yield "value", self.value
        self.__rich_repr__ = __rich_repr__

        return self

def _sanitize_descr(cls, descr, /):
    """
    Internal: validate an optional description (None when Unset).
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return descr

def _sanitize_type(cls, type, /):
    if not isinstance(type, ArgType):
        raise TypeError(f"{cls.__typename__} 'type' must be an argument type")
    return type

def _sanitize_names(cls, long, short, /):
    """
    Internal: validate the long/short names of a named property.

    Returns the (long, short) pair, short being Unset when omitted.
    """
    if not isinstance(long, str):
        raise TypeError(f"{cls.__typename__} long name must be a string")
    elif not long.strip():
        raise ValueError(f"{cls.__typename__} long name cannot be blank")
    elif long.startswith("-"):
        raise ValueError(f"{cls.__typename__} long name should not start with dashes")
    elif re.search(r"[\s=]", long):
        raise ValueError(f"{cls.__typename__} long name cannot contain whitespace or '='")

    if short is None:
        short = Unset
    if not isinstance(short, str | Unset):
        raise TypeError(f"{cls.__typename__} short name must be a string")
    elif isinstance(short, str):
        if len(short) != 1:
            raise ValueError(f"{cls.__typename__} short name must be exactly one character")
        elif short == "-" or short.isspace():
            raise ValueError(f"{cls.__typename__} short name should not be a dash or whitespace")
    return long, short

class Property(metaclass=PropertyType):
    """
    Base of every registrable command-line property.

    Subclasses fill _type, _required and _default and implement parse_value().
    The current value is Unset until parsed or defaulted; the public `value`
    exposes it as None in that case.
    """

    __introspectable__ = (
        "descr",
        "owner",
    )

    def __init__(self, descr=Unset, /):
        self._descr = _sanitize_descr(type(self), descr)
        self._owner = Unset
        self._type = Unset
        self._required = False
        self._default = Unset
        self._value = Unset
        self._explicit = False

    @property
    def value(self):
        return coalesce(self._value)

    @property
    def present(self):
        """
        True when the property holds a value (parsed or defaulted).
        """
        return self._value is not Unset

    @property
    def explicitly_set(self):
        """
        True only once a value was supplied by parsing.
        """
        return self._explicit

    @property
    def display(self):
        """
        Name as the user types it (e.g. "--threads" or "input").
        """
        raise NotImplementedError

    @property
    def label(self):
        """
        Kind and name for messages (e.g. "option '--threads'").
        """
        return "%s %r" % (type(self).__typename__.replace("-", " "), self.display)

    def _attach(self, owner, /):
        """
        Record the owning subcommand; registration is write-once.
        """
        if self._owner is not Unset:
            raise TypeError(f"{type(self).__typename__} {self.display!r} is already registered with {self._owner.name!r}")
        self._owner = owner

    def _convert(self, raw, /):
        """
        Convert through the property's type, naming the property on failure.
        """
        try:
            return self._type.convert(raw)
        except ConversionError as exception:
            raise ConversionError(
                "invalid value for %s: %s" % (self.label, exception.message),
                **{**exception.options, "name": self.display}
            ) from None

    def parse_value(self, raw, /):
        """
        Convert `raw` and store it as this property's value.
        """
        if not isinstance(raw, str):
            raise TypeError(f"{type(self).__typename__} raw value must be a string")
        self._value = self._convert(raw)
        self._explicit = True
        logger.debug("%s <- %r", self.label, raw)

    def is_valid(self):
        if self._value is Unset:
            return not self._required
        return self._type.validate(self._value)

    @property
    def error(self):
        """
        Validation message for the current state, or None when valid.
        """
        if self._value is Unset:
            return "%s is required" % self.label if self._required else None
        if not self._type.validate(self._value):
            return "invalid value for %s: expected %s" % (self.label, self._type.describe())
        return None

    def reset(self):
        self._value = self._default
        self._explicit = False

class Argument[_T](Property):
    """
    Positional argument; matched against positional tokens in registration order.
    """

    __introspectable__ = (
        "type",
        "name",
        "descr",
        "required",
        "owner",
    )

    def __init__(self, type, name, descr=Unset, required=True):
        super().__init__(descr)
        if not isinstance(name, str):
            raise TypeError(f"{builtins.type(self).__typename__} name must be a string")
        if not name.strip():
            raise ValueError(f"{builtins.type(self).__typename__} name cannot be blank")
        self._type = _sanitize_type(builtins.type(self), type)
        self._name = name
        self._required = bool(required)

    @property
    def display(self):
        return self._name

class Option[_T](Property):
    """
    Named option taking exactly one value (--long VALUE / -s VALUE).

    `default` (None means no default) is the initial value; it does not count
    as explicitly set.
    """

    __introspectable__ = (
        "type",
        "long",
        "short",
        "descr",
        "required",
        "default",
        "owner",
    )

    def __init__(self, type, long, short=Unset, descr=Unset, required=False, default=Unset):
        super().__init__(descr)
        self._type = _sanitize_type(builtins.type(self), type)
        self._long, self._short = _sanitize_names(builtins.type(self), long, short)
        self._required = bool(required)
        self._default = Unset if default is None else default
        self._value = self._default

    @property
    def display(self):
        return "--" + self._long

    @property
    def value_or_default(self):
        return coalesce(self._value, coalesce(self._default))

class Flag(Property):
    """
    Named boolean switch. Present → True; the default (usually False) is not
    considered explicitly set.
    """

    __introspectable__ = (
        "long",
        "short",
        "descr",
        "default",
        "owner",
    )

    def __init__(self, long, short=Unset, descr=Unset, default=False):
        super().__init__(descr)
        self._type = BOOLEAN
        self._long, self._short = _sanitize_names(builtins.type(self), long, short)
        self._default = bool(default)
        self._value = self._default

    @property
    def display(self):
        return "--" + self._long

    def set(self):
        """
        Toggle the flag on (the flag appeared on the command line).
        """
        self._value = True
        self._explicit = True
        logger.debug("%s set", self.label)

class OptionalOption(Property):
    """
    Named option usable as a flag or with a value.

    Bare, it stores the type's default_when_present; followed by a token that
    does not start with '-', it stores that token.
    """

    __introspectable__ = (
        "type",
        "long",
        "short",
        "descr",
        "owner",
    )

    def __init__(self, long, short=Unset, descr=Unset, type=Unset):
        super().__init__(descr)
        type = coalesce(type, OptionalValue())
        if not isinstance(type, OptionalValue):
            raise TypeError(f"{builtins.type(self).__typename__} 'type' must be an optional value type")
        self._type = type
        self._long, self._short = _sanitize_names(builtins.type(self), long, short)

    @property
    def display(self):
        return "--" + self._long

    def set_as_flag(self):
        """
        Store the value used when the option appears without one.
        """
        self._value = self._type.default_when_present
        self._explicit = True
        logger.debug("%s set as flag", self.label)


__all__ = (
    "Property",
    "Argument",
    "Option",
    "Flag",
    "OptionalOption",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del PropertyType
