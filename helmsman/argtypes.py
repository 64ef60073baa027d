"""
Helmsman argument types: converters and validators for raw tokens.

Overview
- ArgType[_T]: base contract.
  • convert(raw) -> _T: pure conversion; raises ConversionError on malformed input.
  • validate(value) -> bool: post-conversion semantic check (idempotent, no side effects).
  • describe() -> str: human description of valid values (used in validation messages).
  • typename / tag: diagnostic label and help display string (e.g. "<int>").

- Scalars (stateless singletons): STRING, INT, DOUBLE, BOOLEAN.
- Configured types:
  • IntRange(min, max): integer bounded inclusively; bounds checked inside convert.
  • Choice(*choices): case-sensitive membership; checked inside convert.
  • OptionalValue(default_when_present): identity, backs flag-or-value options.
  • FilePath(...): conversion is total; filesystem constraints are checked by
    validate() at validation time, so a path may convert yet fail validation.

Two-phase rule
- IntRange, Choice and Boolean reject bad input at conversion time.
- FilePath defers every check to validate(), which touches the filesystem.
"""
import functools
import operator
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

from .faults import ConversionError, FaultCode
from .utils import mirror

_TRUTHY = frozenset({"true", "yes", "1", "on"})
_FALSY = frozenset({"false", "no", "0", "off"})
_NON_FINITE = frozenset({"nan", "inf", "infinity"})


def _fail(message, raw):
    return ConversionError(
        message,
        title="invalid value",
        code=FaultCode.CONVERSION,
        raw=raw,
    )


class ArgType[_T](ABC):
    """
    Converter/validator for one kind of value.

    Subclasses set `typename` and `tag` and implement convert(); validate()
    and describe() have permissive defaults.
    """
    __introspectable__ = ()

    typename = "value"
    tag = ""

    @abstractmethod
    def convert(self, raw, /):
        """
        Convert a raw token into a typed value or raise ConversionError.
        """
        raise NotImplementedError

    def validate(self, value, /):
        return True

    def describe(self):
        return "any %s" % self.typename

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "%s(%s)" % (
            type(self).__name__,
            ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
        )


class String(ArgType[str]):
    typename = "string"

    def convert(self, raw, /):
        return raw


class Int(ArgType[int]):
    typename = "int"
    tag = "<int>"

    def convert(self, raw, /):
        # int() would also accept whitespace, underscores and non-ascii digits
        if not re.fullmatch(r"[+-]?[0-9]+", raw):
            raise _fail("'%s' is not a valid integer" % raw, raw)
        return int(raw)


class Double(ArgType[float]):
    typename = "double"
    tag = "<double>"

    def convert(self, raw, /):
        if not raw.strip() or "_" in raw:
            raise _fail("'%s' is not a valid number" % raw, raw)
        # non-finite values only as "NaN" and "[+-]Infinity"
        if raw.strip().lstrip("+-").lower() in _NON_FINITE and not re.fullmatch(r"\s*(NaN|[+-]?Infinity)\s*", raw):
            raise _fail("'%s' is not a valid number" % raw, raw)
        try:
            return float(raw)
        except ValueError:
            raise _fail("'%s' is not a valid number" % raw, raw) from None


class Boolean(ArgType[bool]):
    typename = "boolean"
    tag = "<bool>"

    def convert(self, raw, /):
        if (value := raw.lower()) in _TRUTHY:
            return True
        if value in _FALSY:
            return False
        raise _fail("'%s' is not a valid boolean (true/false, yes/no, 1/0, on/off)" % raw, raw)

    def describe(self):
        return "one of: true, false, yes, no, 1, 0, on, off"


class IntRange(ArgType[int]):
    """
    Integer constrained to the inclusive range [min, max].
    """
    __introspectable__ = ("min", "max")

    typename = "int"

    min = mirror("min")
    max = mirror("max")

    def __init__(self, min, max, /):
        if not isinstance(min, int) or not isinstance(max, int) or isinstance(min, bool) or isinstance(max, bool):
            raise TypeError("IntRange bounds must be integers")
        if min > max:
            raise ValueError("IntRange 'min' cannot be greater than 'max'")
        self._min = min
        self._max = max

    @property
    def tag(self):
        return "<%d-%d>" % (self._min, self._max)

    def convert(self, raw, /):
        value = INT.convert(raw)
        if not self._min <= value <= self._max:
            raise _fail("'%s' must be between %d and %d" % (raw, self._min, self._max), raw)
        return value

    def validate(self, value, /):
        return isinstance(value, int) and self._min <= value <= self._max

    def describe(self):
        return "integer between %d and %d" % (self._min, self._max)


class Choice(ArgType[str]):
    """
    One string out of a fixed, ordered set (case-sensitive).
    """
    __introspectable__ = ("choices",)

    typename = "choice"

    choices = mirror("choices")

    def __init__(self, *choices):
        if not choices:
            raise ValueError("Choice requires at least one option")
        sanitized = []
        for choice in choices:
            if not isinstance(choice, str):
                raise TypeError("Choice options must be strings")
            if choice in sanitized:
                raise ValueError("Choice options cannot contain duplicates")
            sanitized.append(choice)
        self._choices = tuple(sanitized)

    @property
    def tag(self):
        return "<%s>" % "|".join(self._choices)

    def convert(self, raw, /):
        if raw not in self._choices:
            raise _fail("'%s' is not a valid choice. Valid options: %s" % (raw, ", ".join(self._choices)), raw)
        return raw

    def validate(self, value, /):
        return value in self._choices

    def describe(self):
        return "one of: %s" % ", ".join(self._choices)


class OptionalValue(ArgType[str]):
    """
    Identity converter for options usable both as a flag and with a value.

    default_when_present is the value stored when the option appears bare.
    """
    __introspectable__ = ("default_when_present",)

    typename = "string"
    tag = "[<value>]"

    default_when_present = mirror("default_when_present")

    def __init__(self, default_when_present="true", /):
        if not isinstance(default_when_present, str):
            raise TypeError("OptionalValue 'default_when_present' must be a string")
        self._default_when_present = default_when_present

    def convert(self, raw, /):
        return raw


class FilePath(ArgType[Path]):
    """
    Filesystem path with deferred, I/O-backed constraints.

    convert() never fails; validate() re-checks every configured constraint
    against the filesystem each time it is called.
    """
    __introspectable__ = (
        "must_exist",
        "must_be_file",
        "must_be_directory",
        "must_be_readable",
        "must_be_writable",
    )

    typename = "path"
    tag = "<path>"

    must_exist = mirror("must_exist")
    must_be_file = mirror("must_be_file")
    must_be_directory = mirror("must_be_directory")
    must_be_readable = mirror("must_be_readable")
    must_be_writable = mirror("must_be_writable")

    def __init__(
            self,
            *,
            must_exist=False,
            must_be_file=False,
            must_be_directory=False,
            must_be_readable=False,
            must_be_writable=False
    ):
        if must_be_file and must_be_directory:
            raise ValueError("FilePath cannot require both a file and a directory")
        self._must_exist = bool(must_exist)
        self._must_be_file = bool(must_be_file)
        self._must_be_directory = bool(must_be_directory)
        self._must_be_readable = bool(must_be_readable)
        self._must_be_writable = bool(must_be_writable)

    def convert(self, raw, /):
        return Path(raw)

    def validate(self, value, /):
        path = Path(value)
        if self._must_exist and not path.exists():
            return False
        if self._must_be_file and not path.is_file():
            return False
        if self._must_be_directory and not path.is_dir():
            return False
        if self._must_be_readable and not os.access(path, os.R_OK):
            return False
        if self._must_be_writable:
            # a missing path is writable when its directory accepts new entries
            target = path if path.exists() else path.absolute().parent
            if not os.access(target, os.W_OK):
                return False
        return True

    def describe(self):
        constraints = [
            text for enabled, text in (
                (self._must_exist, "exists"),
                (self._must_be_file, "is a file"),
                (self._must_be_directory, "is a directory"),
                (self._must_be_readable, "is readable"),
                (self._must_be_writable, "is writable"),
            ) if enabled
        ]
        if not constraints:
            return "any path"
        return "path that %s" % " and ".join(constraints)


STRING = String()
INT = Int()
DOUBLE = Double()
BOOLEAN = Boolean()


__all__ = (
    # Base
    "ArgType",

    # Types
    "String",
    "Int",
    "Double",
    "Boolean",
    "IntRange",
    "Choice",
    "OptionalValue",
    "FilePath",

    # Singletons
    "STRING",
    "INT",
    "DOUBLE",
    "BOOLEAN",
)
