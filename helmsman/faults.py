"""
Helmsman faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
- ArgumentParseException / ParseWarning: base types that carry a message plus
  an immutable mapping of options (title, code, hint and context such as the
  offending raw token or property name) and know how to render themselves.
- trigger(): central entry point that renders any fault to a console sink.

Policy
- Conversion and missing-value failures abort tokenization immediately.
- Unknown options and surplus positionals are fatal in strict mode and
  warnings otherwise; the parser picks the matching class.
- Required-field validation is batched into a single ValidationError.
- Unknown commands are reported, never raised.

Integration
- Faults are plain exceptions/warnings; rendering is opt-in via trigger(), so
  callers that only need the message can use str(fault).
- The host application may define __styles__ in __main__ to override palette
  entries used by __rich__.
"""
import copy
import logging
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - routing (2110x): UNKNOWN_COMMAND
    - named properties (2111x): UNKNOWN_OPTION, MISSING_VALUE, CONVERSION
    - positionals (2112x): TOO_MANY_ARGUMENTS
    - validation (2113x): VALIDATION
    - warnings (22xxx): lenient-mode counterparts of the fatal codes above
    """
    # --- routing errors ---
    UNKNOWN_COMMAND         = 21101

    # --- option/flag errors ---
    UNKNOWN_OPTION          = 21111
    MISSING_VALUE           = 21112
    CONVERSION              = 21113

    # --- positional errors ---
    TOO_MANY_ARGUMENTS      = 21121

    # --- validation errors ---
    VALIDATION              = 21131

    # --- warnings ---
    UNKNOWN_OPTION_IGNORED  = 22111
    EXTRA_ARGUMENTS_IGNORED = 22121


def _render(fault, palette, kind):
    """
    Build the rich renderable shared by exceptions and warnings.

    Layout
    - header: [ prog | code | title ]
    - body: the message
    - footer: an arrow followed by the hint, when one exists
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(fault.options.get("prog", "helmsman"), "prog-name"),
        " | ",
        text(int(fault.options.get("code", 0)) or kind, "code"),
        " | ",
        text(fault.options.get("title", kind), "%s-title" % kind),
        " ]"
    )
    parts = [header, text(fault.message, "%s-message" % kind)]
    if hint := fault.options.get("hint"):
        parts.append(Text.assemble(text(" -> ", "hint-arrow"), text(hint, "hint")))
    return Group(*parts)


class ArgumentParseException(Exception):
    """
    Base class of every fatal parsing fault.

    The message is the complete human-readable description; options carry the
    structured context (code, title, hint, raw, name, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConversionError(ArgumentParseException):
    """
    A raw token could not be converted to the target type.
    """

    @property
    def raw(self):
        return self.options.get("raw")

    @property
    def name(self):
        return self.options.get("name")


class MissingValueError(ArgumentParseException):
    """
    An option was the last token and has no value to consume.
    """

    @property
    def name(self):
        return self.options.get("name")


class UnknownOptionError(ArgumentParseException):
    @property
    def name(self):
        return self.options.get("name")


class UnknownCommandError(ArgumentParseException):
    @property
    def name(self):
        return self.options.get("name")


class ValidationError(ArgumentParseException):
    """
    One or more properties failed validation after tokenization.

    All problems are reported together; `errors` lists them individually.
    """

    @property
    def errors(self):
        return tuple(self.options.get("errors", ()))


class TooManyArgumentsError(ArgumentParseException):
    @property
    def extra(self):
        return tuple(self.options.get("extra", ()))


class ParseWarning(Warning):
    """
    Base class of non-fatal parsing faults (lenient mode).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionWarning(ParseWarning): ...
class TooManyArgumentsWarning(ParseWarning): ...


def trigger(fault, /, console, **options):
    """
    render a fault to the given console sink.

    contract
    - fault must provide __replace__ and __rich__ (see the base classes).
    - options are merged into the fault via copy.replace before rendering
      (typically prog and colorful).
    - warnings are also logged; exceptions are never raised here, raising
      stays with the caller so the original traceback is preserved.

    returns
    - the merged fault.
    """
    if not isinstance(fault, ArgumentParseException | ParseWarning):
        raise TypeError("trigger() argument must be a parse exception or a parse warning")
    fault = copy.replace(fault, **options)
    if isinstance(fault, ParseWarning):
        logger.warning("%s", fault.message)
    console.print(fault)
    return fault


__all__ = (
    "FaultCode",
    "ArgumentParseException",
    "ConversionError",
    "MissingValueError",
    "UnknownOptionError",
    "UnknownCommandError",
    "ValidationError",
    "TooManyArgumentsError",
    "ParseWarning",
    "UnknownOptionWarning",
    "TooManyArgumentsWarning",
    "trigger",
)
