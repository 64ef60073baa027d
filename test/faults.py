"""
Faults module tests (structure, cloning, rendering through trigger()).

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with a rich Console writing to a StringIO.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from helmsman import (
    FaultCode,
    ArgumentParseException,
    ConversionError,
    ValidationError,
    TooManyArgumentsError,
    UnknownOptionWarning,
    trigger,
)


def _console():
    return Console(file=io.StringIO(), width=200)


class TestFaultStructure(TestCase):
    """Behavioral tests for the fault payload."""

    def testMessageAndOptions(self):
        fault = ConversionError("bad", raw="x", name="--level", code=FaultCode.CONVERSION)
        self.assertEqual(str(fault), "bad")
        self.assertEqual(fault.raw, "x")
        self.assertEqual(fault.name, "--level")
        self.assertIsInstance(fault, ArgumentParseException)
        with self.assertRaises(TypeError):
            fault.options["raw"] = "y"

    def testCollectionsAreTuples(self):
        self.assertEqual(ValidationError("bad", errors=["a", "b"]).errors, ("a", "b"))
        self.assertEqual(TooManyArgumentsError("bad", extra=["x"]).extra, ("x",))
        self.assertEqual(ValidationError("bad").errors, ())

    def testReplaceMergesOptions(self):
        fault = ConversionError("bad", raw="x")
        merged = copy.replace(fault, prog="tool")
        self.assertIsInstance(merged, ConversionError)
        self.assertEqual(merged.options["prog"], "tool")
        self.assertEqual(merged.raw, "x")
        self.assertNotIn("prog", fault.options)

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND, 21101)
        self.assertEqual(FaultCode.VALIDATION, 21131)
        self.assertEqual(FaultCode.EXTRA_ARGUMENTS_IGNORED, 22121)


class TestTrigger(TestCase):
    """Behavioral tests for rendering faults to a console."""

    def testRendersHeaderMessageAndHint(self):
        console = _console()
        trigger(
            ConversionError("bad value", title="invalid value", code=FaultCode.CONVERSION, hint="try again"),
            console=console,
            prog="tool",
            colorful=False,
        )
        output = console.file.getvalue()
        self.assertIn("[ tool | 21113 | invalid value ]", output)
        self.assertIn("bad value", output)
        self.assertIn("-> try again", output)

    def testExceptionsAreNotRaised(self):
        fault = trigger(ValidationError("broken"), console=_console(), prog="tool")
        self.assertIsInstance(fault, ValidationError)
        self.assertEqual(fault.options["prog"], "tool")

    def testWarningsAreLogged(self):
        console = _console()
        with self.assertLogs("helmsman.faults", "WARNING") as logs:
            trigger(UnknownOptionWarning("unknown option --bogus"), console=console)
        self.assertIn("unknown option --bogus", logs.output[0])
        self.assertIn("unknown option --bogus", console.file.getvalue())

    def testRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"), console=_console())


if __name__ == "__main__":
    unittest.main()
