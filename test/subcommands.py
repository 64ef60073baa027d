"""
Subcommands module behavioral tests (registration, lookups, lifecycle).

Scope
- Validate construction rules (name, aliases, callback).
- Validate registration dispatch, ordering and name conflict handling.
- Validate lookups, name matching, validate(), execute() and reset().

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API only.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from helmsman import (
    STRING,
    INT,
    IntRange,
    Argument,
    Option,
    Flag,
    OptionalOption,
    Subcommand,
)


class TestSubcommandConstruction(TestCase):
    """Behavioral tests for Subcommand construction."""

    def testBlankNameRejected(self):
        with self.assertRaises(ValueError):
            Subcommand(" ")

    def testDuplicateAliasesRejected(self):
        with self.assertRaises(ValueError):
            Subcommand("build", aliases=("b", "b"))
        with self.assertRaises(ValueError):
            Subcommand("build", aliases=("build",))

    def testAliasesMustBeIterableOfStrings(self):
        with self.assertRaises(TypeError):
            Subcommand("build", aliases="b")

    def testCallbackMustBeCallable(self):
        with self.assertRaises(TypeError):
            Subcommand("build", callback="run")

    def testNoneMeansOmitted(self):
        build = Subcommand("build", None, callback=None)
        self.assertIsNone(build.descr)
        with self.assertRaises(NotImplementedError):
            build.execute()

    def testReprShowsIdentity(self):
        self.assertEqual(
            repr(Subcommand("build", "Build things", ("b",))),
            "subcommand(name='build', descr='Build things', aliases=('b',))"
        )


class TestRegistration(TestCase):
    """Behavioral tests for property registration."""

    def testRegistriesKeepRegistrationOrder(self):
        build = Subcommand("build")
        target = build.argument(STRING, "target")
        jobs = build.option(INT, "jobs", "j")
        verbose = build.flag("verbose", "v")
        color = build.optional_option("color")
        output = build.argument(STRING, "output", required=False)

        self.assertEqual(build.arguments, (target, output))
        self.assertEqual(build.options, (jobs,))
        self.assertEqual(build.flags, (verbose,))
        self.assertEqual(build.optionals, (color,))
        self.assertEqual(build.properties, (target, jobs, verbose, color, output))

    def testRegisterDispatchesByKind(self):
        build = Subcommand("build")
        for property, registry in (
                (Argument(STRING, "target"), "arguments"),
                (Option(STRING, "config"), "options"),
                (Flag("quiet"), "flags"),
                (OptionalOption("color"), "optionals"),
        ):
            with self.subTest(registry=registry):
                self.assertIs(build.register(property), property)
                self.assertIn(property, getattr(build, registry))

    def testRegisterRejectsNonProperties(self):
        with self.assertRaises(TypeError):
            Subcommand("build").register("--verbose")

    def testDuplicateLongNameRejectedAcrossKinds(self):
        build = Subcommand("build")
        build.option(STRING, "output")
        with self.assertRaises(ValueError):
            build.flag("output")
        with self.assertRaises(ValueError):
            build.optional_option("output")

    def testDuplicateShortNameRejectedWithinKind(self):
        build = Subcommand("build")
        build.flag("verbose", "v")
        with self.assertRaises(ValueError):
            build.flag("version", "v")

    def testDuplicateArgumentNameRejected(self):
        build = Subcommand("build")
        build.argument(STRING, "target")
        with self.assertRaises(ValueError):
            build.argument(STRING, "target")

    def testOptionAndFlagMayShareShortName(self):
        build = Subcommand("build")
        fmt = build.option(STRING, "format", "f")
        with self.assertLogs("helmsman.subcommands", "WARNING"):
            force = build.flag("force", "f")
        self.assertIs(build.find_option(short="f"), fmt)
        self.assertIs(build.find_flag(short="f"), force)

    def testRejectedPropertyStaysUnowned(self):
        build = Subcommand("build")
        build.flag("verbose")
        duplicate = Flag("verbose")
        with self.assertRaises(ValueError):
            build.register(duplicate)
        self.assertIsNone(duplicate.owner)


class TestLookups(TestCase):
    """Behavioral tests for lookups and name matching."""

    def setUp(self):
        self.build = Subcommand("build", aliases=("b", "compile"))
        self.jobs = self.build.option(INT, "jobs", "j")
        self.verbose = self.build.flag("verbose", "v")
        self.color = self.build.optional_option("color", "c")

    def testFindByLongAndShort(self):
        self.assertIs(self.build.find_option(long="jobs"), self.jobs)
        self.assertIs(self.build.find_option(short="j"), self.jobs)
        self.assertIs(self.build.find_flag(long="verbose"), self.verbose)
        self.assertIs(self.build.find_optional(long="color"), self.color)

    def testFindMissReturnsNone(self):
        self.assertIsNone(self.build.find_option(long="verbose"))
        self.assertIsNone(self.build.find_flag(short="j"))
        self.assertIsNone(self.build.find_optional(long="jobs"))

    def testMatchesNameAndAliases(self):
        self.assertTrue(self.build.matches("build"))
        self.assertTrue(self.build.matches("compile"))
        self.assertFalse(self.build.matches("Build"))
        self.assertTrue(self.build.matches("Build", case_sensitive=False))
        self.assertTrue(self.build.matches("B", case_sensitive=False))
        self.assertFalse(self.build.matches("test", case_sensitive=False))


class TestLifecycle(TestCase):
    """Behavioral tests for validate(), execute() and reset()."""

    def testValidateCollectsEveryError(self):
        build = Subcommand("build")
        build.option(STRING, "config", required=True)
        build.option(IntRange(1, 4), "level", default=9)
        build.argument(STRING, "target")
        self.assertEqual(build.validate(), [
            "option '--config' is required",
            "invalid value for option '--level': expected integer between 1 and 4",
            "argument 'target' is required",
        ])

    def testValidateEmptyWhenValid(self):
        build = Subcommand("build")
        build.flag("verbose")
        build.argument(STRING, "target", required=False)
        self.assertEqual(build.validate(), [])

    def testExecuteRunsCallback(self):
        calls = []
        build = Subcommand("build", callback=lambda: calls.append("ran") or "done")
        self.assertEqual(build.execute(), "done")
        self.assertEqual(calls, ["ran"])

    def testHandlerDecorator(self):
        build = Subcommand("build")

        @build.handler
        def run():
            return 42

        self.assertEqual(build.execute(), 42)
        with self.assertRaises(TypeError):
            build.handler(lambda: None)

    def testExecuteWithoutHandlerRaises(self):
        with self.assertRaises(NotImplementedError):
            Subcommand("build").execute()

    def testExecuteCanBeOverridden(self):
        class Build(Subcommand):
            def execute(self):
                return "overridden"

        self.assertEqual(Build("build").execute(), "overridden")

    def testResetRestoresEveryProperty(self):
        build = Subcommand("build")
        jobs = build.option(INT, "jobs", default=2)
        verbose = build.flag("verbose")
        target = build.argument(STRING, "target")
        jobs.parse_value("8")
        verbose.set()
        target.parse_value("app")

        build.reset()

        self.assertEqual(jobs.value, 2)
        self.assertIs(verbose.value, False)
        self.assertIsNone(target.value)
        self.assertFalse(any(property.explicitly_set for property in build.properties))


if __name__ == "__main__":
    unittest.main()
