"""
Utilities tests (Unset sentinel, coalesce, mirror, pluralize).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from types import MappingProxyType
from unittest import TestCase

from helmsman.utils import Unset, UnsetType, coalesce, mirror, pluralize


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testIsFalseySingleton(self):
        self.assertFalse(Unset)
        self.assertIs(UnsetType(), Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypesInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("text", str | Unset))
        self.assertFalse(isinstance(None, str | Unset))

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "xml"), "xml")
        self.assertIsNone(coalesce(Unset))
        self.assertIs(coalesce(False, True), False)


class TestMirror(TestCase):
    """Behavioral tests for read-only mirrors."""

    def testContainersAreFrozenAndUnsetIsNone(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")
            missing = mirror("missing")

            def __init__(self):
                self._items = ["a"]
                self._table = {"k": 1}
                self._missing = Unset

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertIsNone(holder.missing)
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestPluralize(TestCase):
    def testHeadings(self):
        self.assertEqual(pluralize("option"), "options")
        self.assertEqual(pluralize("optional option"), "optional options")
        self.assertEqual(pluralize("Flag"), "Flags")
        self.assertEqual(pluralize("entry"), "entries")


if __name__ == "__main__":
    unittest.main()
