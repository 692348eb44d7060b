"""
Utilities behavioral tests (Unset sentinel, coalesce, rename, freeze, mirror).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from argtree.utils import Unset, UnsetType, coalesce, rename, freeze, mirror


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):
                pass

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)
        self.assertNotIsInstance(3, str | Unset)


class TestHelpers(TestCase):
    """Behavioral tests for the helper functions."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "VALUE"), "VALUE")
        self.assertEqual(coalesce("", "VALUE"), "")
        self.assertIsNone(coalesce(Unset))

    def testRenameForms(self):
        def helper():
            pass

        self.assertEqual(rename(helper, "renamed").__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename()

    def testFreeze(self):
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        self.assertIsNone(freeze(Unset))
        self.assertEqual(freeze("text"), "text")

    def testMirrorIsReadOnly(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()
