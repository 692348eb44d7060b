"""
Arguments module behavioral tests (option and positional specs).

Scope
- Construction and validation of every option kind and positional kind.
- Conversion: spec(raw) for strings, flags, computed options and arguments.
- Factories, including computed() in decorator form.
- Read-only introspection and repr.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API only.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argtree import (
    StringOption,
    BooleanOption,
    ComputedOption,
    RepeatingOption,
    RequiredArgument,
    RepeatingRest,
    OptionalRest,
    option,
    flag,
    computed,
    repeating,
    argument,
    rest,
    optional,
)


class TestOptions(TestCase):
    """Behavioral tests for the named option kinds."""

    def testStringOptionPassesValueThrough(self):
        o = option("output", short="o", docv="FILE")
        self.assertIsInstance(o, StringOption)
        self.assertEqual(o("out.txt"), "out.txt")
        self.assertEqual(o.spellings, ("--output", "-o"))
        self.assertEqual(o.placeholder, "FILE")

    def testPlaceholderDefaultsToValue(self):
        self.assertEqual(option("output").placeholder, "VALUE")

    def testUndeclaredFieldsReadAsNone(self):
        o = option("output")
        self.assertIsNone(o.short)
        self.assertIsNone(o.doc)
        self.assertIsNone(o.env)
        self.assertIsNone(o.default)

    def testEmptyDefaultIsKept(self):
        self.assertEqual(option("prefix", default="").default, "")

    def testFlagParsesBooleanStrings(self):
        f = flag("verbose", short="v", env="VERBOSE")
        self.assertIsInstance(f, BooleanOption)
        self.assertIsNone(f.placeholder)
        for value in ("no", "OFF", "0", "False"):
            self.assertFalse(f(value), value)
        for value in ("yes", "1", "on", "anything"):
            self.assertTrue(f(value), value)

    def testComputedOptionAppliesAction(self):
        port = computed("port", int, short="p", default="8080")
        self.assertIsInstance(port, ComputedOption)
        self.assertEqual(port("9000"), 9000)
        self.assertIs(port.action, int)

    def testComputedDecoratorBindsAction(self):
        @computed("level", docv="LEVEL")
        def level(value):
            return value.upper()

        self.assertIsInstance(level, ComputedOption)
        self.assertEqual(level.name, "level")
        self.assertEqual(level("debug"), "DEBUG")

    def testComputedRequiresCallable(self):
        with self.assertRaises(TypeError):
            ComputedOption("port", "int")

    def testRepeatingMirrorsInnerOption(self):
        tags = repeating(option("tag", short="t", docv="TAG", env="TAGS"))
        self.assertIsInstance(tags, RepeatingOption)
        self.assertEqual(tags.name, "tag")
        self.assertEqual(tags.short, "t")
        self.assertEqual(tags.env, "TAGS")
        self.assertEqual(tags.placeholder, "TAG")
        self.assertIsNone(tags.default)
        self.assertEqual(tags("x"), "x")

    def testRepeatingRejectsDefault(self):
        with self.assertRaises(TypeError):
            repeating(option("tag", default="x"))

    def testRepeatingRejectsNesting(self):
        with self.assertRaises(TypeError):
            repeating(repeating(option("tag")))

    def testRepeatingRejectsNonOption(self):
        with self.assertRaises(TypeError):
            repeating(argument("TAG"))

    def testOptionNameValidation(self):
        option("dry-run")
        for name in ("", "--port", "-p", "two words", "trailing-", "9lives"):
            with self.assertRaises(ValueError, msg=name):
                option(name)
        with self.assertRaises(TypeError):
            option(42)

    def testShortNameValidation(self):
        with self.assertRaises(ValueError):
            option("port", short="pp")
        with self.assertRaises(ValueError):
            option("port", short="-")
        with self.assertRaises(ValueError):
            option("port", short=" ")

    def testEmptyLabelsRejected(self):
        with self.assertRaises(ValueError):
            option("port", doc="   ")
        with self.assertRaises(ValueError):
            option("port", env="")
        with self.assertRaises(TypeError):
            option("port", docv=3)

    def testOptionsAreReadOnly(self):
        o = option("output")
        with self.assertRaises(AttributeError):
            o.name = "input"

    def testSealedKinds(self):
        with self.assertRaises(TypeError):
            class Derived(StringOption):
                pass

    def testRepr(self):
        self.assertTrue(repr(option("output")).startswith("string-option(name='output'"))


class TestArguments(TestCase):
    """Behavioral tests for the positional kinds."""

    def testArgumentWithoutActionReturnsRaw(self):
        a = argument("SRC", doc="source directory")
        self.assertIsInstance(a, RequiredArgument)
        self.assertEqual(a("site"), "site")
        self.assertEqual(a.docv, "SRC")

    def testArgumentActionApplied(self):
        self.assertEqual(argument("COUNT", action=int)("3"), 3)

    def testArgumentDocvOptional(self):
        self.assertIsNone(argument().docv)

    def testRestKinds(self):
        self.assertIsInstance(rest("FILE"), RepeatingRest)
        o = optional("DIR", default=".")
        self.assertIsInstance(o, OptionalRest)
        self.assertEqual(o.default, ".")

    def testActionMustBeCallable(self):
        with self.assertRaises(TypeError):
            argument("SRC", action="path")
        with self.assertRaises(TypeError):
            optional("DIR", action=1)


if __name__ == "__main__":
    unittest.main()
