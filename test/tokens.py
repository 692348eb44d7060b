"""
Tokenizer behavioral tests.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argtree import Token, TokenKind, tokenize


class TestTokenize(TestCase):
    """Behavioral tests for tokenize()."""

    def testLongOption(self):
        token, = tokenize(["--port"])
        self.assertEqual(token, Token(TokenKind.OPTION, 0, "--port", "port", None))
        self.assertEqual(token.spelling, "--port")

    def testInlineValue(self):
        token, = tokenize(["--port=8080"])
        self.assertEqual(token.name, "port")
        self.assertEqual(token.value, "8080")
        self.assertEqual(token.spelling, "--port")

    def testInlineValueMayContainEquals(self):
        token, = tokenize(["--define=a=b"])
        self.assertEqual(token.value, "a=b")

    def testEmptyInlineValue(self):
        token, = tokenize(["--prefix="])
        self.assertEqual(token.value, "")

    def testShortOption(self):
        token, = tokenize(["-p"])
        self.assertEqual((token.kind, token.name, token.spelling), (TokenKind.OPTION, "p", "-p"))

    def testShortOptionsAreNotClustered(self):
        token, = tokenize(["-abc"])
        self.assertEqual(token.name, "abc")

    def testPositionals(self):
        tokens = tokenize(["serve", "-", "--=x"])
        self.assertTrue(all(token.kind is TokenKind.POSITIONAL for token in tokens))
        self.assertEqual([token.value for token in tokens], ["serve", "-", "--=x"])

    def testTerminatorMakesEverythingPositional(self):
        tokens = tokenize(["a", "--", "--port", "--"])
        self.assertEqual(
            [token.kind for token in tokens],
            [TokenKind.POSITIONAL, TokenKind.TERMINATOR, TokenKind.POSITIONAL, TokenKind.POSITIONAL],
        )
        self.assertEqual(tokens[2].value, "--port")

    def testIndicesFollowArgv(self):
        self.assertEqual([token.index for token in tokenize(["a", "--b", "c"])], [0, 1, 2])

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            tokenize(["--port", 8080])


if __name__ == "__main__":
    unittest.main()
