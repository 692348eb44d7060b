"""
argtree tokenizer: split argv into an ordered stream of tokens.

The tokenizer knows nothing about the command tree. Whether `--port 80`
means "option with value" or "flag followed by a positional" is decided later
by the resolver, which may consume the positional that follows a value option.

Rules
- "--"                    → TERMINATOR; every later argument is POSITIONAL.
- "--name", "--name=v"    → OPTION named "name", inline value "v" when given.
- "-n", "-n=v"            → OPTION named "n"; "-abc" is the single option "abc".
- "-", "--=v", "---x"     → POSITIONAL (no usable option name).
- anything else           → POSITIONAL.
"""
import enum
import re
from typing import NamedTuple


class TokenKind(enum.Enum):
    OPTION = "option"
    POSITIONAL = "positional"
    TERMINATOR = "terminator"


class Token(NamedTuple):
    kind: TokenKind
    index: int
    raw: str
    name: str | None = None
    value: str | None = None

    @property
    def spelling(self):
        """The option as typed, without any inline value ("--port", "-p")."""
        if self.kind is not TokenKind.OPTION:
            return self.raw
        return self.raw.partition("=")[0]


_OPTION = re.compile(r"(?P<dashes>--?)(?P<name>[^=-][^=]*)(?:=(?P<value>.*))?", re.DOTALL)


def tokenize(argv, /):
    """
    Turn argv (without the program name) into a tuple of tokens.
    """
    tokens = []
    terminated = False
    for index, raw in enumerate(argv):
        if not isinstance(raw, str):
            raise TypeError("tokenize() arguments must be strings")

        if terminated:
            tokens.append(Token(TokenKind.POSITIONAL, index, raw, value=raw))
        elif raw == "--":
            terminated = True
            tokens.append(Token(TokenKind.TERMINATOR, index, raw))
        elif match := _OPTION.fullmatch(raw):
            tokens.append(Token(TokenKind.OPTION, index, raw, match["name"], match["value"]))
        else:
            tokens.append(Token(TokenKind.POSITIONAL, index, raw, value=raw))
    return tuple(tokens)


__all__ = (
    "TokenKind",
    "Token",
    "tokenize",
)
