"""
Tagger - Filter Lexer

Splits filter text into tokens.

Iterating a Lexer yields tokens lazily and always starts over from the
beginning of the text; the last token is always EOF. Token patterns are
pyparsing elements shared with the grammar in parser.py.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

import pyparsing as pp

from src.tagger.errors import LexError
from src.tagger.models import parse_value


class TokenKind(Enum):
    IDENT = "identifier"
    INTEGER = "integer"
    COMPARATOR = "comparator"
    AND = "AND"
    OR = "OR"
    LPAREN = "'('"
    RPAREN = "')'"
    EOF = "end of input"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token and its offset in the filter text."""
    kind: TokenKind
    text: str
    position: int
    value: Optional[int] = None

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return str(self.kind)
        return f"{self.kind} {self.text!r}"


COMPARATOR_SYMBOLS = ("==", "!=", "<=", ">=", "<", ">")
KEYWORDS = {"AND": TokenKind.AND, "OR": TokenKind.OR}

# A word runs until whitespace, a parenthesis or an operator character.
WORD_PATTERN = r"[^\s()=!<>]+"
WORD_END = r"(?![^\s()=!<>])"
INTEGER_PATTERN = r"-?[0-9]+"

_INTEGER_RE = re.compile(INTEGER_PATTERN)
_PARENS = {"(": TokenKind.LPAREN, ")": TokenKind.RPAREN}

# one_of tries longer symbols first, so "<=" is never read as "<" then "=".
comparator_symbol = pp.one_of(COMPARATOR_SYMBOLS).set_name("comparator")
word = pp.Regex(WORD_PATTERN).set_name("word")

_token = (comparator_symbol | pp.one_of("( )") | word).parse_with_tabs()


def is_identifier(text: str) -> bool:
    """True when text lexes as exactly one tag-name token."""
    return (
        re.fullmatch(WORD_PATTERN, text) is not None
        and text not in KEYWORDS
        and not text.startswith("-")
        and not _INTEGER_RE.fullmatch(text)
    )


class Lexer:
    """
    Tokenizer for filter expressions.

    Example:
        [t.kind for t in Lexer("role == 1")]
        # [IDENT, COMPARATOR, INTEGER, EOF]
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[Token]:
        return self._scan()

    def tokenize(self) -> List[Token]:
        """Lex the whole text eagerly."""
        return list(self)

    def _scan(self) -> Iterator[Token]:
        pos = 0
        for tokens, start, end in _token.scan_string(self.text):
            # scan_string skips what it cannot match; only whitespace may be skipped
            self._check_skipped(pos, start)
            yield self._make_token(tokens[0], start)
            pos = end

        self._check_skipped(pos, len(self.text))
        yield Token(TokenKind.EOF, "", len(self.text))

    def _check_skipped(self, start: int, end: int) -> None:
        for pos in range(start, end):
            char = self.text[pos]
            if not char.isspace():
                raise LexError(pos, f"unexpected character {char!r}")

    def _make_token(self, text: str, position: int) -> Token:
        if text in _PARENS:
            return Token(_PARENS[text], text, position)

        if text in COMPARATOR_SYMBOLS:
            return Token(TokenKind.COMPARATOR, text, position)

        if text in KEYWORDS:
            return Token(KEYWORDS[text], text, position)

        if _INTEGER_RE.fullmatch(text):
            return Token(TokenKind.INTEGER, text, position, parse_value(text, position))

        if text.startswith("-"):
            raise LexError(position, f"malformed integer literal {text!r}")

        return Token(TokenKind.IDENT, text, position)


def tokenize(text: str) -> List[Token]:
    """Shortcut for Lexer(text).tokenize()."""
    return Lexer(text).tokenize()
