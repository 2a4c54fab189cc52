"""
Tagger - Filter Parser

pyparsing grammar turning filter text into a Filter tree.

Grammar (lowest to highest binding):
    expr       := or_expr
    or_expr    := and_expr ( "OR" and_expr )*
    and_expr   := atom ( "AND" atom )*
    atom       := "(" expr ")" | comparison | presence
    comparison := IDENT COMPARATOR INTEGER
    presence   := IDENT

A run of the same connective becomes one flat node: "a AND b AND c" is a
single Conjunction with three children. Parenthesized groups stay nested.

The text is lexed first, so malformed tokens surface as LexError before
any grammar rule runs. Elements that are mandatory where they are tried
carry a fail action, so errors point at the token found there and name
the token kinds that were expected.
"""
from typing import List

import pyparsing as pp

from src.tagger.errors import ParseError, TaggerError
from src.tagger.models import parse_value
from src.tagger.query.filters import (
    Comparator,
    Comparison,
    Filter,
    NamePresence,
    conjunction_of,
    disjunction_of,
)
from src.tagger.query.lexer import (
    INTEGER_PATTERN,
    WORD_END,
    WORD_PATTERN,
    Token,
    TokenKind,
    comparator_symbol,
    is_identifier,
    tokenize,
)


class _SyntaxFailure(TaggerError):
    """Carries a failure position out of pyparsing; converted to ParseError."""

    def __init__(self, loc: int, expected: List[str]):
        super().__init__(f"syntax error at {loc}")
        self.loc = loc
        self.expected = expected


def _expected(*kinds: TokenKind):
    """Fail action reporting the token kinds a mandatory element accepts."""
    def fail(text: str, loc: int, expr: pp.ParserElement, err: Exception):
        # Already reported by a nested element
        if isinstance(err, TaggerError):
            return
        raise _SyntaxFailure(loc, [str(kind) for kind in kinds])
    return fail


def _keyword(name: str) -> pp.ParserElement:
    # Case-sensitive; "ANDx" or "AND-x" is a tag name, not the keyword
    return pp.Suppress(pp.Regex(name + WORD_END).set_name(name))


def _make_leaf(tokens: pp.ParseResults) -> Filter:
    if len(tokens) == 1:
        return NamePresence(tokens[0])
    name, symbol, value = tokens
    return Comparison(name, Comparator.from_symbol(symbol), value)


def _build_grammar() -> pp.ParserElement:
    and_ = _keyword("AND")
    or_ = _keyword("OR")
    lparen = pp.Suppress("(")
    rparen = pp.Suppress(")").set_fail_action(_expected(TokenKind.RPAREN))

    identifier = pp.Regex(WORD_PATTERN).add_condition(lambda t: is_identifier(t[0])).set_name("identifier")
    integer = (
        pp.Regex(INTEGER_PATTERN + WORD_END)
        .set_name("integer")
        .set_parse_action(lambda s, loc, t: parse_value(t[0], loc))
        .set_fail_action(_expected(TokenKind.INTEGER))
    )

    leaf = (identifier + pp.Optional(comparator_symbol + integer)).set_parse_action(_make_leaf)

    expr = pp.Forward()
    group = lparen + expr + rparen
    atom = (group | leaf).set_name("atom").set_fail_action(_expected(TokenKind.LPAREN, TokenKind.IDENT))

    and_expr = (atom + pp.ZeroOrMore(and_ + atom)).set_parse_action(lambda t: conjunction_of(list(t)))
    or_expr = (and_expr + pp.ZeroOrMore(or_ + and_expr)).set_parse_action(lambda t: disjunction_of(list(t)))
    expr <<= or_expr
    return expr


_EXPR = _build_grammar()
_PARTIAL = _EXPR.parse_with_tabs()
_COMPLETE = (
    _EXPR + pp.StringEnd().set_fail_action(_expected(TokenKind.AND, TokenKind.OR, TokenKind.EOF))
).parse_with_tabs()


def _token_at(tokens: List[Token], loc: int) -> Token:
    # pyparsing may report a location before skipped whitespace
    for token in tokens:
        if token.position >= loc:
            return token
    return tokens[-1]


def parse_filter(text: str, allow_partial: bool = False) -> Filter:
    """
    Parse filter text into a Filter tree.

    Args:
        text: Filter expression
        allow_partial: Stop after the first complete expression instead of
            requiring the whole text to be consumed

    Example:
        node = parse_filter("status == 1 AND (tag1 OR tag2)")
        node.matches([ValuedTag("status", 1), PlainTag("tag2")])  # True

    Raises:
        LexError: Text contains a malformed token
        InvalidValueError: Integer literal out of range
        ParseError: Tokens do not follow the grammar
    """
    tokens = tokenize(text)
    grammar = _PARTIAL if allow_partial else _COMPLETE
    try:
        return grammar.parse_string(text)[0]
    except _SyntaxFailure as e:
        token = _token_at(tokens, e.loc)
        raise ParseError(token.position, e.expected, token.describe()) from None
    except pp.ParseBaseException as e:
        token = _token_at(tokens, e.loc)
        raise ParseError(token.position, [str(e.msg)], token.describe()) from None
