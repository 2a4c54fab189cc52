"""Tagger Query Package."""
from src.tagger.query.filters import (
    Comparator,
    Comparison,
    Conjunction,
    Disjunction,
    Filter,
    NamePresence,
    conjunction_of,
    disjunction_of,
)
from src.tagger.query.lexer import Lexer, Token, TokenKind, is_identifier, tokenize
from src.tagger.query.parser import parse_filter

__all__ = [
    "Comparator",
    "Comparison",
    "Conjunction",
    "Disjunction",
    "Filter",
    "NamePresence",
    "conjunction_of",
    "disjunction_of",
    "Lexer",
    "Token",
    "TokenKind",
    "is_identifier",
    "tokenize",
    "parse_filter",
]
