"""
Tagger - Filter Expressions

Immutable expression tree evaluated against a file's tags.

Node kinds:
- NamePresence: a tag with the name exists (value irrelevant)
- Comparison: the named tag is valued and its value satisfies an operator
- Conjunction: all children match
- Disjunction: any child matches

Name lookups use first-match semantics: the first tag carrying the name
decides the outcome. A tag collection is expected to hold at most one
entry per name.
"""
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple, Union

from src.tagger.models import Tag


class Comparator(Enum):
    """Integer comparison operators, keyed by their filter symbol."""
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="

    @classmethod
    def from_symbol(cls, symbol: str) -> "Comparator":
        """
        Look up a comparator by symbol.

        Raises:
            ValueError: Symbol is not one of the six operators
        """
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"invalid comparator: {symbol!r}") from None

    @property
    def symbol(self) -> str:
        return self.value

    def apply(self, left: int, right: int) -> bool:
        return _COMPARATOR_FUNCS[self](left, right)

    def __str__(self) -> str:
        return self.value


_COMPARATOR_FUNCS: dict = {
    Comparator.EQUAL: operator.eq,
    Comparator.NOT_EQUAL: operator.ne,
    Comparator.LESS_THAN: operator.lt,
    Comparator.GREATER_THAN: operator.gt,
    Comparator.LESS_OR_EQUAL: operator.le,
    Comparator.GREATER_OR_EQUAL: operator.ge,
}


def _first_named(tags: Iterable[Tag], name: str) -> Optional[Tag]:
    for tag in tags:
        if tag.name == name:
            return tag
    return None


@dataclass(frozen=True, slots=True)
class NamePresence:
    """True when a tag with this name is present."""
    name: str

    def matches(self, tags: Iterable[Tag]) -> bool:
        return _first_named(tags, self.name) is not None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Comparison:
    """True when the named tag is valued and `tag.value <op> value` holds."""
    name: str
    comparator: Comparator
    value: int

    def matches(self, tags: Iterable[Tag]) -> bool:
        tag = _first_named(tags, self.name)
        if tag is None or not tag.has_value:
            return False
        return self.comparator.apply(tag.value, self.value)

    def __str__(self) -> str:
        return f"{self.name} {self.comparator} {self.value}"


def _check_children(kind: str, children: Tuple) -> Tuple:
    children = tuple(children)
    if len(children) < 2:
        raise ValueError(f"{kind} needs at least two children, got {len(children)}")
    return children


@dataclass(frozen=True, slots=True)
class Conjunction:
    """All children must match. Children are evaluated in order."""
    children: Tuple["Filter", ...]

    def __post_init__(self):
        object.__setattr__(self, "children", _check_children("Conjunction", self.children))

    def matches(self, tags: Iterable[Tag]) -> bool:
        # Children may scan the collection repeatedly.
        tags = _reiterable(tags)
        return all(child.matches(tags) for child in self.children)

    def __str__(self) -> str:
        return _render_group(self.children)


@dataclass(frozen=True, slots=True)
class Disjunction:
    """At least one child must match. Children are evaluated in order."""
    children: Tuple["Filter", ...]

    def __post_init__(self):
        object.__setattr__(self, "children", _check_children("Disjunction", self.children))

    def matches(self, tags: Iterable[Tag]) -> bool:
        tags = _reiterable(tags)
        return any(child.matches(tags) for child in self.children)

    def __str__(self) -> str:
        return _render_group(self.children)


Filter = Union[NamePresence, Comparison, Conjunction, Disjunction]


def _reiterable(tags: Iterable[Tag]) -> Iterable[Tag]:
    if isinstance(tags, (list, tuple, set, frozenset)):
        return tags
    return list(tags)


def _render_group(children: Tuple["Filter", ...]) -> str:
    return "(" + ", ".join(str(child) for child in children) + ")"


def conjunction_of(children: Iterable["Filter"]) -> "Filter":
    """Single child as-is, otherwise one flat Conjunction."""
    return _combine(Conjunction, children)


def disjunction_of(children: Iterable["Filter"]) -> "Filter":
    """Single child as-is, otherwise one flat Disjunction."""
    return _combine(Disjunction, children)


def _combine(node_type: Callable[[Tuple], "Filter"], children: Iterable["Filter"]) -> "Filter":
    children = tuple(children)
    if not children:
        raise ValueError("cannot combine an empty sequence of filters")
    if len(children) == 1:
        return children[0]
    return node_type(children)

