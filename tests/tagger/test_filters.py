"""
Tagger - Filter Expression Tests

Tests for evaluation semantics of each node kind.
"""
import pytest

from src.tagger.models import PlainTag, ValuedTag
from src.tagger.query.filters import (
    Comparator,
    Comparison,
    Conjunction,
    Disjunction,
    NamePresence,
    conjunction_of,
    disjunction_of,
)


class TestComparator:
    """Tests for the comparator enum."""

    def test_exactly_six_operators(self):
        assert {c.symbol for c in Comparator} == {"==", "!=", "<", ">", "<=", ">="}

    @pytest.mark.parametrize("symbol", ["=", "=>", "<>", "", "===", "!"])
    def test_invalid_symbols_rejected(self, symbol):
        with pytest.raises(ValueError):
            Comparator.from_symbol(symbol)

    @pytest.mark.parametrize("symbol, expected", [
        ("==", True),
        ("!=", False),
        ("<", False),
        (">", False),
        ("<=", True),
        (">=", True),
    ])
    def test_against_equal_value(self, symbol, expected):
        node = Comparison("v", Comparator.from_symbol(symbol), 5)
        assert node.matches([ValuedTag("v", 5)]) is expected

    @pytest.mark.parametrize("symbol, expected", [
        ("==", False),
        ("!=", True),
        ("<", True),
        (">", False),
        ("<=", True),
        (">=", False),
    ])
    def test_against_smaller_value(self, symbol, expected):
        node = Comparison("v", Comparator.from_symbol(symbol), 5)
        assert node.matches([ValuedTag("v", 2)]) is expected


class TestLeaves:
    """Tests for NamePresence and Comparison."""

    def test_presence(self):
        node = NamePresence("x")

        assert node.matches([PlainTag("x")])
        assert node.matches([ValuedTag("x", 0)])
        assert not node.matches([PlainTag("y")])
        assert not node.matches([])

    def test_comparison_requires_value(self):
        assert not Comparison("x", Comparator.GREATER_OR_EQUAL, 1).matches([PlainTag("x")])

    def test_comparison_missing_tag(self):
        assert not Comparison("x", Comparator.NOT_EQUAL, 1).matches([ValuedTag("y", 2)])

    def test_first_match_decides(self):
        tags = [PlainTag("x"), ValuedTag("x", 5)]

        assert not Comparison("x", Comparator.EQUAL, 5).matches(tags)
        assert NamePresence("x").matches(tags)

    def test_accepts_any_iterable(self):
        assert Comparison("x", Comparator.EQUAL, 5).matches(iter([ValuedTag("x", 5)]))
        assert NamePresence("x").matches({PlainTag("x")})


class TestConnectives:
    """Tests for Conjunction and Disjunction."""

    def test_conjunction(self):
        node = Conjunction((NamePresence("a"), Comparison("b", Comparator.GREATER_THAN, 1)))

        assert node.matches([PlainTag("a"), ValuedTag("b", 2)])
        assert not node.matches([PlainTag("a"), ValuedTag("b", 1)])

    def test_disjunction(self):
        node = Disjunction((NamePresence("a"), NamePresence("b")))

        assert node.matches([PlainTag("b")])
        assert not node.matches([PlainTag("c")])

    def test_generator_input_is_reused_by_children(self):
        node = Conjunction((NamePresence("a"), NamePresence("b")))
        assert node.matches(tag for tag in [PlainTag("a"), PlainTag("b")])

    def test_children_are_frozen_into_tuple(self):
        children = [NamePresence("a"), NamePresence("b")]
        node = Conjunction(children)
        children.append(NamePresence("c"))

        assert node.children == (NamePresence("a"), NamePresence("b"))

    @pytest.mark.parametrize("node_type", [Conjunction, Disjunction])
    def test_needs_two_children(self, node_type):
        with pytest.raises(ValueError):
            node_type((NamePresence("a"),))

    def test_nodes_are_immutable(self):
        node = NamePresence("a")
        with pytest.raises(AttributeError):
            node.name = "b"

    def test_rendering(self):
        node = Disjunction((
            Conjunction((NamePresence("a"), Comparison("n", Comparator.LESS_OR_EQUAL, -2))),
            NamePresence("c"),
        ))
        assert str(node) == "((a, n <= -2), c)"


class TestCombine:
    """Tests for the flattening constructors."""

    def test_single_child_returned_as_is(self):
        leaf = NamePresence("a")
        assert conjunction_of([leaf]) is leaf
        assert disjunction_of([leaf]) is leaf

    def test_many_children(self):
        node = conjunction_of([NamePresence("a"), NamePresence("b"), NamePresence("c")])
        assert isinstance(node, Conjunction)
        assert len(node.children) == 3

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            disjunction_of([])
