"""
Tagger - Models

Tags and files as immutable value objects.

A tag is either a PlainTag (name only) or a ValuedTag (name and integer).
Within a file's tag set the name is the natural key: storing a ValuedTag
replaces a PlainTag of the same name and vice versa.
"""
import re
import uuid
from dataclasses import dataclass
from typing import Union

from src.tagger.errors import InvalidValueError

# Returned by PlainTag.value; check has_value first.
NO_VALUE = -1

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_value(text: str, position: int = None) -> int:
    """
    Parse a tag value or comparison literal.

    Args:
        text: Decimal integer with optional sign
        position: Offset in the filter text, for error reporting

    Returns:
        Parsed integer

    Raises:
        InvalidValueError: Malformed or outside the signed 64-bit range
    """
    stripped = text.strip()
    if not _INTEGER_RE.fullmatch(stripped):
        raise InvalidValueError(text, position)

    value = int(stripped)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidValueError(text, position)
    return value


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ValueError("tag name must be a non-empty string")


@dataclass(frozen=True, slots=True)
class PlainTag:
    """Tag with just a name."""
    name: str

    def __post_init__(self):
        _check_name(self.name)

    @property
    def has_value(self) -> bool:
        return False

    @property
    def value(self) -> int:
        return NO_VALUE

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ValuedTag:
    """Tag with both a name and an integer value."""
    name: str
    value: int

    def __post_init__(self):
        _check_name(self.name)
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"tag value must be an int, got {type(self.value).__name__}")

    @property
    def has_value(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


Tag = Union[PlainTag, ValuedTag]


def make_tag(name: str, value: int = None) -> Tag:
    """Build a PlainTag when value is None, a ValuedTag otherwise."""
    if value is None:
        return PlainTag(name)
    return ValuedTag(name, value)


def format_tag(tag: Tag) -> str:
    """Render a tag as `name` or `name=value`."""
    return str(tag)


@dataclass(frozen=True, slots=True)
class File:
    """
    A file registered in storage.

    The id never changes once assigned; the path follows renames and moves.
    """
    id: uuid.UUID
    path: str

    @classmethod
    def new(cls, path: str) -> "File":
        """Register-time constructor with a freshly generated id."""
        return cls(id=uuid.uuid4(), path=path)

    def with_path(self, path: str) -> "File":
        """Same file at a new location."""
        return File(id=self.id, path=path)

    def __str__(self) -> str:
        return f"{self.id} {self.path}"
