"""
Tagger - Errors

Typed failures raised by the filter engine and storage providers.
"""
from typing import Optional, Sequence


class TaggerError(Exception):
    """Base class for all tagger errors."""
    pass


class FilterSyntaxError(TaggerError, ValueError):
    """Filter text could not be turned into a filter tree."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position


class LexError(FilterSyntaxError):
    """A character sequence could not start any valid token."""

    def __init__(self, position: int, reason: str):
        super().__init__(f"{reason} at position {position}", position)
        self.reason = reason


class ParseError(FilterSyntaxError):
    """The token stream does not follow the filter grammar."""

    def __init__(self, position: int, expected: Sequence[str], found: str):
        self.expected = tuple(expected)
        self.found = found
        super().__init__(
            f"expected {' or '.join(self.expected)} at position {position}, found {found}",
            position
        )


class InvalidValueError(TaggerError, ValueError):
    """A tag value or comparison literal is not a valid integer."""

    def __init__(self, text: str, position: Optional[int] = None):
        message = f"invalid tag value: {text!r}"
        if position is not None:
            message += f" at position {position}"
        super().__init__(message)
        self.text = text
        self.position = position


class InvalidTagNameError(TaggerError, ValueError):
    """A tag name that filter text could never refer to."""

    def __init__(self, name: str):
        super().__init__(f"invalid tag name: {name!r}")
        self.name = name


class StorageError(TaggerError):
    """Base class for storage provider failures."""
    pass


class NoFileError(StorageError):
    """No such file in storage."""

    def __init__(self, key: object = None):
        message = "no such file in storage"
        if key is not None:
            message += f": {key}"
        super().__init__(message)
        self.key = key


class NoTagError(StorageError):
    """No such tag on file."""

    def __init__(self, name: str, file_id: object = None):
        message = f"no such tag on file: {name}"
        if file_id is not None:
            message += f" ({file_id})"
        super().__init__(message)
        self.name = name
        self.file_id = file_id


class NoMatchesError(StorageError):
    """No files in storage matched a filter."""

    def __init__(self, filter_text: str = ""):
        message = "no matching files in storage"
        if filter_text:
            message += f" for filter: {filter_text}"
        super().__init__(message)
        self.filter_text = filter_text
