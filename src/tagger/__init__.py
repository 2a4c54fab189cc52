"""
Tagger - File Tagging and Filter Queries

Attach plain or integer-valued tags to files and select files with boolean
filter expressions such as `status == 1 AND (tag1 OR tag2)`.

Usage:
    from src.tagger import MemoryStorage, File, PlainTag, ValuedTag, parse_filter

    async with MemoryStorage() as storage:
        await storage.update_file(File.new("/photos/a.jpg"), [ValuedTag("rating", 4)])
        files = await storage.get_matching_files(parse_filter("rating >= 3"))
"""
__version__ = "0.1.0"

from src.tagger.errors import (
    TaggerError,
    FilterSyntaxError,
    LexError,
    ParseError,
    InvalidValueError,
    InvalidTagNameError,
    StorageError,
    NoFileError,
    NoTagError,
    NoMatchesError,
)
from src.tagger.models import File, PlainTag, ValuedTag, Tag, make_tag, parse_value
from src.tagger.query import (
    Comparator,
    Comparison,
    Conjunction,
    Disjunction,
    Filter,
    NamePresence,
    parse_filter,
)
from src.tagger.storage import StorageProvider, MemoryStorage, JsonFileStorage, create_storage

__all__ = [
    "__version__",
    # Errors
    "TaggerError",
    "FilterSyntaxError",
    "LexError",
    "ParseError",
    "InvalidValueError",
    "InvalidTagNameError",
    "StorageError",
    "NoFileError",
    "NoTagError",
    "NoMatchesError",
    # Models
    "File",
    "PlainTag",
    "ValuedTag",
    "Tag",
    "make_tag",
    "parse_value",
    # Filters
    "Comparator",
    "Comparison",
    "Conjunction",
    "Disjunction",
    "Filter",
    "NamePresence",
    "parse_filter",
    # Storage
    "StorageProvider",
    "MemoryStorage",
    "JsonFileStorage",
    "create_storage",
]
