"""
Tagger - Storage Contract

Interface every tag storage backend implements, plus the default
filter-matching strategy built on top of it.
"""
import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import List, Sequence

from loguru import logger

from src.tagger.models import File, Tag
from src.tagger.query.filters import Filter

DEFAULT_MATCH_CONCURRENCY = 16


class StorageProvider(ABC):
    """
    Abstract tag storage backend.

    Operations are coroutines. Missing files raise NoFileError, missing
    tags raise NoTagError; backend failures propagate unchanged.

    Usage:
        async with MemoryStorage() as storage:
            await storage.update_file(File.new("/tmp/a.txt"), [PlainTag("x")])
            files = await storage.get_matching_files(parse_filter("x"))
    """

    def __init__(self, match_concurrency: int = DEFAULT_MATCH_CONCURRENCY):
        if match_concurrency < 1:
            raise ValueError("match_concurrency must be at least 1")
        self.match_concurrency = match_concurrency

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Open connections or load persisted state."""

    async def close(self) -> None:
        """Release all resources held by the provider."""

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # --- Files ---

    @abstractmethod
    async def get_file(self, file_id: uuid.UUID) -> File:
        """File with the given id."""

    @abstractmethod
    async def get_file_for_path(self, path: str) -> File:
        """File registered at the given path."""

    @abstractmethod
    async def get_all_files(self) -> List[File]:
        """All files, in registration order."""

    @abstractmethod
    async def update_file(self, file: File, tags: Sequence[Tag]) -> None:
        """
        Create or update a file record and replace its whole tag collection.

        A different file registered at the same path is removed.
        """

    @abstractmethod
    async def remove_file(self, file: File) -> None:
        """Remove a file together with all of its tags."""

    # --- Tags ---

    @abstractmethod
    async def get_tags(self, file: File) -> List[Tag]:
        """Tags on a file, in insertion order."""

    @abstractmethod
    async def update_tag(self, file: File, tag: Tag) -> None:
        """Set a tag on a file, replacing any tag with the same name."""

    @abstractmethod
    async def remove_tag(self, file: File, tag: Tag) -> None:
        """Remove the tag with the given tag's name from a file."""

    # --- Matching ---

    async def get_matching_files(self, node: Filter) -> List[File]:
        """
        Files whose tags match a filter.

        Tag collections are fetched concurrently, at most match_concurrency
        at a time. Results keep the get_all_files order. The first failing
        fetch aborts the whole operation and its exception is raised.

        Args:
            node: Parsed filter

        Returns:
            Matching files
        """
        files = await self.get_all_files()
        if not files:
            return []

        semaphore = asyncio.Semaphore(self.match_concurrency)

        async def fetch(file: File) -> List[Tag]:
            async with semaphore:
                return await self.get_tags(file)

        tasks = [asyncio.ensure_future(fetch(file)) for file in files]
        try:
            tag_sets = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let cancelled fetches unwind before surfacing the failure
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        matches = [file for file, tags in zip(files, tag_sets) if node.matches(tags)]
        logger.debug(f"Filter {node} matched {len(matches)} of {len(files)} files")
        return matches
