"""Persistent repository of mined bug patterns."""

import json
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from common.constants import WILDCARD_LANGUAGE
from common.logger import get_logger
from common.rounding import round_half_up

from .memory_io import empty_memory, read_memory, utc_timestamp, write_memory
from .models import BugCategory, BugMemory, BugPattern, RepositoryStats

logger = get_logger(__name__)


class PatternRepository:
    """Owns the BugMemory for one store file.

    Every mutating call writes the store before returning. There is no
    locking; one owner per store file.
    """

    def __init__(self, store_path: Path, clock: Callable[[], datetime] | None = None):
        """Open a repository, loading whatever is on disk.

        Args:
            store_path: Path of the JSON store file
            clock: Returns the current time; used for ``generated_at``
        """
        self.store_path = Path(store_path)
        self._clock = clock
        self._index: dict[tuple[str, BugCategory], BugPattern] = {}
        self.memory = self.load()

    def _now(self) -> str:
        return utc_timestamp(self._clock() if self._clock else None)

    def _reindex(self) -> None:
        self._index = {}
        for pattern in self.memory.patterns:
            self._index.setdefault(pattern.key, pattern)

    def load(self) -> BugMemory:
        """Read the store from disk, replacing the in-memory state.

        A missing, unreadable or malformed store yields an empty default
        store. Never raises.

        Returns:
            The loaded (or default) BugMemory
        """
        try:
            memory = read_memory(self.store_path)
        except FileNotFoundError:
            memory = empty_memory(self._now())
        except (
            OSError,
            json.JSONDecodeError,
            KeyError,
            TypeError,
            ValueError,
            OverflowError,
            RecursionError,
        ) as e:
            logger.warning(f"Could not load pattern store {self.store_path}: {e}")
            memory = empty_memory(self._now())

        self.memory = memory
        self._reindex()
        logger.debug(f"Loaded {len(memory.patterns)} patterns from {self.store_path}")
        return memory

    def save(self) -> None:
        """Write the current state, refreshing ``generated_at``.

        Raises:
            OSError: If the store cannot be written
        """
        self.memory.generated_at = self._now()
        try:
            write_memory(self.store_path, self.memory)
        except OSError as e:
            logger.error(f"Failed to save pattern store {self.store_path}: {e}")
            raise

    @property
    def patterns(self) -> list[BugPattern]:
        """All patterns, in insertion order."""
        return self.memory.patterns

    @property
    def last_scanned_sha(self) -> str | None:
        """SHA of the newest commit already mined, if any."""
        return self.memory.last_scanned_sha

    def query(self, language: str) -> list[BugPattern]:
        """Patterns for a language, plus wildcard-language patterns.

        Args:
            language: Language tag of the document being scanned

        Returns:
            Matching patterns in insertion order
        """
        return [
            p
            for p in self.memory.patterns
            if p.language == language or p.language == WILDCARD_LANGUAGE
        ]

    def get_pattern(self, pattern_id: str) -> BugPattern | None:
        """Look up a pattern by ID."""
        for pattern in self.memory.patterns:
            if pattern.id == pattern_id:
                return pattern
        return None

    def merge(self, new_patterns: Iterable[BugPattern]) -> None:
        """Merge extracted patterns into the repository and save.

        A pattern whose ``(regex, category)`` already exists adds its
        occurrence count and commits to the existing entry, and the risk base
        becomes the rounded mean of the two values (not weighted by
        occurrences). Unknown patterns are inserted.

        Args:
            new_patterns: Patterns to merge
        """
        added = 0
        merged = 0

        for incoming in new_patterns:
            existing = self._index.get(incoming.key)
            if existing is not None:
                existing.occurrence_count += incoming.occurrence_count
                existing.commits.extend(incoming.commits)
                existing.risk_base = round_half_up((existing.risk_base + incoming.risk_base) / 2)
                merged += 1
            else:
                stored = replace(incoming, commits=list(incoming.commits))
                self.memory.patterns.append(stored)
                self._index[stored.key] = stored
                added += 1

        logger.debug(f"Merged patterns: {added} new, {merged} existing")
        self.save()

    def bookmark(self, sha: str) -> None:
        """Record the newest commit considered and save."""
        self.memory.last_scanned_sha = sha
        self.save()

    def clear(self) -> None:
        """Remove all patterns and the bookmark, then save."""
        self.memory.patterns = []
        self.memory.last_scanned_sha = None
        self._index = {}
        self.save()

    def stats(self) -> RepositoryStats:
        """Summarize the repository contents."""
        category_counts = Counter(p.category.value for p in self.memory.patterns)
        return RepositoryStats(
            total_patterns=len(self.memory.patterns),
            total_occurrences=sum(p.occurrence_count for p in self.memory.patterns),
            category_counts=dict(category_counts),
            last_updated=self.memory.generated_at,
        )
