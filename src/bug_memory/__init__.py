"""Mined bug patterns and their persistent repository."""

from .context import EngineContext
from .ids import CounterIdGenerator, timestamped_pattern_id
from .models import (
    BugCategory,
    BugMemory,
    BugPattern,
    CommitReference,
    RepositoryStats,
    ScanResult,
)
from .store import PatternRepository

__all__ = [
    "BugCategory",
    "BugMemory",
    "BugPattern",
    "CommitReference",
    "CounterIdGenerator",
    "EngineContext",
    "PatternRepository",
    "RepositoryStats",
    "ScanResult",
    "timestamped_pattern_id",
]
