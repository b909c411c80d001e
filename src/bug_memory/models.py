"""Data models for mined bug patterns and scan results."""

from dataclasses import dataclass, field
from enum import Enum

from common.constants import STORE_VERSION


class BugCategory(str, Enum):
    """Closed set of bug categories. Values are part of the store format."""

    NULL_CHECK_MISSING = "null_check_missing"
    OFF_BY_ONE_LOOP = "off_by_one_loop"
    MISSING_AWAIT = "missing_await"
    UNDEFINED_ACCESS = "undefined_access"
    RACE_CONDITION = "race_condition"
    MEMORY_LEAK = "memory_leak"
    TYPE_ERROR = "type_error"
    LOGIC_ERROR = "logic_error"
    LOOSE_EQUALITY = "loose_equality"
    MISSING_ERROR_HANDLING = "missing_error_handling"
    UNHANDLED_PROMISE = "unhandled_promise"
    VAR_SCOPING = "var_scoping"
    OTHER = "other"


@dataclass
class CommitReference:
    """One observed fix of a pattern."""

    sha: str
    file: str
    line: int
    message: str  # First line of the commit message


@dataclass
class BugPattern:
    """A mined single-line bug-fix idiom.

    ``(regex, category)`` is the identity key: two patterns sharing it are
    the same pattern and get merged by the repository.
    """

    id: str
    language: str
    regex: str
    category: BugCategory
    risk_base: int
    commits: list[CommitReference] = field(default_factory=list)
    occurrence_count: int = 1
    buggy_example: str | None = None
    fixed_example: str | None = None

    @property
    def key(self) -> tuple[str, BugCategory]:
        """Identity key used for de-duplication."""
        return (self.regex, self.category)

    @property
    def commit_shas(self) -> list[str]:
        """SHAs of every recorded fix, in order, duplicates kept."""
        return [c.sha for c in self.commits]


@dataclass
class BugMemory:
    """The persisted pattern collection."""

    generated_at: str
    patterns: list[BugPattern] = field(default_factory=list)
    last_scanned_sha: str | None = None
    version: int = STORE_VERSION


@dataclass
class ScanResult:
    """A pattern match on one line. Never persisted."""

    line_number: int  # 0-based
    risk_score: int
    pattern_id: str
    commit_shas: list[str]
    short_reason: str
    category: BugCategory

    def to_dict(self) -> dict:
        """Render with the field names editor integrations expect."""
        return {
            "lineNumber": self.line_number,
            "riskScore": self.risk_score,
            "patternId": self.pattern_id,
            "commitShas": list(self.commit_shas),
            "shortReason": self.short_reason,
            "category": self.category.value,
        }


@dataclass
class RepositoryStats:
    """Summary numbers for a pattern repository."""

    total_patterns: int
    total_occurrences: int
    category_counts: dict[str, int]
    last_updated: str
