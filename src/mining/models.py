"""Commit objects handed to the miner by a commit source."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommitAuthor:
    """Author of a commit."""

    name: str
    date: str  # ISO timestamp as reported by the source


@dataclass
class CommitFile:
    """One file touched by a commit."""

    filename: str
    patch: str | None = None  # Unified diff hunks, None for binary/too large


@dataclass
class Commit:
    """A commit with (optionally) its per-file diffs."""

    sha: str
    message: str
    author: CommitAuthor
    files: list[CommitFile] | None = None

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n")[0]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Commit":
        """Build a Commit from a plain dict.

        Accepts the flat shape ``{sha, message, author, files}`` as well as
        the hosted-API shape where message and author sit under ``commit``.

        Args:
            data: Commit dictionary

        Returns:
            Commit instance

        Raises:
            KeyError: If ``sha`` is missing
        """
        nested = data.get("commit") or {}
        author = data.get("author") or nested.get("author") or {}
        message = data.get("message", nested.get("message", ""))

        files = data.get("files")
        return cls(
            sha=data["sha"],
            message=message or "",
            author=CommitAuthor(
                name=author.get("name", "Unknown"),
                date=author.get("date", ""),
            ),
            files=(
                [CommitFile(filename=f["filename"], patch=f.get("patch")) for f in files]
                if files is not None
                else None
            ),
        )


@dataclass
class CandidatePair:
    """A removed line followed directly by an added line in a diff hunk."""

    buggy_line: str
    fixed_line: str
    line_number: int


@dataclass
class MiningSummary:
    """Outcome of one mining run."""

    commits_seen: int
    bug_commits: int
    patterns_extracted: int
    head_sha: str | None
    skipped_commits: list[str] = field(default_factory=list)
