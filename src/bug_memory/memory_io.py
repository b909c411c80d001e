"""Pattern store file I/O utilities."""

import json
from datetime import datetime, timezone
from pathlib import Path

from .models import BugCategory, BugMemory, BugPattern, CommitReference


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format a moment as ISO-8601 UTC with milliseconds, e.g. 2026-01-02T03:04:05.678Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def empty_memory(generated_at: str | None = None) -> BugMemory:
    """Create the default store: version 1, no patterns, no bookmark."""
    return BugMemory(generated_at=generated_at or utc_timestamp())


def pattern_to_dict(pattern: BugPattern) -> dict:
    """Convert a BugPattern to its store representation."""
    data = {
        "id": pattern.id,
        "language": pattern.language,
        "regex": pattern.regex,
        "category": pattern.category.value,
        "risk_base": pattern.risk_base,
        "commits": [
            {"sha": c.sha, "file": c.file, "line": c.line, "message": c.message}
            for c in pattern.commits
        ],
        "occurrence_count": pattern.occurrence_count,
    }
    if pattern.buggy_example is not None:
        data["buggyExample"] = pattern.buggy_example
    if pattern.fixed_example is not None:
        data["fixedExample"] = pattern.fixed_example
    return data


def pattern_from_dict(data: dict) -> BugPattern:
    """Parse a BugPattern from its store representation.

    Raises:
        KeyError: If a required field is missing
        TypeError: If the regex is not a string
        ValueError: If the category is not a known BugCategory
    """
    if not isinstance(data["regex"], str):
        raise TypeError(f"Pattern {data.get('id')!r} regex must be a string")

    return BugPattern(
        id=data["id"],
        language=data["language"],
        regex=data["regex"],
        category=BugCategory(data["category"]),
        risk_base=int(data["risk_base"]),
        commits=[
            CommitReference(
                sha=c["sha"],
                file=c["file"],
                line=int(c["line"]),
                message=c.get("message", ""),
            )
            for c in data.get("commits", [])
        ],
        occurrence_count=int(data.get("occurrence_count", 1)),
        buggy_example=data.get("buggyExample"),
        fixed_example=data.get("fixedExample"),
    )


def memory_to_dict(memory: BugMemory) -> dict:
    """Convert a BugMemory to the store document. An unset bookmark is omitted."""
    data: dict = {
        "version": memory.version,
        "generated_at": memory.generated_at,
    }
    if memory.last_scanned_sha is not None:
        data["last_scanned_sha"] = memory.last_scanned_sha
    data["patterns"] = [pattern_to_dict(p) for p in memory.patterns]
    return data


def memory_from_dict(data: dict) -> BugMemory:
    """Parse a store document.

    Raises:
        KeyError, TypeError, ValueError: If the document is malformed
    """
    if not isinstance(data, dict):
        raise TypeError(f"Store document must be an object, got {type(data).__name__}")

    return BugMemory(
        version=int(data.get("version", 1)),
        generated_at=data.get("generated_at") or utc_timestamp(),
        last_scanned_sha=data.get("last_scanned_sha"),
        patterns=[pattern_from_dict(p) for p in data.get("patterns", [])],
    )


def write_memory(file_path: Path, memory: BugMemory) -> None:
    """Write the store with pretty formatting, creating parent directories.

    Raises:
        OSError: If the file cannot be written
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(memory_to_dict(memory), f, indent=2, ensure_ascii=False)


def read_memory(file_path: Path) -> BugMemory:
    """Read and parse a store file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        KeyError, TypeError, ValueError: If the document is malformed
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Pattern store not found: {file_path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    return memory_from_dict(data)
