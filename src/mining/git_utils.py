"""Read commits and their diffs from a local git repository."""

import re
import subprocess
from collections.abc import Iterable
from pathlib import Path

from common.logger import get_logger

from .models import Commit, CommitAuthor, CommitFile

logger = get_logger(__name__)

# ASCII unit separator between log fields; never appears in subjects
_FIELD_SEP = "\x1f"
_LOG_FORMAT = "--pretty=format:%H%x1f%s%x1f%an%x1f%aI"

_DIFF_HEADER = re.compile(r"^diff --git a/(.+?) b/(.+?)$", re.MULTILINE)
_FILE_SECTION = re.compile(r"(?=^diff --git )", re.MULTILINE)


class GitError(RuntimeError):
    """Raised when a git command fails."""


def _run_git(args: Iterable[str], *, cwd: Path) -> str:
    """Run a git sub-command and return its stdout.

    Raises:
        GitError: If git exits non-zero or is not installed
    """
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e

    if completed.returncode != 0:
        raise GitError(completed.stderr.strip() or "git command failed")
    return completed.stdout


def is_git_repository(repo_root: Path) -> bool:
    """Check whether a directory is inside a git work tree."""
    try:
        _run_git(["rev-parse", "--git-dir"], cwd=repo_root)
        return True
    except GitError:
        return False


def get_head_sha(repo_root: Path) -> str:
    """
    Get current HEAD commit hash.

    Raises:
        GitError: If git command fails (e.g. repository has no commits)
    """
    return _run_git(["rev-parse", "HEAD"], cwd=repo_root).strip()


def _parse_log_line(line: str) -> Commit | None:
    parts = line.split(_FIELD_SEP)
    if len(parts) != 4 or not parts[0]:
        return None
    sha, subject, author, date = parts
    return Commit(
        sha=sha,
        message=subject,
        author=CommitAuthor(name=author or "Unknown", date=date),
    )


def list_commits(
    repo_root: Path,
    max_count: int = 100,
    since_sha: str | None = None,
) -> list[Commit]:
    """
    List commits newest first, without diffs.

    Args:
        repo_root: Path to git repository root
        max_count: Maximum number of commits to return
        since_sha: Only commits after this one (``since_sha..HEAD``)

    Returns:
        Commits with subject line and author; ``files`` is None

    Raises:
        GitError: If git command fails (e.g. unknown since_sha)
    """
    args = ["log", f"-n{max_count}", _LOG_FORMAT]
    if since_sha:
        args.append(f"{since_sha}..HEAD")

    output = _run_git(args, cwd=repo_root)

    commits = []
    for line in output.splitlines():
        commit = _parse_log_line(line)
        if commit is not None:
            commits.append(commit)
    return commits


def parse_diff_output(diff_output: str) -> list[CommitFile]:
    """
    Split ``git show``/``git diff`` output into per-file patches.

    Each patch starts at the file's first ``@@`` hunk header. Sections
    without hunks (binary files, pure renames, mode changes) are skipped.

    Args:
        diff_output: Raw multi-file diff text

    Returns:
        One CommitFile per file with hunks, in diff order
    """
    files = []

    for section in _FILE_SECTION.split(diff_output):
        header = _DIFF_HEADER.search(section)
        if not header:
            continue

        hunk_start = section.find("\n@@")
        if hunk_start < 0:
            continue

        files.append(CommitFile(filename=header.group(2).strip(), patch=section[hunk_start + 1 :]))

    return files


def get_commit_details(repo_root: Path, sha: str) -> Commit:
    """
    Fetch a commit's full message, author and per-file patches.

    Args:
        repo_root: Path to git repository root
        sha: Commit to read

    Returns:
        Commit with ``files`` populated

    Raises:
        GitError: If git command fails
    """
    header = _run_git(["show", "-s", "--format=%an%x1f%aI%x1f%B", sha], cwd=repo_root)
    author, date, message = (header.split(_FIELD_SEP, 2) + ["", "", ""])[:3]

    diff_output = _run_git(["show", "--unified=3", "--format=", "--no-color", sha], cwd=repo_root)

    files = parse_diff_output(diff_output)
    logger.debug(f"Commit {sha[:7]}: {len(files)} files with hunks")

    return Commit(
        sha=sha,
        message=message.strip(),
        author=CommitAuthor(name=author.strip() or "Unknown", date=date.strip()),
        files=files,
    )
