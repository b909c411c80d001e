"""Mine a repository's history into the pattern store.

Two modes, mirroring full and incremental extraction:
- full: clear the store and mine the newest ``max_commits`` commits
- incremental: mine only commits after the store's bookmark, falling back
  to full when there is no usable bookmark
"""

from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from bug_memory.context import EngineContext
from common.logger import get_logger

from .extractor import PatternExtractor, filter_bug_commits
from .git_utils import GitError, get_commit_details, list_commits
from .models import Commit, MiningSummary

logger = get_logger(__name__)


def mine_commits(
    context: EngineContext,
    commits: Sequence[Commit],
    head_sha: str | None = None,
) -> MiningSummary:
    """
    Extract patterns from commits that already carry their diffs.

    Args:
        context: Engine context holding the repository
        commits: Commits newest first, with ``files`` populated
        head_sha: Commit to bookmark (default: first commit)

    Returns:
        MiningSummary for the run
    """
    bug_commits = filter_bug_commits(commits)
    logger.info(f"Found {len(bug_commits)} bug-fix commits out of {len(commits)}")

    extractor = PatternExtractor(context.new_pattern_id)
    patterns = extractor.extract_patterns(bug_commits)
    context.repository.merge(patterns)

    head_sha = head_sha or (commits[0].sha if commits else None)
    if head_sha:
        context.repository.bookmark(head_sha)

    return MiningSummary(
        commits_seen=len(commits),
        bug_commits=len(bug_commits),
        patterns_extracted=len(patterns),
        head_sha=head_sha,
    )


def _fetch_details(repo_root: Path, commits: Sequence[Commit]) -> tuple[list[Commit], list[str]]:
    detailed = []
    skipped = []
    for commit in commits:
        try:
            detailed.append(get_commit_details(repo_root, commit.sha))
        except GitError as e:
            logger.warning(f"Skipping commit {commit.sha[:7]}: {e}")
            skipped.append(commit.sha)
    return detailed, skipped


def mine_repository(
    context: EngineContext,
    repo_root: Path,
    max_commits: int = 100,
    full: bool = False,
) -> MiningSummary:
    """
    Mine a local git repository into the context's repository.

    Args:
        context: Engine context holding the repository
        repo_root: Path to git repository root
        max_commits: Maximum number of commits to read
        full: Clear the store and re-mine instead of continuing from the bookmark

    Returns:
        MiningSummary for the run

    Raises:
        GitError: If the commit log cannot be read
    """
    repository = context.repository
    since_sha = None if full else repository.last_scanned_sha

    if since_sha:
        try:
            commits = list_commits(repo_root, max_count=max_commits, since_sha=since_sha)
            logger.info(f"Incremental mining: {len(commits)} new commits since {since_sha[:7]}")
        except GitError as e:
            logger.warning(f"Bookmark {since_sha[:7]} unusable ({e}), mining from scratch")
            since_sha = None

    if not since_sha:
        if repository.patterns or repository.last_scanned_sha:
            repository.clear()
        commits = list_commits(repo_root, max_count=max_commits)
        logger.info(f"Full mining: {len(commits)} commits")

    if not commits:
        logger.info("No new commits to mine")
        return MiningSummary(
            commits_seen=0,
            bug_commits=0,
            patterns_extracted=0,
            head_sha=repository.last_scanned_sha,
        )

    detailed, skipped = _fetch_details(repo_root, filter_bug_commits(commits))

    summary = mine_commits(context, detailed, head_sha=commits[0].sha)
    return replace(summary, commits_seen=len(commits), skipped_commits=skipped)
