#!/usr/bin/env python3
"""CLI interface for mining bug patterns from git history."""

import argparse
import json
from pathlib import Path

from bug_memory.context import EngineContext
from common.env import env
from common.logger import error, progress, setup_logging, success, warning
from scan.reporters import report_stats

from .git_utils import GitError, is_git_repository
from .main import mine_commits, mine_repository
from .models import Commit


def _context(args) -> EngineContext:
    return EngineContext.for_workspace(
        Path(args.repo),
        store_path=Path(args.store) if args.store else None,
    )


def _load_commits_json(path: Path) -> list[Commit]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("commits", [])
    return [Commit.from_dict(item) for item in data]


def cmd_learn(args):
    """Mine bug-fix commits into the pattern store.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    repo = Path(args.repo)
    context = _context(args)

    if args.commits_json:
        commits_path = Path(args.commits_json)
        try:
            commits = _load_commits_json(commits_path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            error(f"Could not read commits from {commits_path}: {e}")
            return 1

        progress(f"Mining {len(commits)} commits from {commits_path}...")
        summary = mine_commits(context, commits)
    else:
        if not is_git_repository(repo):
            error(f"{repo} is not a git repository")
            return 1

        progress(f"Mining up to {args.max_commits} commits in {repo}...")
        try:
            summary = mine_repository(context, repo, max_commits=args.max_commits, full=args.full)
        except GitError as e:
            error(f"git failed: {e}")
            return 1

    for sha in summary.skipped_commits:
        warning(f"Skipped unreadable commit {sha[:7]}")

    success(
        f"Found {summary.patterns_extracted} bug patterns from "
        f"{summary.bug_commits} bug-fix commits ({summary.commits_seen} commits read)"
    )
    progress(f"Patterns saved to {context.repository.store_path}")
    return 0


def cmd_stats(args):
    """Show what the pattern store contains.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (always 0)
    """
    repository = _context(args).repository
    report_stats(repository.stats(), repository, top=args.top)
    return 0


def cmd_clear(args):
    """Delete all patterns and the mining bookmark.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    repository = _context(args).repository
    try:
        repository.clear()
    except OSError as e:
        error(f"Could not write {repository.store_path}: {e}")
        return 1

    success(f"Cleared {repository.store_path}")
    return 0


def _add_store_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        type=str,
        default=".",
        help="Repository root (default: current directory)",
    )
    parser.add_argument(
        "--store",
        type=str,
        help="Pattern store file (default: <repo>/.bug_memory/bug_memory.json)",
    )


def main():
    """Main entry point for the CLI."""
    setup_logging(level="INFO")

    parser = argparse.ArgumentParser(description="Mine bug-fix idioms from git history")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Learn command
    learn_parser = subparsers.add_parser("learn", help="Mine bug-fix commits into the store")
    _add_store_arguments(learn_parser)
    learn_parser.add_argument(
        "--max-commits",
        type=int,
        default=env.max_commits(),
        help="Number of recent commits to read (default: BUG_MEMORY_MAX_COMMITS or 100)",
    )
    learn_parser.add_argument(
        "--full",
        action="store_true",
        help="Rebuild the store from scratch (default: continue from last mined commit)",
    )
    learn_parser.add_argument(
        "--commits-json",
        type=str,
        help="Read commits with patches from a JSON file instead of git",
    )
    learn_parser.set_defaults(func=cmd_learn)

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show pattern store statistics")
    _add_store_arguments(stats_parser)
    stats_parser.add_argument("--top", type=int, default=5, help="Patterns to list")
    stats_parser.set_defaults(func=cmd_stats)

    # Clear command
    clear_parser = subparsers.add_parser("clear", help="Delete all mined patterns")
    _add_store_arguments(clear_parser)
    clear_parser.set_defaults(func=cmd_clear)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    exit(main())
