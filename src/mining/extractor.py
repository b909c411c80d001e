"""Extract bug patterns from bug-fix commits."""

from collections.abc import Iterable

from bug_memory.ids import PatternIdGenerator, timestamped_pattern_id
from bug_memory.models import BugCategory, BugPattern, CommitReference
from common.constants import BUG_KEYWORDS
from common.logger import get_logger

from .detectors import classify
from .diff_analyzer import analyze_patch
from .languages import detect_language
from .models import CandidatePair, Commit, CommitFile

logger = get_logger(__name__)

_COMMENT_PREFIXES = ("//", "#")


def is_bug_commit(commit: Commit) -> bool:
    """Check whether a commit message looks like a bug fix."""
    message = commit.message.lower()
    return any(keyword in message for keyword in BUG_KEYWORDS)


def filter_bug_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Keep commits whose message mentions a fix-related keyword."""
    return [c for c in commits if is_bug_commit(c)]


def _is_comment_change(pair: CandidatePair) -> bool:
    return any(
        pair.buggy_line.startswith(prefix) and pair.fixed_line.startswith(prefix)
        for prefix in _COMMENT_PREFIXES
    )


class PatternExtractor:
    """Turn commit diffs into BugPatterns."""

    def __init__(self, new_pattern_id: PatternIdGenerator = timestamped_pattern_id):
        """Initialize the extractor.

        Args:
            new_pattern_id: Generator for fresh pattern IDs
        """
        self.new_pattern_id = new_pattern_id

    def extract_patterns(self, commits: Iterable[Commit]) -> list[BugPattern]:
        """Extract patterns from commits, folding duplicates within the batch.

        Duplicates (same regex and category) count one more occurrence and
        contribute their commit reference; the first pattern's risk base and
        examples are kept.

        Args:
            commits: Commits with file patches

        Returns:
            Distinct patterns in first-seen order
        """
        by_key: dict[tuple[str, BugCategory], BugPattern] = {}

        for commit in commits:
            if not commit.files:
                continue

            logger.debug(f"Processing commit {commit.sha[:7]} with {len(commit.files)} files")

            for file in commit.files:
                for pattern in self.extract_from_file(file, commit):
                    existing = by_key.get(pattern.key)
                    if existing is not None:
                        existing.occurrence_count += 1
                        existing.commits.extend(pattern.commits)
                    else:
                        by_key[pattern.key] = pattern

        logger.info(f"Extracted [bold]{len(by_key)}[/bold] patterns")
        return list(by_key.values())

    def extract_from_file(self, file: CommitFile, commit: Commit) -> list[BugPattern]:
        """Extract patterns from one file's patch.

        Args:
            file: Changed file with its patch
            commit: Commit the change belongs to

        Returns:
            One pattern per classified candidate pair
        """
        if not file.patch:
            return []

        language = detect_language(file.filename)
        patterns = []

        for pair in analyze_patch(file.patch):
            pattern = self.build_pattern(pair, language, file.filename, commit)
            if pattern is not None:
                patterns.append(pattern)

        return patterns

    def build_pattern(
        self,
        pair: CandidatePair,
        language: str,
        filename: str,
        commit: Commit,
    ) -> BugPattern | None:
        """Classify a candidate pair into a new BugPattern.

        Blank lines and comment-only edits are ignored.

        Returns:
            BugPattern, or None if no detector fires
        """
        if not pair.buggy_line.strip() or not pair.fixed_line.strip():
            return None
        if _is_comment_change(pair):
            return None

        match = classify(pair.buggy_line, pair.fixed_line, language)
        if match is None:
            return None

        return BugPattern(
            id=self.new_pattern_id(),
            language=language,
            regex=match.regex,
            category=match.category,
            risk_base=match.risk_base,
            commits=[
                CommitReference(
                    sha=commit.sha,
                    file=filename,
                    line=pair.line_number,
                    message=commit.subject,
                )
            ],
            occurrence_count=1,
            buggy_example=pair.buggy_line,
            fixed_example=pair.fixed_line,
        )
