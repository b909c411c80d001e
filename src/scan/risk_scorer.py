"""Risk scoring for pattern matches."""

import math
import re
from enum import Enum

from bug_memory.models import BugPattern
from bug_memory.store import PatternRepository
from common.rounding import clamp, round_half_up

MIN_SCORE = 1
MAX_SCORE = 10

# Regexes this short that still use a bare word class match almost anything
GENERIC_TOKEN = r"\w+"
GENERIC_REGEX_LENGTH = 30


class Sensitivity(str, Enum):
    """How much the caller wants to see."""

    LOW = "low"  # score >= 7
    MEDIUM = "medium"  # score >= 5
    HIGH = "high"  # score >= 3


SENSITIVITY_THRESHOLDS: dict[Sensitivity, int] = {
    Sensitivity.LOW: 7,
    Sensitivity.MEDIUM: 5,
    Sensitivity.HIGH: 3,
}


def file_basename(path: str) -> str:
    """Last path component, accepting both / and \\ separators."""
    return re.split(r"[\\/]", path)[-1]


def category_offset(category: str) -> int:
    """Stable -1/0/+1 nudge derived from the category name.

    Keeps patterns of different categories from all landing on the same
    score.
    """
    return sum(ord(ch) for ch in category) % 3 - 1


def adjust_for_sensitivity(score: int, sensitivity: Sensitivity | str) -> int:
    """Suppress scores below the sensitivity threshold.

    Args:
        score: Risk score from RiskScorer.score
        sensitivity: ``low``, ``medium`` or ``high``

    Returns:
        The score unchanged when visible, 0 when suppressed. Unknown levels
        pass the score through.
    """
    try:
        threshold = SENSITIVITY_THRESHOLDS[Sensitivity(sensitivity)]
    except ValueError:
        return score
    return score if score >= threshold else 0


def risk_level(score: int) -> str:
    """Bucket a score into ``high`` (8+), ``medium`` (5+) or ``low``."""
    if score >= 8:
        return "high"
    if score >= 5:
        return "medium"
    return "low"


class RiskScorer:
    """Turns a pattern match into a 1-10 risk score."""

    def score(self, pattern: BugPattern, file_path: str, repository: PatternRepository) -> int:
        """Calculate the risk score for a pattern matched in a file.

        base risk
        + occurrence bonus, log2(count + 1) capped at 2
        + file history bonus, up to 1.5 for files with past fixes
        - 0.5 for short regexes built on a bare word class
        then rounded, clamped to 1-10, nudged by the category offset and
        clamped again.

        Args:
            pattern: The matching pattern
            file_path: Path of the scanned file
            repository: Repository the pattern came from

        Returns:
            Integer score in [1, 10]
        """
        total = float(pattern.risk_base)
        total += min(2.0, math.log2(pattern.occurrence_count + 1))
        total += self.file_history_bonus(file_path, repository)
        if GENERIC_TOKEN in pattern.regex and len(pattern.regex) < GENERIC_REGEX_LENGTH:
            total -= 0.5

        raw_score = clamp(round_half_up(total), MIN_SCORE, MAX_SCORE)
        return clamp(raw_score + category_offset(pattern.category.value), MIN_SCORE, MAX_SCORE)

    def file_history_bonus(self, file_path: str, repository: PatternRepository) -> float:
        """Bonus for files that already needed fixes.

        Counts commit references, across all patterns, to files with the
        same basename.
        """
        name = file_basename(file_path)
        occurrences = sum(
            1
            for pattern in repository.patterns
            for commit in pattern.commits
            if file_basename(commit.file) == name
        )

        if occurrences >= 5:
            return 1.5
        if occurrences >= 3:
            return 1.0
        if occurrences >= 1:
            return 0.5
        return 0.0
