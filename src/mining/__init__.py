"""Mine bug-fix idioms from git history."""

from .detectors import DETECTORS, DetectorMatch, classify
from .diff_analyzer import analyze_patch
from .extractor import PatternExtractor, filter_bug_commits, is_bug_commit
from .languages import detect_language
from .main import mine_commits, mine_repository
from .models import CandidatePair, Commit, CommitAuthor, CommitFile, MiningSummary

__all__ = [
    "DETECTORS",
    "CandidatePair",
    "Commit",
    "CommitAuthor",
    "CommitFile",
    "DetectorMatch",
    "MiningSummary",
    "PatternExtractor",
    "analyze_patch",
    "classify",
    "detect_language",
    "filter_bug_commits",
    "is_bug_commit",
    "mine_commits",
    "mine_repository",
]
