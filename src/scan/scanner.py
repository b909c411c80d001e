"""Match document lines against mined bug patterns."""

import re
from collections.abc import Sequence
from pathlib import Path

from bug_memory.models import BugCategory, BugPattern, ScanResult
from bug_memory.store import PatternRepository
from common.logger import get_logger
from mining.languages import detect_language

from .risk_scorer import RiskScorer, file_basename

logger = get_logger(__name__)

REASON_TEMPLATES: dict[BugCategory, str] = {
    BugCategory.NULL_CHECK_MISSING: "Missing null/undefined check",
    BugCategory.OFF_BY_ONE_LOOP: "Off-by-one error in loop boundary",
    BugCategory.MISSING_AWAIT: "Missing await keyword for async operation",
    BugCategory.UNDEFINED_ACCESS: "Unsafe array/object access",
    BugCategory.RACE_CONDITION: "Potential race condition",
    BugCategory.MEMORY_LEAK: "Possible memory leak",
    BugCategory.TYPE_ERROR: "Type mismatch error",
    BugCategory.LOGIC_ERROR: "Logic error",
    BugCategory.LOOSE_EQUALITY: "Loose equality comparison",
    BugCategory.MISSING_ERROR_HANDLING: "Unhandled error from risky call",
    BugCategory.UNHANDLED_PROMISE: "Promise rejection not handled",
    BugCategory.VAR_SCOPING: "Function-scoped var declaration",
    BugCategory.OTHER: "Suspicious pattern",
}


class LineScanner:
    """Scans lines against a repository's patterns.

    Holds no state besides the repository and scorer; rebuild freely.
    """

    def __init__(self, repository: PatternRepository, scorer: RiskScorer | None = None):
        """Initialize the scanner.

        Args:
            repository: Repository providing patterns
            scorer: Risk scorer (default: RiskScorer())
        """
        self.repository = repository
        self.scorer = scorer or RiskScorer()

    def scan_line(
        self, line: str, line_number: int, language: str, file_path: str
    ) -> list[ScanResult]:
        """Scan a single line.

        A pattern whose regex cannot be compiled or run is logged and skipped;
        the other patterns still run.

        Args:
            line: Line text
            line_number: 0-based line number
            language: Language tag of the document
            file_path: Path of the document

        Returns:
            One ScanResult per matching pattern, in pattern order
        """
        results = []
        patterns = self.repository.query(language)

        if line_number == 0:
            logger.debug(f"Scanning {file_path} with {len(patterns)} patterns for {language}")

        for pattern in patterns:
            try:
                matched = re.search(pattern.regex, line, re.IGNORECASE)
            except (re.error, OverflowError, TypeError, RecursionError) as e:
                logger.warning(f"Skipping pattern {pattern.id}, invalid regex {pattern.regex!r}: {e}")
                continue

            if matched:
                results.append(
                    ScanResult(
                        line_number=line_number,
                        risk_score=self.scorer.score(pattern, file_path, self.repository),
                        pattern_id=pattern.id,
                        commit_shas=pattern.commit_shas,
                        short_reason=self.generate_reason(pattern),
                        category=pattern.category,
                    )
                )

        return results

    def scan_lines(
        self,
        lines: Sequence[str],
        start_line_number: int,
        language: str,
        file_path: str,
    ) -> list[ScanResult]:
        """Scan consecutive lines, results in line order.

        Args:
            lines: Line texts
            start_line_number: 0-based number of the first line
            language: Language tag of the document
            file_path: Path of the document

        Returns:
            Concatenated per-line results
        """
        results = []
        for offset, line in enumerate(lines):
            results.extend(self.scan_line(line, start_line_number + offset, language, file_path))
        return results

    def scan_file(self, file_path: Path, language: str | None = None) -> list[ScanResult]:
        """Scan a whole file from disk.

        Args:
            file_path: File to scan
            language: Language tag (default: detected from the extension)

        Returns:
            Results for every line
        """
        lines = file_path.read_text(encoding="utf-8").split("\n")
        language = language or detect_language(file_path.name)
        return self.scan_lines(lines, 0, language, str(file_path))

    def generate_reason(self, pattern: BugPattern) -> str:
        """Short human-readable explanation of a match."""
        reason = REASON_TEMPLATES.get(pattern.category, REASON_TEMPLATES[BugCategory.OTHER])

        if not pattern.commits:
            return reason
        if pattern.occurrence_count > 1:
            return f"{reason} (found {pattern.occurrence_count}x in history)"
        return f"{reason} in {file_basename(pattern.commits[0].file) or pattern.commits[0].file}"

    def get_pattern_details(self, pattern_id: str) -> BugPattern | None:
        """Look up the pattern behind a ScanResult."""
        return self.repository.get_pattern(pattern_id)
