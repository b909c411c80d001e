"""Scan result and repository statistics reporters."""

import json
from dataclasses import dataclass

from rich.markup import escape

from bug_memory.models import RepositoryStats, ScanResult
from bug_memory.store import PatternRepository
from common.logger import get_logger

from .risk_scorer import Sensitivity, adjust_for_sensitivity, risk_level

logger = get_logger(__name__)

_LEVEL_ICONS = {
    "high": "[red]✗[/red]",
    "medium": "[yellow]⚠[/yellow]",
    "low": "ℹ",
}


@dataclass
class FileScan:
    """Scan results for one file."""

    file_path: str
    results: list[ScanResult]


def visible_results(results: list[ScanResult], sensitivity: Sensitivity | str) -> list[ScanResult]:
    """Drop results the sensitivity level suppresses."""
    return [r for r in results if adjust_for_sensitivity(r.risk_score, sensitivity) > 0]


class ScanReporter:
    """Format and display scan results."""

    def __init__(self, repository: PatternRepository, sensitivity: Sensitivity | str = "medium"):
        """Initialize the reporter.

        Args:
            repository: Repository used to look up pattern examples
            sensitivity: Visibility threshold applied before reporting
        """
        self.repository = repository
        self.sensitivity = sensitivity

    def report_console(self, scans: list[FileScan]) -> int:
        """Print visible findings to the console.

        Args:
            scans: Per-file scan results

        Returns:
            Exit code (0 when nothing is visible, 1 otherwise)
        """
        total = 0
        by_level = {"high": 0, "medium": 0, "low": 0}

        for scan in scans:
            results = visible_results(scan.results, self.sensitivity)
            if not results:
                continue

            logger.info(f"\n{escape(scan.file_path)}:")

            for result in results:
                level = risk_level(result.risk_score)
                by_level[level] += 1
                total += 1

                logger.info(
                    f"  {_LEVEL_ICONS[level]} Line [bold]{result.line_number + 1}[/bold] "
                    f"risk [bold]{result.risk_score}/10[/bold]: {escape(result.short_reason)}"
                )
                pattern = self.repository.get_pattern(result.pattern_id)
                if pattern and pattern.buggy_example and pattern.fixed_example:
                    logger.info(f"      was: {escape(pattern.buggy_example)}")
                    logger.info(f"      fix: {escape(pattern.fixed_example)}")
                if result.commit_shas:
                    shas = ", ".join(dict.fromkeys(sha[:7] for sha in result.commit_shas))
                    logger.info(f"      commits: {shas}")

        logger.info("\n" + "=" * 60)
        logger.info(
            f"Total: [bold]{total}[/bold] findings "
            f"([bold]{by_level['high']}[/bold] high, [bold]{by_level['medium']}[/bold] medium, "
            f"[bold]{by_level['low']}[/bold] low)"
        )

        return 1 if total > 0 else 0

    def report_json(self, scans: list[FileScan]) -> str:
        """Format visible findings as JSON.

        Args:
            scans: Per-file scan results

        Returns:
            JSON string; files without visible findings are omitted
        """
        data = {
            "sensitivity": str(getattr(self.sensitivity, "value", self.sensitivity)),
            "files": [
                {
                    "file": scan.file_path,
                    "results": [r.to_dict() for r in visible_results(scan.results, self.sensitivity)],
                }
                for scan in scans
                if visible_results(scan.results, self.sensitivity)
            ],
        }
        return json.dumps(data, indent=2)


def report_stats(stats: RepositoryStats, repository: PatternRepository, top: int = 5) -> None:
    """Print repository statistics and the most frequent patterns.

    Args:
        stats: Output of PatternRepository.stats()
        repository: Repository to list patterns from
        top: How many patterns to list
    """
    logger.info(f"Patterns: [bold]{stats.total_patterns}[/bold]")
    logger.info(f"Observed fixes: [bold]{stats.total_occurrences}[/bold]")
    logger.info(f"Last updated: {stats.last_updated}")
    if repository.last_scanned_sha:
        logger.info(f"Last mined commit: {repository.last_scanned_sha[:7]}")

    if stats.category_counts:
        logger.info("\nBy category:")
        for category, count in sorted(stats.category_counts.items(), key=lambda kv: (-kv[1], kv[0])):
            logger.info(f"  {category.replace('_', ' ')}: {count}")

    ranked = sorted(repository.patterns, key=lambda p: p.occurrence_count, reverse=True)
    if ranked:
        logger.info(f"\nTop {min(top, len(ranked))} patterns:")
        for pattern in ranked[:top]:
            logger.info(
                f"  - {pattern.category.value} ({pattern.language}) "
                f"x{pattern.occurrence_count}, risk {pattern.risk_base}/10: {escape(pattern.regex)}"
            )
