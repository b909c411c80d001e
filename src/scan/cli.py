#!/usr/bin/env python3
"""CLI interface for scanning files against mined bug patterns."""

import argparse
from pathlib import Path

from bug_memory.context import EngineContext
from common.env import env
from common.logger import error, progress, setup_logging

from .reporters import FileScan, ScanReporter, visible_results
from .risk_scorer import Sensitivity
from .scanner import LineScanner


def cmd_scan(args):
    """Scan files and report risky lines.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 when nothing is flagged, 1 for findings or errors)
    """
    context = EngineContext.for_workspace(
        Path(args.repo),
        store_path=Path(args.store) if args.store else None,
    )
    repository = context.repository

    if not repository.patterns:
        progress(f"No patterns in {repository.store_path}; run 'bug-mine learn' first")

    scanner = LineScanner(repository)
    scans = []
    for name in args.files:
        path = Path(name)
        try:
            scans.append(FileScan(file_path=str(path), results=scanner.scan_file(path)))
        except (OSError, UnicodeDecodeError) as e:
            error(f"Could not read {path}: {e}")
            return 1

    reporter = ScanReporter(repository, sensitivity=args.sensitivity)

    if args.format == "json":
        output = reporter.report_json(scans)
        if args.output:
            output_path = Path(args.output)
            output_path.write_text(output, encoding="utf-8")
            progress(f"Scan results written to {output_path}")
        else:
            print(output)
        return 1 if any(visible_results(s.results, args.sensitivity) for s in scans) else 0

    return reporter.report_console(scans)


def main():
    """Main entry point for the CLI."""
    setup_logging(level="INFO")

    parser = argparse.ArgumentParser(description="Flag lines that look like past bugs")
    parser.add_argument("files", nargs="+", help="Files to scan")
    parser.add_argument(
        "--repo",
        type=str,
        default=".",
        help="Repository root holding the pattern store (default: current directory)",
    )
    parser.add_argument(
        "--store",
        type=str,
        help="Pattern store file (default: <repo>/.bug_memory/bug_memory.json)",
    )
    parser.add_argument(
        "--sensitivity",
        choices=[s.value for s in Sensitivity],
        default=env.sensitivity(),
        help="low: risk 7+, medium: 5+, high: 3+ (default: BUG_MEMORY_SENSITIVITY or medium)",
    )
    parser.add_argument(
        "--format",
        choices=["console", "json"],
        default="console",
        help="Output format",
    )
    parser.add_argument("--output", type=str, help="Write JSON results to file")
    parser.set_defaults(func=cmd_scan)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    exit(main())
