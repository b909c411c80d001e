"""Extract candidate bug/fix line pairs from unified diff hunks.

Only single-line replacements produce a pair: the last line of a block of
removals followed directly by an added line. Reorders, pure insertions and
pure deletions are ignored.
"""

import re

from .models import CandidatePair

_HUNK_START = re.compile(r"@@ -(\d+)")


def analyze_patch(patch: str | None) -> list[CandidatePair]:
    """Walk one file's patch and collect (buggy, fixed, line) candidates.

    The line cursor starts at each hunk's old-file start line. Removed lines
    do not move it; added and context lines do; ``\\ No newline`` markers
    do not.

    Args:
        patch: Unified diff text for a single file, possibly None

    Returns:
        Candidate pairs in patch order
    """
    if not patch:
        return []

    pairs: list[CandidatePair] = []
    line_number = 0
    removed: list[str] = []

    for line in patch.split("\n"):
        if line.startswith("@@"):
            match = _HUNK_START.match(line)
            if match:
                line_number = int(match.group(1))
            continue

        if line.startswith("-") and not line.startswith("---"):
            removed.append(line[1:].strip())
        elif line.startswith("+") and not line.startswith("+++"):
            if removed:
                pairs.append(
                    CandidatePair(
                        buggy_line=removed[-1],
                        fixed_line=line[1:].strip(),
                        line_number=line_number,
                    )
                )
            removed = []
            line_number += 1
        else:
            removed = []
            if not line.startswith("\\"):
                line_number += 1

    return pairs
