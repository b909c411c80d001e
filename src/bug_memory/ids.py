"""Pattern ID generation.

Extraction takes any zero-argument callable returning a fresh ID, so tests
can swap the random default for a deterministic counter.
"""

import itertools
import time
import uuid
from collections.abc import Callable

PatternIdGenerator = Callable[[], str]


def timestamped_pattern_id() -> str:
    """Generate ``pattern_<epoch millis>_<9 random hex chars>``."""
    return f"pattern_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class CounterIdGenerator:
    """Deterministic IDs: ``pattern_1``, ``pattern_2``, ..."""

    def __init__(self, prefix: str = "pattern", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}_{next(self._counter)}"
