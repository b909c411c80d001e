"""Explicit engine state passed into mining and scanning.

There is no module-level "current repository"; callers build a context and
hand it to the operations that need it.
"""

from dataclasses import dataclass, field
from pathlib import Path

from common.env import env

from .ids import PatternIdGenerator, timestamped_pattern_id
from .store import PatternRepository


@dataclass
class EngineContext:
    """The repository a workspace mines into and scans against."""

    repository: PatternRepository
    new_pattern_id: PatternIdGenerator = field(default=timestamped_pattern_id)

    @classmethod
    def for_workspace(
        cls,
        workspace: Path,
        store_path: Path | None = None,
        new_pattern_id: PatternIdGenerator | None = None,
    ) -> "EngineContext":
        """Open the store belonging to a workspace.

        Args:
            workspace: Repository root
            store_path: Explicit store file (default: from the environment)
            new_pattern_id: Pattern ID generator (default: timestamped)

        Returns:
            EngineContext with a loaded repository
        """
        repository = PatternRepository(store_path or env.store_path(workspace))
        return cls(
            repository=repository,
            new_pattern_id=new_pattern_id or timestamped_pattern_id,
        )
