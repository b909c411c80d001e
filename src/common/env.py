"""Environment configuration interface for bug-memory.

All environment variable access goes through this module. Values can also be
placed in a ``.env`` file in the working directory.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from common.constants import STORE_FILE_NAME

# Load environment variables from .env file if it exists
load_dotenv()


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def store_dir() -> str:
        """Get the name of the per-workspace pattern store directory.

        Returns:
            Directory name, defaults to '.bug_memory'
        """
        return os.getenv("BUG_MEMORY_DIR", ".bug_memory")

    @staticmethod
    def store_path(workspace: Path) -> Path:
        """Get the pattern store file for a workspace.

        BUG_MEMORY_PATH overrides the location entirely.

        Args:
            workspace: Root of the repository being mined or scanned

        Returns:
            Path to the JSON pattern store
        """
        override = os.getenv("BUG_MEMORY_PATH")
        if override:
            return Path(override)
        return workspace / Environment.store_dir() / STORE_FILE_NAME

    @staticmethod
    def sensitivity() -> str:
        """Get the default scan sensitivity.

        Returns:
            One of 'low', 'medium', 'high'; defaults to 'medium'
        """
        return os.getenv("BUG_MEMORY_SENSITIVITY", "medium").lower()

    @staticmethod
    def max_commits() -> int:
        """Get how many commits a mining run looks at.

        Returns:
            Commit limit, defaults to 100
        """
        return int(os.getenv("BUG_MEMORY_MAX_COMMITS", "100"))

    @staticmethod
    def log_level(default: str = "INFO") -> str:
        """Get the logging level.

        Args:
            default: Level used when LOG_LEVEL is unset

        Returns:
            Upper-cased level name
        """
        return os.getenv("LOG_LEVEL", default).upper()


# Singleton instance for convenient access
env = Environment()
