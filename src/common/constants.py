"""Shared constants for the bug-memory application.

For environment-based configuration (store location, sensitivity, etc.), use
the env module:
    from common.env import env
    store = env.store_path(Path("."))
"""

# Durable store
STORE_FILE_NAME = "bug_memory.json"
STORE_VERSION = 1

# Patterns tagged with this language apply to every scan
WILDCARD_LANGUAGE = "unknown"

# Commit message words that mark a commit as a likely bug fix
BUG_KEYWORDS: tuple[str, ...] = (
    "fix",
    "bug",
    "error",
    "crash",
    "hotfix",
    "issue",
    "patch",
)
