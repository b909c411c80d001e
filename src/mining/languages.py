"""Map file names to language tags."""

from pathlib import PurePath

from common.constants import WILDCARD_LANGUAGE

EXTENSION_LANGUAGES: dict[str, str] = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "go": "go",
    "rs": "rust",
    "rb": "ruby",
    "php": "php",
}

# Languages with an ``await`` keyword for the missing-await detector
ASYNC_LANGUAGES = frozenset({"typescript", "javascript", "python"})


def detect_language(filename: str) -> str:
    """Detect a language tag from a file name's extension.

    Args:
        filename: File name or path (either separator)

    Returns:
        Language tag, or ``unknown`` for unmapped extensions
    """
    name = PurePath(filename.replace("\\", "/")).name
    if "." not in name:
        return WILDCARD_LANGUAGE
    extension = name.rsplit(".", 1)[1].lower()
    return EXTENSION_LANGUAGES.get(extension, WILDCARD_LANGUAGE)
