"""Heuristic detectors that turn a (buggy, fixed) line pair into a pattern.

Each detector is a pure function ``(buggy_line, fixed_line, language)``
returning a DetectorMatch or None. ``classify`` tries them in DETECTORS order
and the first match wins, so a pair lands in exactly one category. The
order is part of the behavior: reordering changes classifications.

Generated regexes are stored and later compiled with Python's ``re`` module
(case-insensitive), so templates only use syntax ``re`` accepts, including
fixed-width lookbehind.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from bug_memory.models import BugCategory

from .languages import ASYNC_LANGUAGES


@dataclass(frozen=True)
class DetectorMatch:
    """Pattern skeleton produced by a detector."""

    regex: str
    category: BugCategory
    risk_base: int


Detector = Callable[[str, str, str], DetectorMatch | None]

_PROPERTY_ACCESS = re.compile(r"(\w+)\.(\w+)")
_LOOP_INCLUSIVE_BOUND = re.compile(r"for\s*\([^;]*;\s*\w+\s*<=\s*\w+")
_CALL = re.compile(r"(\w+)\s*\(")
_INDEX_ACCESS = re.compile(r"\[\w+\]")
_LOOSE_EQ = re.compile(r"(\w+)\s*==\s*(\w+)")
_LOOSE_NE = re.compile(r"(\w+)\s*!=\s*(\w+)")
_THEN_CHAIN = re.compile(r"\.\s*then\s*\(")
_VAR_DECLARATION = re.compile(r"\bvar\s+\w+")
_STATE_WRITE = re.compile(r"\b(this|self)\.state\[(\w+)\]")
_FIELD_WRITE = re.compile(r"\b(this|self)\.(\w+)\s*[-+*/]?=")

_NULL_WORDS = ("null", "undefined", "None")
_CAST_MARKERS = {
    "typescript": (" as ", "typeof"),
    "javascript": (" as ", "typeof"),
    "python": ("isinstance(", "cast("),
}
_SYNC_WORDS = ("lock", "mutex", "while")
_CLEANUP_CALLS = ("clearInterval", "clearTimeout", ".close()", "unsubscribe")


def _has_null_guard(line: str) -> bool:
    return "if" in line and any(word in line for word in _NULL_WORDS)


def _adds(marker: str, buggy_line: str, fixed_line: str) -> bool:
    return marker in fixed_line and marker not in buggy_line


def detect_null_check(buggy_line: str, fixed_line: str, language: str) -> DetectorMatch | None:
    """Fix adds optional chaining, a short-circuit or a null guard to a property access."""
    guard_added = (
        _adds("?.", buggy_line, fixed_line)
        or _adds("&&", buggy_line, fixed_line)
        or (_has_null_guard(fixed_line) and not _has_null_guard(buggy_line))
    )
    if not guard_added or "." not in buggy_line:
        return None

    match = _PROPERTY_ACCESS.search(buggy_line)
    if not match:
        return None

    obj, prop = match.groups()
    return DetectorMatch(
        regex=rf"\b{re.escape(obj)}\.{re.escape(prop)}\b(?!\?)",
        category=BugCategory.NULL_CHECK_MISSING,
        risk_base=8,
    )


def detect_off_by_one_loop(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix turns an inclusive ``<=`` loop bound into a strict ``<``."""
    if "<=" not in buggy_line or "<" not in fixed_line or "<=" in fixed_line:
        return None
    if not _LOOP_INCLUSIVE_BOUND.search(buggy_line):
        return None

    return DetectorMatch(
        regex=r"for\s*\([^;]*;\s*\w+\s*<=\s*\w+\.length",
        category=BugCategory.OFF_BY_ONE_LOOP,
        risk_base=9,
    )


def detect_missing_await(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix awaits a call that was previously left as a bare promise/coroutine."""
    if language not in ASYNC_LANGUAGES:
        return None
    if not _adds("await", buggy_line, fixed_line):
        return None

    match = _CALL.search(buggy_line)
    if not match:
        return None

    # re has no variable-width lookbehind: reject lines awaiting the call, then match it
    name = re.escape(match.group(1))
    return DetectorMatch(
        regex=rf"^(?!.*\bawait\s+{name}\s*\().*\b{name}\s*\(",
        category=BugCategory.MISSING_AWAIT,
        risk_base=7,
    )


def detect_undefined_access(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix guards an unchecked ``container[index]`` lookup."""
    if not _INDEX_ACCESS.search(buggy_line):
        return None

    guarded = (
        "?.[" in fixed_line
        or "&&" in fixed_line
        or _adds(".get(", buggy_line, fixed_line)
        or _adds(" and ", buggy_line, fixed_line)
    )
    if not guarded:
        return None

    return DetectorMatch(
        regex=r"\w+\[\w+\](?!\?)",
        category=BugCategory.UNDEFINED_ACCESS,
        risk_base=7,
    )


def detect_type_coercion(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix adds an explicit cast or runtime type check."""
    markers = _CAST_MARKERS.get(language)
    if not markers:
        return None
    if not any(_adds(marker, buggy_line, fixed_line) for marker in markers):
        return None

    return DetectorMatch(
        regex=r"\w+\s*=\s*\w+(?!\s+as\s+)",
        category=BugCategory.TYPE_ERROR,
        risk_base=5,
    )


def detect_loose_equality(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix replaces ``==``/``!=`` with ``===``/``!==``."""
    eq_fixed = "==" in buggy_line and "===" not in buggy_line and "===" in fixed_line
    ne_fixed = "!=" in buggy_line and "!==" not in buggy_line and "!==" in fixed_line
    if not (eq_fixed or ne_fixed):
        return None

    eq_match = _LOOSE_EQ.search(buggy_line)
    if eq_match:
        lhs, rhs = eq_match.groups()
        regex = rf"\b{re.escape(lhs)}\s*==\s*{re.escape(rhs)}\b"
    else:
        ne_match = _LOOSE_NE.search(buggy_line)
        if not ne_match:
            return None
        lhs, rhs = ne_match.groups()
        regex = rf"\b{re.escape(lhs)}\s*!=\s*{re.escape(rhs)}\b"

    return DetectorMatch(regex=regex, category=BugCategory.LOOSE_EQUALITY, risk_base=5)


def detect_missing_error_handling(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix wraps a parse, fetch or response-body read in try/catch."""
    if "try" not in fixed_line and "catch" not in fixed_line:
        return None
    if "try" in buggy_line or "catch" in buggy_line:
        return None

    if re.search(r"JSON\.parse\s*\([^)]*\)", buggy_line):
        regex = r"JSON\.parse\s*\([^)]*\)"
    elif re.search(r"\.json\s*\(", buggy_line):
        regex = r"\.json\s*\(\s*\)"
    elif re.search(r"fetch\s*\([^)]*\)", buggy_line):
        regex = r"fetch\s*\([^)]+\)"
    else:
        return None

    return DetectorMatch(regex=regex, category=BugCategory.MISSING_ERROR_HANDLING, risk_base=7)


def detect_memory_leak(buggy_line: str, fixed_line: str, language: str) -> DetectorMatch | None:
    """Fix adds cleanup for a timer, watcher or listener the buggy line never released."""
    cleanup_added = ("return" in fixed_line and "()" in fixed_line) or any(
        call in fixed_line for call in _CLEANUP_CALLS
    )
    if not cleanup_added:
        return None

    handle_dropped = "const" not in buggy_line and "let" not in buggy_line
    if "setInterval" in buggy_line and handle_dropped:
        regex = r"setInterval\s*\([^)]+\)[^;]*;(?!.*const|.*let)"
    elif ".watch(" in buggy_line and handle_dropped:
        regex = r"\.watch\s*\([^)]+\)[^;]*;(?!.*const|.*let)"
    elif ".push(" in buggy_line and "listeners" in buggy_line:
        regex = r"\.push\s*\(\s*callback\s*\)\s*;(?!.*return)"
    else:
        return None

    return DetectorMatch(regex=regex, category=BugCategory.MEMORY_LEAK, risk_base=6)


def detect_unhandled_promise(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix appends a ``.catch`` handler to a ``.then`` chain."""
    if not _adds(".catch", buggy_line, fixed_line):
        return None
    if not _THEN_CHAIN.search(buggy_line):
        return None

    return DetectorMatch(
        regex=r"\.\s*then\s*\([^)]*\)(?!\s*\.\s*catch)",
        category=BugCategory.UNHANDLED_PROMISE,
        risk_base=6,
    )


def detect_var_scoping(buggy_line: str, fixed_line: str, language: str) -> DetectorMatch | None:
    """Fix swaps a function-scoped ``var`` for ``let``/``const``."""
    if not _VAR_DECLARATION.search(buggy_line):
        return None
    if "let " not in fixed_line and "const " not in fixed_line:
        return None

    return DetectorMatch(
        regex=r"\bvar\s+\w+",
        category=BugCategory.VAR_SCOPING,
        risk_base=4,
    )


def detect_race_condition(
    buggy_line: str, fixed_line: str, language: str
) -> DetectorMatch | None:
    """Fix adds a lock, mutex or spin-wait around a shared-state write."""
    if not any(word in fixed_line for word in _SYNC_WORDS):
        return None
    if any(word in buggy_line for word in _SYNC_WORDS):
        return None
    if "=" not in buggy_line:
        return None

    state = _STATE_WRITE.search(buggy_line)
    if state:
        receiver, key = state.groups()
        return DetectorMatch(
            regex=rf"{receiver}\.state\[{re.escape(key)}\]\s*=",
            category=BugCategory.RACE_CONDITION,
            risk_base=7,
        )

    field_write = _FIELD_WRITE.search(buggy_line)
    if not field_write:
        return None

    receiver, name = field_write.groups()
    if receiver == "this" and "//" in buggy_line:
        regex = rf"this\.{re.escape(name)}\s*=\s*[^;]+;\s*//.*(?:race|concurrent|update)"
    elif receiver == "self" and "#" in buggy_line:
        regex = rf"self\.{re.escape(name)}\s*[-+*/]?=\s*[^#]+#.*(?:race|concurrent|update)"
    else:
        return None

    return DetectorMatch(regex=regex, category=BugCategory.RACE_CONDITION, risk_base=7)


DETECTORS: tuple[Detector, ...] = (
    detect_null_check,
    detect_off_by_one_loop,
    detect_missing_await,
    detect_undefined_access,
    detect_type_coercion,
    detect_loose_equality,
    detect_missing_error_handling,
    detect_memory_leak,
    detect_unhandled_promise,
    detect_var_scoping,
    detect_race_condition,
)


def classify(buggy_line: str, fixed_line: str, language: str) -> DetectorMatch | None:
    """Run the detectors in priority order and return the first match.

    Args:
        buggy_line: Removed line, stripped
        fixed_line: Added line, stripped
        language: Language tag of the file

    Returns:
        The first DetectorMatch, or None when no detector fires
    """
    for detector in DETECTORS:
        match = detector(buggy_line, fixed_line, language)
        if match is not None:
            return match
    return None
