"""Tests for bug-fix idiom detectors."""

import re

import pytest

from bug_memory.models import BugCategory
from mining.detectors import (
    DETECTORS,
    classify,
    detect_loose_equality,
    detect_missing_await,
    detect_null_check,
    detect_off_by_one_loop,
    detect_race_condition,
    detect_undefined_access,
)


def matches(regex: str, line: str) -> bool:
    return re.search(regex, line, re.IGNORECASE) is not None


class TestClassify:
    """End-to-end classification of (buggy, fixed) pairs."""

    def test_off_by_one_loop(self):
        """Test an inclusive loop bound fixed to strict is an off-by-one."""
        match = classify(
            "for (let i = 0; i <= arr.length; i++) {",
            "for (let i = 0; i < arr.length; i++) {",
            "javascript",
        )

        assert match.category == BugCategory.OFF_BY_ONE_LOOP
        assert match.risk_base == 9
        assert matches(match.regex, "for (let j = 0; j <= items.length; j++) {")
        assert not matches(match.regex, "for (let j = 0; j < items.length; j++) {")

    def test_null_check_optional_chaining(self):
        """Test adding optional chaining yields a property-specific null check."""
        match = classify("return user.name;", "return user?.name ?? 'Unknown';", "typescript")

        assert match.category == BugCategory.NULL_CHECK_MISSING
        assert match.risk_base == 8
        assert matches(match.regex, "console.log(user.name)")
        assert not matches(match.regex, "console.log(user?.name)")

    def test_null_guard_in_python(self):
        """Test an added ``if ... None`` guard counts as a null check."""
        match = classify(
            "total = order.amount",
            "total = order.amount if order is not None else 0",
            "python",
        )

        assert match.category == BugCategory.NULL_CHECK_MISSING
        assert matches(match.regex, "x = order.amount + 1")

    def test_missing_await(self):
        """Test awaiting a previously bare call."""
        match = classify(
            "const data = fetchUser(id);", "const data = await fetchUser(id);", "typescript"
        )

        assert match.category == BugCategory.MISSING_AWAIT
        assert match.risk_base == 7
        assert matches(match.regex, "const user = fetchUser(42);")
        assert not matches(match.regex, "const user = await fetchUser(42);")

    @pytest.mark.parametrize(
        "line",
        [
            "const d = await  fetchData();",
            "const d = await\tfetchData();",
            "const d = await \t fetchData ();",
        ],
    )
    def test_missing_await_ignores_any_await_spacing(self, line):
        """Test an awaited call is not flagged however much whitespace follows await."""
        match = classify("const d = fetchData();", "const d = await fetchData();", "typescript")

        assert not matches(match.regex, line)
        assert matches(match.regex, "const e = fetchData();")

    def test_missing_await_needs_async_language(self):
        """Test await additions in other languages are not missing-await patterns."""
        assert detect_missing_await("x = load(a)", "x = await load(a)", "go") is None

    def test_loose_equality(self):
        """Test ``==`` replaced by ``===``."""
        match = classify("if (count == limit) {", "if (count === limit) {", "javascript")

        assert match.category == BugCategory.LOOSE_EQUALITY
        assert match.risk_base == 5
        assert matches(match.regex, "while (count == limit)")
        assert not matches(match.regex, "while (count === limit)")

    def test_loose_inequality(self):
        """Test ``!=`` replaced by ``!==``."""
        match = detect_loose_equality("if (a != b) {", "if (a !== b) {", "javascript")

        assert match.regex == r"\ba\s*!=\s*b\b"

    def test_missing_error_handling(self):
        """Test wrapping JSON.parse in try."""
        match = classify(
            "const cfg = JSON.parse(raw);",
            "try { const cfg = JSON.parse(raw); } catch (e) { return null; }",
            "javascript",
        )

        assert match.category == BugCategory.MISSING_ERROR_HANDLING
        assert match.regex == r"JSON\.parse\s*\([^)]*\)"

    def test_memory_leak_interval(self):
        """Test an interval whose handle was dropped."""
        match = classify(
            "setInterval(poll, 1000);",
            "const timer = setInterval(poll, 1000); return () => clearInterval(timer);",
            "javascript",
        )

        assert match.category == BugCategory.MEMORY_LEAK
        assert match.risk_base == 6
        assert matches(match.regex, "setInterval(refresh, 500);")

    def test_unhandled_promise(self):
        """Test adding a catch handler to a then chain."""
        match = classify(
            "load().then(render)",
            "load().then(render).catch(report)",
            "javascript",
        )

        assert match.category == BugCategory.UNHANDLED_PROMISE
        assert matches(match.regex, "save().then(done);")
        assert not matches(match.regex, "save().then(done).catch(fail);")

    def test_var_scoping(self):
        """Test ``var`` replaced by ``let``."""
        match = classify("var count = 0;", "let count = 0;", "javascript")

        assert match.category == BugCategory.VAR_SCOPING
        assert match.regex == r"\bvar\s+\w+"
        assert match.risk_base == 4

    def test_type_coercion(self):
        """Test adding an ``as`` cast in TypeScript."""
        match = classify("const id = value;", "const id = value as string;", "typescript")

        assert match.category == BugCategory.TYPE_ERROR
        assert match.risk_base == 5

    def test_unrelated_change(self):
        """Test a plain rename is not classified."""
        assert classify("const total = sum(a);", "const total = add(a);", "javascript") is None


class TestDetectors:
    """Detector-level behavior."""

    def test_priority_order(self):
        """Test detectors run in their documented order."""
        assert [d.__name__ for d in DETECTORS] == [
            "detect_null_check",
            "detect_off_by_one_loop",
            "detect_missing_await",
            "detect_undefined_access",
            "detect_type_coercion",
            "detect_loose_equality",
            "detect_missing_error_handling",
            "detect_memory_leak",
            "detect_unhandled_promise",
            "detect_var_scoping",
            "detect_race_condition",
        ]

    def test_first_match_wins(self):
        """Test a pair two detectors accept goes to the earlier one."""
        buggy = "if (user.role == admin) {"
        fixed = "if (user && user.role === admin) {"

        assert detect_loose_equality(buggy, fixed, "javascript") is not None
        assert classify(buggy, fixed, "javascript").category == BugCategory.NULL_CHECK_MISSING

    def test_null_check_requires_property_access(self):
        """Test a guard without a dotted access is not a null check."""
        assert detect_null_check("return value;", "return value && value;", "javascript") is None

    def test_null_check_uses_words_around_dot(self):
        """Test the regex is built from the identifiers on either side of the dot."""
        match = detect_null_check("x = $el.value;", "x = $el?.value;", "javascript")

        assert match.regex == r"\bel\.value\b(?!\?)"

    def test_off_by_one_requires_loop_header(self):
        """Test a comparison outside a for loop is not an off-by-one loop."""
        assert detect_off_by_one_loop("if (i <= n) {", "if (i < n) {", "javascript") is None

    def test_undefined_access(self):
        """Test guarding an index lookup."""
        match = detect_undefined_access(
            "const v = cache[key];", "const v = cache && cache[key];", "javascript"
        )

        assert match.category == BugCategory.UNDEFINED_ACCESS
        assert matches(match.regex, "return table[idx];")

    def test_undefined_access_python_get(self):
        """Test switching to dict.get in Python."""
        match = detect_undefined_access("v = cache[key]", "v = cache.get(key)", "python")

        assert match is not None

    def test_race_condition_state_write(self):
        """Test a lock added around a shared state write."""
        match = detect_race_condition(
            "this.state[count] = value;",
            "mutex.runExclusive(() => { this.state[count] = value; });",
            "javascript",
        )

        assert match.category == BugCategory.RACE_CONDITION
        assert match.regex == r"this\.state\[count\]\s*="

    def test_race_condition_python_field(self):
        """Test a commented self-field update that gained a lock."""
        match = detect_race_condition(
            "self.total += amount  # concurrent update",
            "with self.lock: self.total += amount",
            "python",
        )

        assert match is not None
        assert matches(match.regex, "self.total += n  # racy update")

    @pytest.mark.parametrize("detector", DETECTORS)
    def test_identical_lines_never_match(self, detector):
        """Test no detector fires when nothing changed."""
        line = "for (let i = 0; i <= arr.length; i++) { user.name == x; }"
        assert detector(line, line, "javascript") is None
