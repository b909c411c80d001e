"""Tests for bug-commit filtering and pattern extraction."""

from bug_memory.ids import CounterIdGenerator
from bug_memory.models import BugCategory
from mining.extractor import PatternExtractor, filter_bug_commits, is_bug_commit
from mining.models import CandidatePair, Commit, CommitAuthor, CommitFile

OFF_BY_ONE_PATCH = "\n".join(
    [
        "@@ -10,3 +10,3 @@",
        " function total(arr) {",
        "-  for (let i = 0; i <= arr.length; i++) {",
        "+  for (let i = 0; i < arr.length; i++) {",
    ]
)

NULL_CHECK_PATCH = "\n".join(
    [
        "@@ -4,2 +4,2 @@",
        "-  return user.name;",
        "+  return user?.name ?? 'Unknown';",
    ]
)


def make_commit(sha, message="Fix crash", files=None):
    return Commit(
        sha=sha,
        message=message,
        author=CommitAuthor(name="Dev", date="2026-01-01T00:00:00Z"),
        files=files,
    )


class TestBugCommitFilter:
    """Tests for keyword filtering."""

    def test_keywords_case_insensitive(self):
        """Test any fix keyword, in any case, marks a bug commit."""
        for message in ["Fix login", "BUG: wrong total", "hotfix", "Patch release", "crash on start"]:
            assert is_bug_commit(make_commit("a", message=message))

    def test_keyword_substring_matches(self):
        """Test keywords match inside longer words."""
        assert is_bug_commit(make_commit("a", message="Prefix the cache key"))

    def test_other_commits_rejected(self):
        """Test commits without keywords are dropped, order kept."""
        commits = [
            make_commit("a", message="Add feature"),
            make_commit("b", message="Fix null user"),
            make_commit("c", message="Refactor"),
            make_commit("d", message="Resolve issue #12"),
        ]

        assert [c.sha for c in filter_bug_commits(commits)] == ["b", "d"]


class TestPatternExtractor:
    """Tests for PatternExtractor."""

    def test_extracts_pattern_with_commit_reference(self):
        """Test a classified pair becomes a pattern referencing its commit."""
        commit = make_commit(
            "abc123",
            message="Fix loop bound\n\nLonger body",
            files=[CommitFile(filename="src/total.js", patch=OFF_BY_ONE_PATCH)],
        )

        patterns = PatternExtractor(CounterIdGenerator()).extract_patterns([commit])

        assert len(patterns) == 1
        pattern = patterns[0]
        assert pattern.id == "pattern_1"
        assert pattern.language == "javascript"
        assert pattern.category == BugCategory.OFF_BY_ONE_LOOP
        assert pattern.risk_base == 9
        assert pattern.occurrence_count == 1
        assert pattern.buggy_example == "for (let i = 0; i <= arr.length; i++) {"
        assert pattern.fixed_example == "for (let i = 0; i < arr.length; i++) {"
        ref = pattern.commits[0]
        assert (ref.sha, ref.file, ref.line, ref.message) == ("abc123", "src/total.js", 11, "Fix loop bound")

    def test_duplicates_in_batch_are_folded(self):
        """Test the same idiom in two commits yields one pattern with two occurrences."""
        commits = [
            make_commit("c1", files=[CommitFile(filename="a.js", patch=OFF_BY_ONE_PATCH)]),
            make_commit("c2", files=[CommitFile(filename="b.js", patch=OFF_BY_ONE_PATCH)]),
        ]

        patterns = PatternExtractor(CounterIdGenerator()).extract_patterns(commits)

        assert len(patterns) == 1
        assert patterns[0].id == "pattern_1"
        assert patterns[0].occurrence_count == 2
        assert patterns[0].commit_shas == ["c1", "c2"]
        assert [c.file for c in patterns[0].commits] == ["a.js", "b.js"]

    def test_distinct_patterns_keep_order(self):
        """Test different idioms stay separate in first-seen order."""
        commit = make_commit(
            "c1",
            files=[
                CommitFile(filename="user.ts", patch=NULL_CHECK_PATCH),
                CommitFile(filename="total.js", patch=OFF_BY_ONE_PATCH),
            ],
        )

        patterns = PatternExtractor(CounterIdGenerator()).extract_patterns([commit])

        assert [p.category for p in patterns] == [
            BugCategory.NULL_CHECK_MISSING,
            BugCategory.OFF_BY_ONE_LOOP,
        ]
        assert patterns[0].language == "typescript"

    def test_commits_without_files_or_patches(self):
        """Test commits with no file list and files with no patch are skipped."""
        commits = [
            make_commit("c1", files=None),
            make_commit("c2", files=[CommitFile(filename="logo.png", patch=None)]),
        ]

        assert PatternExtractor().extract_patterns(commits) == []

    def test_comment_changes_ignored(self):
        """Test edits inside comments never become patterns."""
        extractor = PatternExtractor(CounterIdGenerator())
        pair = CandidatePair(
            buggy_line="// for (i = 0; i <= n.length; i++) {",
            fixed_line="// for (i = 0; i < n.length; i++) {",
            line_number=1,
        )

        assert extractor.build_pattern(pair, "javascript", "a.js", make_commit("c1")) is None

    def test_blank_lines_ignored(self):
        """Test a pair with an empty side is skipped."""
        extractor = PatternExtractor(CounterIdGenerator())
        pair = CandidatePair(buggy_line="", fixed_line="let x = 1;", line_number=1)

        assert extractor.build_pattern(pair, "javascript", "a.js", make_commit("c1")) is None
