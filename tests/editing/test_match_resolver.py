"""Tests for strategy escalation in single-target edits."""

import pytest

from smart_patch.editing.match_resolver import (
    MatchStrategy,
    find_matches,
    literal_positions,
    pattern_replace,
    resolve_edit,
)
from smart_patch.editing.patterns import build_whitespace_tolerant
from smart_patch.errors import (
    E_COUNT_MISMATCH,
    E_NOT_FOUND,
    NoMatchError,
    OccurrenceMismatchError,
)


class TestLiteralPositions:
    def test_non_overlapping(self):
        assert literal_positions("aaaa", "aa") == [0, 2]

    def test_empty_search(self):
        assert literal_positions("abc", "") == []


class TestFindMatches:
    def test_exact_first(self):
        outcome = find_matches("x = 1\ny = 2\n", "y = 2")
        assert outcome.strategy is MatchStrategy.EXACT
        assert outcome.occurrence_count == 1
        assert outcome.positions == [6]

    def test_whitespace_tolerant_fallback(self):
        content = "if x:\n        y = 1\n"
        outcome = find_matches(content, "if x:\n    y  =  1")
        assert outcome.strategy is MatchStrategy.WHITESPACE_TOLERANT

    def test_token_fallback(self):
        content = "def f():\n    return  1\n"
        outcome = find_matches(content, "def f(): return 1")
        assert outcome.strategy is MatchStrategy.TOKEN_TOLERANT

    def test_no_match(self):
        with pytest.raises(NoMatchError) as exc_info:
            find_matches("abc\n", "xyz", target="a.py")
        err = exc_info.value
        assert err.message == "No match found in a.py"
        assert err.error_code == E_NOT_FOUND
        assert err.suggestions

    def test_exact_count_mismatch_names_count(self):
        with pytest.raises(OccurrenceMismatchError) as exc_info:
            find_matches("foo();\nfoo();\nfoo();\n", "foo();", target="a.js")
        err = exc_info.value
        assert err.error_code == E_COUNT_MISMATCH
        assert "expected 1 but found 3 exact match(es)" in err.message
        assert err.exact_count == 3
        assert any("expected_replacements to 3" in s for s in err.suggestions)

    def test_relaxed_count_mismatch_names_both_counts(self):
        content = "a  =  1\na   =   1\n"
        with pytest.raises(OccurrenceMismatchError) as exc_info:
            find_matches(content, "a = 1")
        msg = exc_info.value.message
        assert "found 2 (whitespace-tolerant) and 2 (token-based)" in msg

    def test_expected_many(self):
        outcome = find_matches("foo();\nfoo();\nfoo();\n", "foo();", expected=3)
        assert outcome.strategy is MatchStrategy.EXACT
        assert outcome.occurrence_count == 3


class TestResolveEdit:
    def test_exact_replacement(self):
        content = "const a = 1;\nconst b = 2;\nconst c = 3;\n"
        outcome = resolve_edit(content, "const b = 2;", "const b = 42;")
        assert outcome.content == "const a = 1;\nconst b = 42;\nconst c = 3;\n"
        assert outcome.changed

    def test_replace_all_expected(self):
        outcome = resolve_edit("foo();\nfoo();\nfoo();\n", "foo();", "bar();",
                               expected=3)
        assert outcome.content == "bar();\nbar();\nbar();\n"

    def test_whitespace_tolerant_replaces_matched_span(self):
        content = "start\nif x:\n        y = 1\nend\n"
        outcome = resolve_edit(content, "if x:\n    y = 1", "if x:\n    y = 2")
        assert outcome.content == "start\nif x:\n    y = 2\nend\n"

    def test_trailing_newline_keeps_next_line_indent(self):
        content = "if x:\n\tfoo()\n\tbaz()\n"
        outcome = resolve_edit(content, "if x:\n    foo()\n", "if y:\n    foo()\n")
        assert outcome.content == "if y:\n    foo()\n\tbaz()\n"

    def test_leading_newline_keeps_blank_lines(self):
        content = "a\n\n\n\tfoo()\n"
        outcome = resolve_edit(content, "\n  foo()", "\n  bar()")
        assert outcome.content == "a\n\n\n  bar()\n"

    def test_token_replacement(self):
        content = "def f():\n    return  1\n"
        outcome = resolve_edit(content, "def f(): return 1", "def f(): return 2")
        assert outcome.content == "def f(): return 2\n"
        assert outcome.match.strategy is MatchStrategy.TOKEN_TOLERANT

    def test_backreference_text_is_literal(self):
        content = "x  =  1\n"
        outcome = resolve_edit(content, "x = 1", r"x = r'\1\g<0>'")
        assert outcome.content == "x = r'\\1\\g<0>'\n"

    def test_dollar_and_backslash_in_exact_replace(self):
        outcome = resolve_edit("a = 1\n", "a = 1", "a = '$1\\n'")
        assert outcome.content == "a = '$1\\n'\n"

    def test_no_change_when_replacement_matches_text(self):
        # "a  b" matched tolerantly and replaced with itself
        outcome = resolve_edit("a  b\n", "a b", "a  b")
        assert not outcome.changed


class TestPatternReplace:
    def test_callable_replacement(self):
        pattern = build_whitespace_tolerant("a b")
        assert pattern_replace("a   b", pattern, r"\g<0>") == r"\g<0>"
