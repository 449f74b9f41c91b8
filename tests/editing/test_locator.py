"""Tests for the hint-windowed hunk locator."""

from smart_patch.editing.locator import line_of, locate
from smart_patch.editing.match_resolver import MatchStrategy


def _numbered_file(n=100, overrides=None):
    lines = [f"line {i}" for i in range(1, n + 1)]
    for line_no, text in (overrides or {}).items():
        lines[line_no - 1] = text
    return "\n".join(lines) + "\n"


class TestLineOf:
    def test_first_line(self):
        assert line_of("a\nb\nc", 0) == 1

    def test_later_line(self):
        assert line_of("a\nb\nc", 4) == 3


class TestLocate:
    def test_no_hint_finds_first(self):
        content = _numbered_file(overrides={10: "target()", 80: "target()"})
        loc = locate(content, "target()")
        assert loc.line == 10
        assert loc.strategy is MatchStrategy.EXACT
        assert not loc.in_window

    def test_hint_prefers_nearby_occurrence(self):
        content = _numbered_file(overrides={10: "target()", 80: "target()"})
        loc = locate(content, "target()", start_line=78)
        assert loc.line == 80
        assert loc.in_window
        assert content[loc.start:loc.end] == "target()"

    def test_window_end_is_exclusive(self):
        content = _numbered_file(overrides={31: "target()"})
        loc = locate(content, "target()", start_line=1)
        assert loc.line == 31
        assert not loc.in_window

    def test_last_line_of_window(self):
        content = _numbered_file(overrides={30: "target()"})
        loc = locate(content, "target()", start_line=1)
        assert loc.line == 30
        assert loc.in_window

    def test_custom_window(self):
        content = _numbered_file(overrides={10: "target()", 50: "target()"})
        loc = locate(content, "target()", start_line=48, window=1)
        # line 50 lies outside ±1, so the full-file search wins
        assert loc.line == 10

    def test_hint_beyond_end_falls_back(self):
        content = _numbered_file(n=5, overrides={2: "target()"})
        loc = locate(content, "target()", start_line=500)
        assert loc.line == 2

    def test_multiline_search_in_window(self):
        content = _numbered_file(overrides={40: "def f():", 41: "    pass"})
        loc = locate(content, "def f():\n    pass", start_line=40)
        assert loc.line == 40
        assert loc.end - loc.start == len("def f():\n    pass")

    def test_whitespace_tolerant_fallback(self):
        content = "a = 0\n    x  =  1\n"
        loc = locate(content, "x = 1")
        assert loc.strategy is MatchStrategy.WHITESPACE_TOLERANT
        assert loc.line == 2
        assert content[loc.start:loc.end] == "x  =  1"

    def test_token_tolerant_not_used(self):
        content = "def f():\n    return 1\n"
        assert locate(content, "def f(): return 1") is None

    def test_not_found(self):
        assert locate("abc\n", "xyz", start_line=1) is None

    def test_empty_search(self):
        assert locate("abc\n", "") is None
