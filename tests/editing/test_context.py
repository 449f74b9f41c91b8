"""Tests for post-edit context excerpts."""

from smart_patch.editing.context import edit_context, line_context, preview


def _file(n):
    return "\n".join(f"l{i}" for i in range(1, n + 1))


class TestEditContext:
    def test_window_around_new_text(self):
        text = edit_context(_file(20), "l10", context_lines=2)
        assert text.split("\n") == ["8\tl8", "9\tl9", "10\tl10", "11\tl11", "12\tl12"]

    def test_clamped_at_start(self):
        text = edit_context(_file(20), "l1\nl2", context_lines=3)
        assert text.split("\n")[0] == "1\tl1"
        assert text.split("\n")[-1] == "5\tl5"

    def test_fallback_to_head_when_not_found(self):
        text = edit_context(_file(20), "missing", context_lines=2)
        assert text.split("\n") == ["1\tl1", "2\tl2", "3\tl3", "4\tl4"]

    def test_offset_picks_edit_over_earlier_occurrence(self):
        text = edit_context("x\ny\nx\n", "x", context_lines=0, offset=4)
        assert text == "3\tx"

    def test_offset_for_deletion(self):
        content = _file(20).replace("l10\n", "")
        text = edit_context(content, "", context_lines=1,
                            offset=content.index("l11"))
        assert text.split("\n") == ["9\tl9", "10\tl11", "11\tl12"]


class TestLineContext:
    def test_before_and_after(self):
        text = line_context(_file(30), 10, before=2, after=3)
        assert text.split("\n") == [
            "8\tl8", "9\tl9", "10\tl10", "11\tl11", "12\tl12", "13\tl13",
        ]

    def test_clamped_at_end(self):
        text = line_context(_file(5), 4, before=1, after=15)
        assert text.split("\n") == ["3\tl3", "4\tl4", "5\tl5"]


class TestPreview:
    def test_short_content(self):
        assert preview("a\nb", max_lines=20) == "1\ta\n2\tb"

    def test_truncated(self):
        text = preview(_file(25), max_lines=20)
        lines = text.split("\n")
        assert lines[19] == "20\tl20"
        assert lines[-1] == "... (5 more lines)"
