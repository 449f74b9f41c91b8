"""Tests for the line-ending codec."""

from smart_patch.editing.line_endings import CRLF, LF, detect, normalize, restore


class TestDetect:
    def test_lf_only(self):
        assert detect("a\nb\n") == LF

    def test_any_crlf_wins(self):
        assert detect("a\nb\r\nc\n") == CRLF

    def test_empty(self):
        assert detect("") == LF

    def test_lone_cr_is_not_crlf(self):
        assert detect("a\rb") == LF


class TestNormalize:
    def test_collapses_crlf(self):
        assert normalize("a\r\nb\r\n") == "a\nb\n"

    def test_keeps_lone_cr(self):
        assert normalize("a\rb\r\n") == "a\rb\n"


class TestRestore:
    def test_lf_untouched(self):
        assert restore("a\nb\n", LF) == "a\nb\n"

    def test_crlf_expanded(self):
        assert restore("a\nb\n", CRLF) == "a\r\nb\r\n"

    def test_crlf_file_survives_normalize_restore(self):
        raw = "x = 1\r\ny = 2\r\n"
        assert restore(normalize(raw), detect(raw)) == raw
