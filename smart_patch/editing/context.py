"""
Context reporter — line-numbered excerpts of post-edit content.
"""

from __future__ import annotations


def _numbered(lines: list[str], first_line: int) -> str:
    return "\n".join(f"{first_line + i}\t{line}" for i, line in enumerate(lines))


def edit_context(content: str, new_text: str, context_lines: int = 5,
                 offset: int | None = None) -> str:
    """Excerpt around the replacement *new_text* in post-edit *content*.

    *offset* is where the first replacement starts; without it the first
    occurrence of *new_text* is used.  Falls back to the first
    ``2 * context_lines`` lines when neither locates the edit.
    """
    lines = content.split("\n")
    idx = offset if offset is not None else content.find(new_text)
    if idx == -1 or idx > len(content):
        return _numbered(lines[:context_lines * 2], 1)

    lines_before = content.count("\n", 0, idx)
    start = max(0, lines_before - context_lines)
    end = min(len(lines), lines_before + len(new_text.split("\n")) + context_lines)
    return _numbered(lines[start:end], start + 1)


def line_context(content: str, line: int, before: int = 3,
                 after: int = 15) -> str:
    """Excerpt from *before* lines above *line* to *after* lines below it."""
    lines = content.split("\n")
    start = max(0, line - 1 - before)
    end = min(len(lines), line + after)
    return _numbered(lines[start:end], start + 1)


def preview(content: str, max_lines: int = 20) -> str:
    """First *max_lines* lines, with a note on how many were left out."""
    lines = content.split("\n")
    text = _numbered(lines[:max_lines], 1)
    if len(lines) > max_lines:
        text += f"\n... ({len(lines) - max_lines} more lines)"
    return text
