"""
Diff parser — splits SEARCH/REPLACE hunk text into structured edit blocks.

Block syntax (one or more per request)::

    <<<<<<< SEARCH
    :start_line:42
    -------
    [exact content to find]
    =======
    [replacement content]
    >>>>>>> REPLACE

The ``:start_line:`` directive and the ``-------`` divider are optional.
Marker lines are compared after stripping surrounding whitespace.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..errors import DiffParseError, NoBlocksFoundError
from .line_endings import normalize

logger = logging.getLogger(__name__)

# Markers
SEARCH_MARKER = "<<<<<<< SEARCH"
SEPARATOR_MARKER = "======="
REPLACE_MARKER = ">>>>>>> REPLACE"
DIVIDER_MARKER = "-------"

# Patterns
_START_LINE_PATTERN = re.compile(r"^:start_line:(\d+)\s*$")

_FORMAT_HINTS = [
    "Ensure each block follows the format: <<<<<<< SEARCH / :start_line:N / "
    "------- / [search] / ======= / [replace] / >>>>>>> REPLACE",
    "Check for missing markers or mismatched blocks",
]


@dataclass
class DiffHunk:
    """A single SEARCH/REPLACE block."""
    search_text: str
    replace_text: str
    raw_text: str
    start_line: int | None = None   # 1-indexed hint, None when absent

    @property
    def is_deletion(self) -> bool:
        return self.replace_text == ""

    @property
    def preview(self) -> str:
        """First 80 characters of the search body, for diagnostics."""
        if len(self.search_text) > 80:
            return self.search_text[:80] + "..."
        return self.search_text


class DiffParser:
    """Parse SEARCH/REPLACE hunk text."""

    def parse(self, diff: str) -> list[DiffHunk]:
        """Parse every block in *diff*, in input order.

        Raises
        ------
        NoBlocksFoundError
            When the text contains no SEARCH marker at all.
        DiffParseError
            When a block is missing its separator or REPLACE marker, or
            has an empty search body.  Nothing is partially parsed.
        """
        lines = normalize(diff).split("\n")
        hunks: list[DiffHunk] = []
        i = 0

        while i < len(lines):
            if lines[i].strip() != SEARCH_MARKER:
                i += 1
                continue

            block_start = i
            i += 1

            start_line: int | None = None
            if i < len(lines):
                hint = _START_LINE_PATTERN.match(lines[i].strip())
                if hint:
                    start_line = int(hint.group(1)) or None
                    i += 1

            if i < len(lines) and lines[i].strip() == DIVIDER_MARKER:
                i += 1

            search_lines: list[str] = []
            while i < len(lines) and lines[i].strip() != SEPARATOR_MARKER:
                search_lines.append(lines[i])
                i += 1
            if i >= len(lines):
                raise DiffParseError(
                    f"Failed to parse diff: invalid diff block starting at line "
                    f"{block_start + 1}: missing {SEPARATOR_MARKER} separator",
                    _FORMAT_HINTS,
                )
            i += 1

            replace_lines: list[str] = []
            while i < len(lines) and lines[i].strip() != REPLACE_MARKER:
                replace_lines.append(lines[i])
                i += 1
            if i >= len(lines):
                raise DiffParseError(
                    f"Failed to parse diff: invalid diff block starting at line "
                    f"{block_start + 1}: missing {REPLACE_MARKER} marker",
                    _FORMAT_HINTS,
                )
            i += 1

            search_text = "\n".join(search_lines)
            if search_text == "":
                raise DiffParseError(
                    f"Failed to parse diff: block starting at line "
                    f"{block_start + 1} has empty search content",
                    [
                        "Every SEARCH section must contain the text to replace",
                        "To create a file, use code_edit with an empty old_string",
                    ],
                )

            hunks.append(DiffHunk(
                search_text=search_text,
                replace_text="\n".join(replace_lines),
                raw_text="\n".join(lines[block_start:i]),
                start_line=start_line,
            ))

        if not hunks:
            raise NoBlocksFoundError(
                "No SEARCH/REPLACE blocks found in diff",
                [
                    "Include at least one <<<<<<< SEARCH ... >>>>>>> REPLACE block",
                    "Check the diff format: each block needs SEARCH, =======, "
                    "and REPLACE markers",
                ],
            )

        logger.debug("[ApplyDiff] Parsed %d block(s)", len(hunks))
        return hunks
