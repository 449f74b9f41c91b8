"""
Windowed locator — finds where a hunk's search body sits in the file.

Order of attempts, first success wins:

1. exact match inside ±``window`` lines around the ``:start_line:`` hint
2. exact match anywhere
3. whitespace-tolerant match anywhere

Token-tolerant matching is not used for hunks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .match_resolver import MatchStrategy
from .patterns import build_whitespace_tolerant

logger = logging.getLogger(__name__)

HINT_WINDOW = 30


@dataclass
class Location:
    """A located span ``[start, end)`` in LF-normalized content."""
    start: int
    end: int
    line: int                    # 1-indexed line of ``start``
    strategy: MatchStrategy
    in_window: bool = False


def line_of(content: str, offset: int) -> int:
    """1-indexed line number containing character *offset*."""
    return content.count("\n", 0, offset) + 1


def _find_in_window(content: str, search: str, hint: int,
                    window: int) -> int:
    lines = content.split("\n")
    hint_idx = hint - 1
    window_start = max(0, hint_idx - window)
    window_end = min(len(lines), hint_idx + window)
    if window_start >= window_end:
        return -1

    local = "\n".join(lines[window_start:window_end]).find(search)
    if local == -1:
        return -1

    # Every line before the window contributes its text plus one "\n".
    prefix = sum(len(line) + 1 for line in lines[:window_start])
    return prefix + local


def locate(
    content: str,
    search: str,
    start_line: int | None = None,
    *,
    window: int = HINT_WINDOW,
) -> Location | None:
    """Locate *search* in *content*; ``None`` when every attempt fails."""
    if not search:
        return None

    if start_line is not None and start_line > 0:
        idx = _find_in_window(content, search, start_line, window)
        if idx != -1:
            return Location(idx, idx + len(search), line_of(content, idx),
                            MatchStrategy.EXACT, in_window=True)
        logger.debug(
            "[Locate] No exact match within ±%d lines of line %d",
            window, start_line,
        )

    idx = content.find(search)
    if idx != -1:
        return Location(idx, idx + len(search), line_of(content, idx),
                        MatchStrategy.EXACT)

    match = build_whitespace_tolerant(search).search(content)
    if match:
        logger.debug("[Locate] Whitespace-tolerant match at offset %d",
                     match.start())
        return Location(match.start(), match.end(),
                        line_of(content, match.start()),
                        MatchStrategy.WHITESPACE_TOLERANT)

    return None
