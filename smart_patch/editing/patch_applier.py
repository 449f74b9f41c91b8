"""
Patch applier — commits located edits to LF-normalized content in memory.

Multi-block requests are located against the *original* content first and
only then spliced, bottom-up, so no splice can shift the offsets of a
block that has not been applied yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .diff_parser import DiffHunk
from .line_endings import normalize
from .locator import HINT_WINDOW, Location, line_of, locate
from .match_resolver import EditOutcome, MatchStrategy, resolve_edit

logger = logging.getLogger(__name__)


@dataclass
class HunkResult:
    """Outcome for one block, reported in input order."""
    hunk: DiffHunk
    success: bool = False
    matched_at_line: int | None = None    # line in the original content
    result_line: int | None = None        # line in the patched content
    strategy: MatchStrategy | None = None
    error: str = ""


@dataclass
class ApplyResult:
    """Result of applying a set of blocks."""
    content: str = ""
    results: list[HunkResult] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.applied

    @property
    def success(self) -> bool:
        return self.applied > 0

    @property
    def first_success(self) -> HunkResult | None:
        return next((r for r in self.results if r.success), None)


@dataclass
class _Located:
    index: int
    location: Location
    replace: str


class PatchApplier:
    """Apply single edits and SEARCH/REPLACE blocks to normalized content."""

    def __init__(self, hint_window: int = HINT_WINDOW) -> None:
        self._hint_window = hint_window

    def apply_edit(
        self,
        content: str,
        search: str,
        replace: str,
        expected: int = 1,
        *,
        target: str = "file",
    ) -> EditOutcome:
        """Single-edit mode: escalate strategies and replace every occurrence.

        Raises :class:`~smart_patch.errors.MatchError` when no strategy finds
        exactly *expected* occurrences.
        """
        return resolve_edit(content, search, replace, expected, target=target)

    def apply_hunks(self, content: str, hunks: list[DiffHunk]) -> ApplyResult:
        """Multi-block mode: locate all blocks, then splice from the bottom up.

        Blocks that cannot be located (or that overlap an earlier block)
        are reported as failed and left out; the rest are applied.
        """
        results: list[HunkResult | None] = [None] * len(hunks)
        accepted: list[_Located] = []

        for i, hunk in enumerate(hunks):
            search = normalize(hunk.search_text)
            if not search:
                results[i] = HunkResult(hunk, error="Empty search content")
                continue

            location = locate(content, search, hunk.start_line,
                              window=self._hint_window)
            if location is None:
                hint = (f" (hinted at line {hunk.start_line})"
                        if hunk.start_line else "")
                results[i] = HunkResult(
                    hunk,
                    error=f'Could not find search content{hint}: "{hunk.preview}"',
                )
                logger.warning(
                    "[ApplyDiff] Block %d not found%s", i + 1, hint,
                )
                continue

            overlap = next(
                (other for other in accepted
                 if location.start < other.location.end
                 and other.location.start < location.end),
                None,
            )
            if overlap is not None:
                results[i] = HunkResult(
                    hunk,
                    matched_at_line=location.line,
                    error=f"Search content overlaps block {overlap.index + 1}",
                )
                logger.warning(
                    "[ApplyDiff] Block %d overlaps block %d, skipping",
                    i + 1, overlap.index + 1,
                )
                continue

            if hunk.start_line and not location.in_window:
                logger.info(
                    "[ApplyDiff] Block %d hinted at line %d but matched at line %d "
                    "(outside ±%d lines)",
                    i + 1, hunk.start_line, location.line, self._hint_window,
                )
            logger.debug(
                "[ApplyDiff] Block %d: %s at line %d via %s", i + 1,
                "deletion" if hunk.is_deletion else "replacement",
                location.line, location.strategy.value,
            )
            accepted.append(_Located(i, location, normalize(hunk.replace_text)))

        # Bottom-up: each splice only touches text before the previous one.
        new_content = content
        for item in sorted(accepted, key=lambda a: a.location.start, reverse=True):
            loc = item.location
            new_content = new_content[:loc.start] + item.replace + new_content[loc.end:]

        shift = 0
        for item in sorted(accepted, key=lambda a: a.location.start):
            loc = item.location
            results[item.index] = HunkResult(
                hunks[item.index],
                success=True,
                matched_at_line=loc.line,
                result_line=line_of(new_content, loc.start + shift),
                strategy=loc.strategy,
            )
            shift += len(item.replace) - (loc.end - loc.start)

        logger.debug(
            "[ApplyDiff] Applied %d/%d block(s)", len(accepted), len(hunks),
        )
        return ApplyResult(content=new_content, results=list(results))
