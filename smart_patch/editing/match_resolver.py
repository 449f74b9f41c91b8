"""
Match resolver — escalating-strategy search for single-target edits.

Strategies are tried in order of increasing tolerance and the first one
that finds *exactly* the expected number of occurrences is committed:

1. exact literal substring
2. whitespace-tolerant pattern
3. token-tolerant pattern

All inputs are expected to be LF-normalized already.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from ..errors import NoMatchError, OccurrenceMismatchError
from .patterns import build_token_tolerant, build_whitespace_tolerant

logger = logging.getLogger(__name__)


class MatchStrategy(str, enum.Enum):
    EXACT = "exact"
    WHITESPACE_TOLERANT = "whitespace-tolerant"
    TOKEN_TOLERANT = "token-based"


@dataclass
class MatchOutcome:
    """Which strategy matched, how often, and where (character offsets)."""
    strategy: MatchStrategy
    occurrence_count: int
    positions: list[int] = field(default_factory=list)


@dataclass
class EditOutcome:
    """Result of resolving and applying a single edit in memory."""
    original: str
    content: str
    match: MatchOutcome

    @property
    def changed(self) -> bool:
        return self.original != self.content


def literal_positions(content: str, search: str) -> list[int]:
    """Offsets of non-overlapping literal occurrences, left to right."""
    if not search:
        return []
    positions: list[int] = []
    pos = content.find(search)
    while pos != -1:
        positions.append(pos)
        pos = content.find(search, pos + len(search))
    return positions


def pattern_positions(content: str, pattern: re.Pattern) -> list[int]:
    return [m.start() for m in pattern.finditer(content)]


def literal_replace(content: str, search: str, replace: str) -> str:
    """Replace every literal occurrence; *replace* is copied verbatim."""
    if not search:
        return content
    return content.replace(search, replace)


def pattern_replace(content: str, pattern: re.Pattern, replace: str) -> str:
    # A callable replacement is never parsed for \1 / \g<name> templates.
    return pattern.sub(lambda _m: replace, content)


def find_matches(
    content: str,
    search: str,
    expected: int = 1,
    *,
    target: str = "file",
) -> MatchOutcome:
    """Return the first strategy whose occurrence count equals *expected*.

    Raises :class:`NoMatchError` when nothing matches under any strategy
    and :class:`OccurrenceMismatchError` when something matched but never
    with the right count.
    """
    exact = literal_positions(content, search)
    if len(exact) == expected:
        return MatchOutcome(MatchStrategy.EXACT, len(exact), exact)
    logger.debug(
        "[CodeEdit] Exact match found %d occurrence(s), expected %d; "
        "trying whitespace-tolerant", len(exact), expected,
    )

    ws = pattern_positions(content, build_whitespace_tolerant(search))
    if len(ws) == expected:
        return MatchOutcome(MatchStrategy.WHITESPACE_TOLERANT, len(ws), ws)
    logger.debug(
        "[CodeEdit] Whitespace-tolerant found %d occurrence(s); trying token-based",
        len(ws),
    )

    tokens = pattern_positions(content, build_token_tolerant(search))
    if len(tokens) == expected:
        return MatchOutcome(MatchStrategy.TOKEN_TOLERANT, len(tokens), tokens)

    counts = dict(
        expected=expected,
        exact_count=len(exact),
        whitespace_count=len(ws),
        token_count=len(tokens),
    )

    if not exact and not ws and not tokens:
        raise NoMatchError(
            f"No match found in {target}",
            [
                "Use read to confirm the file's current contents",
                "Ensure old_string matches exactly (including whitespace/indentation)",
                "Provide more surrounding context in old_string to make the match unique",
                "If the file has changed since you last read it, re-read and retry",
            ],
            **counts,
        )

    if exact:
        raise OccurrenceMismatchError(
            f"Occurrence count mismatch in {target}: expected {expected} "
            f"but found {len(exact)} exact match(es)",
            [
                "Provide a more specific old_string so it matches exactly "
                "the expected number of times",
                f"If you intend to replace all occurrences, set "
                f"expected_replacements to {len(exact)}",
                "Use read to confirm the exact text and counts",
            ],
            **counts,
        )

    raise OccurrenceMismatchError(
        f"Occurrence count mismatch in {target}: expected {expected}, found "
        f"{len(ws)} (whitespace-tolerant) and {len(tokens)} (token-based)",
        [
            "Provide more surrounding context in old_string to make the match unique",
            "If multiple replacements are intended, adjust expected_replacements",
            "Use read to confirm the current file contents and refine the match",
        ],
        **counts,
    )


def resolve_edit(
    content: str,
    search: str,
    replace: str,
    expected: int = 1,
    *,
    target: str = "file",
) -> EditOutcome:
    """Locate *search* with strategy escalation and apply *replace* in memory."""
    match = find_matches(content, search, expected, target=target)

    if match.strategy is MatchStrategy.EXACT:
        new_content = literal_replace(content, search, replace)
    elif match.strategy is MatchStrategy.WHITESPACE_TOLERANT:
        new_content = pattern_replace(
            content, build_whitespace_tolerant(search), replace)
    else:
        new_content = pattern_replace(
            content, build_token_tolerant(search), replace)

    logger.debug(
        "[CodeEdit] Committed %d replacement(s) via %s strategy",
        match.occurrence_count, match.strategy.value,
    )
    return EditOutcome(original=content, content=new_content, match=match)
