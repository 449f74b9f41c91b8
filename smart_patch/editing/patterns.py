"""
Pattern builders — turn a literal search string into a relaxed regex.

Non-whitespace text is always matched literally (``re.escape``); only the
whitespace between it is relaxed.  The patterns contain no nested
quantifiers, so matching stays linear on ordinary source files.
"""

from __future__ import annotations

import re

# Lookahead that can never succeed: empty/blank search text matches nothing.
NEVER_MATCH = re.compile(r"(?!)")

_SEGMENT = re.compile(r"\s+|\S+")
_WHITESPACE_RUN = re.compile(r"\s+")


def segments(text: str) -> list[str]:
    """Split *text* into alternating whitespace / non-whitespace runs."""
    return _SEGMENT.findall(text)


def build_whitespace_tolerant(search: str) -> re.Pattern:
    """Pattern that tolerates differing whitespace runs.

    A horizontal-only run becomes ``[\\t ]+`` so it cannot swallow a line
    break.  An interior run containing a newline becomes ``\\s+``.  A
    newline run at either edge of *search* matches exactly as many line
    breaks as it holds, so blank lines before the match and the indentation
    of the line after it are left alone.
    """
    parts = segments(search)
    if not any(not p.isspace() for p in parts):
        return NEVER_MATCH

    last = len(parts) - 1
    pattern: list[str] = []
    for i, part in enumerate(parts):
        if not part.isspace():
            pattern.append(re.escape(part))
        elif "\n" not in part:
            pattern.append(r"[\t ]+")
        elif i == 0:
            pattern.append(_edge_newlines(part) + r"[\t ]*")
        elif i == last:
            indent = r"[\t ]*" if not part.endswith("\n") else ""
            pattern.append(_edge_newlines(part) + indent)
        else:
            pattern.append(r"\s+")
    return re.compile("".join(pattern))


def _edge_newlines(run: str) -> str:
    return r"(?:[\t ]*\n){%d}" % run.count("\n")


def build_token_tolerant(search: str) -> re.Pattern:
    """Pattern that matches the non-whitespace tokens separated by any whitespace."""
    tokens = [t for t in _WHITESPACE_RUN.split(search) if t]
    if not tokens:
        return NEVER_MATCH
    return re.compile(r"\s+".join(re.escape(t) for t in tokens))
