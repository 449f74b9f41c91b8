"""
Line-ending codec — all offset arithmetic in the engine runs on LF-only text.
"""

from __future__ import annotations

LF = "\n"
CRLF = "\r\n"


def detect(raw: str) -> str:
    """Return ``"\\r\\n"`` if the text contains any CRLF pair, else ``"\\n"``."""
    return CRLF if CRLF in raw else LF


def normalize(raw: str) -> str:
    """Collapse every CRLF pair to LF.  Lone CRs are left alone."""
    return raw.replace(CRLF, LF)


def restore(content: str, eol: str) -> str:
    """Re-expand LF-only *content* to the file's original style."""
    if eol == LF:
        return content
    return content.replace(LF, eol)
