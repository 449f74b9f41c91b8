"""Fuzzy-matching patch engine used by the edit tools."""

from .context import edit_context, line_context, preview
from .diff_parser import DiffHunk, DiffParser
from .line_endings import detect, normalize, restore
from .locator import HINT_WINDOW, Location, locate
from .match_resolver import (
    EditOutcome, MatchOutcome, MatchStrategy, find_matches, resolve_edit,
)
from .metrics import log_edit_metric, read_edit_stats
from .patch_applier import ApplyResult, HunkResult, PatchApplier
from .patterns import build_token_tolerant, build_whitespace_tolerant

__all__ = [
    "edit_context", "line_context", "preview",
    "DiffHunk", "DiffParser",
    "detect", "normalize", "restore",
    "HINT_WINDOW", "Location", "locate",
    "EditOutcome", "MatchOutcome", "MatchStrategy", "find_matches", "resolve_edit",
    "log_edit_metric", "read_edit_stats",
    "ApplyResult", "HunkResult", "PatchApplier",
    "build_token_tolerant", "build_whitespace_tolerant",
]
