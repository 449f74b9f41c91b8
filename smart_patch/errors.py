"""
Error taxonomy for the patch engine.

Every failure the engine can report is an :class:`EditError`.  The tool
layer catches these and relays ``format()`` to the calling model, so the
message and the recovery suggestions are part of the contract.
"""

from __future__ import annotations

E_INPUT = "E_INPUT"
E_PRECONDITION = "E_PRECONDITION"
E_NOT_FOUND = "E_NOT_FOUND"
E_COUNT_MISMATCH = "E_COUNT_MISMATCH"
E_PARSE = "E_PARSE"
E_NO_BLOCKS = "E_NO_BLOCKS"
E_ALL_FAILED = "E_ALL_FAILED"
E_CANCELLED = "E_CANCELLED"
E_IO = "E_IO"


def format_error(message: str, suggestions: list[str]) -> str:
    """Combine a diagnostic with a numbered list of recovery suggestions."""
    if not suggestions:
        return message
    numbered = "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions, 1))
    return (
        f"{message}\n\n<error_details>\nRecovery suggestions:\n"
        f"{numbered}\n</error_details>"
    )


class EditError(Exception):
    """Base class for all caller-facing edit failures."""

    error_code = E_INPUT

    def __init__(self, message: str, suggestions: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])

    def format(self) -> str:
        return format_error(self.message, self.suggestions)


class EditInputError(EditError):
    """Missing/empty field, identical search and replace, bad counts."""

    error_code = E_INPUT


class EditPreconditionError(EditError):
    """Target missing for an edit, or already present for create mode."""

    error_code = E_PRECONDITION


class MatchError(EditError):
    """No strategy found exactly the expected number of occurrences."""

    error_code = E_NOT_FOUND

    def __init__(
        self,
        message: str,
        suggestions: list[str] | None = None,
        *,
        expected: int = 1,
        exact_count: int = 0,
        whitespace_count: int = 0,
        token_count: int = 0,
    ):
        super().__init__(message, suggestions)
        self.expected = expected
        self.exact_count = exact_count
        self.whitespace_count = whitespace_count
        self.token_count = token_count


class NoMatchError(MatchError):
    error_code = E_NOT_FOUND


class OccurrenceMismatchError(MatchError):
    error_code = E_COUNT_MISMATCH


class DiffParseError(EditError):
    """The hunk text could not be split into SEARCH/REPLACE blocks."""

    error_code = E_PARSE


class NoBlocksFoundError(DiffParseError):
    error_code = E_NO_BLOCKS


class HunksFailedError(EditError):
    """Every hunk of a multi-block request failed to locate."""

    error_code = E_ALL_FAILED

    def __init__(self, message: str, suggestions: list[str] | None = None,
                 results: list | None = None):
        super().__init__(message, suggestions)
        self.results = list(results or [])


class EditCancelledError(EditError):
    """The invocation was cancelled before the write step."""

    error_code = E_CANCELLED

    def __init__(self, message: str = "Operation aborted"):
        super().__init__(message)
