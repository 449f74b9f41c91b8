"""
Agent-facing edit tools: ``code_edit`` and ``code_apply_diff``.

Both tools take a plain argument dict (as decoded from a model's tool call),
run the patch engine against a :class:`~smart_patch.file_ops.FileOperations`
capability, and return a :class:`ToolResult` whose ``text`` is relayed to
the model.  Engine failures never escape ``execute()``; they come back as
``success=False`` results carrying recovery suggestions.

Usage::

    from smart_patch.tools import create_edit_tools

    edit, apply_diff = create_edit_tools(cwd="/work/repo")
    result = edit.execute({"file_path": "a.py", "old_string": "x = 1",
                           "new_string": "x = 2"})
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from .config import Config
from .editing.context import edit_context, line_context, preview
from .editing.diff_parser import DiffParser
from .editing.line_endings import detect, normalize, restore
from .editing.match_resolver import MatchStrategy
from .editing.metrics import log_edit_metric
from .editing.patch_applier import ApplyResult, HunkResult, PatchApplier
from .errors import (
    E_IO,
    EditCancelledError,
    EditError,
    EditInputError,
    EditPreconditionError,
    HunksFailedError,
)
from .file_ops import FileOperations, LocalFileOperations

logger = logging.getLogger(__name__)

_UNICODE_SPACES = re.compile("[\u00a0\u2000-\u200a\u202f\u205f\u3000]")


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


@dataclass
class ToolResult:
    """Human-readable outcome plus a success flag for the tool layer."""
    success: bool
    text: str
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


def resolve_path(file_path: str, cwd: str) -> str:
    """Expand ``~`` and resolve *file_path* against *cwd*."""
    expanded = _UNICODE_SPACES.sub(" ", file_path)
    if expanded == "~":
        expanded = os.path.expanduser("~")
    elif expanded.startswith("~/"):
        expanded = os.path.expanduser("~") + expanded[1:]
    if os.path.isabs(expanded):
        return expanded
    return os.path.normpath(os.path.join(cwd, expanded))


def _format_block_error(result: HunkResult, idx: int) -> str:
    hint = (f" (start_line: {result.hunk.start_line})"
            if result.hunk.start_line else "")
    return f"Block {idx + 1}{hint}: {result.error}"


class _EditTool:
    """Shared plumbing: path handling, cancellation, I/O, metrics."""

    name = ""
    log_tag = ""
    description = ""
    parameters: dict = {}

    def __init__(
        self,
        cwd: str | None = None,
        operations: FileOperations | None = None,
        config: Config | None = None,
    ) -> None:
        self.cwd = cwd or os.getcwd()
        self.ops = operations or LocalFileOperations()
        self.config = config or Config()
        self.applier = PatchApplier(hint_window=self.config.HINT_WINDOW)

    @property
    def definition(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def execute(self, args: dict, cancel_event: CancelSignal | None = None) -> ToolResult:
        """Run the tool; always returns a :class:`ToolResult`."""
        file_path = args.get("file_path") if isinstance(args, dict) else None
        try:
            self._check_cancelled(cancel_event)
            if not isinstance(args, dict):
                raise EditInputError(
                    f"Invalid arguments: expected an object, got {type(args).__name__}",
                    [f"Call {self.name} with an object of named parameters"],
                )
            result = self._run(args, cancel_event)
        except EditError as exc:
            logger.warning("[%s] %s: %s", self.log_tag, file_path, exc.message)
            result = ToolResult(
                success=False, text=exc.format(), error_code=exc.error_code,
            )
        except OSError as exc:
            logger.error("[%s] I/O error on %s: %s", self.log_tag, file_path, exc)
            result = ToolResult(
                success=False,
                text=f"Failed to access {file_path}: {exc}",
                error_code=E_IO,
            )
        self._record_metric(file_path, result)
        return result

    def _run(self, args: dict, cancel_event: CancelSignal | None) -> ToolResult:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_cancelled(cancel_event: CancelSignal | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise EditCancelledError()

    def _require_path(self, args: dict, purpose: str) -> str:
        file_path = args.get("file_path")
        if not isinstance(file_path, str) or not file_path.strip():
            raise EditInputError(
                "Missing required parameter: file_path",
                [f"Provide the path to the file you want to {purpose}"],
            )
        return file_path

    def _read_text(self, abs_path: str) -> str:
        return self.ops.read_bytes(abs_path).decode("utf-8", errors="surrogateescape")

    def _write_text(self, abs_path: str, text: str) -> None:
        self.ops.write_bytes(abs_path, text.encode("utf-8", errors="surrogateescape"))

    def _record_metric(self, file_path: Any, result: ToolResult) -> None:
        if not self.config.RECORD_METRICS:
            return
        entry = {
            "tool": self.name,
            "file": file_path if isinstance(file_path, str) else "",
            "success": result.success,
            "error_code": result.error_code,
        }
        entry.update(result.details)
        log_edit_metric(entry, project_root=self.cwd,
                        metrics_dir=self.config.METRICS_DIR)


class CodeEditTool(_EditTool):
    """Search-and-replace with exact → whitespace-tolerant → token-based matching."""

    name = "code_edit"
    log_tag = "CodeEdit"
    description = (
        "Edit a code file using smart search-and-replace with fuzzy matching. "
        "Tries exact match first, then whitespace-tolerant, then token-based "
        "matching. Use empty old_string to create a new file. Always read the "
        "file first to confirm its contents before editing. Include 3-5 lines "
        "of context around the target text for uniqueness."
    )
    parameters = {
        "type": "object",
        "properties": {
            "file_path": {
                "type": "string",
                "description": "Path to the file to edit (relative or absolute). "
                               "Use empty old_string to create a new file.",
            },
            "old_string": {
                "type": "string",
                "description": "The text to find and replace. Whitespace-tolerant "
                               "matching is attempted on failure. Use empty "
                               "string to create a new file.",
            },
            "new_string": {
                "type": "string",
                "description": "The replacement text, or the whole file content "
                               "when creating a new file.",
            },
            "expected_replacements": {
                "type": "integer",
                "minimum": 1,
                "description": "Number of occurrences to replace. Defaults to 1.",
            },
        },
        "required": ["file_path", "old_string", "new_string"],
    }

    def _run(self, args: dict, cancel_event: CancelSignal | None) -> ToolResult:
        file_path = self._require_path(args, "edit")
        old_string = args.get("old_string")
        new_string = args.get("new_string")
        if not isinstance(old_string, str):
            raise EditInputError(
                "Missing required parameter: old_string",
                ["Provide the text to replace, or an empty string to create a file"],
            )
        if not isinstance(new_string, str):
            raise EditInputError(
                "Missing required parameter: new_string",
                ["Provide the replacement text"],
            )
        expected = self._expected_count(args.get("expected_replacements"))
        abs_path = resolve_path(file_path, self.cwd)

        if old_string == "":
            return self._create(file_path, abs_path, new_string, cancel_event)

        old_lf = normalize(old_string)
        new_lf = normalize(new_string)
        if old_lf == new_lf:
            raise EditInputError(
                "No changes to apply: old_string and new_string are identical "
                "(after normalizing line endings)",
                [
                    "Update new_string to the intended replacement text",
                    "If you intended to verify file state only, use read instead",
                ],
            )

        if not self.ops.exists(abs_path):
            raise EditPreconditionError(
                f"File does not exist: {file_path}",
                [
                    "Verify the file path is correct",
                    "If you intended to create a new file, set old_string to an empty string",
                    "Use read or find to confirm the correct path",
                ],
            )

        raw = self._read_text(abs_path)
        self._check_cancelled(cancel_event)

        eol = detect(raw)
        outcome = self.applier.apply_edit(
            normalize(raw), old_lf, new_lf, expected, target=file_path,
        )
        details = {"strategy": outcome.match.strategy.value,
                   "replacements": outcome.match.occurrence_count}

        if not outcome.changed:
            return ToolResult(True, f"No changes needed for {file_path}",
                              details=details)

        self._check_cancelled(cancel_event)
        self._write_text(abs_path, restore(outcome.content, eol))
        logger.info(
            "[CodeEdit] Edited %s: %d replacement(s) via %s",
            file_path, outcome.match.occurrence_count, outcome.match.strategy.value,
        )

        match_note = (
            f" (matched via {outcome.match.strategy.value} strategy)"
            if outcome.match.strategy is not MatchStrategy.EXACT else ""
        )
        repl_note = f" ({expected} replacements)" if expected > 1 else ""
        context = edit_context(outcome.content, new_lf,
                               self.config.EDIT_CONTEXT_LINES,
                               offset=outcome.match.positions[0])
        return ToolResult(
            True,
            f"Successfully edited {file_path}{match_note}{repl_note}\n\n"
            f"Post-edit context:\n{context}",
            details=details,
        )

    def _create(self, file_path: str, abs_path: str, content: str,
                cancel_event: CancelSignal | None) -> ToolResult:
        if self.ops.exists(abs_path):
            raise EditPreconditionError(
                f"File already exists: {file_path}",
                [
                    "To modify an existing file, provide a non-empty old_string "
                    "that matches the current file contents",
                    "Use read to confirm the exact text to match",
                    "If you intended to overwrite the entire file, use a write tool instead",
                ],
            )

        self._check_cancelled(cancel_event)
        self.ops.make_dirs(os.path.dirname(abs_path))
        self._write_text(abs_path, content)
        logger.info("[CodeEdit] Created %s", file_path)

        line_count = len(content.split("\n"))
        return ToolResult(
            True,
            f"Created new file: {file_path} ({line_count} lines)\n\n"
            f"{preview(content, self.config.CREATE_PREVIEW_LINES)}",
            details={"created": True},
        )

    @staticmethod
    def _expected_count(value: Any) -> int:
        if value is None:
            return 1
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise EditInputError(
                f"Invalid expected_replacements: {value!r}",
                ["expected_replacements must be a positive integer (default 1)"],
            )
        return value


class ApplyDiffTool(_EditTool):
    """Multi-block SEARCH/REPLACE edits anchored by optional line hints."""

    name = "code_apply_diff"
    log_tag = "ApplyDiff"
    description = (
        "Apply targeted code modifications using line-number-anchored "
        "SEARCH/REPLACE blocks. Supports multiple blocks in a single call for "
        "related changes to the same file. Each block uses :start_line: to "
        "narrow the search window for reliable matching. Always read the file "
        "first to get accurate line numbers."
    )
    parameters = {
        "type": "object",
        "properties": {
            "file_path": {
                "type": "string",
                "description": "Path to the file to modify (relative or absolute).",
            },
            "diff": {
                "type": "string",
                "description": (
                    "One or more SEARCH/REPLACE blocks:\n\n"
                    "<<<<<<< SEARCH\n:start_line:42\n-------\n"
                    "[exact content to find in the file]\n=======\n"
                    "[new content to replace with]\n>>>>>>> REPLACE"
                ),
            },
        },
        "required": ["file_path", "diff"],
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.parser = DiffParser()

    def _run(self, args: dict, cancel_event: CancelSignal | None) -> ToolResult:
        file_path = self._require_path(args, "modify")
        diff = args.get("diff")
        if not isinstance(diff, str) or not diff.strip():
            raise EditInputError(
                "Missing required parameter: diff",
                ["Provide at least one SEARCH/REPLACE block"],
            )

        hunks = self.parser.parse(diff)
        abs_path = resolve_path(file_path, self.cwd)

        if not self.ops.exists(abs_path):
            raise EditPreconditionError(
                f"File does not exist: {file_path}",
                [
                    "Verify the file path is correct",
                    "Use read or find to confirm the correct path",
                ],
            )

        raw = self._read_text(abs_path)
        self._check_cancelled(cancel_event)

        eol = detect(raw)
        content = normalize(raw)
        result = self.applier.apply_hunks(content, hunks)

        if not result.success:
            errors = "\n".join(
                _format_block_error(r, i) for i, r in enumerate(result.results))
            raise HunksFailedError(
                f"All {result.failed} diff block(s) failed to apply to "
                f"{file_path}:\n{errors}",
                [
                    "Use read to confirm the file's current contents and line numbers",
                    "Ensure the search content matches exactly (including whitespace/indentation)",
                    "Verify :start_line: values are accurate",
                    "If the file has changed, re-read and rebuild the diff",
                ],
                results=result.results,
            )

        details = {
            "strategy": self._overall_strategy(result),
            "blocks_total": len(result.results),
            "blocks_applied": result.applied,
        }

        if result.content == content:
            return ToolResult(True, f"No changes needed for {file_path}",
                              details=details)

        self._check_cancelled(cancel_event)
        self._write_text(abs_path, restore(result.content, eol))
        logger.info("[ApplyDiff] Applied %d/%d block(s) to %s",
                    result.applied, len(result.results), file_path)

        return ToolResult(True, self._report(file_path, result), details=details)

    @staticmethod
    def _overall_strategy(result: ApplyResult) -> str:
        strategies = {r.strategy for r in result.results if r.success}
        if MatchStrategy.WHITESPACE_TOLERANT in strategies:
            return MatchStrategy.WHITESPACE_TOLERANT.value
        return MatchStrategy.EXACT.value

    def _report(self, file_path: str, result: ApplyResult) -> str:
        total = len(result.results)
        parts = [f"Applied {result.applied}/{total} diff block(s) to {file_path}"]

        for i, r in enumerate(result.results):
            if r.success:
                line_info = f" at line {r.matched_at_line}" if r.matched_at_line else ""
                fuzzy = (f" (matched via {r.strategy.value} strategy)"
                         if r.strategy is not MatchStrategy.EXACT else "")
                parts.append(f"  ✓ Block {i + 1}{line_info}{fuzzy}")

        if result.failed:
            parts.append("")
            parts.append(f"⚠️ {result.failed} block(s) failed:")
            for i, r in enumerate(result.results):
                if not r.success:
                    parts.append(f"  ✗ {_format_block_error(r, i)}")
            parts.append("")
            parts.append("Use read to check the file and re-apply failed blocks.")

        first = result.first_success
        if first is not None and first.result_line:
            parts.append("")
            parts.append(f"Post-edit context (around line {first.result_line}):")
            parts.append(line_context(
                result.content, first.result_line,
                before=self.config.DIFF_CONTEXT_BEFORE,
                after=self.config.DIFF_CONTEXT_AFTER,
            ))

        if total == 1 and self.config.SINGLE_BLOCK_NOTICE:
            parts.append("")
            parts.append(
                "<notice>Multiple related changes can be included as additional "
                "SEARCH/REPLACE blocks in a single code_apply_diff call for "
                "efficiency.</notice>"
            )

        return "\n".join(parts)


def create_edit_tools(
    cwd: str | None = None,
    operations: FileOperations | None = None,
    config: Config | None = None,
) -> tuple[CodeEditTool, ApplyDiffTool]:
    """Create both edit tools sharing one file capability and config."""
    return (
        CodeEditTool(cwd, operations, config),
        ApplyDiffTool(cwd, operations, config),
    )
