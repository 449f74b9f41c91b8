"""
smart_patch — fuzzy-matching file edit tools for coding agents.

Public API for library usage::

    from smart_patch import create_edit_tools

    edit, apply_diff = create_edit_tools(cwd="/work/repo")
    result = apply_diff.execute({"file_path": "app.py", "diff": diff_text})
"""

from .config import Config
from .errors import EditError
from .file_ops import (
    DryRunFileOperations, FileOperations, InMemoryFileOperations,
    LocalFileOperations,
)
from .tools import ApplyDiffTool, CodeEditTool, ToolResult, create_edit_tools

__all__ = [
    "Config", "EditError",
    "FileOperations", "LocalFileOperations", "InMemoryFileOperations",
    "DryRunFileOperations",
    "ApplyDiffTool", "CodeEditTool", "ToolResult", "create_edit_tools",
]
