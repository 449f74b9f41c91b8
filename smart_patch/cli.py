"""
`smartpatch` command line — run the edit tools against local files.

Commands
--------
smartpatch edit FILE --old TEXT --new TEXT [--expected N]
smartpatch edit FILE --old-file P --new-file P
smartpatch apply-diff FILE [--diff-file P]     -- diff read from stdin if omitted
smartpatch batch PLAN.yaml                     -- apply a list of edits in order
smartpatch stats [--last-n N]                  -- rolling edit metrics

Global options: --config, --cwd, --dry-run (show diff, write nothing),
--review (approve/reject in a TUI before writing), --no-log.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import yaml
from tqdm import tqdm

from .cli_display import prompt_diff_approval, setup_logger, show_diffs
from .config import Config
from .editing.metrics import read_edit_stats
from .file_ops import DryRunFileOperations, FileOperations, LocalFileOperations
from .tools import ApplyDiffTool, CodeEditTool, ToolResult, create_edit_tools

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_arg_text(text: str | None, path: str | None) -> str | None:
    if path is not None:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    return text


def _print_result(result: ToolResult) -> None:
    print(result.text, file=sys.stdout if result.success else sys.stderr)


def _pending_changes(ops: DryRunFileOperations) -> dict[str, tuple[str | None, str]]:
    changes: dict[str, tuple[str | None, str]] = {}
    for path, data in ops.pending.items():
        old = ops.original(path)
        changes[path] = (
            old.decode("utf-8", errors="replace") if old is not None else None,
            data.decode("utf-8", errors="replace"),
        )
    return changes


def _finish_staged(ops: FileOperations, args: argparse.Namespace) -> bool:
    """Show or commit staged writes. Returns False if the user rejected them."""
    if not isinstance(ops, DryRunFileOperations) or not ops.pending:
        return True

    changes = _pending_changes(ops)
    if args.dry_run:
        show_diffs(changes)
        ops.discard()
        print("\n(dry run: no files written)")
        return True

    if prompt_diff_approval(changes):
        written = ops.commit()
        print(f"Wrote {len(written)} file(s).")
        return True

    ops.discard()
    print("Changes rejected; no files written.", file=sys.stderr)
    return False


def _load_plan(path: str) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("edits", [])
    if not isinstance(data, list) or not all(isinstance(e, dict) for e in data):
        raise ValueError(f"{path}: expected a list of edit mappings")
    return data


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_edit(args: argparse.Namespace, edit: CodeEditTool,
              apply_diff: ApplyDiffTool) -> bool:
    request = {
        "file_path": args.file,
        "old_string": _read_arg_text(args.old, args.old_file),
        "new_string": _read_arg_text(args.new, args.new_file),
    }
    if args.expected is not None:
        request["expected_replacements"] = args.expected
    result = edit.execute(request)
    _print_result(result)
    return result.success


def _cmd_apply_diff(args: argparse.Namespace, edit: CodeEditTool,
                    apply_diff: ApplyDiffTool) -> bool:
    if args.diff_file:
        diff = _read_arg_text(None, args.diff_file)
    else:
        diff = sys.stdin.read()
    result = apply_diff.execute({"file_path": args.file, "diff": diff})
    _print_result(result)
    return result.success


def _cmd_batch(args: argparse.Namespace, edit: CodeEditTool,
               apply_diff: ApplyDiffTool) -> bool:
    try:
        plan = _load_plan(args.plan)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Failed to load plan: {exc}", file=sys.stderr)
        return False

    failures = 0
    for i, entry in enumerate(tqdm(plan, unit="edit", desc="Applying",
                                   disable=not plan), 1):
        tool = apply_diff if "diff" in entry else edit
        result = tool.execute(entry)
        if not result.success:
            failures += 1
        label = f"{i}/{len(plan)} {entry.get('file_path', '?')}"
        tqdm.write(f"[{label}] {result.text}",
                   file=sys.stdout if result.success else sys.stderr)

    print(f"\n{len(plan) - failures}/{len(plan)} edit(s) succeeded.")
    return failures == 0


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> bool:
    stats = read_edit_stats(last_n=args.last_n, project_root=args.cwd,
                            metrics_dir=cfg.METRICS_DIR)
    if stats["total_edits"] == 0:
        print("No edit metrics found yet.")
        print("Enable record_metrics in .smartpatch.yaml or set "
              "SMARTPATCH_RECORD_METRICS=true.")
        return True

    print(f"\nEdit stats (last {args.last_n} invocations)")
    print("-" * 40)
    print(f"  Total invocations : {stats['total_edits']}")
    print(f"  Success rate      : {stats['success_rate']:.0f}%")
    print(f"  Partial rate      : {stats['partial_rate']:.0f}%")
    print(f"  Fallback rate     : {stats['fallback_rate']:.0f}%")
    for name, pct in stats["strategies"].items():
        print(f"    {name:<20}{pct:.0f}%")
    print()
    return True


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartpatch",
        description="Fuzzy-matching search/replace and SEARCH/REPLACE patching",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .smartpatch.yaml config file")
    parser.add_argument("--cwd", default=os.getcwd(),
                        help="Directory relative paths resolve against")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show the resulting diff without writing files")
    parser.add_argument("--review", action="store_true",
                        help="Review and approve the diff before writing files")
    parser.add_argument("--no-log", action="store_true",
                        help="Do not write a log file")

    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    edit_p = subparsers.add_parser("edit", help="Single search-and-replace edit")
    edit_p.add_argument("file", help="File to edit (or create with an empty --old)")
    old = edit_p.add_mutually_exclusive_group(required=True)
    old.add_argument("--old", help="Text to find")
    old.add_argument("--old-file", help="Read the text to find from a file")
    new = edit_p.add_mutually_exclusive_group(required=True)
    new.add_argument("--new", help="Replacement text")
    new.add_argument("--new-file", help="Read the replacement text from a file")
    edit_p.add_argument("--expected", type=int, default=None,
                        help="Expected number of occurrences (default: 1)")
    edit_p.set_defaults(func=_cmd_edit)

    diff_p = subparsers.add_parser("apply-diff",
                                   help="Apply SEARCH/REPLACE blocks to a file")
    diff_p.add_argument("file", help="File to modify")
    diff_p.add_argument("--diff-file", default=None,
                        help="File holding the blocks (default: stdin)")
    diff_p.set_defaults(func=_cmd_apply_diff)

    batch_p = subparsers.add_parser("batch", help="Apply a YAML list of edits")
    batch_p.add_argument("plan", help="YAML file: a list (or 'edits:' key) of requests")
    batch_p.set_defaults(func=_cmd_batch)

    stats_p = subparsers.add_parser("stats", help="Show rolling edit metrics")
    stats_p.add_argument("--last-n", dest="last_n", type=int, default=50,
                         help="Number of recent invocations to include")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if not args.no_log:
        setup_logger(cfg.LOG_DIR)

    if args.cmd == "stats":
        return 0 if _cmd_stats(args, cfg) else 1

    ops: FileOperations = LocalFileOperations()
    if args.dry_run or args.review:
        ops = DryRunFileOperations(ops)

    logger.info("[CLI] %s (dry_run=%s, review=%s)",
                args.cmd, args.dry_run, args.review)
    edit, apply_diff = create_edit_tools(cwd=args.cwd, operations=ops, config=cfg)
    ok = args.func(args, edit, apply_diff)
    approved = _finish_staged(ops, args)
    return 0 if ok and approved else 1


if __name__ == "__main__":
    sys.exit(main())
