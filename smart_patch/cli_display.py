"""
CLI display — log file setup, staged-change diffs, and the Textual patch
review screen used by ``smartpatch --dry-run`` / ``--review``.

Staged changes are passed around as ``{path: (old_text | None, new_text)}``
where ``None`` marks a file that does not exist yet.
"""

from __future__ import annotations

import difflib
import logging
import os
from dataclasses import dataclass
from datetime import datetime

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Static

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(log_dir: str = ".smartpatch/logs",
                 level: int = logging.DEBUG) -> logging.Logger:
    """Send ``smart_patch.*`` records to ``<log_dir>/smartpatch_<ts>.log``."""
    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    handler = logging.FileHandler(
        os.path.join(log_dir, f"smartpatch_{stamp}.log"), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))

    package_logger = logging.getLogger("smart_patch")
    package_logger.setLevel(level)
    package_logger.addHandler(handler)
    return package_logger


# ---------------------------------------------------------------------------
# Staged changes
# ---------------------------------------------------------------------------

@dataclass
class StagedChange:
    """One pending write: the file's current text (if any) and its new text."""
    path: str
    old: str | None
    new: str

    @property
    def is_new(self) -> bool:
        return self.old is None

    @property
    def diff(self) -> str:
        """Unified diff, empty for new files and unchanged content."""
        if self.old is None or self.old == self.new:
            return ""
        lines = difflib.unified_diff(
            self.old.splitlines(keepends=True),
            self.new.splitlines(keepends=True),
            fromfile=f"a/{self.path}",
            tofile=f"b/{self.path}",
            lineterm="",
        )
        return "\n".join(line.rstrip("\r\n") for line in lines)

    def line_counts(self) -> tuple[int, int]:
        """(added, removed) line counts."""
        if self.old is None:
            return len(self.new.splitlines()), 0
        added = removed = 0
        for line in self.diff.splitlines():
            if line.startswith(("+++", "---")):
                continue
            if line.startswith("+"):
                added += 1
            elif line.startswith("-"):
                removed += 1
        return added, removed

    @property
    def summary(self) -> str:
        added, removed = self.line_counts()
        tag = " (new file)" if self.is_new else ""
        return f"{self.path}{tag}  +{added} -{removed}"


def staged_changes(changes: dict[str, tuple[str | None, str]]) -> list[StagedChange]:
    """Changes that would actually alter something on disk, sorted by path."""
    staged = [StagedChange(path, old, new) for path, (old, new) in changes.items()]
    return sorted((c for c in staged if c.is_new or c.old != c.new),
                  key=lambda c: c.path)


# ANSI and Rich markup styles keyed by diff line kind
_ANSI = {"header": ("\033[1m", "\033[0m"), "hunk": ("\033[36m", "\033[0m"),
         "add": ("\033[32m", "\033[0m"), "del": ("\033[31m", "\033[0m")}
_RICH = {"header": ("[bold]", "[/bold]"), "hunk": ("[cyan]", "[/cyan]"),
         "add": ("[green]", "[/green]"), "del": ("[red]", "[/red]")}


def _line_kind(line: str) -> str | None:
    if line.startswith(("+++", "---")):
        return "header"
    if line.startswith("@@"):
        return "hunk"
    if line.startswith("+"):
        return "add"
    if line.startswith("-"):
        return "del"
    return None


def _styled(diff_text: str, styles: dict, escape=lambda s: s) -> str:
    out: list[str] = []
    for line in diff_text.splitlines():
        kind = _line_kind(line)
        text = escape(line)
        if kind is None:
            out.append(text)
        else:
            start, end = styles[kind]
            out.append(f"{start}{text}{end}")
    return "\n".join(out)


def format_colored_diff(diff_text: str) -> str:
    """Unified diff with ANSI colors for terminal output."""
    return _styled(diff_text, _ANSI)


def _rich_diff(diff_text: str) -> str:
    return _styled(diff_text, _RICH, escape=lambda s: s.replace("[", "\\["))


def _print_changes(staged: list[StagedChange]) -> None:
    for change in staged:
        print(f"\n=== {change.summary}")
        if change.diff:
            print(format_colored_diff(change.diff))


def show_diffs(changes: dict[str, tuple[str | None, str]]) -> list[str]:
    """Print pending changes; returns the unified diffs of modified files."""
    staged = staged_changes(changes)
    _print_changes(staged)
    return [c.diff for c in staged if c.diff]


# ---------------------------------------------------------------------------
# Review screen
# ---------------------------------------------------------------------------

class PatchReviewApp(App):
    """Scrollable review of staged changes; ``y`` writes, ``n`` discards."""

    CSS = """
    #summary {
        dock: top;
        height: 3;
        padding: 1 2;
        background: $boost;
        text-style: bold;
    }
    #changes {
        height: 1fr;
        padding: 0 2;
    }
    .change-title {
        margin-top: 1;
        color: $warning;
        text-style: bold;
    }
    #choices {
        dock: bottom;
        height: 3;
        align: center middle;
    }
    #choices Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("y", "decide(True)", "Write changes"),
        Binding("n", "decide(False)", "Discard"),
        Binding("escape", "decide(False)", "Discard", show=False),
    ]

    def __init__(self, staged: list[StagedChange]) -> None:
        super().__init__()
        self._staged = staged
        self.approved = False

    def compose(self) -> ComposeResult:
        counts = [c.line_counts() for c in self._staged]
        yield Static(
            f"{len(self._staged)} file(s) staged  "
            f"+{sum(a for a, _ in counts)} -{sum(r for _, r in counts)}",
            id="summary",
        )
        with VerticalScroll(id="changes"):
            for change in self._staged:
                yield Static(change.summary.replace("[", "\\["),
                             classes="change-title")
                if change.diff:
                    yield Static(_rich_diff(change.diff))
                else:
                    yield Static(change.new.replace("[", "\\["))
        with Horizontal(id="choices"):
            yield Button("Write (y)", id="write", variant="success")
            yield Button("Discard (n)", id="discard", variant="error")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.action_decide(event.button.id == "write")

    def action_decide(self, approve: bool) -> None:
        self.approved = approve
        self.exit()


def prompt_diff_approval(changes: dict[str, tuple[str | None, str]],
                         auto: bool = False) -> bool:
    """Ask whether the staged *changes* should be written.

    Parameters
    ----------
    changes:
        ``{path: (old_text or None, new_text)}``.
    auto:
        Approve without asking; the diffs are only logged.

    Returns ``True`` when there is nothing to review.
    """
    staged = staged_changes(changes)
    if not staged:
        return True

    if auto:
        for change in staged:
            logger.info("[Review] auto-approved %s\n%s", change.summary, change.diff)
        return True

    try:
        app = PatchReviewApp(staged)
        app.run()
        return app.approved
    except Exception as e:
        logger.warning("[Review] Textual viewer unavailable: %s", e)

    return _console_review(staged)


def _console_review(staged: list[StagedChange]) -> bool:
    _print_changes(staged)
    while True:
        try:
            answer = input("\nWrite these changes? [y/n] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
