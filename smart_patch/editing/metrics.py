"""
Edit metrics — tracks patch-tool outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".smartpatch"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None,
                  metrics_dir: str = _METRICS_DIR) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir, _METRICS_FILE)


def log_edit_metric(
    data: dict,
    project_root: str | None = None,
    metrics_dir: str = _METRICS_DIR,
) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (tool, file, success, strategy, blocks_*).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory under *project_root* holding the log.
    """
    path = _metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Metrics] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str = _METRICS_DIR,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate``, ``partial_rate``,
        ``fallback_rate`` (non-exact strategy), and ``strategies``
        (percentage per strategy name).
    """
    path = _metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue
        except OSError as exc:
            logger.warning("[Metrics] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "partial_rate": 0.0,
            "fallback_rate": 0.0,
            "strategies": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("success", False))
    partials = sum(
        1 for e in entries
        if e.get("success", False)
        and e.get("blocks_applied", 0) < e.get("blocks_total", 0)
    )
    with_strategy = [e["strategy"] for e in entries if e.get("strategy")]
    fallbacks = sum(1 for s in with_strategy if s != "exact")
    strategies = Counter(with_strategy)

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "partial_rate": partials / total * 100,
        "fallback_rate": (
            fallbacks / len(with_strategy) * 100 if with_strategy else 0.0
        ),
        "strategies": {
            name: count / len(with_strategy) * 100
            for name, count in strategies.most_common()
        },
    }
