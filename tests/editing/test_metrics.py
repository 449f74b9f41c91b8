"""Tests for edit metrics logging and stats."""

import json
import os

import pytest

from smart_patch.editing.metrics import log_edit_metric, read_edit_stats


@pytest.fixture
def tmp_project(tmp_path):
    return str(tmp_path)


def _metrics_file(root, metrics_dir=".smartpatch"):
    return os.path.join(root, metrics_dir, "edit_metrics.jsonl")


class TestLogEditMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_edit_metric(
            {"tool": "code_edit", "file": "src/auth.py", "success": True,
             "strategy": "exact"},
            project_root=tmp_project,
        )

        path = _metrics_file(tmp_project)
        assert os.path.isfile(path)

        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["file"] == "src/auth.py"
        assert entry["strategy"] == "exact"
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        log_edit_metric({"file": "a.py"}, project_root=tmp_project)
        log_edit_metric({"file": "b.py"}, project_root=tmp_project)
        log_edit_metric({"file": "c.py"}, project_root=tmp_project)

        with open(_metrics_file(tmp_project)) as f:
            lines = f.readlines()
        assert len(lines) == 3

    def test_custom_metrics_dir(self, tmp_project):
        log_edit_metric({"file": "a.py"}, project_root=tmp_project,
                        metrics_dir="stats")
        assert os.path.isfile(_metrics_file(tmp_project, "stats"))


class TestReadEditStats:
    def test_empty_stats(self, tmp_project):
        stats = read_edit_stats(project_root=tmp_project)

        assert stats["total_edits"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["partial_rate"] == 0.0
        assert stats["fallback_rate"] == 0.0
        assert stats["strategies"] == {}

    def test_stats_from_entries(self, tmp_project):
        entries = [
            {"tool": "code_edit", "file": "a.py", "success": True,
             "strategy": "exact"},
            {"tool": "code_apply_diff", "file": "b.py", "success": True,
             "strategy": "whitespace-tolerant", "blocks_total": 2,
             "blocks_applied": 1},
            {"tool": "code_edit", "file": "c.py", "success": False,
             "error_code": "E_NOT_FOUND"},
        ]
        for e in entries:
            log_edit_metric(e, project_root=tmp_project)

        stats = read_edit_stats(last_n=50, project_root=tmp_project)

        assert stats["total_edits"] == 3
        # 2 successes / 3 total ≈ 66.7%
        assert 66 <= stats["success_rate"] <= 67
        # 1 partial / 3 total ≈ 33.3%
        assert 33 <= stats["partial_rate"] <= 34
        # 1 of the 2 entries with a strategy fell back
        assert stats["fallback_rate"] == 50.0
        assert stats["strategies"] == {"exact": 50.0, "whitespace-tolerant": 50.0}

    def test_skips_corrupt_lines(self, tmp_project):
        log_edit_metric({"success": True}, project_root=tmp_project)
        with open(_metrics_file(tmp_project), "a") as f:
            f.write("{not json\n\n")
        log_edit_metric({"success": True}, project_root=tmp_project)

        stats = read_edit_stats(project_root=tmp_project)
        assert stats["total_edits"] == 2

    def test_last_n_limits(self, tmp_project):
        for i in range(10):
            log_edit_metric(
                {"file": f"f{i}.py", "success": True, "strategy": "exact"},
                project_root=tmp_project,
            )

        stats = read_edit_stats(last_n=5, project_root=tmp_project)
        assert stats["total_edits"] == 5
