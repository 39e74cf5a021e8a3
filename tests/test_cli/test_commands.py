"""Tests for the score and classify CLI commands."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from compliance_scoring.cli import main


# ── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def assessment_file(tmp_path: Path) -> Path:
    path = tmp_path / "assessment.json"
    path.write_text(json.dumps({
        "gaps": [
            {
                "id": "gap-1",
                "category": "Governance",
                "title": "No board-level risk oversight",
                "severity": "CRITICAL",
            }
        ],
        "risks": [],
        "previous_scores": [38, 40, 42],
    }))
    return path


@pytest.fixture
def evidence_files(tmp_path: Path) -> list[Path]:
    files = {
        "notes.txt": "Hi team, please remember to lock your screens. Thanks!",
        "users.csv": '"user","role"\n"alice","admin"',
        "handbook.md": "Version 2\nApproved by: CISO",
    }
    paths = []
    for name, content in files.items():
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        paths.append(path)
    return paths


# ── score ─────────────────────────────────────────────────


class TestScoreCommand:
    def test_json_output(self, runner, assessment_file):
        result = runner.invoke(main, ["score", str(assessment_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["breakdown"]["overall"] == 46
        assert data["breakdown"]["composite_index"] == 45
        assert data["breakdown"]["by_category"]["GOVERNANCE"] == 0
        assert data["risk_level"] == "HIGH"
        assert data["trend"]["direction"] == "improving"
        assert data["trend"]["confidence"] == 80
        assert data["insights"]["level"] == "Fair"

    def test_history_option_overrides_file(self, runner, assessment_file):
        result = runner.invoke(
            main, ["score", str(assessment_file), "--history", "60,58", "--json"]
        )

        assert result.exit_code == 0, result.output
        trend = json.loads(result.stdout)["trend"]
        assert trend["direction"] == "declining"
        assert trend["confidence"] == 50

    def test_text_output(self, runner, assessment_file):
        result = runner.invoke(main, ["score", str(assessment_file)])

        assert result.exit_code == 0, result.output
        assert "Overall score: 46/100 (Fair)" in result.output
        assert "Risk level: HIGH" in result.output
        assert "Address No board-level risk oversight" in result.output

    def test_empty_assessment(self, runner, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("{}")

        result = runner.invoke(main, ["score", str(path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["breakdown"]["overall"] == 0
        assert data["insights"]["strengths"] == ["Comprehensive assessment completed"]

    def test_invalid_gap_rejected(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"gaps": [{"id": "g", "category": "X", "gap_size": 150}]}))

        result = runner.invoke(main, ["score", str(path)])

        assert result.exit_code == 2
        assert "Invalid assessment data" in result.output

    def test_malformed_json_rejected(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        result = runner.invoke(main, ["score", str(path)])

        assert result.exit_code == 2
        assert "not valid JSON" in result.output


# ── classify ──────────────────────────────────────────────


class TestClassifyCommand:
    def test_json_output(self, runner, evidence_files):
        result = runner.invoke(
            main, ["classify", *map(str, evidence_files), "--heuristic-only", "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        tiers = {Path(path).name: r["tier"] for path, r in data["results"].items()}
        assert tiers == {"notes.txt": "TIER_0", "users.csv": "TIER_2", "handbook.md": "TIER_1"}
        assert data["stats"]["strategy"] == "heuristic"
        assert data["stats"]["heuristic_classified"] == 3

    def test_text_output(self, runner, evidence_files):
        result = runner.invoke(main, ["classify", str(evidence_files[0]), "--heuristic-only"])

        assert result.exit_code == 0, result.output
        assert "TIER_0" in result.output
        assert "notes.txt" in result.output
        assert "self-declared" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["classify", str(tmp_path / "absent.txt")])
        assert result.exit_code == 2


# ── global options ────────────────────────────────────────


class TestGlobalOptions:
    def test_debug_sets_root_level(self, runner, assessment_file):
        root = logging.getLogger()
        level = root.level
        try:
            result = runner.invoke(main, ["--debug", "score", str(assessment_file), "--json"])

            assert result.exit_code == 0, result.output
            assert root.level == logging.DEBUG
            assert json.loads(result.stdout)["breakdown"]["overall"] == 46
        finally:
            root.setLevel(level)

    @pytest.mark.parametrize("command", ["score", "classify"])
    def test_metrics_flag_starts_server(
        self, runner, monkeypatch, assessment_file, evidence_files, command
    ):
        collector = MagicMock()
        monkeypatch.setattr("compliance_scoring.cli.get_metrics", lambda: collector)
        target = assessment_file if command == "score" else evidence_files[0]
        extra = ["--heuristic-only"] if command == "classify" else []

        result = runner.invoke(main, [command, str(target), *extra, "--metrics"])

        assert result.exit_code == 0, result.output
        collector.start_server.assert_called_once_with()

    def test_metrics_server_off_by_default(self, runner, monkeypatch, assessment_file):
        collector = MagicMock()
        monkeypatch.setattr("compliance_scoring.cli.get_metrics", lambda: collector)

        result = runner.invoke(main, ["score", str(assessment_file)])

        assert result.exit_code == 0, result.output
        collector.start_server.assert_not_called()
        collector.record_score.assert_called_once_with("Fair")
