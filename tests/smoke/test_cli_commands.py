"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate the analytics deeply - the unit tests do that.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from src.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru output out of the captured command output."""
    logger.disable("src")
    yield
    logger.enable("src")


@pytest.fixture
def progress_file(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({
        "student_id": "s-1",
        "progress": {
            "counting": {
                "attempts": [
                    {"correct": 4, "total": 4, "timestamp": "2024-05-28T10:00:00Z"},
                ],
                "timeSpent": 40,
            },
            "addition": {
                "attempts": [
                    {"correct": 1, "total": 2, "timestamp": "2024-05-29T10:00:00Z"},
                    {"correct": 2, "total": 2, "timestamp": "2024-05-30T10:00:00Z"},
                ],
                "timeSpent": 20,
            },
        },
    }))
    return path


@pytest.fixture
def curriculum_file(tmp_path):
    path = tmp_path / "curriculum.json"
    path.write_text(json.dumps({
        "counting": {"difficulty": "easy", "importance": 9},
        "addition": {"prerequisites": ["counting"], "importance": 8},
        "subtraction": {"prerequisites": ["counting"], "importance": 6},
        "division": {"prerequisites": ["addition", "subtraction"], "difficulty": "hard"},
    }))
    return path


@pytest.fixture
def assessments_file(tmp_path):
    path = tmp_path / "assessments.json"
    path.write_text(json.dumps([
        {"results": [
            {"topic": "division", "isCorrect": False, "studentAnswer": "3", "correctAnswer": "4"},
            {"topic": "division", "isCorrect": False},
            {"topic": "division", "isCorrect": True},
            {"topic": "division", "isCorrect": False},
        ]},
    ]))
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "next-topic" in result.output
        assert "validate-curriculum" in result.output

    def test_db_help(self):
        result = runner.invoke(app, ["db", "--help"])
        assert result.exit_code == 0
        assert "init" in result.output


class TestAnalyticsCommands:
    def test_mastery_table(self, progress_file):
        result = runner.invoke(app, ["mastery", str(progress_file)])
        assert result.exit_code == 0, result.output
        assert "counting" in result.output
        assert "Mastered" in result.output

    def test_mastery_json(self, progress_file):
        result = runner.invoke(app, ["mastery", str(progress_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["counting"]["level"] == 100
        assert data["addition"]["level"] == 66

    def test_next_topic(self, progress_file, curriculum_file):
        result = runner.invoke(app, ["next-topic", str(progress_file), str(curriculum_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["recommendation"]["topic"] == "addition"
        assert [a["topic"] for a in data["alternatives"]] == ["subtraction"]

    def test_next_topic_panel(self, progress_file, curriculum_file):
        result = runner.invoke(app, ["next-topic", str(progress_file), str(curriculum_file)])
        assert result.exit_code == 0, result.output
        assert "NEXT TOPIC" in result.output

    def test_path(self, progress_file, curriculum_file):
        result = runner.invoke(app, [
            "path", str(progress_file), str(curriculum_file),
            "-t", "addition", "-t", "subtraction", "--days", "6", "--json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert len(data["phases"]) == 2
        assert len(data["daily_schedule"]) == 6

    def test_gaps(self, assessments_file):
        result = runner.invoke(app, ["gaps", str(assessments_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["summary"]["critical"] == 1
        assert data["gaps"][0]["accuracy"] == 25

    def test_velocity(self, progress_file):
        result = runner.invoke(app, [
            "velocity", str(progress_file), "--now", "2024-06-01T00:00:00+00:00", "--json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["topics_started"] == 2
        assert data["topics_mastered"] == 1

    def test_predict_mastered_topic(self, progress_file):
        result = runner.invoke(app, ["predict", "counting", str(progress_file)])
        assert result.exit_code == 0, result.output
        assert "already mastered" in result.output

    @pytest.mark.parametrize(
        "outcomes,expected",
        [([], "easy"), (["1", "1", "1", "1", "1"], "hard"), (["y", "n", "y", "n", "y"], "medium")],
    )
    def test_difficulty(self, outcomes, expected):
        result = runner.invoke(app, ["difficulty", *outcomes])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == expected


class TestCurriculumValidation:
    def test_valid_curriculum(self, curriculum_file):
        result = runner.invoke(app, ["validate-curriculum", str(curriculum_file)])
        assert result.exit_code == 0
        assert "4 topics" in result.output

    def test_cyclic_curriculum_fails(self, tmp_path):
        path = tmp_path / "cyclic.json"
        path.write_text(json.dumps({"a": {"prerequisites": ["b"]}, "b": {"prerequisites": ["a"]}}))
        result = runner.invoke(app, ["validate-curriculum", str(path)])
        assert result.exit_code == 1
        assert "cycle" in result.output

    def test_missing_file_fails(self, tmp_path):
        result = runner.invoke(app, ["mastery", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_non_numeric_importance_fails_cleanly(self, tmp_path):
        path = tmp_path / "bad_importance.json"
        path.write_text(json.dumps({"a": {"importance": "high"}}))
        result = runner.invoke(app, ["validate-curriculum", str(path)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "Invalid curriculum" in result.output


class TestMalformedRecords:
    @pytest.mark.parametrize(
        "attempt",
        [
            {"correct": 1, "total": 2, "timestamp": "yesterday"},
            {"correct": "most", "total": 2},
        ],
    )
    def test_bad_attempt_fails_cleanly(self, tmp_path, attempt):
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"algebra": {"attempts": [attempt]}}))
        result = runner.invoke(app, ["mastery", str(path)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "Invalid progress record" in result.output

    def test_bad_assessment_fails_cleanly(self, tmp_path):
        path = tmp_path / "assessments.json"
        path.write_text(json.dumps([{"completedAt": "last week", "results": []}]))
        result = runner.invoke(app, ["gaps", str(path)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "Invalid assessment record" in result.output
