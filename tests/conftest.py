"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.models import (  # noqa: E402
    Attempt,
    TopicProgress,
    assessments_from_list,
    graph_from_dict,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database, API)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_attempts(*scores, start=None, step_days=1):
    """Build attempts from (correct, total) pairs, one day apart."""
    start = start or datetime(2024, 5, 1, tzinfo=UTC)
    return [
        Attempt(correct=c, total=t, timestamp=start + timedelta(days=i * step_days))
        for i, (c, t) in enumerate(scores)
    ]


@pytest.fixture
def attempts_from():
    """Factory fixture: attempts_from((correct, total), ...) -> list[Attempt]."""
    return make_attempts


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixed_now():
    """Reference 'now' for window-based calculations."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def perfect_attempts():
    """Five perfect attempts (mastery 72, proficient)."""
    return make_attempts((4, 4), (5, 5), (3, 3), (2, 2), (6, 6))


@pytest.fixture
def sample_curriculum():
    """Small arithmetic curriculum with one locked branch."""
    return graph_from_dict({
        "counting": {"prerequisites": [], "difficulty": "easy", "importance": 9},
        "addition": {"prerequisites": ["counting"], "difficulty": "easy", "importance": 8},
        "subtraction": {"prerequisites": ["counting"], "difficulty": "medium", "importance": 6},
        "multiplication": {"prerequisites": ["addition"], "difficulty": "medium", "importance": 7},
        "fractions": {"prerequisites": ["multiplication", "subtraction"], "difficulty": "hard"},
    })


@pytest.fixture
def sample_progress(perfect_attempts):
    """Student who mastered counting and is midway through subtraction."""
    return {
        "counting": TopicProgress(attempts=perfect_attempts, time_spent=45),
        "subtraction": TopicProgress(attempts=make_attempts((1, 2), (2, 2)), time_spent=20),
    }


@pytest.fixture
def sample_assessments():
    """Two graded assessments sharing the 'fractions' topic."""
    return assessments_from_list([
        {
            "assessmentId": "quiz-1",
            "results": [
                {"topic": "fractions", "isCorrect": False, "question": "1/2 + 1/4",
                 "studentAnswer": "2/6", "correctAnswer": "3/4"},
                {"topic": "fractions", "isCorrect": False, "question": "1/3 + 1/3",
                 "studentAnswer": "2/6", "correctAnswer": "2/3"},
                {"topic": "fractions", "isCorrect": True, "question": "1/2 of 8"},
                {"topic": "fractions", "isCorrect": False, "question": "3/4 - 1/4",
                 "studentAnswer": "2/0", "correctAnswer": "1/2"},
                {"topic": "fractions", "isCorrect": False, "question": "2/3 x 3",
                 "studentAnswer": "6/9", "correctAnswer": "2"},
                {"topic": "addition", "isCorrect": True},
                {"topic": "addition", "isCorrect": True},
            ],
        },
        {
            "assessmentId": "quiz-2",
            "results": [
                {"topic": "fractions", "isCorrect": False, "question": "1/5 + 1/5"},
                {"topic": "fractions", "isCorrect": False, "question": "5/10 simplified"},
                {"topic": "fractions", "isCorrect": True, "question": "1/4 of 12"},
                {"topic": "fractions", "isCorrect": False, "question": "1 - 1/3"},
                {"topic": "fractions", "isCorrect": False, "question": "2/4 vs 1/2"},
                {"topic": "addition", "isCorrect": False},
            ],
        },
    ])
