"""
Integration tests for ProgressRepository against in-memory SQLite.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.mastery import calculate_mastery_level
from src.core.models import AssessmentResult, QuestionOutcome

pytestmark = pytest.mark.integration


class TestAttempts:
    def test_attempts_round_trip_in_order(self, repository):
        start = datetime(2024, 5, 1, tzinfo=UTC)
        repository.record_attempt("s-1", "counting", 2, 4, timestamp=start)
        repository.record_attempt("s-1", "counting", 4, 4, timestamp=start + timedelta(days=1))
        repository.record_attempt("s-2", "counting", 0, 4)

        attempts = repository.get_topic_attempts("s-1", "counting")

        assert [(a.correct, a.total) for a in attempts] == [(2, 4), (4, 4)]
        assert attempts[0].timestamp == start
        assert attempts[1].timestamp.tzinfo is not None

    def test_mastery_from_stored_history(self, repository):
        for _ in range(5):
            repository.record_attempt("s-1", "addition", 5, 5)
        result = calculate_mastery_level(repository.get_topic_attempts("s-1", "addition"))
        assert result.level == 72

    @pytest.mark.parametrize("correct,total", [(1, 0), (-1, 3), (4, 3)])
    def test_invalid_attempt_rejected(self, repository, correct, total):
        with pytest.raises(ValueError):
            repository.record_attempt("s-1", "counting", correct, total)

    def test_student_progress_includes_time_spent(self, repository):
        repository.record_attempt("s-1", "counting", 3, 3)
        repository.add_time_spent("s-1", "counting", 15)
        total = repository.add_time_spent("s-1", "counting", 10)
        repository.add_time_spent("s-1", "phonics", 5)

        progress = repository.get_student_progress("s-1")

        assert total == 25
        assert progress["counting"].time_spent == 25
        assert len(progress["counting"].attempts) == 1
        assert progress["phonics"].attempts == []
        assert progress["phonics"].time_spent == 5

    def test_unknown_student_has_empty_progress(self, repository):
        assert repository.get_student_progress("nobody") == {}


class TestAssessments:
    def _assessment(self, *outcomes, assessment_id=None):
        return AssessmentResult(
            results=[QuestionOutcome(topic=t, is_correct=c) for t, c in outcomes],
            assessment_id=assessment_id,
        )

    def test_assessments_oldest_first(self, repository):
        repository.record_assessment("s-1", self._assessment(("fractions", False), assessment_id="a1"))
        repository.record_assessment("s-1", self._assessment(("fractions", True), assessment_id="a2"))
        repository.record_assessment("s-1", self._assessment(("decimals", True), assessment_id="a3"))

        all_results = repository.get_assessment_results("s-1")
        latest_two = repository.get_assessment_results("s-1", limit=2)

        assert [a.assessment_id for a in all_results] == ["a1", "a2", "a3"]
        assert [a.assessment_id for a in latest_two] == ["a2", "a3"]
        assert all_results[0].results[0] == QuestionOutcome(topic="fractions", is_correct=False)
        assert all_results[0].student_id == "s-1"

    def test_recent_outcomes(self, repository):
        repository.record_assessment(
            "s-1",
            self._assessment(("fractions", False), ("decimals", True), ("fractions", True)),
        )
        repository.record_assessment("s-1", self._assessment(("fractions", True)))

        assert repository.get_recent_outcomes("s-1", limit=2) == [{"correct": True}, {"correct": True}]
        assert repository.get_recent_outcomes("s-1", topic="fractions") == [
            {"correct": False},
            {"correct": True},
            {"correct": True},
        ]
        assert repository.get_recent_outcomes("s-1", limit=0) == []
