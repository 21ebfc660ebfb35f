"""
Progress Repository.

The only writer of attempt and assessment records. Marshals stored rows into
the shapes the adaptive engine consumes (StudentProgress, AssessmentResult).
"""
from __future__ import annotations

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import (
    AssessmentResult,
    Attempt,
    QuestionOutcome,
    StudentProgress,
    TopicProgress,
)
from src.db.models import AssessmentRecord, StudentAttempt, TopicTimeSpent


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored values are UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ProgressRepository:
    """
    Read/write access to a student's practice history.

    Uses the caller's session; committing is the caller's job
    (``session_scope`` or the FastAPI ``get_session`` dependency).
    """

    def __init__(self, session: Session):
        self._session = session

    # ========================================
    # Attempts
    # ========================================

    def record_attempt(
        self,
        student_id: str,
        topic: str,
        correct: int,
        total: int,
        timestamp: datetime | None = None,
    ) -> StudentAttempt:
        """
        Append an attempt to a student's history.

        Raises:
            ValueError: total is not positive, or correct is outside [0, total]
        """
        if total <= 0:
            raise ValueError("total must be positive")
        if correct < 0 or correct > total:
            raise ValueError("correct must be between 0 and total")

        row = StudentAttempt(
            student_id=student_id,
            topic=topic,
            correct=correct,
            total=total,
            recorded_at=timestamp or datetime.now(UTC),
        )
        self._session.add(row)
        self._session.flush()
        logger.debug(f"Recorded attempt {correct}/{total} on '{topic}' for {student_id}")
        return row

    def add_time_spent(self, student_id: str, topic: str, minutes: float) -> float:
        """Add study minutes to a topic. Returns the new cumulative total."""
        row = self._session.scalar(
            select(TopicTimeSpent).where(
                TopicTimeSpent.student_id == student_id,
                TopicTimeSpent.topic == topic,
            )
        )
        if row is None:
            row = TopicTimeSpent(student_id=student_id, topic=topic, minutes=0.0)
            self._session.add(row)
        row.minutes = (row.minutes or 0.0) + max(minutes, 0.0)
        self._session.flush()
        return row.minutes

    def get_topic_attempts(self, student_id: str, topic: str) -> list[Attempt]:
        """Attempts for one topic in insertion (chronological) order."""
        rows = self._session.scalars(
            select(StudentAttempt)
            .where(StudentAttempt.student_id == student_id, StudentAttempt.topic == topic)
            .order_by(StudentAttempt.id)
        )
        return [
            Attempt(correct=r.correct, total=r.total, timestamp=_as_utc(r.recorded_at))
            for r in rows
        ]

    def get_student_progress(self, student_id: str) -> StudentProgress:
        """
        Build the full StudentProgress for a student.

        Topics with time logged but no attempts are included with an empty
        attempt list.
        """
        progress: StudentProgress = {}

        rows = self._session.scalars(
            select(StudentAttempt)
            .where(StudentAttempt.student_id == student_id)
            .order_by(StudentAttempt.id)
        )
        for r in rows:
            entry = progress.setdefault(r.topic, TopicProgress())
            entry.attempts.append(
                Attempt(correct=r.correct, total=r.total, timestamp=_as_utc(r.recorded_at))
            )

        time_rows = self._session.scalars(
            select(TopicTimeSpent).where(TopicTimeSpent.student_id == student_id)
        )
        for t in time_rows:
            progress.setdefault(t.topic, TopicProgress()).time_spent = t.minutes or 0.0

        return progress

    # ========================================
    # Assessments
    # ========================================

    def record_assessment(self, student_id: str, assessment: AssessmentResult) -> AssessmentRecord:
        """Store a graded assessment."""
        row = AssessmentRecord(
            student_id=student_id,
            assessment_id=assessment.assessment_id,
            completed_at=assessment.completed_at or datetime.now(UTC),
            results=[q.to_dict() for q in assessment.results],
        )
        self._session.add(row)
        self._session.flush()
        logger.debug(
            f"Recorded assessment with {len(assessment.results)} questions for {student_id}"
        )
        return row

    def get_assessment_results(self, student_id: str, limit: int | None = None) -> list[AssessmentResult]:
        """
        Graded assessments for a student, oldest first.

        Args:
            limit: Only the most recent ``limit`` assessments
        """
        query = (
            select(AssessmentRecord)
            .where(AssessmentRecord.student_id == student_id)
            .order_by(AssessmentRecord.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        rows = list(self._session.scalars(query))
        rows.reverse()

        return [
            AssessmentResult(
                results=[QuestionOutcome.from_dict(q) for q in (r.results or [])],
                assessment_id=r.assessment_id,
                student_id=r.student_id,
                completed_at=_as_utc(r.completed_at),
            )
            for r in rows
        ]

    def get_recent_outcomes(
        self,
        student_id: str,
        topic: str | None = None,
        limit: int = 5,
    ) -> list[dict[str, bool]]:
        """
        Last ``limit`` question outcomes, oldest first, for difficulty adaptation.

        Args:
            topic: Restrict to questions tagged with this topic
        """
        outcomes = [
            {"correct": q.is_correct}
            for assessment in self.get_assessment_results(student_id)
            for q in assessment.results
            if topic is None or q.topic == topic
        ]
        return outcomes[-limit:] if limit > 0 else []
