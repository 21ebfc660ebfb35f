"""
Progress Store Models.

SQLAlchemy models backing the student progress collaborator:
- StudentAttempt: one practice/assessment event (correct/total) per topic
- TopicTimeSpent: cumulative study minutes per student per topic
- AssessmentRecord: graded assessment with per-question outcomes

Attempts are append-only. Their primary key order is their chronological
order, which the mastery estimator relies on.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StudentAttempt(Base):
    """A recorded attempt on a topic."""

    __tablename__ = "student_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    correct: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_attempts_student_topic", "student_id", "topic"),
    )

    def __repr__(self) -> str:
        return f"<StudentAttempt student={self.student_id} topic={self.topic} {self.correct}/{self.total}>"


class TopicTimeSpent(Base):
    """Cumulative minutes a student spent on a topic."""

    __tablename__ = "topic_time_spent"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    minutes: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("student_id", "topic", name="uq_time_student_topic"),
    )

    def __repr__(self) -> str:
        return f"<TopicTimeSpent student={self.student_id} topic={self.topic} minutes={self.minutes}>"


class AssessmentRecord(Base):
    """
    A graded assessment.

    ``results`` holds the per-question outcomes as a JSON list of
    {topic, is_correct, question, student_answer, correct_answer}.
    """

    __tablename__ = "assessment_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    assessment_id: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    results: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<AssessmentRecord student={self.student_id} questions={len(self.results or [])}>"
