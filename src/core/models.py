"""
Core Domain Models.

Typed records shared by the adaptive-learning modules:

- Enums: MasteryStatus, Difficulty, GapSeverity, VelocityLabel
- Inputs: Attempt, TopicProgress, TopicSpec, QuestionOutcome, AssessmentResult
- Outputs: MasteryResult, TopicRecommendation, LearningPath, LearningGap, LearningVelocity

Loose records coming from the progress store, the curriculum file or the
HTTP layer are normalized through the ``from_dict`` classmethods. Both
snake_case and the camelCase keys used by the tutoring frontend are accepted.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_TOPIC = "general"
DEFAULT_IMPORTANCE = 5


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return math.floor(value + 0.5)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key from a loosely-typed record."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass through a datetime)."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        return datetime.fromisoformat(value.strip())
    return None


# ============================================================================
# Enums
# ============================================================================


class MasteryStatus(str, Enum):
    """
    Status label attached to a mastery level.

    Lower bounds are inclusive: 90 mastered, 70 proficient,
    50 developing, 30 struggling.
    """

    NOT_STARTED = "not-started"
    NEEDS_SUPPORT = "needs-support"
    STRUGGLING = "struggling"
    DEVELOPING = "developing"
    PROFICIENT = "proficient"
    MASTERED = "mastered"

    @classmethod
    def from_level(cls, level: int) -> MasteryStatus:
        """
        Convert a 0-100 mastery level to a status.

        Never returns NOT_STARTED: that status is reserved for an empty
        attempt history.
        """
        if level >= 90:
            return cls.MASTERED
        elif level >= 70:
            return cls.PROFICIENT
        elif level >= 50:
            return cls.DEVELOPING
        elif level >= 30:
            return cls.STRUGGLING
        else:
            return cls.NEEDS_SUPPORT

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("-", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryStatus.NOT_STARTED: "dim",
            MasteryStatus.NEEDS_SUPPORT: "red",
            MasteryStatus.STRUGGLING: "magenta",
            MasteryStatus.DEVELOPING: "yellow",
            MasteryStatus.PROFICIENT: "cyan",
            MasteryStatus.MASTERED: "green",
        }[self]


class Difficulty(str, Enum):
    """Question/topic difficulty tier."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Any, default: Difficulty | None = None) -> Difficulty:
        """Parse a loose value, falling back to MEDIUM for missing or unknown tiers."""
        fallback = default or cls.MEDIUM
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return fallback
        return fallback


class GapSeverity(str, Enum):
    """Severity band of a learning gap."""

    CRITICAL = "critical"  # accuracy < 30%
    HIGH = "high"  # accuracy < 50%
    MEDIUM = "medium"  # accuracy < 70%

    @classmethod
    def from_accuracy(cls, accuracy: float) -> GapSeverity:
        """Severity for an accuracy already known to be below the gap threshold."""
        if accuracy < 0.3:
            return cls.CRITICAL
        elif accuracy < 0.5:
            return cls.HIGH
        return cls.MEDIUM

    @property
    def rank(self) -> int:
        """Sort key: critical first."""
        return {
            GapSeverity.CRITICAL: 0,
            GapSeverity.HIGH: 1,
            GapSeverity.MEDIUM: 2,
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            GapSeverity.CRITICAL: "red",
            GapSeverity.HIGH: "yellow",
            GapSeverity.MEDIUM: "cyan",
        }[self]


class VelocityLabel(str, Enum):
    """Qualitative learning pace."""

    FAST = "fast"  # > 1 topic/week
    STEADY = "steady"  # > 0.5 topic/week
    SLOW = "slow"

    @classmethod
    def from_rate(cls, topics_per_week: float) -> VelocityLabel:
        if topics_per_week > 1:
            return cls.FAST
        elif topics_per_week > 0.5:
            return cls.STEADY
        return cls.SLOW


# ============================================================================
# Progress & Curriculum Inputs
# ============================================================================


@dataclass(frozen=True)
class Attempt:
    """One practice/assessment event for a topic."""

    correct: int
    total: int
    timestamp: datetime | None = None

    @property
    def accuracy(self) -> float:
        """Fraction correct (0 when the attempt has no questions)."""
        if self.total <= 0:
            return 0.0
        return self.correct / self.total

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Attempt:
        return cls(
            correct=int(_pick(data, "correct", default=0)),
            total=int(_pick(data, "total", default=0)),
            timestamp=parse_timestamp(_pick(data, "timestamp", "recorded_at", "recordedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class TopicProgress:
    """A student's chronologically ordered attempts on one topic."""

    attempts: list[Attempt] = field(default_factory=list)
    time_spent: float = 0.0  # minutes

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TopicProgress:
        attempts = [
            a if isinstance(a, Attempt) else Attempt.from_dict(a)
            for a in _pick(data, "attempts", default=[])
        ]
        return cls(
            attempts=attempts,
            time_spent=float(_pick(data, "time_spent", "timeSpent", default=0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": [a.to_dict() for a in self.attempts],
            "time_spent": self.time_spent,
        }


@dataclass(frozen=True)
class TopicSpec:
    """A node of the curriculum prerequisite graph."""

    prerequisites: tuple[str, ...] = ()
    difficulty: Difficulty = Difficulty.MEDIUM
    importance: int = DEFAULT_IMPORTANCE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TopicSpec:
        prerequisites = _pick(data, "prerequisites", default=[])
        if isinstance(prerequisites, str):
            prerequisites = [prerequisites]
        return cls(
            prerequisites=tuple(str(p) for p in prerequisites),
            difficulty=Difficulty.parse(data.get("difficulty")),
            # Zero/missing importance falls back to the default, like an unset field
            importance=int(data.get("importance") or DEFAULT_IMPORTANCE),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "prerequisites": list(self.prerequisites),
            "difficulty": self.difficulty.value,
            "importance": self.importance,
        }


# Topic identifier -> node / progress
CurriculumGraph = dict[str, TopicSpec]
StudentProgress = dict[str, TopicProgress]


def graph_from_dict(data: Mapping[str, Any]) -> CurriculumGraph:
    """Build a CurriculumGraph from a ``{topic: {...}}`` mapping."""
    return {
        str(topic): spec if isinstance(spec, TopicSpec) else TopicSpec.from_dict(spec or {})
        for topic, spec in data.items()
    }


def progress_from_dict(data: Mapping[str, Any]) -> StudentProgress:
    """Build StudentProgress from a ``{topic: {attempts, timeSpent}}`` mapping."""
    return {
        str(topic): entry if isinstance(entry, TopicProgress) else TopicProgress.from_dict(entry or {})
        for topic, entry in data.items()
    }


# ============================================================================
# Assessment Inputs
# ============================================================================


@dataclass(frozen=True)
class QuestionOutcome:
    """A single graded question inside an assessment."""

    topic: str = DEFAULT_TOPIC
    is_correct: bool = False
    question: str | None = None
    student_answer: str | None = None
    correct_answer: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QuestionOutcome:
        return cls(
            # Untagged questions are grouped under "general"
            topic=str(data.get("topic") or DEFAULT_TOPIC),
            is_correct=bool(_pick(data, "is_correct", "isCorrect", default=False)),
            question=_pick(data, "question"),
            student_answer=_pick(data, "student_answer", "studentAnswer"),
            correct_answer=_pick(data, "correct_answer", "correctAnswer"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AssessmentResult:
    """A graded assessment as produced by the grading collaborator."""

    results: list[QuestionOutcome] = field(default_factory=list)
    assessment_id: str | None = None
    student_id: str | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AssessmentResult:
        results = [
            q if isinstance(q, QuestionOutcome) else QuestionOutcome.from_dict(q)
            for q in (data.get("results") or [])
        ]
        assessment_id = _pick(data, "assessment_id", "assessmentId", "id")
        student_id = _pick(data, "student_id", "studentId")
        return cls(
            results=results,
            assessment_id=str(assessment_id) if assessment_id is not None else None,
            student_id=str(student_id) if student_id is not None else None,
            completed_at=parse_timestamp(_pick(data, "completed_at", "completedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "assessment_id": self.assessment_id,
            "student_id": self.student_id,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": [q.to_dict() for q in self.results],
        }


def assessments_from_list(items: Iterable[Mapping[str, Any] | AssessmentResult]) -> list[AssessmentResult]:
    return [a if isinstance(a, AssessmentResult) else AssessmentResult.from_dict(a) for a in items]


# ============================================================================
# Outputs
# ============================================================================


@dataclass(frozen=True)
class MasteryResult:
    """Mastery estimate for one topic, recomputed on demand."""

    level: int
    status: MasteryStatus
    confidence: float
    total_attempts: int = 0
    recent_accuracy: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "status": self.status.value,
            "confidence": self.confidence,
            "total_attempts": self.total_attempts,
            "recent_accuracy": self.recent_accuracy,
        }


@dataclass(frozen=True)
class TopicRecommendation:
    """A topic the student can work on next."""

    topic: str
    difficulty: Difficulty
    importance: int
    current_mastery: int
    status: MasteryStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty.value,
            "importance": self.importance,
            "current_mastery": self.current_mastery,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ScheduledActivity:
    activity: str
    duration: int  # minutes


@dataclass
class Phase:
    """A block of consecutive days focused on a subset of topics."""

    phase: int
    duration: int  # days
    topics: list[str]
    goals: list[str]
    activities: list[str]
    milestones: list[str]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DaySchedule:
    day: int
    phase: int
    topics: list[str]
    time_allocated: int  # minutes
    activities: list[ScheduledActivity]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LearningPath:
    """Phased plan plus a day-by-day schedule."""

    phases: list[Phase] = field(default_factory=list)
    estimated_duration: int = 0  # days
    daily_schedule: list[DaySchedule] = field(default_factory=list)

    @property
    def topics(self) -> list[str]:
        """All topics covered by the path, in phase order."""
        return [t for p in self.phases for t in p.topics]

    def to_dict(self) -> dict[str, Any]:
        return {
            "phases": [p.to_dict() for p in self.phases],
            "estimated_duration": self.estimated_duration,
            "daily_schedule": [d.to_dict() for d in self.daily_schedule],
        }


@dataclass(frozen=True)
class CommonError:
    question: str | None
    student_answer: str | None
    correct_answer: str | None


@dataclass
class LearningGap:
    """A topic whose aggregate assessment accuracy is below the gap threshold."""

    topic: str
    severity: GapSeverity
    accuracy: int  # 0-100
    total_questions: int
    incorrect_count: int
    common_errors: list[CommonError]
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


@dataclass(frozen=True)
class LearningVelocity:
    """Recent pace of topic mastery."""

    topics_per_week: float
    topics_started: int
    topics_mastered: int
    average_time_per_topic: float
    velocity: VelocityLabel

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["velocity"] = self.velocity.value
        return data
