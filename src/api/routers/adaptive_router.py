"""
Adaptive Learning API Router.

Endpoints for the adaptive learning engine:
- Attempt and assessment logging (progress store writes)
- Mastery per topic
- Next topic recommendation
- Learning path generation
- Learning gap report
- Velocity and time-to-mastery prediction
- Next question difficulty

Handlers marshal stored records into engine inputs and call the pure
functions in src.adaptive; no analytics live here.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from config import get_settings
from src.adaptive import (
    calculate_learning_velocity,
    calculate_optimal_difficulty,
    generate_learning_path,
    get_available_topics,
    identify_learning_gaps,
    predict_time_to_mastery,
    summarize_gaps,
)
from src.adaptive.difficulty import recent_accuracy
from src.core.mastery import calculate_mastery_level, topic_mastery
from src.core.models import AssessmentResult, CurriculumGraph, QuestionOutcome
from src.curriculum import load_curriculum
from src.db.database import get_session
from src.db.repository import ProgressRepository

router = APIRouter()


# ========================================
# Dependencies
# ========================================


@lru_cache(maxsize=1)
def _load_configured_curriculum() -> CurriculumGraph:
    """Load the configured curriculum once per process."""
    settings = get_settings()
    if not settings.has_curriculum_configured():
        logger.warning("No curriculum configured; topic recommendations will be empty")
        return {}

    path = Path(settings.curriculum_path)
    if not path.exists():
        logger.warning(f"Curriculum file not found: {path}; using an empty graph")
        return {}
    return load_curriculum(path)


def get_curriculum() -> CurriculumGraph:
    """FastAPI dependency for the curriculum graph."""
    return _load_configured_curriculum()


def get_repository(session: Session = Depends(get_session)) -> ProgressRepository:
    """FastAPI dependency for the progress store."""
    return ProgressRepository(session)


# ========================================
# Request/Response Models
# ========================================


class _Model(BaseModel):
    """Accepts both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttemptCreateRequest(_Model):
    """Request model for logging a practice attempt."""

    topic: str = Field(..., min_length=1, description="Topic identifier")
    correct: int = Field(..., ge=0, description="Questions answered correctly")
    total: int = Field(..., gt=0, description="Questions attempted")
    timestamp: datetime | None = Field(None, description="When the attempt happened (default: now)")
    time_spent_minutes: float = Field(0, ge=0, description="Minutes spent on the session")

    @model_validator(mode="after")
    def _correct_not_above_total(self) -> AttemptCreateRequest:
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        return self


class QuestionOutcomeRequest(_Model):
    """A graded question inside an assessment."""

    topic: str | None = Field(None, description="Topic tag (default: general)")
    is_correct: bool = False
    question: str | None = None
    student_answer: str | None = None
    correct_answer: str | None = None


class AssessmentCreateRequest(_Model):
    """Request model for storing a graded assessment."""

    assessment_id: str | None = None
    completed_at: datetime | None = None
    results: list[QuestionOutcomeRequest] = Field(default_factory=list)


class LearningPathRequest(_Model):
    """Request model for learning path generation."""

    target_topics: list[str] = Field(default_factory=list, description="Topics to cover, in order")
    timeframe_days: int | None = Field(None, ge=1, le=365, description="Days to schedule")
    daily_minutes: int | None = Field(None, ge=1, le=600, description="Study minutes per day")


class RecentResultRequest(_Model):
    correct: bool


class DifficultyRequest(_Model):
    """Request model for difficulty adaptation."""

    recent_results: list[RecentResultRequest] = Field(default_factory=list)


class MasteryResponse(BaseModel):
    """Response model for topic mastery."""

    topic: str
    level: int
    status: str
    confidence: float
    total_attempts: int
    recent_accuracy: float


class TopicRecommendationResponse(BaseModel):
    """Response model for a recommended topic."""

    topic: str
    difficulty: str
    importance: int
    current_mastery: int
    status: str


class NextTopicResponse(BaseModel):
    """Response model for the next topic recommendation."""

    student_id: str
    recommendation: TopicRecommendationResponse | None
    alternatives: list[TopicRecommendationResponse]
    message: str | None = None


class AttemptCreateResponse(BaseModel):
    student_id: str
    topic: str
    mastery: MasteryResponse


class AssessmentCreateResponse(BaseModel):
    student_id: str
    questions_recorded: int


class ScheduledActivityResponse(BaseModel):
    activity: str
    duration: int


class PhaseResponse(BaseModel):
    phase: int
    duration: int
    topics: list[str]
    goals: list[str]
    activities: list[str]
    milestones: list[str]


class DayScheduleResponse(BaseModel):
    day: int
    phase: int
    topics: list[str]
    time_allocated: int
    activities: list[ScheduledActivityResponse]


class LearningPathResponse(BaseModel):
    """Response model for a learning path."""

    phases: list[PhaseResponse]
    estimated_duration: int
    daily_schedule: list[DayScheduleResponse]


class CommonErrorResponse(BaseModel):
    question: str | None
    student_answer: str | None
    correct_answer: str | None


class LearningGapResponse(BaseModel):
    """Response model for a learning gap."""

    topic: str
    severity: str
    accuracy: int
    total_questions: int
    incorrect_count: int
    common_errors: list[CommonErrorResponse]
    recommendation: str


class GapReportResponse(BaseModel):
    student_id: str
    assessments_analyzed: int
    summary: dict[str, int]
    gaps: list[LearningGapResponse]


class VelocityResponse(BaseModel):
    """Response model for learning velocity."""

    topics_per_week: float
    topics_started: int
    topics_mastered: int
    average_time_per_topic: float
    velocity: str


class PredictionResponse(BaseModel):
    student_id: str
    topic: str
    current_mastery: int
    estimated_days: int
    velocity: VelocityResponse


class DifficultyResponse(BaseModel):
    difficulty: str
    recent_accuracy: float
    results_considered: int


# ========================================
# Progress Logging Endpoints
# ========================================


@router.post(
    "/students/{student_id}/attempts",
    response_model=AttemptCreateResponse,
    status_code=201,
    summary="Log a practice attempt",
)
def record_attempt(
    student_id: str,
    request: AttemptCreateRequest,
    repo: ProgressRepository = Depends(get_repository),
) -> AttemptCreateResponse:
    """Append an attempt and return the recomputed mastery for its topic."""
    try:
        repo.record_attempt(
            student_id,
            request.topic,
            request.correct,
            request.total,
            timestamp=request.timestamp,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if request.time_spent_minutes:
        repo.add_time_spent(student_id, request.topic, request.time_spent_minutes)

    mastery = calculate_mastery_level(repo.get_topic_attempts(student_id, request.topic))
    logger.info(f"Attempt logged for {student_id} on '{request.topic}': mastery {mastery.level}")

    return AttemptCreateResponse(
        student_id=student_id,
        topic=request.topic,
        mastery=MasteryResponse(topic=request.topic, **mastery.to_dict()),
    )


@router.post(
    "/students/{student_id}/assessments",
    response_model=AssessmentCreateResponse,
    status_code=201,
    summary="Store a graded assessment",
)
def record_assessment(
    student_id: str,
    request: AssessmentCreateRequest,
    repo: ProgressRepository = Depends(get_repository),
) -> AssessmentCreateResponse:
    assessment = AssessmentResult(
        results=[QuestionOutcome.from_dict(q.model_dump()) for q in request.results],
        assessment_id=request.assessment_id,
        student_id=student_id,
        completed_at=request.completed_at,
    )
    repo.record_assessment(student_id, assessment)
    logger.info(f"Assessment stored for {student_id}: {len(assessment.results)} questions")

    return AssessmentCreateResponse(student_id=student_id, questions_recorded=len(assessment.results))


# ========================================
# Mastery Endpoints
# ========================================


@router.get(
    "/students/{student_id}/mastery",
    response_model=list[MasteryResponse],
    summary="Get mastery for every practised topic",
)
def get_all_mastery(
    student_id: str,
    repo: ProgressRepository = Depends(get_repository),
) -> list[MasteryResponse]:
    progress = repo.get_student_progress(student_id)
    return [
        MasteryResponse(topic=topic, **calculate_mastery_level(entry.attempts).to_dict())
        for topic, entry in progress.items()
    ]


@router.get(
    "/students/{student_id}/mastery/{topic}",
    response_model=MasteryResponse,
    summary="Get mastery for one topic",
)
def get_topic_mastery(
    student_id: str,
    topic: str,
    repo: ProgressRepository = Depends(get_repository),
) -> MasteryResponse:
    """Unknown topics report the not-started result rather than 404."""
    mastery = calculate_mastery_level(repo.get_topic_attempts(student_id, topic))
    return MasteryResponse(topic=topic, **mastery.to_dict())


# ========================================
# Recommendation Endpoints
# ========================================


@router.get(
    "/students/{student_id}/next-topic",
    response_model=NextTopicResponse,
    summary="Get next topic recommendation",
)
def get_next_topic_for_student(
    student_id: str,
    alternatives: int = Query(3, ge=0, le=20, description="Number of runner-up topics to include"),
    repo: ProgressRepository = Depends(get_repository),
    curriculum: CurriculumGraph = Depends(get_curriculum),
) -> NextTopicResponse:
    """
    Recommend the next topic to study.

    In-progress topics (mastery 21-69) come first, then importance.
    """
    settings = get_settings()
    ranked = get_available_topics(
        repo.get_student_progress(student_id),
        curriculum,
        threshold=settings.mastery_threshold,
        in_progress_floor=settings.in_progress_floor,
    )
    if not ranked:
        return NextTopicResponse(
            student_id=student_id,
            recommendation=None,
            alternatives=[],
            message="No recommendation available",
        )

    return NextTopicResponse(
        student_id=student_id,
        recommendation=TopicRecommendationResponse(**ranked[0].to_dict()),
        alternatives=[TopicRecommendationResponse(**r.to_dict()) for r in ranked[1:1 + alternatives]],
    )


@router.post(
    "/students/{student_id}/learning-path",
    response_model=LearningPathResponse,
    summary="Generate learning path",
)
def create_learning_path(
    student_id: str,
    request: LearningPathRequest,
    repo: ProgressRepository = Depends(get_repository),
    curriculum: CurriculumGraph = Depends(get_curriculum),
) -> LearningPathResponse:
    """Phase target topics (or the next recommended topic) over the timeframe."""
    settings = get_settings()
    path = generate_learning_path(
        repo.get_student_progress(student_id),
        curriculum,
        target_topics=request.target_topics,
        timeframe_days=request.timeframe_days or settings.default_timeframe_days,
        daily_minutes=request.daily_minutes or settings.default_daily_minutes,
    )
    return LearningPathResponse.model_validate(path.to_dict())


# ========================================
# Analytics Endpoints
# ========================================


@router.get(
    "/students/{student_id}/gaps",
    response_model=GapReportResponse,
    summary="Get learning gap report",
)
def get_learning_gaps(
    student_id: str,
    limit: int | None = Query(None, ge=1, description="Only analyze the most recent N assessments"),
    repo: ProgressRepository = Depends(get_repository),
) -> GapReportResponse:
    """Severity-ranked gaps (critical, high, medium) across stored assessments."""
    settings = get_settings()
    assessments = repo.get_assessment_results(student_id, limit=limit)
    gaps = identify_learning_gaps(assessments, gap_threshold=settings.gap_threshold)

    return GapReportResponse(
        student_id=student_id,
        assessments_analyzed=len(assessments),
        summary=summarize_gaps(gaps),
        gaps=[LearningGapResponse.model_validate(g.to_dict()) for g in gaps],
    )


@router.get(
    "/students/{student_id}/velocity",
    response_model=VelocityResponse,
    summary="Get learning velocity",
)
def get_learning_velocity(
    student_id: str,
    weeks: int | None = Query(None, ge=1, le=52, description="Look-back window in weeks"),
    repo: ProgressRepository = Depends(get_repository),
) -> VelocityResponse:
    settings = get_settings()
    velocity = calculate_learning_velocity(
        repo.get_student_progress(student_id),
        weeks=weeks or settings.velocity_window_weeks,
    )
    return VelocityResponse(**velocity.to_dict())


@router.get(
    "/students/{student_id}/prediction/{topic}",
    response_model=PredictionResponse,
    summary="Predict days to mastery",
)
def get_mastery_prediction(
    student_id: str,
    topic: str,
    repo: ProgressRepository = Depends(get_repository),
) -> PredictionResponse:
    settings = get_settings()
    progress = repo.get_student_progress(student_id)
    velocity = calculate_learning_velocity(progress, weeks=settings.velocity_window_weeks)
    days = predict_time_to_mastery(topic, progress, velocity, max_days=settings.max_prediction_days)

    return PredictionResponse(
        student_id=student_id,
        topic=topic,
        current_mastery=topic_mastery(progress, topic).level,
        estimated_days=days,
        velocity=VelocityResponse(**velocity.to_dict()),
    )


# ========================================
# Difficulty Endpoints
# ========================================


@router.post(
    "/difficulty",
    response_model=DifficultyResponse,
    summary="Pick difficulty from recent results",
)
def post_difficulty(request: DifficultyRequest) -> DifficultyResponse:
    results = [{"correct": r.correct} for r in request.recent_results]
    return DifficultyResponse(
        difficulty=calculate_optimal_difficulty(results).value,
        recent_accuracy=recent_accuracy(results),
        results_considered=min(len(results), 5),
    )


@router.get(
    "/students/{student_id}/difficulty",
    response_model=DifficultyResponse,
    summary="Pick difficulty from stored assessment outcomes",
)
def get_student_difficulty(
    student_id: str,
    topic: str | None = Query(None, description="Restrict to questions tagged with this topic"),
    repo: ProgressRepository = Depends(get_repository),
) -> DifficultyResponse:
    results = repo.get_recent_outcomes(student_id, topic=topic)
    return DifficultyResponse(
        difficulty=calculate_optimal_difficulty(results).value,
        recent_accuracy=recent_accuracy(results),
        results_considered=len(results),
    )
