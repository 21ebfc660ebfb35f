"""
Core Module - Shared domain models and mastery estimation.

This module contains the canonical implementations of core concepts
that are used across the adaptive, curriculum, db, api and cli modules.

Components:
- models: Typed records and closed enums (Attempt, MasteryResult, LearningGap, ...)
- mastery: Mastery estimation from attempt history

Design Principle:
Domain-specific modules (src/adaptive/, src/api/, src/cli/) import from
src/core/ rather than reimplementing shared concepts.
"""

from src.core.mastery import (
    MASTERY_THRESHOLD,
    calculate_mastery_level,
    is_mastered,
    mastered_topics,
    topic_mastery,
)
from src.core.models import (
    AssessmentResult,
    Attempt,
    CommonError,
    CurriculumGraph,
    DaySchedule,
    Difficulty,
    GapSeverity,
    LearningGap,
    LearningPath,
    LearningVelocity,
    MasteryResult,
    MasteryStatus,
    Phase,
    QuestionOutcome,
    ScheduledActivity,
    StudentProgress,
    TopicProgress,
    TopicRecommendation,
    TopicSpec,
    VelocityLabel,
    graph_from_dict,
    progress_from_dict,
)

__all__ = [
    # Mastery
    "MASTERY_THRESHOLD",
    "calculate_mastery_level",
    "is_mastered",
    "mastered_topics",
    "topic_mastery",
    # Enums
    "Difficulty",
    "GapSeverity",
    "MasteryStatus",
    "VelocityLabel",
    # Inputs
    "Attempt",
    "AssessmentResult",
    "CurriculumGraph",
    "QuestionOutcome",
    "StudentProgress",
    "TopicProgress",
    "TopicSpec",
    "graph_from_dict",
    "progress_from_dict",
    # Outputs
    "CommonError",
    "DaySchedule",
    "LearningGap",
    "LearningPath",
    "LearningVelocity",
    "MasteryResult",
    "Phase",
    "ScheduledActivity",
    "TopicRecommendation",
]
