"""
Learning Path Generator.

Expands target topics into phases and a day-by-day schedule:

- Topics are split into at most 4 phases of ceil(count / 4) topics each
- Each phase lasts ceil(timeframe / phase_count) days
- Day d belongs to phase floor((d - 1) / (timeframe / phase_count)),
  clamped to the last phase

Activity and milestone lists are fixed templates. The daily breakdown
(5 / 15 / 10 minutes) is a template as well and does not scale with the
configured daily minutes.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from loguru import logger

from src.adaptive.topic_selector import get_next_topic
from src.core.models import (
    CurriculumGraph,
    DaySchedule,
    LearningPath,
    Phase,
    ScheduledActivity,
    StudentProgress,
)

MAX_PHASES = 4
DEFAULT_TIMEFRAME_DAYS = 30
DEFAULT_DAILY_MINUTES = 30

PHASE_ACTIVITIES = (
    "Watch introduction video",
    "Complete practice exercises",
    "Take mini-assessment",
    "Review and reinforce",
)

DAILY_ACTIVITIES = (
    ScheduledActivity("Review previous lesson", 5),
    ScheduledActivity("New concept learning", 15),
    ScheduledActivity("Practice exercises", 10),
)


def _phase_milestones(topic_count: int) -> list[str]:
    return [
        f"Complete {topic_count} topics",
        "Achieve 70% mastery",
        "Pass phase assessment",
    ]


def _build_phases(topics: Sequence[str], timeframe_days: int) -> list[Phase]:
    # The floor of 1 applies to topics per phase; zero topics still give zero phases
    if not topics:
        return []

    topics_per_phase = math.ceil(len(topics) / MAX_PHASES) or 1
    phase_count = math.ceil(len(topics) / topics_per_phase)
    duration = math.ceil(timeframe_days / phase_count)

    phases = []
    for i in range(phase_count):
        phase_topics = list(topics[i * topics_per_phase:(i + 1) * topics_per_phase])
        phases.append(
            Phase(
                phase=i + 1,
                duration=duration,
                topics=phase_topics,
                goals=[f"Master {topic}" for topic in phase_topics],
                activities=list(PHASE_ACTIVITIES),
                milestones=_phase_milestones(len(phase_topics)),
            )
        )
    return phases


def _build_daily_schedule(
    phases: Sequence[Phase],
    timeframe_days: int,
    daily_minutes: int,
) -> list[DaySchedule]:
    # With no phases every day is an empty phase-1 entry
    phase_count = max(len(phases), 1)
    days_per_phase = timeframe_days / phase_count

    schedule = []
    for day in range(1, timeframe_days + 1):
        index = math.floor((day - 1) / days_per_phase)
        current = phases[min(index, len(phases) - 1)] if phases else None
        schedule.append(
            DaySchedule(
                day=day,
                # Reported phase number is the computed index, even when the
                # topics were taken from the last phase after clamping
                phase=index + 1,
                topics=list(current.topics) if current else [],
                time_allocated=daily_minutes,
                activities=list(DAILY_ACTIVITIES),
            )
        )
    return schedule


def generate_learning_path(
    progress: StudentProgress,
    graph: CurriculumGraph,
    target_topics: Sequence[str] = (),
    timeframe_days: int = DEFAULT_TIMEFRAME_DAYS,
    daily_minutes: int = DEFAULT_DAILY_MINUTES,
) -> LearningPath:
    """
    Build a phased learning path.

    Args:
        progress: Student progress (used only when no targets are given)
        graph: Curriculum graph (used only when no targets are given)
        target_topics: Topics to cover, in order. Empty falls back to the
            topic selector's single recommendation.
        timeframe_days: Number of days to schedule
        daily_minutes: Study minutes allocated per day

    Returns:
        LearningPath with phases, daily schedule and estimated duration
        (the requested timeframe echoed back)
    """
    topics = list(target_topics)
    if not topics:
        recommendation = get_next_topic(progress, graph)
        topics = [recommendation.topic] if recommendation else []

    timeframe_days = max(timeframe_days, 0)
    phases = _build_phases(topics, timeframe_days)
    schedule = _build_daily_schedule(phases, timeframe_days, daily_minutes)

    logger.debug(
        f"Learning path: {len(topics)} topics, {len(phases)} phases, {timeframe_days} days"
    )

    return LearningPath(
        phases=phases,
        estimated_duration=timeframe_days,
        daily_schedule=schedule,
    )
