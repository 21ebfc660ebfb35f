"""
Learning Velocity & Time-to-Mastery Prediction.

Velocity counts topics mastered per week over a recent window. Mastery for
the window is recomputed from the windowed attempts only, so topics
practised steadily before the window can be undercounted. Full-history
mastery lives in src.core.mastery.
"""
from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta

from loguru import logger

from src.core.mastery import MASTERY_THRESHOLD, calculate_mastery_level, topic_mastery
from src.core.models import LearningVelocity, StudentProgress, VelocityLabel

DEFAULT_WINDOW_WEEKS = 4
MAX_PREDICTION_DAYS = 90

# Assumed mastery points gained per day for each topic/week of velocity.
# A tunable constant, not derived from data.
MASTERY_GAIN_PER_TOPIC = 10


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def calculate_learning_velocity(
    progress: StudentProgress,
    weeks: int = DEFAULT_WINDOW_WEEKS,
    now: datetime | None = None,
) -> LearningVelocity:
    """
    Estimate how many topics a student masters per week.

    Args:
        progress: Topic -> attempts and time spent
        weeks: Look-back window in weeks
        now: End of the window (defaults to current UTC time)

    Returns:
        LearningVelocity; topics_per_week is 0 when weeks <= 0
    """
    now = _as_utc(now) if now else datetime.now(UTC)
    cutoff = now - timedelta(days=weeks * 7)

    topics_started = 0
    topics_mastered = 0
    total_time_spent = 0.0

    for entry in progress.values():
        # Attempts without a timestamp cannot be placed in the window
        recent = [
            a for a in entry.attempts
            if a.timestamp is not None and _as_utc(a.timestamp) >= cutoff
        ]
        if not recent:
            continue

        topics_started += 1
        if calculate_mastery_level(recent).level >= MASTERY_THRESHOLD:
            topics_mastered += 1
        total_time_spent += entry.time_spent or 0

    topics_per_week = topics_mastered / weeks if weeks > 0 else 0.0
    average_time = total_time_spent / topics_started if topics_started > 0 else 0.0

    logger.debug(
        f"Velocity over {weeks}w: {topics_mastered}/{topics_started} topics mastered "
        f"({topics_per_week:.2f}/week)"
    )

    return LearningVelocity(
        topics_per_week=topics_per_week,
        topics_started=topics_started,
        topics_mastered=topics_mastered,
        average_time_per_topic=average_time,
        velocity=VelocityLabel.from_rate(topics_per_week),
    )


def predict_time_to_mastery(
    topic: str,
    progress: StudentProgress,
    velocity: LearningVelocity,
    max_days: int = MAX_PREDICTION_DAYS,
) -> int:
    """
    Project days until a topic reaches mastery (level 70).

    Returns:
        0 if already mastered, otherwise a value in [1, max_days]. Zero
        velocity yields max_days.
    """
    remaining = MASTERY_THRESHOLD - topic_mastery(progress, topic).level
    if remaining <= 0:
        return 0

    progress_per_day = (velocity.topics_per_week / 7) * MASTERY_GAIN_PER_TOPIC
    if progress_per_day <= 0:
        return max_days

    estimated_days = math.ceil(remaining / progress_per_day)
    return max(1, min(estimated_days, max_days))
