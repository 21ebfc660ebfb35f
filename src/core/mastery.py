"""
Core Mastery Module.

Converts a chronologically ordered attempt history into a 0-100 mastery
level, a status label and a confidence figure.

Formula:
    weighted    = sum(accuracy_i * (i / n)) / n            (i is 1-indexed)
    consistency = 1 - stddev(last 5 accuracies)            (population stddev)
    level       = round((weighted * 0.7 + consistency * 0.3) * 100)

The recency weights are not normalized to sum to 1; status thresholds are
calibrated against this exact formula.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from src.core.models import (
    Attempt,
    MasteryResult,
    MasteryStatus,
    StudentProgress,
    round_half_up,
)

# Level at which a topic counts as mastered for gating and prediction
MASTERY_THRESHOLD = 70

# Number of most recent attempts used for consistency / recent accuracy
CONSISTENCY_WINDOW = 5

WEIGHT_ACCURACY = 0.7
WEIGHT_CONSISTENCY = 0.3


def weighted_accuracy(attempts: Sequence[Attempt]) -> float:
    """
    Recency-weighted accuracy over the full sequence.

    Position i (1-indexed) gets weight i/n and the sum is divided by n,
    so a perfect history scores (n + 1) / (2n), not 1.0.
    """
    n = len(attempts)
    if n == 0:
        return 0.0
    total = sum(a.accuracy * ((i + 1) / n) for i, a in enumerate(attempts))
    return total / n


def consistency_score(accuracies: Sequence[float]) -> float:
    """1 minus the population standard deviation; not clamped."""
    if not accuracies:
        return 0.0
    mean = sum(accuracies) / len(accuracies)
    variance = sum((acc - mean) ** 2 for acc in accuracies) / len(accuracies)
    return 1 - math.sqrt(variance)


def calculate_mastery_level(attempts: Sequence[Attempt] | None) -> MasteryResult:
    """
    Estimate mastery for one topic.

    Args:
        attempts: Attempts in chronological order (oldest first). Position,
            not timestamp, is the recency signal.

    Returns:
        MasteryResult. An empty history yields level 0, NOT_STARTED and
        confidence 0.
    """
    if not attempts:
        return MasteryResult(level=0, status=MasteryStatus.NOT_STARTED, confidence=0.0)

    weighted = weighted_accuracy(attempts)

    recent = [a.accuracy for a in attempts[-CONSISTENCY_WINDOW:]]
    recent_accuracy = sum(recent) / len(recent)
    consistency = consistency_score(recent)

    raw_level = (weighted * WEIGHT_ACCURACY + consistency * WEIGHT_CONSISTENCY) * 100
    # Half-up rounding, then clamp to [0, 100]. Well-formed attempts never
    # leave the range; over-reported scores (correct > total) could.
    level = min(max(round_half_up(raw_level), 0), 100)

    return MasteryResult(
        level=level,
        status=MasteryStatus.from_level(level),
        confidence=consistency,
        total_attempts=len(attempts),
        recent_accuracy=recent_accuracy,
    )


def topic_mastery(progress: StudentProgress, topic: str) -> MasteryResult:
    """Mastery for a topic, or the not-started result if it was never attempted."""
    entry = progress.get(topic)
    return calculate_mastery_level(entry.attempts if entry else None)


def is_mastered(result: MasteryResult, threshold: int = MASTERY_THRESHOLD) -> bool:
    """Check if a mastery result meets the gating threshold (70 by default)."""
    return result.level >= threshold


def mastered_topics(progress: StudentProgress, threshold: int = MASTERY_THRESHOLD) -> set[str]:
    """Every topic in the progress record whose mastery meets the threshold."""
    return {
        topic
        for topic, entry in progress.items()
        if is_mastered(calculate_mastery_level(entry.attempts), threshold)
    }


def format_progress_bar(level: int, width: int = 10) -> str:
    """
    Format a text progress bar.

    Args:
        level: Mastery level 0-100
        width: Character width

    Returns:
        String like "████████░░"
    """
    filled = int(level / 100 * width)
    empty = width - filled
    return "█" * filled + "░" * empty
