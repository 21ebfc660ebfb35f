"""
Gap Analyzer.

Aggregates graded assessment questions by topic and reports topics whose
accuracy is below 70%, ranked critical -> high -> medium.

Recommendations are fixed templates per severity band, not model output.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from src.core.models import (
    AssessmentResult,
    CommonError,
    GapSeverity,
    LearningGap,
    round_half_up,
)

GAP_THRESHOLD = 0.7
MAX_COMMON_ERRORS = 3

RECOMMENDATIONS = {
    GapSeverity.CRITICAL: "Review foundational concepts in {topic}. Consider one-on-one tutoring.",
    GapSeverity.HIGH: "Practice more exercises in {topic}. Focus on understanding core concepts.",
    GapSeverity.MEDIUM: "Continue practicing {topic}. You're making good progress!",
}


@dataclass
class _TopicTally:
    correct: int = 0
    total: int = 0
    errors: list[CommonError] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


def get_recommendation(topic: str, severity: GapSeverity) -> str:
    """Templated study recommendation for a gap."""
    return RECOMMENDATIONS[severity].format(topic=topic)


def _tally_by_topic(assessment_results: Iterable[AssessmentResult]) -> dict[str, _TopicTally]:
    # dict preserves first-encounter order, used as the tiebreak within a tier
    tallies: dict[str, _TopicTally] = {}
    for result in assessment_results:
        for outcome in result.results:
            tally = tallies.setdefault(outcome.topic, _TopicTally())
            tally.total += 1
            if outcome.is_correct:
                tally.correct += 1
            else:
                tally.errors.append(
                    CommonError(
                        question=outcome.question,
                        student_answer=outcome.student_answer,
                        correct_answer=outcome.correct_answer,
                    )
                )
    return tallies


def identify_learning_gaps(
    assessment_results: Iterable[AssessmentResult],
    gap_threshold: float = GAP_THRESHOLD,
) -> list[LearningGap]:
    """
    Identify learning gaps across a batch of graded assessments.

    Args:
        assessment_results: Graded assessments; questions without a topic
            tag were already normalized to "general"
        gap_threshold: Accuracy below which a topic is a gap

    Returns:
        Gaps ordered by severity (critical first), encounter order within a tier
    """
    gaps = []
    for topic, tally in _tally_by_topic(assessment_results).items():
        accuracy = tally.accuracy
        if accuracy >= gap_threshold:
            continue

        severity = GapSeverity.from_accuracy(accuracy)
        gaps.append(
            LearningGap(
                topic=topic,
                severity=severity,
                accuracy=round_half_up(accuracy * 100),
                total_questions=tally.total,
                incorrect_count=tally.total - tally.correct,
                common_errors=tally.errors[:MAX_COMMON_ERRORS],
                recommendation=get_recommendation(topic, severity),
            )
        )

    gaps.sort(key=lambda gap: gap.severity.rank)
    logger.debug(f"Identified {len(gaps)} learning gaps")
    return gaps


def summarize_gaps(gaps: Iterable[LearningGap]) -> dict[str, int]:
    """Count gaps per severity band (every band present, zero if empty)."""
    counts = Counter(gap.severity for gap in gaps)
    return {severity.value: counts.get(severity, 0) for severity in GapSeverity}
