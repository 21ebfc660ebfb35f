"""
Topic Selector.

Picks the single best next topic for a student by gating the curriculum
prerequisite graph on mastery:

- A topic is mastered when its mastery level is >= 70
- A topic is available when every prerequisite is mastered and the topic
  itself is not
- In-progress topics (20 < mastery < 70) come first, then importance
  descending; ties keep curriculum order (stable sort)

This is a greedy, single-step recommendation. Callers re-run it as mastery
changes rather than asking for a full path.
"""
from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from src.core.mastery import MASTERY_THRESHOLD, mastered_topics, topic_mastery
from src.core.models import CurriculumGraph, StudentProgress, TopicRecommendation

# Mastery strictly above this (and below the threshold) counts as "started"
IN_PROGRESS_FLOOR = 20


def prerequisites_satisfied(prerequisites: Iterable[str], mastered: set[str]) -> bool:
    """Check that every prerequisite is in the mastered set."""
    return all(prereq in mastered for prereq in prerequisites)


def is_in_progress(
    mastery_level: int,
    floor: int = IN_PROGRESS_FLOOR,
    threshold: int = MASTERY_THRESHOLD,
) -> bool:
    return floor < mastery_level < threshold


def get_available_topics(
    progress: StudentProgress,
    graph: CurriculumGraph,
    threshold: int = MASTERY_THRESHOLD,
    in_progress_floor: int = IN_PROGRESS_FLOOR,
) -> list[TopicRecommendation]:
    """
    Rank every topic that is unlocked but not yet mastered.

    Args:
        progress: Topic -> attempts for one student
        graph: Curriculum prerequisite graph
        threshold: Mastery level that counts as mastered
        in_progress_floor: Lower (exclusive) bound of the in-progress band

    Returns:
        Recommendations in selection order (best first)
    """
    mastered = mastered_topics(progress, threshold)

    available: list[TopicRecommendation] = []
    for topic, spec in graph.items():
        if topic in mastered or not prerequisites_satisfied(spec.prerequisites, mastered):
            continue

        current = topic_mastery(progress, topic)
        available.append(
            TopicRecommendation(
                topic=topic,
                difficulty=spec.difficulty,
                importance=spec.importance,
                current_mastery=current.level,
                status=current.status,
            )
        )

    # Single stable sort on (partition, -importance): in-progress first,
    # then most important; equal keys keep curriculum insertion order.
    available.sort(
        key=lambda rec: (
            0 if is_in_progress(rec.current_mastery, in_progress_floor, threshold) else 1,
            -rec.importance,
        )
    )

    logger.debug(
        f"Topic gating: {len(mastered)} mastered, {len(available)} available "
        f"of {len(graph)} curriculum topics"
    )
    return available


def get_next_topic(
    progress: StudentProgress,
    graph: CurriculumGraph,
    threshold: int = MASTERY_THRESHOLD,
    in_progress_floor: int = IN_PROGRESS_FLOOR,
) -> TopicRecommendation | None:
    """
    Recommend the next topic to study.

    Returns:
        The best available topic, or None when everything is mastered or
        nothing has its prerequisites met (including a cyclic graph whose
        cycle is never entered).
    """
    available = get_available_topics(progress, graph, threshold, in_progress_floor)
    if not available:
        logger.debug("No topic available for recommendation")
        return None
    return available[0]
