"""
Adaptive Learning Engine.

Stateless analytics over a student's attempt history and assessments.

Components:
- Topic selector: next topic from the prerequisite graph
- Difficulty adapter: next question tier from a rolling window
- Path generator: phased plan and daily schedule
- Gap analyzer: severity-ranked learning gaps
- Velocity: topics mastered per week, days to mastery
"""
from src.adaptive.difficulty import calculate_optimal_difficulty
from src.adaptive.gap_analyzer import identify_learning_gaps, summarize_gaps
from src.adaptive.path_generator import generate_learning_path
from src.adaptive.topic_selector import get_available_topics, get_next_topic
from src.adaptive.velocity import calculate_learning_velocity, predict_time_to_mastery
from src.core.mastery import calculate_mastery_level

__all__ = [
    "calculate_mastery_level",
    "get_next_topic",
    "get_available_topics",
    "calculate_optimal_difficulty",
    "generate_learning_path",
    "identify_learning_gaps",
    "summarize_gaps",
    "calculate_learning_velocity",
    "predict_time_to_mastery",
]
