# SQLAlchemy models
from .base import Base
from .progress import (
    AssessmentRecord,
    StudentAttempt,
    TopicTimeSpent,
)

__all__ = [
    "Base",
    "AssessmentRecord",
    "StudentAttempt",
    "TopicTimeSpent",
]
