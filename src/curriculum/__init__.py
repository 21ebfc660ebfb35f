"""Curriculum prerequisite graph loading and validation."""

from .loader import (
    CurriculumCycleError,
    CurriculumError,
    UnknownPrerequisiteError,
    find_cycle,
    load_curriculum,
    parse_curriculum,
    validate_curriculum,
)

__all__ = [
    "CurriculumError",
    "CurriculumCycleError",
    "UnknownPrerequisiteError",
    "find_cycle",
    "load_curriculum",
    "parse_curriculum",
    "validate_curriculum",
]
