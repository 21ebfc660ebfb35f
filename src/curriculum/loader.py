"""
Curriculum Loader.

Reads the prerequisite graph from a JSON file and validates it:

    {
        "fractions": {"prerequisites": ["division"], "difficulty": "medium", "importance": 8},
        "division": {"prerequisites": [], "difficulty": "easy"}
    }

Validation happens here, at configuration-load time. The topic selector
itself never raises on a bad graph; a cycle just starves its topics.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from src.core.models import CurriculumGraph, graph_from_dict


class CurriculumError(Exception):
    """Raised when a curriculum configuration cannot be used."""
    pass


class UnknownPrerequisiteError(CurriculumError):
    """Raised when a topic lists a prerequisite that is not in the graph."""

    def __init__(self, topic: str, prerequisite: str):
        self.topic = topic
        self.prerequisite = prerequisite
        super().__init__(f"Topic '{topic}' requires unknown topic '{prerequisite}'")


class CurriculumCycleError(CurriculumError):
    """Raised when the prerequisite graph contains a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Prerequisite cycle: {' -> '.join(cycle)}")


def find_cycle(graph: CurriculumGraph) -> list[str] | None:
    """
    Find one prerequisite cycle, if any.

    Iterative DFS with white/grey/black colouring. Prerequisites missing
    from the graph are ignored here.

    Returns:
        The cycle as a closed path (first topic repeated at the end), or None
    """
    WHITE, GREY, BLACK = 0, 1, 2
    colour = dict.fromkeys(graph, WHITE)

    for root in graph:
        if colour[root] != WHITE:
            continue

        path = [root]
        stack = [iter(graph[root].prerequisites)]
        colour[root] = GREY

        while stack:
            prereq = next(stack[-1], None)
            if prereq is None:
                colour[path.pop()] = BLACK
                stack.pop()
                continue
            if prereq not in graph:
                continue
            if colour[prereq] == GREY:
                return path[path.index(prereq):] + [prereq]
            if colour[prereq] == WHITE:
                colour[prereq] = GREY
                path.append(prereq)
                stack.append(iter(graph[prereq].prerequisites))

    return None


def validate_curriculum(graph: CurriculumGraph, allow_unknown: bool = False) -> None:
    """
    Validate a curriculum graph.

    Args:
        graph: Graph to validate
        allow_unknown: Accept prerequisites that are not topics of the graph
            (they can then never be mastered through the curriculum)

    Raises:
        UnknownPrerequisiteError: Prerequisite missing from the graph
        CurriculumCycleError: Graph is not acyclic
    """
    if not allow_unknown:
        for topic, spec in graph.items():
            for prereq in spec.prerequisites:
                if prereq not in graph:
                    raise UnknownPrerequisiteError(topic, prereq)

    cycle = find_cycle(graph)
    if cycle:
        raise CurriculumCycleError(cycle)


def parse_curriculum(data: Any, validate: bool = True) -> CurriculumGraph:
    """Parse and (optionally) validate a decoded JSON curriculum."""
    if not isinstance(data, Mapping):
        raise CurriculumError("Curriculum must be a JSON object mapping topics to definitions")

    for topic, spec in data.items():
        if spec is not None and not isinstance(spec, Mapping):
            raise CurriculumError(f"Topic '{topic}' must map to an object")

    try:
        graph = graph_from_dict(data)
    except (TypeError, ValueError) as e:
        raise CurriculumError(f"Invalid topic definition: {e}") from e

    if validate:
        validate_curriculum(graph)
    return graph


def load_curriculum(path: str | Path, validate: bool = True) -> CurriculumGraph:
    """
    Load a curriculum graph from a JSON file.

    Raises:
        FileNotFoundError: File does not exist
        CurriculumError: Invalid JSON, shape or graph
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Curriculum file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CurriculumError(f"Invalid JSON in {path.name}: {e}") from e

    graph = parse_curriculum(data, validate=validate)
    logger.info(f"Loaded curriculum: {len(graph)} topics from {path.name}")
    return graph
