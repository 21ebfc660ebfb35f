"""
Difficulty Adapter.

Chooses the next question's difficulty from a short rolling window of
pass/fail outcomes:

    accuracy over last 5 >= 0.8 -> hard
    accuracy over last 5 >= 0.6 -> medium
    otherwise (or no history)  -> easy
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from src.core.models import Difficulty

DIFFICULTY_WINDOW = 5
HARD_ACCURACY = 0.8
MEDIUM_ACCURACY = 0.6


def _is_correct(result: Any) -> bool:
    if isinstance(result, Mapping):
        return bool(result.get("correct"))
    return bool(result)


def recent_accuracy(recent_results: Sequence[Any], window: int = DIFFICULTY_WINDOW) -> float:
    """Fraction correct over the last ``window`` results (0 when empty)."""
    if not recent_results:
        return 0.0
    tail = recent_results[-window:]
    return sum(1 for r in tail if _is_correct(r)) / min(window, len(recent_results))


def calculate_optimal_difficulty(recent_results: Sequence[Any] | None) -> Difficulty:
    """
    Pick the difficulty tier for the next question.

    Args:
        recent_results: Outcomes oldest-first; each is a mapping with a
            ``correct`` key or a plain bool.

    Returns:
        Difficulty tier; EASY for an empty history.
    """
    if not recent_results:
        return Difficulty.EASY

    accuracy = recent_accuracy(recent_results)
    if accuracy >= HARD_ACCURACY:
        return Difficulty.HARD
    if accuracy >= MEDIUM_ACCURACY:
        return Difficulty.MEDIUM
    return Difficulty.EASY
