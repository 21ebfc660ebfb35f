"""
Unit tests for rolling-window difficulty adaptation.
"""

import pytest

from src.adaptive.difficulty import calculate_optimal_difficulty, recent_accuracy
from src.core.models import Difficulty


def outcomes(*flags):
    return [{"correct": bool(f)} for f in flags]


class TestOptimalDifficulty:
    def test_empty_history_is_easy(self):
        assert calculate_optimal_difficulty([]) == Difficulty.EASY
        assert calculate_optimal_difficulty(None) == Difficulty.EASY

    def test_five_correct_is_hard(self):
        assert calculate_optimal_difficulty(outcomes(1, 1, 1, 1, 1)) == Difficulty.HARD

    def test_three_of_five_is_medium(self):
        assert calculate_optimal_difficulty(outcomes(1, 0, 1, 0, 1)) == Difficulty.MEDIUM

    def test_two_of_five_is_easy(self):
        assert calculate_optimal_difficulty(outcomes(0, 0, 1, 0, 1)) == Difficulty.EASY

    def test_only_last_five_count(self):
        history = outcomes(*([0] * 10 + [1] * 5))
        assert calculate_optimal_difficulty(history) == Difficulty.HARD

    def test_short_history_uses_its_own_length(self):
        assert calculate_optimal_difficulty(outcomes(1)) == Difficulty.HARD
        assert calculate_optimal_difficulty(outcomes(1, 0)) == Difficulty.EASY

    def test_plain_booleans_accepted(self):
        assert calculate_optimal_difficulty([True, True, True, True, False]) == Difficulty.HARD


class TestRecentAccuracy:
    def test_window(self):
        assert recent_accuracy(outcomes(0, 0, 1, 1, 0, 1, 0)) == pytest.approx(0.6)

    def test_empty(self):
        assert recent_accuracy([]) == 0.0
