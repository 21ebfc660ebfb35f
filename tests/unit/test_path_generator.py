"""
Unit tests for learning path generation.

Phases hold ceil(count / 4) topics each; days map onto phases by
floor((day - 1) / (timeframe / phase_count)).
"""

from src.adaptive.path_generator import (
    DAILY_ACTIVITIES,
    PHASE_ACTIVITIES,
    generate_learning_path,
)
from src.core.models import graph_from_dict

TOPICS = ["counting", "addition", "subtraction", "multiplication", "fractions"]


class TestPhases:
    def test_five_targets_partitioned_two_per_phase(self):
        path = generate_learning_path({}, {}, target_topics=TOPICS, timeframe_days=30)

        assert [p.topics for p in path.phases] == [
            ["counting", "addition"],
            ["subtraction", "multiplication"],
            ["fractions"],
        ]
        assert [p.phase for p in path.phases] == [1, 2, 3]
        assert all(p.duration == 10 for p in path.phases)
        assert len(path.daily_schedule) == 30

    def test_four_targets_one_per_phase(self):
        path = generate_learning_path({}, {}, target_topics=TOPICS[:4], timeframe_days=14)
        assert len(path.phases) == 4
        assert path.phases[0].duration == 4  # ceil(14 / 4)

    def test_phase_templates(self):
        phase = generate_learning_path({}, {}, target_topics=TOPICS).phases[0]
        assert phase.goals == ["Master counting", "Master addition"]
        assert phase.activities == list(PHASE_ACTIVITIES)
        assert phase.milestones == [
            "Complete 2 topics",
            "Achieve 70% mastery",
            "Pass phase assessment",
        ]


class TestDailySchedule:
    def test_days_map_onto_phases(self):
        path = generate_learning_path({}, {}, target_topics=["a", "b", "c"], timeframe_days=7)
        assert [d.phase for d in path.daily_schedule] == [1, 1, 1, 2, 2, 3, 3]
        assert path.daily_schedule[3].topics == ["b"]
        assert [d.day for d in path.daily_schedule] == list(range(1, 8))

    def test_activity_breakdown_is_fixed(self):
        path = generate_learning_path({}, {}, target_topics=["a"], timeframe_days=3, daily_minutes=90)
        day = path.daily_schedule[0]
        assert day.time_allocated == 90
        assert day.activities == list(DAILY_ACTIVITIES)
        assert [a.duration for a in day.activities] == [5, 15, 10]

    def test_estimated_duration_echoes_timeframe(self):
        assert generate_learning_path({}, {}, target_topics=["a"], timeframe_days=12).estimated_duration == 12


class TestFallbacks:
    def test_empty_targets_use_recommended_topic(self, sample_progress, sample_curriculum):
        path = generate_learning_path(sample_progress, sample_curriculum, timeframe_days=10)
        assert path.topics == ["subtraction"]
        assert len(path.phases) == 1
        assert path.phases[0].duration == 10

    def test_no_topics_gives_empty_days(self):
        graph = graph_from_dict({"A": {"prerequisites": ["B"]}, "B": {"prerequisites": ["A"]}})
        path = generate_learning_path({}, graph, timeframe_days=5)

        assert path.phases == []
        assert len(path.daily_schedule) == 5
        assert all(d.topics == [] and d.phase == 1 for d in path.daily_schedule)

    def test_to_dict_shape(self):
        data = generate_learning_path({}, {}, target_topics=["a"], timeframe_days=2).to_dict()
        assert set(data) == {"phases", "estimated_duration", "daily_schedule"}
        assert data["daily_schedule"][0]["activities"][1] == {
            "activity": "New concept learning",
            "duration": 15,
        }
