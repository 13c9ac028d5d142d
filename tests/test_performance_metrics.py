"""Tests for the performance metrics calculator."""

import pytest

from mastery_analytics.services.performance_metrics import (
    PerformanceMetricsCalculator, accuracy_trend, retention_rate
)


@pytest.fixture
def calculator():
    return PerformanceMetricsCalculator()


def test_empty_history_yields_zero_metrics(calculator, now):
    metrics = calculator.compute([], now=now)

    assert metrics.overall_performance_score == 0
    assert metrics.learning_velocity == 0
    assert metrics.accuracy_trends == []
    assert metrics.retention_rate == 0
    assert metrics.consistency_index == 0
    assert metrics.questions_per_session == 0
    assert metrics.average_session_time == 0


def test_scalar_metrics(calculator, make_session, now):
    sessions = [
        make_session(60, days_ago=10, total=10, seconds=200),
        make_session(80, days_ago=5, total=20, seconds=400),
        make_session(100, days_ago=0, total=30, seconds=600),
    ]

    metrics = calculator.compute(sessions, now=now)

    assert metrics.overall_performance_score == pytest.approx(80)
    assert metrics.learning_velocity == pytest.approx(60 / 10)
    assert metrics.questions_per_session == pytest.approx(20)
    assert metrics.average_session_time == pytest.approx(400)
    # pstdev of 60/80/100 is sqrt(800/3)
    assert metrics.consistency_index == pytest.approx(100 - (800 / 3) ** 0.5)


def test_learning_velocity_floors_elapsed_days_at_one(calculator, make_session, now):
    sessions = [make_session(70, days_ago=0, total=12), make_session(75, days_ago=0, total=8)]

    assert calculator.compute(sessions, now=now).learning_velocity == pytest.approx(20)


def test_constant_scores_are_perfectly_consistent(calculator, make_session, now):
    sessions = [make_session(80, days_ago=d) for d in range(5)]

    assert calculator.compute(sessions, now=now).consistency_index == 100


def test_consistency_for_widest_spread(calculator, make_session, now):
    sessions = [make_session(0, days_ago=1), make_session(100, days_ago=0)]

    assert calculator.compute(sessions, now=now).consistency_index == pytest.approx(50)


class TestRetention:

    def test_same_day_sessions_retain_fully(self, make_session):
        sessions = [make_session(s, days_ago=0.1 * i) for i, s in enumerate([90, 40, 70])]

        assert retention_rate(sessions) == 100

    def test_single_session(self, make_session):
        assert retention_rate([make_session(30)]) == 100

    def test_only_gapped_pairs_count(self, make_session):
        sessions = [
            make_session(80, days_ago=10),
            make_session(60, days_ago=5),
            make_session(90, days_ago=0),
            make_session(10, days_ago=0.5),   # same-day dip, not a gap
        ]
        # chronological: 80 -(5d)-> 60 -(4.5d)-> 10 -(0.5d)-> 90
        # gapped ratios: 60/80 = 75, 10/60 = 16.67
        expected = (75 + 10 / 60 * 100) / 2

        assert retention_rate(sessions) == pytest.approx(expected)

    def test_improvement_is_capped_at_hundred(self, make_session):
        sessions = [make_session(40, days_ago=3), make_session(90, days_ago=0)]

        assert retention_rate(sessions) == 100

    def test_zero_previous_score_does_not_divide_by_zero(self, make_session):
        sessions = [make_session(0, days_ago=3), make_session(0.5, days_ago=0)]

        assert retention_rate(sessions) == pytest.approx(50)


class TestAccuracyTrends:

    @pytest.mark.parametrize(
        "accuracies, label",
        [
            ([0.5, 0.5, 0.9, 0.9], "improving"),
            ([0.9, 0.9, 0.5, 0.5], "declining"),
            ([0.6, 0.65], "stable"),
            ([0.2], "stable"),
            ([0.6, 0.6, 0.7], "stable"),      # 0.6 vs 0.65
            ([0.4, 0.6, 0.7], "improving"),   # 0.4 vs 0.65
        ],
    )
    def test_half_split_labels(self, accuracies, label):
        assert accuracy_trend(accuracies) == label

    def test_trends_per_module(self, calculator, make_session, now):
        sessions = [
            make_session(50, module="addition", days_ago=4, total=10, correct=5),
            make_session(55, module="addition", days_ago=3, total=10, correct=5),
            make_session(90, module="addition", days_ago=2, total=10, correct=9),
            make_session(95, module="addition", days_ago=1, total=10, correct=9),
            make_session(70, module="fractions", days_ago=2, total=10, correct=7),
        ]

        trends = {t.module_name: t for t in calculator.compute(sessions, now=now).accuracy_trends}

        assert trends["addition"].trend == "improving"
        assert trends["addition"].accuracy == pytest.approx(0.7)
        assert trends["addition"].session_count == 4
        assert trends["addition"].last_session_date == sessions[3].completed_at
        assert trends["fractions"].trend == "stable"
        assert trends["fractions"].session_count == 1

    def test_inconsistent_records_are_clamped(self, calculator, make_session, now):
        sessions = [make_session(100, total=10, correct=14)]

        trend = calculator.compute(sessions, now=now).accuracy_trends[0]

        assert trend.accuracy == 1.0
