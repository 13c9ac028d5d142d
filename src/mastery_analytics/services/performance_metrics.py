"""Performance metrics over a learner's session history."""

import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..schemas.analytics import ModuleAccuracyTrend, PerformanceMetrics, TrendLabel
from ..schemas.records import SessionRecord
from ..utils.sessions import (
    days_between, gapped_pairs, group_by_module, newest_first, oldest_first
)
from ..utils.stats import inverted_spread, mean

TREND_THRESHOLD = 0.10


def accuracy_trend(accuracies: Sequence[float]) -> TrendLabel:
    """Compare the chronological first and second halves of an accuracy series."""
    if len(accuracies) < 2:
        return "stable"

    split = len(accuracies) // 2
    first_avg = mean(accuracies[:split])
    second_avg = mean(accuracies[split:])

    if second_avg > first_avg + TREND_THRESHOLD:
        return "improving"
    if second_avg < first_avg - TREND_THRESHOLD:
        return "declining"
    return "stable"


def retention_rate(sessions: Sequence[SessionRecord]) -> float:
    """Average score retained across gaps of more than a day; 100 without gaps."""
    if len(sessions) < 2:
        return 100.0

    retentions = [
        min(100.0, current.final_score / max(1.0, previous.final_score) * 100)
        for _, previous, current in gapped_pairs(sessions)
    ]
    return mean(retentions) if retentions else 100.0


class PerformanceMetricsCalculator:
    """Aggregates session records into scalar and per-module metrics."""

    def compute(self, sessions: Sequence[SessionRecord], now: Optional[datetime] = None) -> PerformanceMetrics:
        if not sessions:
            return PerformanceMetrics()

        now = now or datetime.now(timezone.utc)
        history = newest_first(sessions)
        total_sessions = len(history)

        scores = [s.final_score for s in history]
        total_questions = sum(s.questions_total for s in history)

        oldest = history[-1]
        days_since_first = max(1, math.ceil(days_between(now, oldest.completed_at)))

        return PerformanceMetrics(
            overall_performance_score=mean(scores),
            learning_velocity=total_questions / days_since_first,
            accuracy_trends=self.accuracy_trends(history),
            retention_rate=retention_rate(history),
            consistency_index=inverted_spread(scores),
            questions_per_session=total_questions / total_sessions,
            average_session_time=sum(s.time_spent_seconds for s in history) / total_sessions,
        )

    def accuracy_trends(self, sessions: Sequence[SessionRecord]) -> List[ModuleAccuracyTrend]:
        trends = []
        for module_name, module_sessions in group_by_module(newest_first(sessions)).items():
            chronological = [s.accuracy for s in oldest_first(module_sessions)]
            trends.append(ModuleAccuracyTrend(
                module_name=module_name,
                accuracy=mean(chronological),
                trend=accuracy_trend(chronological),
                session_count=len(module_sessions),
                last_session_date=module_sessions[0].completed_at,
            ))
        return trends
