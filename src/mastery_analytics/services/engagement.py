"""Engagement metrics over a learner's session history."""

import math
from typing import List, Sequence

from ..schemas.analytics import (
    ComebackMetric, DifficultyMetric, EngagementMetrics, ModulePreference, SessionPattern
)
from ..schemas.records import SessionRecord
from ..utils.sessions import days_between, gapped_pairs, group_by_module, newest_first, oldest_first
from ..utils.stats import mean
from .learning_patterns import difficulty_adaptation

GOAL_SCORE = 80.0
OPTIMAL_DURATION_FACTOR = 1.2

# (label, first hour, last hour)
TIME_OF_DAY_BANDS = (
    ("morning", 5, 11),
    ("afternoon", 12, 16),
    ("evening", 17, 20),
)


def time_of_day(hour: int) -> str:
    for label, start, end in TIME_OF_DAY_BANDS:
        if start <= hour <= end:
            return label
    return "night"


def goal_achievement_rate(sessions: Sequence[SessionRecord]) -> float:
    """Percentage (0-100) of sessions scoring at least the goal score."""
    achieved = sum(1 for s in sessions if s.final_score >= GOAL_SCORE)
    return achieved / max(1, len(sessions)) * 100


class EngagementAnalyzer:
    """Session duration, module preference, difficulty comfort and comeback metrics."""

    def analyze(self, sessions: Sequence[SessionRecord]) -> EngagementMetrics:
        history = newest_first(sessions)
        return EngagementMetrics(
            session_duration_patterns=self.session_duration_patterns(history),
            module_preferences=self.module_preferences(history),
            difficulty_adaptation=self.difficulty_metrics(history),
            comeback_performance=self.comeback_performance(history),
            goal_achievement_rate=goal_achievement_rate(history),
        )

    def session_duration_patterns(self, sessions: Sequence[SessionRecord]) -> List[SessionPattern]:
        average = mean([s.time_spent_seconds for s in sessions])
        return [SessionPattern(
            average_duration=average,
            optimal_duration=average * OPTIMAL_DURATION_FACTOR,
            engagement_score=min(100.0, average / 10),
            time_of_day=self.preferred_time_of_day(sessions),
        )]

    def preferred_time_of_day(self, sessions: Sequence[SessionRecord]) -> str:
        """Band holding the most sessions; earlier bands win ties."""
        counts = {label: 0 for label, _, _ in TIME_OF_DAY_BANDS}
        counts["night"] = 0
        for session in sessions:
            counts[time_of_day(session.completed_at.hour)] += 1

        if not sessions:
            return "morning"
        return max(counts, key=counts.get)

    def module_preferences(self, sessions: Sequence[SessionRecord]) -> List[ModulePreference]:
        return [
            ModulePreference(
                module_name=module_name,
                time_spent=sum(s.time_spent_seconds for s in module_sessions),
                performance_correlation=mean([s.final_score for s in module_sessions]),
                engagement_level=min(100.0, len(module_sessions) * 10.0),
            )
            for module_name, module_sessions in group_by_module(sessions).items()
        ]

    def difficulty_metrics(self, sessions: Sequence[SessionRecord]) -> List[DifficultyMetric]:
        current_level = mean([s.difficulty_level for s in sessions])

        # Goal rate among sessions played at or above the learner's usual level
        usual_level = math.floor(current_level + 0.5)
        stretched = [s for s in sessions if s.difficulty_level >= usual_level]
        readiness = goal_achievement_rate(stretched) if stretched else 0.0

        return [DifficultyMetric(
            current_level=current_level,
            adaptation_speed=difficulty_adaptation(sessions),
            comfort_zone=(current_level - 1, current_level + 1),
            challenge_readiness=readiness,
        )]

    def comeback_performance(self, sessions: Sequence[SessionRecord]) -> List[ComebackMetric]:
        """How scores respond to breaks of more than a day."""
        ordered = oldest_first(sessions)
        comebacks = []
        for index, previous, current in gapped_pairs(ordered):
            recovery_time = len(ordered) - index
            for offset, later in enumerate(ordered[index:], start=1):
                if later.final_score >= previous.final_score:
                    recovery_time = offset
                    break

            comebacks.append(ComebackMetric(
                days_away=int(days_between(current.completed_at, previous.completed_at)),
                performance_change=current.final_score - previous.final_score,
                recovery_time=recovery_time,
            ))
        return comebacks
