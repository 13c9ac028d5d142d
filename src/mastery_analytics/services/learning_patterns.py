"""Learning pattern detection over a learner's session history.

Covers the time-of-day performance profile, per-module learning curves,
struggle points, mastery milestones and how scores in different modules
move together.
"""

import math
from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Sequence

from ..logging_config import get_logger
from ..schemas.analytics import (
    ConceptStruggle, CorrelationType, LearningCurve, LearningPatterns,
    MasteryMilestone, ModuleCorrelation, TimeSlot
)
from ..schemas.records import SessionRecord
from ..utils.sessions import group_by_module, newest_first, oldest_first
from ..utils.stats import inverted_spread, mean, pearson

logger = get_logger(__name__)

MASTERY_SCORE = 85.0
NOT_IMPROVING = 999
MIN_PROGRESS_RATE = 0.1
STRUGGLE_FAILURE_RATE = 0.40
REVIEW_FAILURE_RATE = 0.60
MILESTONE_WINDOW = 3
MILESTONE_MIN_SESSIONS = 2
CORRELATION_THRESHOLD = 0.1
MIN_CORRELATION_SESSIONS = 2


def progress_rate(sessions: Sequence[SessionRecord]) -> float:
    """Score gained per session between the first and last chronological sessions."""
    if len(sessions) < 2:
        return 0.0
    ordered = oldest_first(sessions)
    return (ordered[-1].final_score - ordered[0].final_score) / len(sessions)


def time_to_mastery(sessions: Sequence[SessionRecord]) -> int:
    """Sessions still needed to reach the mastery score at the current rate."""
    if not sessions:
        return 0

    latest_score = newest_first(sessions)[0].final_score
    if latest_score >= MASTERY_SCORE:
        return 0

    rate = progress_rate(sessions)
    if rate <= 0:
        return NOT_IMPROVING
    return math.ceil((MASTERY_SCORE - latest_score) / max(MIN_PROGRESS_RATE, rate))


def difficulty_adaptation(sessions: Sequence[SessionRecord]) -> float:
    """Mean step in difficulty between consecutive sessions; positive means escalation."""
    levels = [s.difficulty_level for s in oldest_first(sessions)]
    changes = [current - previous for previous, current in zip(levels, levels[1:])]
    return mean(changes)


def correlation_type(r: float) -> CorrelationType:
    if r > CORRELATION_THRESHOLD:
        return "positive"
    if r < -CORRELATION_THRESHOLD:
        return "negative"
    return "neutral"


class LearningPatternAnalyzer:
    """Detects when, where and how a learner improves."""

    def analyze(self, sessions: Sequence[SessionRecord]) -> LearningPatterns:
        history = newest_first(sessions)
        modules = group_by_module(history)

        patterns = LearningPatterns(
            peak_performance_times=self.peak_performance_times(history),
            learning_curve_analysis=self.learning_curves(modules),
            struggle_points=self.struggle_points(modules),
            mastery_milestones=self.mastery_milestones(modules),
            cross_module_correlation=self.cross_module_correlation(modules),
        )

        logger.debug(
            "learning_patterns_analyzed",
            sessions=len(history),
            modules=len(modules),
            struggle_points=len(patterns.struggle_points),
            milestones=len(patterns.mastery_milestones),
        )
        return patterns

    def peak_performance_times(self, sessions: Sequence[SessionRecord]) -> List[TimeSlot]:
        by_hour: Dict[int, List[float]] = defaultdict(list)
        for session in sessions:
            by_hour[session.completed_at.hour].append(session.final_score)

        return [
            TimeSlot(hour=hour, performance_score=mean(scores), session_count=len(scores))
            for hour, scores in sorted(by_hour.items())
        ]

    def learning_curves(self, modules: Dict[str, List[SessionRecord]]) -> List[LearningCurve]:
        return [
            LearningCurve(
                concept=module_name,
                progress_rate=progress_rate(module_sessions),
                time_to_mastery=time_to_mastery(module_sessions),
                difficulty_adaptation=difficulty_adaptation(module_sessions),
            )
            for module_name, module_sessions in modules.items()
        ]

    def struggle_points(self, modules: Dict[str, List[SessionRecord]]) -> List[ConceptStruggle]:
        struggles = []
        for module_name, module_sessions in modules.items():
            total = sum(s.questions_total for s in module_sessions)
            if total == 0:
                continue
            # Over-reported correct counts are clamped to zero misses
            incorrect = sum(max(0, s.questions_total - s.questions_correct) for s in module_sessions)
            failure_rate = incorrect / total

            if failure_rate > STRUGGLE_FAILURE_RATE:
                struggles.append(ConceptStruggle(
                    concept=module_name,
                    failure_rate=failure_rate,
                    attempts_needed=len(module_sessions),
                    recommended_action=(
                        "Review fundamentals" if failure_rate > REVIEW_FAILURE_RATE else "Practice more"
                    ),
                ))
        return struggles

    def mastery_milestones(self, modules: Dict[str, List[SessionRecord]]) -> List[MasteryMilestone]:
        milestones = []
        for module_name, module_sessions in modules.items():
            recent = newest_first(module_sessions)[:MILESTONE_WINDOW]
            if len(recent) < MILESTONE_MIN_SESSIONS:
                continue

            recent_scores = [s.final_score for s in recent]
            average = mean(recent_scores)
            if average >= MASTERY_SCORE:
                milestones.append(MasteryMilestone(
                    concept=module_name,
                    mastery_level=average,
                    achieved_date=recent[0].completed_at,
                    stability_score=inverted_spread(recent_scores),
                ))
        return milestones

    def cross_module_correlation(self, modules: Dict[str, List[SessionRecord]]) -> List[ModuleCorrelation]:
        """Pearson r between every pair of modules with at least two sessions.

        Series are newest-first and paired by position, not by calendar date.
        """
        eligible = [
            name for name, module_sessions in modules.items()
            if len(module_sessions) >= MIN_CORRELATION_SESSIONS
        ]
        correlations = []
        for module1, module2 in combinations(eligible, 2):
            scores1 = [s.final_score for s in newest_first(modules[module1])]
            scores2 = [s.final_score for s in newest_first(modules[module2])]
            r = pearson(scores1, scores2)

            correlations.append(ModuleCorrelation(
                module1=module1,
                module2=module2,
                correlation_strength=abs(r),
                type=correlation_type(r),
            ))
        return correlations
