"""Short-horizon forecasting and study-order recommendations."""

import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from ..schemas.analytics import (
    MasteryEstimate, PathOptimization, PerformanceForecast, PerformanceMetrics,
    PredictiveAnalytics, RiskAssessment
)
from ..schemas.records import SessionRecord
from ..utils.sessions import days_between, group_by_module, newest_first
from ..utils.stats import clamp, mean
from .learning_patterns import MASTERY_SCORE, MIN_PROGRESS_RATE, NOT_IMPROVING, progress_rate

FORECAST_WINDOW = 10
CHALLENGE_WINDOW = 5
DEFAULT_BASE_SCORE = 50.0
RISK_PER_DAY = 5.0
INTERVENTION_RISK = 50.0
PREREQUISITE_SCORE = 40.0

# (minimum recent mean score, challenge level), checked in order
CHALLENGE_LEVELS = ((85.0, 4), (70.0, 3), (55.0, 2))


def forecast_confidence(step: int) -> float:
    """Confidence decays by 0.1 per step from 0.9, floored at 0.3."""
    return max(0.3, 0.9 - 0.1 * step)


def forgetting_risk(days_since_last_session: float) -> float:
    return min(100.0, max(0.0, days_since_last_session) * RISK_PER_DAY)


class PredictiveForecaster:
    """Extrapolates recent performance and ranks what to practise next."""

    def forecast(
        self,
        sessions: Sequence[SessionRecord],
        metrics: Optional[PerformanceMetrics] = None,
        horizon: int = 5,
        now: Optional[datetime] = None
    ) -> PredictiveAnalytics:
        # ``metrics`` is accepted so callers can pass the snapshot they already
        # computed; every estimate here works from the raw sessions.
        now = now or datetime.now(timezone.utc)
        history = newest_first(sessions)

        return PredictiveAnalytics(
            performance_forecast=self.performance_forecast(history, horizon, now),
            risk_assessment=self.risk_assessment(history, now),
            optimal_challenge_level=self.optimal_challenge_level(history),
            learning_path_optimization=self.learning_path(history),
            time_to_mastery_estimates=self.time_to_mastery_estimates(history),
        )

    def performance_forecast(
        self, sessions: Sequence[SessionRecord], horizon: int, now: datetime
    ) -> List[PerformanceForecast]:
        recent_scores = [s.final_score for s in newest_first(sessions)[:FORECAST_WINDOW]]
        if len(recent_scores) > 1:
            trend = (recent_scores[0] - recent_scores[-1]) / len(recent_scores)
        else:
            trend = 0.0
        base_score = recent_scores[0] if recent_scores else DEFAULT_BASE_SCORE

        return [
            PerformanceForecast(
                session_number=i,
                predicted_score=clamp(base_score + trend * i, 0.0, 100.0),
                confidence=forecast_confidence(i),
                date=now + timedelta(days=i),
            )
            for i in range(1, horizon + 1)
        ]

    def risk_assessment(self, sessions: Sequence[SessionRecord], now: datetime) -> List[RiskAssessment]:
        assessments = []
        for module_name, module_sessions in group_by_module(newest_first(sessions)).items():
            risk = forgetting_risk(days_between(now, module_sessions[0].completed_at))
            needed = risk > INTERVENTION_RISK
            assessments.append(RiskAssessment(
                concept=module_name,
                forgetting_risk=risk,
                intervention_needed=needed,
                recommended_action="Review immediately" if needed else "Continue regular practice",
            ))
        return assessments

    def optimal_challenge_level(self, sessions: Sequence[SessionRecord]) -> int:
        recent = newest_first(sessions)[:CHALLENGE_WINDOW]
        average = sum(s.final_score for s in recent) / max(1, len(recent))
        for threshold, level in CHALLENGE_LEVELS:
            if average >= threshold:
                return level
        return 1

    def learning_path(self, sessions: Sequence[SessionRecord]) -> List[PathOptimization]:
        """Order modules weakest first and pair each with the next one up."""
        ranked = sorted(
            (
                (module_name, mean([s.final_score for s in module_sessions]))
                for module_name, module_sessions in group_by_module(newest_first(sessions)).items()
            ),
            key=lambda item: item[1],
        )

        return [
            PathOptimization(
                current_module=current,
                next_module=following,
                optimal_sequence=[current, following],
                expected_outcome=(current_avg + following_avg) / 2,
            )
            for (current, current_avg), (following, following_avg) in zip(ranked, ranked[1:])
        ]

    def time_to_mastery_estimates(self, sessions: Sequence[SessionRecord]) -> List[MasteryEstimate]:
        estimates = []
        for module_name, module_sessions in group_by_module(newest_first(sessions)).items():
            average = mean([s.final_score for s in module_sessions])
            if average >= MASTERY_SCORE:
                days = 0
            else:
                rate = max(MIN_PROGRESS_RATE, progress_rate(module_sessions))
                days = min(NOT_IMPROVING, math.ceil((MASTERY_SCORE - average) / rate))

            estimates.append(MasteryEstimate(
                concept=module_name,
                estimated_days=days,
                confidence=0.8 if len(module_sessions) >= 4 else 0.5,
                prerequisites_met=average > PREREQUISITE_SCORE,
            ))
        return estimates
