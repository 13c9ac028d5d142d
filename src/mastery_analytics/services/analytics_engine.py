"""Comprehensive learner analytics report."""

import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..logging_config import get_logger
from ..schemas.analytics import ComprehensiveAnalytics, Recommendation
from ..schemas.records import SessionRecord
from ..utils.exceptions import LearnerNotFoundException, MasteryAnalyticsException
from ..utils.sessions import format_module_name, group_by_module, newest_first
from ..utils.stats import mean
from .engagement import EngagementAnalyzer
from .forecaster import PredictiveForecaster
from .learning_patterns import LearningPatternAnalyzer
from .performance_metrics import PerformanceMetricsCalculator
from .recommendations import RecommendationBuilder
from .stores import ConceptMasteryStore, LearnerDirectory, SessionRecordStore

logger = get_logger(__name__)

STRENGTH_ACCURACY = 0.8
STRENGTH_SCORE = 75.0
WEAKNESS_ACCURACY = 0.6
WEAKNESS_SCORE = 50.0


def strengths_and_weaknesses(sessions: Sequence[SessionRecord]) -> Tuple[List[str], List[str]]:
    """Split modules into display-named strengths and weaknesses."""
    strengths: List[str] = []
    weaknesses: List[str] = []

    for module_name, module_sessions in group_by_module(newest_first(sessions)).items():
        avg_accuracy = mean([s.accuracy for s in module_sessions])
        avg_score = mean([s.final_score for s in module_sessions])

        if avg_accuracy > STRENGTH_ACCURACY and avg_score > STRENGTH_SCORE:
            strengths.append(format_module_name(module_name))
        elif avg_accuracy < WEAKNESS_ACCURACY or avg_score < WEAKNESS_SCORE:
            weaknesses.append(format_module_name(module_name))

    return strengths, weaknesses


class AnalyticsEngine:
    """Composes every analyzer over one snapshot of a learner's history."""

    def __init__(
        self,
        session_store: SessionRecordStore,
        learner_directory: LearnerDirectory,
        mastery_store: Optional[ConceptMasteryStore] = None,
        settings: Optional[Settings] = None
    ):
        self.session_store = session_store
        self.learner_directory = learner_directory
        self.mastery_store = mastery_store
        self.settings = settings or get_settings()

        self.performance_calculator = PerformanceMetricsCalculator()
        self.pattern_analyzer = LearningPatternAnalyzer()
        self.engagement_analyzer = EngagementAnalyzer()
        self.forecaster = PredictiveForecaster()
        self.recommendation_builder = RecommendationBuilder()

    async def _load_history(self, learner_id: int) -> List[SessionRecord]:
        if not await self.learner_directory.exists(learner_id):
            logger.warning("Analytics requested for unknown learner", learner_id=learner_id)
            raise LearnerNotFoundException(learner_id)

        return await self.session_store.list_sessions(
            learner_id, limit=self.settings.session_history_limit
        )

    async def get_comprehensive_analytics(
        self,
        learner_id: int,
        now: Optional[datetime] = None
    ) -> ComprehensiveAnalytics:
        """Build the full analytics report for a learner."""
        started = time.perf_counter()
        now = now or datetime.now(timezone.utc)

        try:
            history = await self._load_history(learner_id)

            performance = self.performance_calculator.compute(history, now=now)
            patterns = self.pattern_analyzer.analyze(history)
            engagement = self.engagement_analyzer.analyze(history)
            predictive = self.forecaster.forecast(
                history, performance, horizon=self.settings.forecast_horizon, now=now
            )
            strengths, weaknesses = strengths_and_weaknesses(history)
        except MasteryAnalyticsException:
            raise
        except Exception as e:
            logger.error("Failed to generate analytics report", learner_id=learner_id, error=str(e))
            raise

        report = ComprehensiveAnalytics(
            learner_id=learner_id,
            generated_at=now,
            performance_metrics=performance,
            learning_patterns=patterns,
            engagement_metrics=engagement,
            predictive_analytics=predictive,
            strengths=strengths,
            weaknesses=weaknesses,
        )

        logger.info(
            "analytics_report_generated",
            learner_id=learner_id,
            sessions=len(history),
            strengths=len(strengths),
            weaknesses=len(weaknesses),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return report

    async def get_recommendations(self, learner_id: int, now: Optional[datetime] = None) -> Recommendation:
        """Recommend review concepts, new concepts and a difficulty level."""
        history = await self._load_history(learner_id)
        grade = await self.learner_directory.get_grade(learner_id)
        masteries = await self.mastery_store.list_for_learner(learner_id) if self.mastery_store else []

        recommendation = self.recommendation_builder.build(
            learner_id,
            grade,
            masteries,
            correct_count=sum(min(s.questions_correct, s.questions_total) for s in history),
            attempted_count=sum(s.questions_total for s in history),
            now=now,
        )

        logger.info(
            "recommendation_generated",
            learner_id=learner_id,
            review=len(recommendation.concepts_to_review),
            learn=len(recommendation.concepts_to_learn),
            difficulty=recommendation.difficulty_level,
        )
        return recommendation
