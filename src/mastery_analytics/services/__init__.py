"""Mastery tracking and analytics services."""

from .adaptive_selector import AdaptiveSelector, next_difficulty
from .analytics_engine import AnalyticsEngine
from .engagement import EngagementAnalyzer
from .forecaster import PredictiveForecaster
from .learning_patterns import LearningPatternAnalyzer
from .mastery_tracker import ConceptMasteryTracker
from .performance_metrics import PerformanceMetricsCalculator
from .recommendations import RecommendationBuilder
from .stores import InMemoryLearnerDirectory, InMemoryMasteryStore, InMemorySessionStore

__all__ = [
    "AdaptiveSelector",
    "AnalyticsEngine",
    "ConceptMasteryTracker",
    "EngagementAnalyzer",
    "InMemoryLearnerDirectory",
    "InMemoryMasteryStore",
    "InMemorySessionStore",
    "LearningPatternAnalyzer",
    "PerformanceMetricsCalculator",
    "PredictiveForecaster",
    "RecommendationBuilder",
    "next_difficulty",
]
