"""Pydantic schemas."""

from .analytics import (
    ComebackMetric, ComprehensiveAnalytics, ConceptStruggle, DifficultyMetric,
    EngagementMetrics, LearningCurve, LearningPatterns, MasteryEstimate,
    MasteryMilestone, ModuleAccuracyTrend, ModuleCorrelation, ModulePreference,
    PathOptimization, PerformanceForecast, PerformanceMetrics, PredictiveAnalytics,
    Recommendation, RiskAssessment, SessionPattern, TimeSlot
)
from .records import ConceptMastery, SessionRecord

__all__ = [
    "ComebackMetric",
    "ComprehensiveAnalytics",
    "ConceptMastery",
    "ConceptStruggle",
    "DifficultyMetric",
    "EngagementMetrics",
    "LearningCurve",
    "LearningPatterns",
    "MasteryEstimate",
    "MasteryMilestone",
    "ModuleAccuracyTrend",
    "ModuleCorrelation",
    "ModulePreference",
    "PathOptimization",
    "PerformanceForecast",
    "PerformanceMetrics",
    "PredictiveAnalytics",
    "Recommendation",
    "RiskAssessment",
    "SessionPattern",
    "SessionRecord",
    "TimeSlot",
]
