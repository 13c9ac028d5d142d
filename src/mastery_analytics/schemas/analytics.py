"""Analytics report schemas.

These are read-only views recomputed on every report request. They
serialize with camelCase aliases (``model_dump(by_alias=True)``) so the
report document matches what the dashboard consumers already read.
"""

from datetime import datetime
from typing import List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TrendLabel = Literal["improving", "declining", "stable"]
CorrelationType = Literal["positive", "negative", "neutral"]


class AnalyticsView(BaseModel):
    """Base for derived analytics views."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Performance

class ModuleAccuracyTrend(AnalyticsView):
    module_name: str
    accuracy: float
    trend: TrendLabel
    session_count: int
    last_session_date: datetime


class PerformanceMetrics(AnalyticsView):
    """Scalar and per-module performance aggregates."""
    overall_performance_score: float = 0.0
    learning_velocity: float = 0.0
    accuracy_trends: List[ModuleAccuracyTrend] = Field(default_factory=list)
    retention_rate: float = 0.0
    consistency_index: float = 0.0
    questions_per_session: float = 0.0
    average_session_time: float = 0.0


# Learning patterns

class TimeSlot(AnalyticsView):
    hour: int = Field(..., ge=0, le=23)
    performance_score: float
    session_count: int


class LearningCurve(AnalyticsView):
    concept: str
    progress_rate: float
    time_to_mastery: int
    difficulty_adaptation: float


class ConceptStruggle(AnalyticsView):
    concept: str
    failure_rate: float
    attempts_needed: int
    recommended_action: str


class MasteryMilestone(AnalyticsView):
    concept: str
    mastery_level: float
    achieved_date: datetime
    stability_score: float


class ModuleCorrelation(AnalyticsView):
    module1: str
    module2: str
    correlation_strength: float
    type: CorrelationType


class LearningPatterns(AnalyticsView):
    peak_performance_times: List[TimeSlot] = Field(default_factory=list)
    learning_curve_analysis: List[LearningCurve] = Field(default_factory=list)
    struggle_points: List[ConceptStruggle] = Field(default_factory=list)
    mastery_milestones: List[MasteryMilestone] = Field(default_factory=list)
    cross_module_correlation: List[ModuleCorrelation] = Field(default_factory=list)


# Engagement

class SessionPattern(AnalyticsView):
    average_duration: float
    optimal_duration: float
    engagement_score: float
    time_of_day: str


class ModulePreference(AnalyticsView):
    module_name: str
    time_spent: int
    performance_correlation: float
    engagement_level: float


class DifficultyMetric(AnalyticsView):
    current_level: float
    adaptation_speed: float
    comfort_zone: Tuple[float, float]
    challenge_readiness: float


class ComebackMetric(AnalyticsView):
    days_away: int
    performance_change: float
    recovery_time: int


class EngagementMetrics(AnalyticsView):
    session_duration_patterns: List[SessionPattern] = Field(default_factory=list)
    module_preferences: List[ModulePreference] = Field(default_factory=list)
    difficulty_adaptation: List[DifficultyMetric] = Field(default_factory=list)
    comeback_performance: List[ComebackMetric] = Field(default_factory=list)
    goal_achievement_rate: float = Field(
        0.0, ge=0, le=100, description="Percentage (0-100), not a fraction, of sessions meeting the goal score"
    )


# Predictive

class PerformanceForecast(AnalyticsView):
    session_number: int
    predicted_score: float = Field(..., ge=0.0, le=100.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    date: datetime


class RiskAssessment(AnalyticsView):
    concept: str
    forgetting_risk: float = Field(..., ge=0.0, le=100.0)
    intervention_needed: bool
    recommended_action: str


class PathOptimization(AnalyticsView):
    current_module: str
    next_module: str
    optimal_sequence: List[str]
    expected_outcome: float


class MasteryEstimate(AnalyticsView):
    concept: str
    estimated_days: int
    confidence: float
    prerequisites_met: bool


class PredictiveAnalytics(AnalyticsView):
    performance_forecast: List[PerformanceForecast] = Field(default_factory=list)
    risk_assessment: List[RiskAssessment] = Field(default_factory=list)
    optimal_challenge_level: int = Field(default=1, ge=1, le=5)
    learning_path_optimization: List[PathOptimization] = Field(default_factory=list)
    time_to_mastery_estimates: List[MasteryEstimate] = Field(default_factory=list)


# Report

class ComprehensiveAnalytics(AnalyticsView):
    """The full analytics report for one learner."""
    learner_id: int
    generated_at: datetime
    performance_metrics: PerformanceMetrics
    learning_patterns: LearningPatterns
    engagement_metrics: EngagementMetrics
    predictive_analytics: PredictiveAnalytics
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


class Recommendation(AnalyticsView):
    """Practice recommendation derived from concept mastery."""
    learner_id: int
    concepts_to_review: List[str] = Field(default_factory=list)
    concepts_to_learn: List[str] = Field(default_factory=list)
    suggested_categories: List[str] = Field(default_factory=list)
    difficulty_level: int = Field(default=1, ge=1, le=5)
    generated_at: datetime
