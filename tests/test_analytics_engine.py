"""Tests for the analytics engine and recommendations."""

import pytest

from mastery_analytics.config import Settings
from mastery_analytics.schemas.records import ConceptMastery
from mastery_analytics.services.analytics_engine import AnalyticsEngine, strengths_and_weaknesses
from mastery_analytics.services.mastery_tracker import ConceptMasteryTracker
from mastery_analytics.services.recommendations import RecommendationBuilder, curriculum_for
from mastery_analytics.utils.exceptions import ErrorCategory, LearnerNotFoundException
from mastery_analytics.utils.sessions import format_module_name


@pytest.fixture
def engine(session_store, learner_directory, mastery_store):
    return AnalyticsEngine(session_store, learner_directory, mastery_store, settings=Settings())


async def add_all(store, sessions):
    for session in sessions:
        await store.add_session(session)


@pytest.mark.parametrize(
    "slug, display",
    [
        ("math-facts-addition", "Math Facts: Addition"),
        ("time_calc", "Time calc"),
        ("place-value", "Place Value"),
        ("area", "Area"),
    ],
)
def test_format_module_name(slug, display):
    assert format_module_name(slug) == display


def test_strengths_and_weaknesses(make_session):
    sessions = [
        make_session(92, module="math-facts-addition", total=10, correct=9),
        make_session(40, module="time_calc", total=10, correct=4),
        make_session(70, module="area", total=10, correct=7),
        make_session(45, module="fractions", total=10, correct=8),
    ]

    strengths, weaknesses = strengths_and_weaknesses(sessions)

    assert strengths == ["Math Facts: Addition"]
    assert set(weaknesses) == {"Time calc", "Fractions"}


class TestComprehensiveAnalytics:

    @pytest.mark.asyncio
    async def test_unknown_learner(self, engine):
        with pytest.raises(LearnerNotFoundException) as exc_info:
            await engine.get_comprehensive_analytics(99)

        assert exc_info.value.error_code == "LEARNER_NOT_FOUND"
        assert exc_info.value.category == ErrorCategory.NOT_FOUND
        assert exc_info.value.details["learner_id"] == 99

    @pytest.mark.asyncio
    async def test_learner_without_history(self, engine, now):
        report = await engine.get_comprehensive_analytics(2, now=now)

        assert report.learner_id == 2
        assert report.generated_at == now
        assert report.performance_metrics.overall_performance_score == 0
        assert report.learning_patterns.struggle_points == []
        assert report.predictive_analytics.optimal_challenge_level == 1
        assert report.strengths == []
        assert report.weaknesses == []

    @pytest.mark.asyncio
    async def test_full_report(self, engine, session_store, make_session, now):
        await add_all(session_store, [
            make_session(60, module="addition", days_ago=4),
            make_session(80, module="addition", days_ago=2),
            make_session(95, module="addition", days_ago=0),
            make_session(30, module="fractions", days_ago=3, total=10, correct=3),
            make_session(50, module="fractions", days_ago=1, learner_id=2, grade="K"),
        ])

        report = await engine.get_comprehensive_analytics(1, now=now)

        assert report.performance_metrics.overall_performance_score == pytest.approx(66.25)
        assert {t.module_name for t in report.performance_metrics.accuracy_trends} == {"addition", "fractions"}
        assert [s.concept for s in report.learning_patterns.struggle_points] == ["fractions"]
        assert len(report.predictive_analytics.performance_forecast) == 5
        assert report.weaknesses == ["Fractions"]

    @pytest.mark.asyncio
    async def test_history_limit(self, session_store, learner_directory, make_session, now):
        engine = AnalyticsEngine(
            session_store, learner_directory, settings=Settings(session_history_limit=2, forecast_horizon=3)
        )
        await add_all(session_store, [make_session(s, days_ago=d) for s, d in [(10, 5), (80, 1), (90, 0)]])

        report = await engine.get_comprehensive_analytics(1, now=now)

        assert report.performance_metrics.overall_performance_score == pytest.approx(85)
        assert len(report.predictive_analytics.performance_forecast) == 3

    @pytest.mark.asyncio
    async def test_camel_case_document(self, engine, session_store, make_session, now):
        await session_store.add_session(make_session(75))

        document = (await engine.get_comprehensive_analytics(1, now=now)).model_dump(by_alias=True, mode="json")

        assert set(document) == {
            "learnerId", "generatedAt", "performanceMetrics", "learningPatterns",
            "engagementMetrics", "predictiveAnalytics", "strengths", "weaknesses",
        }
        assert "overallPerformanceScore" in document["performanceMetrics"]
        assert "peakPerformanceTimes" in document["learningPatterns"]
        assert "comebackPerformance" in document["engagementMetrics"]
        assert "timeToMasteryEstimates" in document["predictiveAnalytics"]
        assert document["performanceMetrics"]["accuracyTrends"][0]["moduleName"] == "addition"


class TestRecommendations:

    @pytest.mark.asyncio
    async def test_review_learn_and_difficulty(self, engine, session_store, mastery_store, make_session, now):
        tracker = ConceptMasteryTracker(mastery_store, clock=lambda: now)
        await tracker.update(1, "fractions", "3", False)
        await tracker.update(1, "area", "3", True)
        await add_all(session_store, [make_session(90, total=10, correct=9, days_ago=d) for d in range(3)])

        recommendation = await engine.get_recommendations(1, now=now)

        assert recommendation.concepts_to_review == ["fractions"]
        assert recommendation.concepts_to_learn == ["time calculation"]
        assert recommendation.suggested_categories == ["multiplication", "division"]
        assert recommendation.difficulty_level == 5
        assert recommendation.generated_at == now

    @pytest.mark.asyncio
    async def test_without_mastery_store(self, session_store, learner_directory, now):
        engine = AnalyticsEngine(session_store, learner_directory, settings=Settings())

        recommendation = await engine.get_recommendations(2, now=now)

        assert recommendation.concepts_to_review == []
        assert recommendation.concepts_to_learn == ["counting"]
        assert recommendation.suggested_categories == ["addition", "subtraction"]
        assert recommendation.difficulty_level == 1

    @pytest.mark.asyncio
    async def test_unknown_learner(self, engine):
        with pytest.raises(LearnerNotFoundException):
            await engine.get_recommendations(42)


class TestRecommendationBuilder:

    def test_review_weakest_first(self, now):
        masteries = [
            ConceptMastery(learner_id=1, concept=c, grade="2", total_attempts=4, correct_attempts=1,
                           mastery_level=level, last_practiced=now, needs_review=review)
            for c, level, review in [("time", 45, True), ("arrays", 20, True), ("counting", 10, False)]
        ]

        recommendation = RecommendationBuilder().build(1, "2", masteries, now=now)

        assert recommendation.concepts_to_review == ["arrays", "time"]
        assert recommendation.concepts_to_learn == []

    def test_upper_grades(self, now):
        recommendation = RecommendationBuilder().build(1, "6", [], now=now)

        assert recommendation.concepts_to_learn == ["ratios", "percentages"]
        assert recommendation.suggested_categories == ["fractions"]

    def test_missing_grade_uses_upper_curriculum(self):
        assert curriculum_for(None) == ("ratios", "percentages")
