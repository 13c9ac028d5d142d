"""Practice recommendations derived from concept mastery."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ..schemas.analytics import Recommendation
from ..schemas.records import ConceptMastery
from .adaptive_selector import next_difficulty

# Concepts each grade should have started on
GRADE_CURRICULUM: Dict[str, Tuple[str, ...]] = {
    "K": ("counting",),
    "1": ("place value", "measurement"),
    "2": ("arrays",),
    "3": ("fractions", "time calculation"),
    "4": ("decimal values", "area"),
}
UPPER_GRADE_CURRICULUM = ("ratios", "percentages")

GRADE_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "K": ("addition", "subtraction"),
    "1": ("addition", "subtraction"),
    "2": ("multiplication", "division"),
    "3": ("multiplication", "division"),
}
UPPER_GRADE_CATEGORIES = ("fractions",)


def curriculum_for(grade: Optional[str]) -> Tuple[str, ...]:
    return GRADE_CURRICULUM.get(grade or "", UPPER_GRADE_CURRICULUM)


def categories_for(grade: Optional[str]) -> Tuple[str, ...]:
    return GRADE_CATEGORIES.get(grade or "", UPPER_GRADE_CATEGORIES)


class RecommendationBuilder:
    """Builds what-to-practise-next recommendations."""

    def build(
        self,
        learner_id: int,
        grade: Optional[str],
        masteries: Iterable[ConceptMastery],
        correct_count: int = 0,
        attempted_count: int = 0,
        now: Optional[datetime] = None
    ) -> Recommendation:
        masteries = list(masteries)
        practised = {m.concept for m in masteries}

        to_review: List[ConceptMastery] = sorted(
            (m for m in masteries if m.needs_review),
            key=lambda m: (m.mastery_level, m.concept),
        )

        return Recommendation(
            learner_id=learner_id,
            concepts_to_review=[m.concept for m in to_review],
            concepts_to_learn=[c for c in curriculum_for(grade) if c not in practised],
            suggested_categories=list(categories_for(grade)),
            difficulty_level=next_difficulty(correct_count, attempted_count),
            generated_at=now or datetime.now(timezone.utc),
        )
