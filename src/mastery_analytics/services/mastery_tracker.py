"""Per-answer concept mastery tracking."""

import asyncio
import math
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..logging_config import get_logger
from ..schemas.records import ConceptMastery
from .stores import ConceptMasteryStore, MasteryKey

logger = get_logger(__name__)

CORRECT_SEED = 60.0
INCORRECT_SEED = 30.0
CORRECT_STEP = 20.0
INCORRECT_STEP = 15.0
MIN_STEP = 5.0
REVIEW_THRESHOLD = 60.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def step_size(base: float, total_attempts: int) -> float:
    """Shrinking update step: ``max(5, base / sqrt(n))``."""
    return max(MIN_STEP, base / math.sqrt(total_attempts))


def apply_answer(mastery: ConceptMastery, is_correct: bool, now: datetime) -> ConceptMastery:
    """Return the mastery record that results from one more answer."""
    total_attempts = mastery.total_attempts + 1
    correct_attempts = mastery.correct_attempts + (1 if is_correct else 0)

    if is_correct:
        level = min(100.0, mastery.mastery_level + step_size(CORRECT_STEP, total_attempts))
    else:
        level = max(0.0, mastery.mastery_level - step_size(INCORRECT_STEP, total_attempts))

    return ConceptMastery(
        learner_id=mastery.learner_id,
        concept=mastery.concept,
        grade=mastery.grade,
        total_attempts=total_attempts,
        correct_attempts=correct_attempts,
        mastery_level=level,
        last_practiced=now,
        needs_review=level < REVIEW_THRESHOLD or not is_correct,
    )


def first_attempt(learner_id: int, concept: str, grade: str, is_correct: bool, now: datetime) -> ConceptMastery:
    """Seed a mastery record; correct first answers start higher."""
    return ConceptMastery(
        learner_id=learner_id,
        concept=concept,
        grade=grade,
        total_attempts=1,
        correct_attempts=1 if is_correct else 0,
        mastery_level=CORRECT_SEED if is_correct else INCORRECT_SEED,
        last_practiced=now,
        needs_review=not is_correct,
    )


class ConceptMasteryTracker:
    """Applies answer events to concept mastery records.

    The store performs each read-modify-write atomically, which serializes
    same-key updates across trackers, sessions and processes. Within one
    tracker a per-key lock also queues same-key updates locally so they do
    not contend on the store; updates to different keys run independently.
    """

    def __init__(
        self,
        store: ConceptMasteryStore,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.clock = clock
        self._locks: Dict[MasteryKey, asyncio.Lock] = {}
        self._holders: Dict[MasteryKey, int] = {}

    @asynccontextmanager
    async def _key_lock(self, key: MasteryKey):
        # Locks are dropped once no update holds or awaits them
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    async def update(self, learner_id: int, concept: str, grade: str, is_correct: bool) -> ConceptMastery:
        """Apply one answer event to the learner's mastery of ``concept``."""

        def next_state(existing: Optional[ConceptMastery]) -> ConceptMastery:
            if existing is None:
                return first_attempt(learner_id, concept, grade, is_correct, now)
            return apply_answer(existing, is_correct, now)

        async with self._key_lock((learner_id, concept, grade)):
            now = self.clock()
            saved = await self.store.apply(learner_id, concept, grade, next_state)

        logger.debug(
            "concept_mastery_updated",
            learner_id=learner_id,
            concept=concept,
            grade=grade,
            is_correct=is_correct,
            total_attempts=saved.total_attempts,
            correct_attempts=saved.correct_attempts,
            mastery_level=round(saved.mastery_level, 2),
            needs_review=saved.needs_review,
        )
        return saved

    async def update_concepts(
        self,
        learner_id: int,
        concepts: Iterable[str],
        grade: str,
        is_correct: bool
    ) -> List[ConceptMastery]:
        """Apply one answer to every concept a question covers."""
        updated = []
        seen = set()
        for concept in concepts:
            if concept in seen:
                continue
            seen.add(concept)
            updated.append(await self.update(learner_id, concept, grade, is_correct))

        if not updated:
            logger.info("No concepts to update for answer", learner_id=learner_id, grade=grade)
        return updated

    async def concepts_for_review(self, learner_id: int, grade: Optional[str] = None) -> List[ConceptMastery]:
        """Records flagged for review, weakest first."""
        records = await self.store.list_for_learner(learner_id)
        flagged = [
            m for m in records
            if m.needs_review and (grade is None or m.grade == grade)
        ]
        return sorted(flagged, key=lambda m: (m.mastery_level, m.concept))
