"""Store contracts consumed by the engine, plus in-memory implementations."""

from collections import defaultdict
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from ..schemas.records import ConceptMastery, SessionRecord
from ..utils.sessions import newest_first

MasteryKey = Tuple[int, str, str]

# Maps the current record (None before the first attempt) to the next one
MasteryChange = Callable[[Optional[ConceptMastery]], ConceptMastery]


class SessionRecordStore(Protocol):
    """Supplies completed practice sessions, newest first."""

    async def list_sessions(self, learner_id: int, limit: int = 100) -> List[SessionRecord]:
        ...

    async def add_session(self, record: SessionRecord) -> SessionRecord:
        ...


class ConceptMasteryStore(Protocol):
    """Reads and writes per-(learner, concept, grade) mastery records."""

    async def get(self, learner_id: int, concept: str, grade: str) -> Optional[ConceptMastery]:
        ...

    async def upsert(self, mastery: ConceptMastery) -> ConceptMastery:
        ...

    async def apply(self, learner_id: int, concept: str, grade: str, change: MasteryChange) -> ConceptMastery:
        """Atomically replace the key's record with ``change(current)``."""
        ...

    async def list_for_learner(self, learner_id: int) -> List[ConceptMastery]:
        ...


class LearnerDirectory(Protocol):
    """Resolves learner ids."""

    async def exists(self, learner_id: int) -> bool:
        ...

    async def get_grade(self, learner_id: int) -> Optional[str]:
        ...


class InMemorySessionStore:
    """Session store backed by a dict of lists."""

    def __init__(self):
        self._sessions: Dict[int, List[SessionRecord]] = defaultdict(list)

    async def list_sessions(self, learner_id: int, limit: int = 100) -> List[SessionRecord]:
        return newest_first(self._sessions.get(learner_id, []))[:limit]

    async def add_session(self, record: SessionRecord) -> SessionRecord:
        self._sessions[record.learner_id].append(record)
        return record


class InMemoryMasteryStore:
    """Mastery store keyed by (learner, concept, grade)."""

    def __init__(self):
        self._records: Dict[MasteryKey, ConceptMastery] = {}

    async def get(self, learner_id: int, concept: str, grade: str) -> Optional[ConceptMastery]:
        return self._records.get((learner_id, concept, grade))

    async def upsert(self, mastery: ConceptMastery) -> ConceptMastery:
        self._records[mastery.key] = mastery
        return mastery

    async def apply(self, learner_id: int, concept: str, grade: str, change: MasteryChange) -> ConceptMastery:
        # No await between read and write, so this is atomic on the event loop
        mastery = change(self._records.get((learner_id, concept, grade)))
        self._records[mastery.key] = mastery
        return mastery

    async def list_for_learner(self, learner_id: int) -> List[ConceptMastery]:
        return [m for key, m in self._records.items() if key[0] == learner_id]


class InMemoryLearnerDirectory:
    """Learner directory backed by an id -> grade mapping."""

    def __init__(self, learners: Optional[Dict[int, Optional[str]]] = None):
        self._learners: Dict[int, Optional[str]] = dict(learners or {})

    def add_learner(self, learner_id: int, grade: Optional[str] = None) -> None:
        self._learners[learner_id] = grade

    async def exists(self, learner_id: int) -> bool:
        return learner_id in self._learners

    async def get_grade(self, learner_id: int) -> Optional[str]:
        return self._learners.get(learner_id)
