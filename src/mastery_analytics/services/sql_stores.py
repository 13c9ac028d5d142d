"""SQLAlchemy-backed implementations of the store contracts."""

from typing import List, Optional

from sqlalchemy import and_, desc, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..logging_config import get_logger
from ..models.records import ConceptMasteryRow, Learner, SessionRecordRow
from ..schemas.records import ConceptMastery, SessionRecord
from ..utils.exceptions import ConfigurationException, DatabaseException, DataIntegrityException
from .stores import MasteryChange

logger = get_logger(__name__)

# Dialects whose INSERT supports ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

MASTERY_KEY_COLUMNS = ["learner_id", "concept", "grade"]
MASTERY_STATE_COLUMNS = [
    "total_attempts", "correct_attempts", "mastery_level", "last_practiced", "needs_review"
]


class SqlSessionStore:
    """Session records stored in the ``module_history`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_sessions(self, learner_id: int, limit: int = 100) -> List[SessionRecord]:
        """Get a learner's sessions, newest first."""
        try:
            result = await self.db.execute(
                select(SessionRecordRow)
                .where(SessionRecordRow.learner_id == learner_id)
                .order_by(desc(SessionRecordRow.completed_at))
                .limit(limit)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list sessions", learner_id=learner_id, error=str(e))
            raise DatabaseException(f"Failed to list sessions for learner {learner_id}") from e

        return [SessionRecord.model_validate(row) for row in rows]

    async def add_session(self, record: SessionRecord) -> SessionRecord:
        """Record a completed session."""
        row = SessionRecordRow(**record.model_dump())
        try:
            self.db.add(row)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error("Session record rejected", learner_id=record.learner_id, error=str(e))
            raise DataIntegrityException("module_history", str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to add session", learner_id=record.learner_id, error=str(e))
            raise DatabaseException("Failed to add session record") from e

        return record


class SqlMasteryStore:
    """Concept mastery stored in the ``concept_mastery`` table.

    Writes go through ``INSERT ... ON CONFLICT`` so callers on different
    sessions (or processes) never trip the unique key, and ``apply`` holds
    the row's write lock from its read until commit.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ConfigurationException(
                f"Concept mastery upserts are not supported on {dialect}", config_key="database_url"
            )
        return insert(ConceptMasteryRow)

    @staticmethod
    def _key_filter(learner_id: int, concept: str, grade: str):
        return and_(
            ConceptMasteryRow.learner_id == learner_id,
            ConceptMasteryRow.concept == concept,
            ConceptMasteryRow.grade == grade
        )

    async def _get_row(self, learner_id: int, concept: str, grade: str) -> Optional[ConceptMasteryRow]:
        result = await self.db.execute(
            select(ConceptMasteryRow)
            .where(self._key_filter(learner_id, concept, grade))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, learner_id: int, concept: str, grade: str) -> Optional[ConceptMastery]:
        try:
            row = await self._get_row(learner_id, concept, grade)
        except SQLAlchemyError as e:
            logger.error("Failed to read concept mastery", learner_id=learner_id, concept=concept, error=str(e))
            raise DatabaseException("Failed to read concept mastery") from e

        return ConceptMastery.model_validate(row) if row else None

    async def upsert(self, mastery: ConceptMastery) -> ConceptMastery:
        """Write ``mastery`` as the key's state, inserting or overwriting."""
        stmt = self._insert().values(**mastery.model_dump())
        stmt = stmt.on_conflict_do_update(
            index_elements=MASTERY_KEY_COLUMNS,
            set_={column: stmt.excluded[column] for column in MASTERY_STATE_COLUMNS},
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error("Concept mastery rejected", learner_id=mastery.learner_id, concept=mastery.concept, error=str(e))
            raise DataIntegrityException("concept_mastery", str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to upsert concept mastery", learner_id=mastery.learner_id, concept=mastery.concept, error=str(e))
            raise DatabaseException("Failed to save concept mastery") from e

        return mastery

    async def apply(self, learner_id: int, concept: str, grade: str, change: MasteryChange) -> ConceptMastery:
        """Read-modify-write one key in a single transaction.

        An empty row is claimed first with ``ON CONFLICT DO NOTHING``; that
        write takes the row lock on PostgreSQL (and the database write lock
        on SQLite) before the state is read, so concurrent callers queue
        behind each other instead of racing. A row with no attempts is
        handed to ``change`` as ``None``.
        """
        claim = self._insert().values(
            learner_id=learner_id,
            concept=concept,
            grade=grade,
            total_attempts=0,
            correct_attempts=0,
            mastery_level=0.0,
            needs_review=False,
        ).on_conflict_do_nothing(index_elements=MASTERY_KEY_COLUMNS)

        try:
            await self.db.execute(claim)
            result = await self.db.execute(
                select(ConceptMasteryRow)
                .where(self._key_filter(learner_id, concept, grade))
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            row = result.scalar_one()

            current = ConceptMastery.model_validate(row) if row.total_attempts else None
            mastery = change(current)

            for column in MASTERY_STATE_COLUMNS:
                setattr(row, column, getattr(mastery, column))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error("Concept mastery rejected", learner_id=learner_id, concept=concept, error=str(e))
            raise DataIntegrityException("concept_mastery", str(e.orig)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update concept mastery", learner_id=learner_id, concept=concept, error=str(e))
            raise DatabaseException("Failed to update concept mastery") from e
        except Exception:
            await self.db.rollback()
            raise

        return mastery

    async def list_for_learner(self, learner_id: int) -> List[ConceptMastery]:
        try:
            result = await self.db.execute(
                select(ConceptMasteryRow)
                .where(ConceptMasteryRow.learner_id == learner_id)
                .execution_options(populate_existing=True)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list concept mastery", learner_id=learner_id, error=str(e))
            raise DatabaseException(f"Failed to list concept mastery for learner {learner_id}") from e

        return [ConceptMastery.model_validate(row) for row in rows]


class SqlLearnerDirectory:
    """Learner lookups against the ``learners`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get(self, learner_id: int) -> Optional[Learner]:
        try:
            return await self.db.get(Learner, learner_id)
        except SQLAlchemyError as e:
            logger.error("Failed to resolve learner", learner_id=learner_id, error=str(e))
            raise DatabaseException(f"Failed to resolve learner {learner_id}") from e

    async def exists(self, learner_id: int) -> bool:
        return await self._get(learner_id) is not None

    async def get_grade(self, learner_id: int) -> Optional[str]:
        learner = await self._get(learner_id)
        return learner.grade if learner else None
