"""ORM tables backing the learner, session and concept-mastery stores."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index,
    Integer, String, UniqueConstraint
)

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Learner(Base):
    """A learner known to the practice platform."""
    __tablename__ = "learners"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    grade = Column(String(4), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Learner(id={self.id}, grade={self.grade})>"


class SessionRecordRow(Base):
    """One completed practice session."""
    __tablename__ = "module_history"
    __table_args__ = (
        Index("ix_module_history_learner_completed", "learner_id", "completed_at"),
        CheckConstraint("difficulty_level BETWEEN 1 AND 5", name="ck_module_history_difficulty"),
    )

    id = Column(Integer, primary_key=True)
    learner_id = Column(Integer, ForeignKey("learners.id"), nullable=False)
    module_name = Column(String(100), nullable=False)
    grade = Column(String(4), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)
    final_score = Column(Float, nullable=False)
    questions_total = Column(Integer, nullable=False, default=0)
    questions_correct = Column(Integer, nullable=False, default=0)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    difficulty_level = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<SessionRecordRow(id={self.id}, module={self.module_name})>"


class ConceptMasteryRow(Base):
    """Mastery state for one (learner, concept, grade) key."""
    __tablename__ = "concept_mastery"
    __table_args__ = (
        UniqueConstraint("learner_id", "concept", "grade", name="uq_concept_mastery_key"),
        CheckConstraint("correct_attempts <= total_attempts", name="ck_concept_mastery_attempts"),
    )

    id = Column(Integer, primary_key=True)
    learner_id = Column(Integer, ForeignKey("learners.id"), nullable=False)
    concept = Column(String(100), nullable=False)
    grade = Column(String(4), nullable=False)
    total_attempts = Column(Integer, nullable=False, default=0)
    correct_attempts = Column(Integer, nullable=False, default=0)
    mastery_level = Column(Float, nullable=False, default=0.0)
    last_practiced = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    needs_review = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<ConceptMasteryRow(learner_id={self.learner_id}, concept={self.concept})>"
