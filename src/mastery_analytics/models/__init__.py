"""Database models."""

from .records import ConceptMasteryRow, Learner, SessionRecordRow

__all__ = ["ConceptMasteryRow", "Learner", "SessionRecordRow"]
