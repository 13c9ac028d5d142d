"""Pydantic schemas for session records and concept mastery state."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionRecord(BaseModel):
    """One completed practice session, immutable once created."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    learner_id: int
    module_name: str = Field(..., min_length=1, max_length=100)
    grade: str = Field(..., max_length=4)
    completed_at: datetime
    final_score: float = Field(..., ge=0.0, le=100.0)
    questions_total: int = Field(default=0, ge=0)
    questions_correct: int = Field(default=0, ge=0)
    time_spent_seconds: int = Field(default=0, ge=0)
    difficulty_level: int = Field(default=1, ge=1, le=5)

    @field_validator("completed_at")
    @classmethod
    def _completed_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def _default_difficulty(cls, value):
        return 1 if value is None else value

    @property
    def accuracy(self) -> float:
        """Fraction answered correctly, clamped to [0, 1] for inconsistent records."""
        raw = self.questions_correct / max(1, self.questions_total)
        return min(1.0, max(0.0, raw))


class ConceptMastery(BaseModel):
    """Mastery estimate for one (learner, concept, grade) key."""
    model_config = ConfigDict(from_attributes=True)

    learner_id: int
    concept: str = Field(..., min_length=1, max_length=100)
    grade: str = Field(..., max_length=4)
    total_attempts: int = Field(default=0, ge=0)
    correct_attempts: int = Field(default=0, ge=0)
    mastery_level: float = Field(default=0.0, ge=0.0, le=100.0)
    last_practiced: datetime
    needs_review: bool = False

    @field_validator("last_practiced")
    @classmethod
    def _last_practiced_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="after")
    def _attempts_consistent(self) -> "ConceptMastery":
        if self.correct_attempts > self.total_attempts:
            raise ValueError("correct_attempts cannot exceed total_attempts")
        return self

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.learner_id, self.concept, self.grade)
