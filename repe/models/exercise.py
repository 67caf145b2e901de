"""Exercise model - library of trackable exercises."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repe.db.base import Base
from repe.db.types import GUID, StringArray, utcnow


class Exercise(Base):
    """Exercise definition. Names are unique as stored; lookups are case-insensitive."""

    __tablename__ = "exercises"
    __table_args__ = (
        UniqueConstraint("name", name="exercises_name_unique"),
        Index("exercises_category_idx", "category"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    equipment: Mapped[list[str]] = mapped_column(StringArray(), nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    workout_entries: Mapped[list["WorkoutExercise"]] = relationship(
        "WorkoutExercise", back_populates="exercise", passive_deletes=True
    )


Index("exercises_name_lower_idx", func.lower(Exercise.name))
