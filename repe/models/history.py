"""History model - denormalized log of completed sessions."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repe.db.base import Base
from repe.db.types import GUID, utcnow


class History(Base):
    """A completed session. Survives deletion of its workout (workout_id set to NULL)."""

    __tablename__ = "history"
    __table_args__ = (
        CheckConstraint("duration_seconds >= 0", name="duration_check"),
        Index("history_performed_idx", "performed_at", "id"),
        Index("history_workout_idx", "workout_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    workout_id: Mapped[uuid.UUID | None] = mapped_column(
        GUID(), ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True
    )
    performed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    workout: Mapped["Workout | None"] = relationship("Workout")
