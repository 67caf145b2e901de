"""Workout, WorkoutExercise and WorkoutSet models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repe.core.enums import WorkoutSource
from repe.db.base import Base
from repe.db.types import GUID, utcnow


class Workout(Base):
    """A saved workout: a name plus an ordered list of exercises."""

    __tablename__ = "workouts"
    __table_args__ = (
        Index("workouts_user_idx", "user_id"),
        Index("workouts_created_idx", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(Text, nullable=False, default=WorkoutSource.CUSTOM.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    exercises: Mapped[list["WorkoutExercise"]] = relationship(
        "WorkoutExercise",
        back_populates="workout",
        order_by="WorkoutExercise.order_index",
        passive_deletes=True,
    )

    @property
    def sets(self) -> list["WorkoutSet"]:
        """Sets of every entry, flattened in entry order. Entries and sets must be loaded."""
        return [s for entry in self.exercises for s in entry.sets]


class WorkoutExercise(Base):
    """Pivot row placing an exercise at a position inside a workout, with targets."""

    __tablename__ = "workout_exercises"
    __table_args__ = (
        UniqueConstraint("workout_id", "order_index", name="workout_exercises_order_unique"),
        Index("workout_exercises_workout_idx", "workout_id"),
        Index("workout_exercises_exercise_idx", "exercise_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    workout_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("exercises.id", ondelete="RESTRICT"), nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    target_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_weight: Mapped[float | None] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="exercises")
    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="workout_entries")
    sets: Mapped[list["WorkoutSet"]] = relationship(
        "WorkoutSet",
        back_populates="workout_exercise",
        order_by="WorkoutSet.performed_at",
        passive_deletes=True,
    )


class WorkoutSet(Base):
    """One logged set: reps, optional weight / RPE / rest."""

    __tablename__ = "sets"
    __table_args__ = (
        CheckConstraint("reps >= 0", name="reps_check"),
        CheckConstraint("weight >= 0", name="weight_check"),
        CheckConstraint("rpe >= 0 AND rpe <= 10", name="rpe_check"),
        CheckConstraint("rest_seconds >= 0", name="rest_check"),
        Index("sets_workout_exercise_idx", "workout_exercise_id"),
        Index("sets_performed_idx", "performed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    workout_exercise_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("workout_exercises.id", ondelete="CASCADE"), nullable=False
    )
    performed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float | None] = mapped_column(Numeric(8, 2, asdecimal=False), nullable=True)
    rpe: Mapped[float | None] = mapped_column(Numeric(3, 1, asdecimal=False), nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    workout_exercise: Mapped["WorkoutExercise"] = relationship("WorkoutExercise", back_populates="sets")
