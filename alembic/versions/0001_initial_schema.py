"""Initial schema: exercises, workouts, workout_exercises, sets, history, user_settings.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from repe.db.types import GUID, JSONB, StringArray


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "exercises",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("equipment", StringArray(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_exercises"),
        sa.UniqueConstraint("name", name="exercises_name_unique"),
    )
    op.create_index("exercises_category_idx", "exercises", ["category"])
    op.create_index("exercises_name_lower_idx", "exercises", [sa.text("lower(name)")])

    op.create_table(
        "workouts",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=True),
        sa.Column("source", sa.Text(), nullable=False, server_default="custom"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_workouts"),
    )
    op.create_index("workouts_user_idx", "workouts", ["user_id"])
    op.create_index("workouts_created_idx", "workouts", ["created_at"])

    op.create_table(
        "workout_exercises",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("workout_id", GUID(), nullable=False),
        sa.Column("exercise_id", GUID(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("target_sets", sa.Integer(), nullable=True),
        sa.Column("target_reps", sa.Integer(), nullable=True),
        sa.Column("target_weight", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.ForeignKeyConstraint(
            ["workout_id"], ["workouts.id"],
            name="fk_workout_exercises_workout_id_workouts", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["exercise_id"], ["exercises.id"],
            name="fk_workout_exercises_exercise_id_exercises", ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_workout_exercises"),
        sa.UniqueConstraint("workout_id", "order_index", name="workout_exercises_order_unique"),
    )
    op.create_index("workout_exercises_workout_idx", "workout_exercises", ["workout_id"])
    op.create_index("workout_exercises_exercise_idx", "workout_exercises", ["exercise_id"])

    op.create_table(
        "sets",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("workout_exercise_id", GUID(), nullable=False),
        sa.Column("performed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reps", sa.Integer(), nullable=False),
        sa.Column("weight", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("rpe", sa.Numeric(precision=3, scale=1), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("reps >= 0", name="ck_sets_reps_check"),
        sa.CheckConstraint("weight >= 0", name="ck_sets_weight_check"),
        sa.CheckConstraint("rpe >= 0 AND rpe <= 10", name="ck_sets_rpe_check"),
        sa.CheckConstraint("rest_seconds >= 0", name="ck_sets_rest_check"),
        sa.ForeignKeyConstraint(
            ["workout_exercise_id"], ["workout_exercises.id"],
            name="fk_sets_workout_exercise_id_workout_exercises", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sets"),
    )
    op.create_index("sets_workout_exercise_idx", "sets", ["workout_exercise_id"])
    op.create_index("sets_performed_idx", "sets", ["performed_at"])

    op.create_table(
        "history",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("workout_id", GUID(), nullable=True),
        sa.Column("performed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("duration_seconds >= 0", name="ck_history_duration_check"),
        sa.ForeignKeyConstraint(
            ["workout_id"], ["workouts.id"],
            name="fk_history_workout_id_workouts", ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_history"),
    )
    op.create_index("history_performed_idx", "history", ["performed_at", "id"])
    op.create_index("history_workout_idx", "history", ["workout_id"])

    op.create_table(
        "user_settings",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("units", sa.Text(), nullable=False, server_default="metric"),
        sa.Column("preferences_json", JSONB(), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_user_settings"),
    )
    op.create_index("user_settings_user_idx", "user_settings", ["user_id"])


def downgrade() -> None:
    op.drop_table("user_settings")
    op.drop_table("history")
    op.drop_table("sets")
    op.drop_table("workout_exercises")
    op.drop_table("workouts")
    op.drop_table("exercises")
