"""UserSettings model - one row per user, or a single global row without auth."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from repe.core.enums import Units
from repe.db.base import Base
from repe.db.types import GUID, JSONB, utcnow


class UserSettings(Base):
    """Display units plus a free-form preferences object."""

    __tablename__ = "user_settings"
    __table_args__ = (Index("user_settings_user_idx", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    units: Mapped[str] = mapped_column(Text, nullable=False, default=Units.METRIC.value)
    preferences_json: Mapped[dict] = mapped_column(JSONB(), nullable=False, default=dict)
    user_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
