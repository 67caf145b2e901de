"""History schemas, including the keyset cursor."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from repe.schemas.common import CamelModel


class HistoryCursor(CamelModel):
    """Position of the last row of a page: ``{"performedAt", "id"}``."""

    model_config = ConfigDict(extra="forbid")

    performed_at: datetime
    id: UUID


class HistoryCreate(CamelModel):
    workout_id: UUID | None = None
    performed_at: datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    notes: str | None = None


class HistoryBackfillEntry(CamelModel):
    id: UUID | None = None
    workout_id: UUID | None = None
    performed_at: datetime
    duration_seconds: int | None = None
    notes: str | None = None


class HistoryBackfillRequest(CamelModel):
    entries: list[HistoryBackfillEntry]


class HistoryRead(CamelModel):
    id: UUID
    workout_id: UUID | None = None
    performed_at: datetime
    duration_seconds: int | None = None
    notes: str | None = None
    created_at: datetime


class HistoryItem(HistoryRead):
    workout_name: str | None = None


class HistoryResponse(CamelModel):
    success: bool = True
    data: HistoryRead


class BackfillResult(CamelModel):
    inserted: int
    skipped: int
