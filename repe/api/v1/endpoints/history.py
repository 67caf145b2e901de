"""Workout history: keyset-paginated listing, logging and legacy backfill."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from repe.db.session import get_db
from repe.repositories import history as history_repo
from repe.schemas.history import (
    BackfillResult,
    HistoryBackfillRequest,
    HistoryCreate,
    HistoryRead,
    HistoryResponse,
)

router = APIRouter()


@router.get("")
async def list_history(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    cursor: str | None = Query(None, description='JSON {"performedAt", "id"} from the previous page'),
    from_: datetime | None = Query(None, alias="from"),
    to: datetime | None = None,
):
    """Most recent first. ``cursor`` is only present when ``hasMore`` is true."""
    page = await history_repo.list_history(db, cursor=cursor, limit=limit, from_=from_, to=to)
    body = {
        "success": True,
        "data": [item.model_dump(mode="json", by_alias=True) for item in page.data],
        "hasMore": page.has_more,
    }
    if page.cursor is not None:
        body["cursor"] = page.cursor.model_dump(mode="json", by_alias=True)
    return body


@router.post("", response_model=HistoryResponse, status_code=201)
async def log_session(
    payload: HistoryCreate,
    db: AsyncSession = Depends(get_db),
):
    entry = await history_repo.log_session(
        db,
        workout_id=payload.workout_id,
        performed_at=payload.performed_at,
        duration_seconds=payload.duration_seconds,
        notes=payload.notes,
    )
    return HistoryResponse(data=HistoryRead.model_validate(entry))


@router.post("/backfill")
async def backfill_history(
    payload: HistoryBackfillRequest,
    db: AsyncSession = Depends(get_db),
):
    """Idempotent import; duplicates and bad rows are counted as skipped."""
    summary = await history_repo.backfill_history(db, payload.entries)
    result = BackfillResult(inserted=summary.inserted, skipped=summary.skipped)
    return {"success": True, "data": result.model_dump(by_alias=True)}
