"""History repository with keyset pagination over (performed_at, id)."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repe.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from repe.core.errors import StorageError
from repe.db.types import as_utc, dialect_insert, utcnow
from repe.models.history import History
from repe.models.workout import Workout
from repe.schemas.history import HistoryBackfillEntry, HistoryCursor, HistoryItem

logger = logging.getLogger(__name__)


@dataclass
class HistoryPage:
    data: list[HistoryItem] = field(default_factory=list)
    cursor: HistoryCursor | None = None
    has_more: bool = False


@dataclass
class BackfillSummary:
    inserted: int = 0
    skipped: int = 0


def encode_cursor(cursor: HistoryCursor) -> str:
    """Opaque JSON form passed back by clients as ``?cursor=``."""
    return cursor.model_dump_json(by_alias=True)


def decode_cursor(raw: str | bytes | Mapping) -> HistoryCursor:
    """Strictly validate a client-supplied cursor; anything malformed is VALIDATION."""
    try:
        if isinstance(raw, Mapping):
            return HistoryCursor.model_validate(raw)
        return HistoryCursor.model_validate_json(raw)
    except ValidationError as exc:
        raise StorageError.validation(
            "Invalid cursor", exc.errors(include_url=False, include_context=False)
        ) from exc


async def log_session(
    db: AsyncSession,
    workout_id: uuid.UUID | None = None,
    performed_at: datetime | None = None,
    duration_seconds: int | None = None,
    notes: str | None = None,
) -> History:
    """Record a completed session; performed_at defaults to now."""
    if duration_seconds is not None and duration_seconds < 0:
        raise StorageError.validation("Duration must be non-negative")
    try:
        if workout_id is not None and await db.get(Workout, workout_id) is None:
            raise StorageError.not_found(f"Workout with ID {workout_id} not found")
        entry = History(
            workout_id=workout_id,
            performed_at=as_utc(performed_at) if performed_at else utcnow(),
            duration_seconds=duration_seconds,
            notes=notes,
        )
        db.add(entry)
        await db.flush()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to log session", str(exc)) from exc
    logger.info("Logged session %s (workout %s)", entry.id, workout_id)
    return entry


async def list_history(
    db: AsyncSession,
    cursor: HistoryCursor | str | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    from_: datetime | None = None,
    to: datetime | None = None,
) -> HistoryPage:
    """One page of history, most recent first.

    Rows strictly after ``cursor`` in (performed_at DESC, id DESC) order, so
    ties on performed_at are split by id and pages never overlap or skip.
    One extra row is fetched to decide ``has_more``.
    """
    limit = min(max(1, limit or DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    if isinstance(cursor, (str, bytes, Mapping)):
        cursor = decode_cursor(cursor)

    stmt = (
        select(History, Workout.name.label("workout_name"))
        .outerjoin(Workout, History.workout_id == Workout.id)
        .order_by(History.performed_at.desc(), History.id.desc())
    )
    if from_ is not None:
        stmt = stmt.where(History.performed_at >= as_utc(from_))
    if to is not None:
        stmt = stmt.where(History.performed_at <= as_utc(to))
    if cursor is not None:
        performed_at = as_utc(cursor.performed_at)
        stmt = stmt.where(
            or_(
                History.performed_at < performed_at,
                and_(History.performed_at == performed_at, History.id < cursor.id),
            )
        )

    try:
        rows = (await db.execute(stmt.limit(limit + 1))).all()
    except SQLAlchemyError as exc:
        raise StorageError.internal("Failed to list history", str(exc)) from exc

    has_more = len(rows) > limit
    data = []
    for entry, workout_name in rows[:limit]:
        item = HistoryItem.model_validate(entry)
        item.workout_name = workout_name
        data.append(item)

    next_cursor = None
    if has_more and data:
        last = data[-1]
        next_cursor = HistoryCursor(performed_at=as_utc(last.performed_at), id=last.id)
    return HistoryPage(data=data, cursor=next_cursor, has_more=has_more)


async def _has_session(
    db: AsyncSession, workout_id: uuid.UUID | None, performed_at: datetime
) -> bool:
    """Id-less legacy entries are matched on (performed_at, workout_id)."""
    same_workout = (
        History.workout_id.is_(None) if workout_id is None else History.workout_id == workout_id
    )
    stmt = select(History.id).where(History.performed_at == performed_at, same_workout).limit(1)
    return (await db.execute(stmt)).first() is not None


async def backfill_history(
    db: AsyncSession, entries: Iterable[HistoryBackfillEntry | Mapping]
) -> BackfillSummary:
    """Idempotent import of legacy entries.

    Each row is inserted in its own savepoint with ON CONFLICT DO NOTHING;
    entries without an id are matched on (performed_at, workout_id). Duplicates
    and rows that fail (bad shape, unknown workout) count as skipped.
    """
    summary = BackfillSummary()
    for raw in entries or []:
        try:
            entry = (
                raw
                if isinstance(raw, HistoryBackfillEntry)
                else HistoryBackfillEntry.model_validate(raw)
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed history entry: %s", exc.errors(include_url=False))
            summary.skipped += 1
            continue
        if entry.duration_seconds is not None and entry.duration_seconds < 0:
            summary.skipped += 1
            continue

        performed_at = as_utc(entry.performed_at)
        if entry.id is None and await _has_session(db, entry.workout_id, performed_at):
            summary.skipped += 1
            continue

        stmt = (
            dialect_insert(db, History)
            .values(
                id=entry.id or uuid.uuid4(),
                workout_id=entry.workout_id,
                performed_at=performed_at,
                duration_seconds=entry.duration_seconds,
                notes=entry.notes,
            )
            .on_conflict_do_nothing(index_elements=["id"])
            .returning(History.id)
        )
        try:
            async with db.begin_nested():
                inserted = (await db.execute(stmt)).first() is not None
        except SQLAlchemyError as exc:
            logger.warning("Skipping history entry %s: %s", entry.id, exc)
            summary.skipped += 1
            continue
        if inserted:
            summary.inserted += 1
        else:
            summary.skipped += 1

    logger.info("History backfill: %d inserted, %d skipped", summary.inserted, summary.skipped)
    return summary
