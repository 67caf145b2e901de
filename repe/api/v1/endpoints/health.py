"""Health check endpoints for load balancers and monitoring."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from repe import __version__
from repe.db.session import get_db
from repe.services.migration import check_database_health

router = APIRouter()


@router.get("")
async def health():
    """Liveness only; does not touch the database."""
    return {"status": "ok", "version": __version__}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_db)):
    """Readiness: app + DB connectivity."""
    status = await check_database_health(db)
    if not status["connected"]:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": status["message"]},
        )
    return {"status": "ok", "database": "connected"}
