from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.async_session import check_async_database_health, get_async_db

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
async def health_check(db: AsyncSession = Depends(get_async_db)):
    """
    Service and database health.

    Returns 200 when the database answers, 503 otherwise.
    """
    database = await check_async_database_health(db)
    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": database,
            "service": "wellnest-backend",
        },
    )
