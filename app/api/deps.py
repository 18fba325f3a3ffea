"""
API dependency injection module.

Provides the authenticated user, the clock used for "today", and the weight
service wired to the request's database session.
"""

from datetime import date
from typing import Any, Callable, Dict

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.async_session import get_async_db
from app.services.async_auth import AsyncAuthService
from app.services.async_weight import AsyncWeightService
from app.services.async_weight_history import AsyncWeightHistoryGateway


async def get_current_user(
    current_user: Dict[str, Any] = Depends(AsyncAuthService.get_current_user),
) -> Dict[str, Any]:
    """Authenticated user as ``{"id": ..., "email": ...}``."""
    return current_user


def get_today_provider() -> Callable[[], date]:
    """Server-local calendar date. Overridden in tests to pin "today"."""
    return date.today


async def get_weight_service(
    db: AsyncSession = Depends(get_async_db),
    today: Callable[[], date] = Depends(get_today_provider),
) -> AsyncWeightService:
    return AsyncWeightService(AsyncWeightHistoryGateway(db), today=today)
