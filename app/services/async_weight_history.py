"""
Async weight history gateway.

Wraps the ``Users`` and ``WeightHistory`` tables behind an injected
``AsyncSession``. The session is owned by the request (see
``app.db.async_session.get_async_db``); the gateway never opens connections
itself.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.models.weight_entry import WeightEntry
from app.services.async_error_handler import AsyncErrorHandler
from app.utils.logger import db_logger

ENTRY_ADDED_MESSAGE = "Weight entry added successfully"
ENTRY_UPDATED_MESSAGE = "Weight entry updated successfully"


@dataclass(frozen=True)
class GatewayResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


def _store_message(error: SQLAlchemyError) -> str:
    """The driver's own message, without the SQL statement SQLAlchemy appends."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


class AsyncWeightHistoryGateway:
    """Persistence access for weight entries and the user's date of birth."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_date_of_birth(self, user_id: int) -> Optional[date]:
        """
        Get the stored date of birth for a user.

        Returns:
            The date of birth, or None if the user does not exist or has none
        """
        try:
            result = await self.db.execute(
                select(User.date_of_birth).where(User.id == user_id)
            )
        except SQLAlchemyError as e:
            raise AsyncErrorHandler.wrap_error(e, "fetch_date_of_birth") from e
        return result.scalar_one_or_none()

    async def _find_entry_id(self, user_id: int, entry_date: date) -> Optional[int]:
        result = await self.db.execute(
            select(WeightEntry.id)
            .where(WeightEntry.user_id == user_id, WeightEntry.date == entry_date)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def _update_entry(self, entry_id: int, values: Dict[str, float]) -> None:
        await self.db.execute(
            update(WeightEntry).where(WeightEntry.id == entry_id).values(**values)
        )

    async def upsert_entry(
        self,
        user_id: int,
        entry_date: date,
        weight: float,
        height: float,
        age: int,
        bmi: float,
    ) -> GatewayResult:
        """
        Insert the entry for ``(user_id, entry_date)``, or overwrite the
        measurements of the one already stored for that date.

        Commits the request's transaction. A row the store rejects
        (constraint or data error) comes back as ``success=False`` with the
        store's message; any other database error is raised as
        ``AsyncDatabaseError``.
        """
        values = {"weight": weight, "height": height, "age": age, "bmi": bmi}

        try:
            existing_id = await self._find_entry_id(user_id, entry_date)
            if existing_id is not None:
                await self._update_entry(existing_id, values)
                message = ENTRY_UPDATED_MESSAGE
            else:
                self.db.add(WeightEntry(user_id=user_id, date=entry_date, **values))
                await self.db.flush()
                message = ENTRY_ADDED_MESSAGE
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            if not AsyncErrorHandler.is_rejection(e):
                raise AsyncErrorHandler.wrap_error(e, "upsert_entry") from e
            db_logger.warning("Weight entry rejected by store, checking for a concurrent insert", "UPSERT",
                              user_id=user_id, date=entry_date, error=_store_message(e))
            return await self._update_after_conflict(user_id, entry_date, values, e)

        db_logger.debug(message, "UPSERT", user_id=user_id, date=entry_date)
        return GatewayResult(success=True, message=message)

    async def _update_after_conflict(
        self,
        user_id: int,
        entry_date: date,
        values: Dict[str, float],
        rejection: SQLAlchemyError,
    ) -> GatewayResult:
        """Apply the write as an update if another request inserted the row first."""
        try:
            existing_id = await self._find_entry_id(user_id, entry_date)
            if existing_id is None:
                return GatewayResult(success=False, error=_store_message(rejection))
            await self._update_entry(existing_id, values)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            if AsyncErrorHandler.is_rejection(e):
                return GatewayResult(success=False, error=_store_message(e))
            raise AsyncErrorHandler.wrap_error(e, "upsert_entry") from e

        return GatewayResult(success=True, message=ENTRY_UPDATED_MESSAGE)

    async def fetch_history(self, user_id: int) -> List[WeightEntry]:
        """All entries for a user, oldest date first. Empty list when none."""
        try:
            result = await self.db.execute(
                select(WeightEntry)
                .where(WeightEntry.user_id == user_id)
                .order_by(WeightEntry.date.asc(), WeightEntry.id.asc())
            )
        except SQLAlchemyError as e:
            raise AsyncErrorHandler.wrap_error(e, "fetch_history") from e
        return list(result.scalars().all())

    async def fetch_latest_entry(self, user_id: int) -> Optional[WeightEntry]:
        """Most recent entry by date, or None."""
        try:
            result = await self.db.execute(
                select(WeightEntry)
                .where(WeightEntry.user_id == user_id)
                .order_by(WeightEntry.date.desc())
                .limit(1)
            )
        except SQLAlchemyError as e:
            raise AsyncErrorHandler.wrap_error(e, "fetch_latest_entry") from e
        return result.scalars().first()
