"""
Async weight tracking service.

Runs a submission through validation, age calculation and the history
gateway. Validation failures never reach the gateway's write path.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from app.models.weight_entry import WeightEntry
from app.schemas.weight import WeightEntrySubmission
from app.services.async_weight_history import AsyncWeightHistoryGateway
from app.services.weight_validation import (
    WeightEntryError,
    WeightErrorKind,
    has_missing_fields,
    validate_measurements,
)
from app.utils.age import calculate_age
from app.utils.logger import weight_logger


@dataclass(frozen=True)
class SavedWeightEntry:
    message: str
    age: int


class AsyncWeightService:
    """Weight entry submission and history reads for one request."""

    def __init__(self, gateway: AsyncWeightHistoryGateway, today: Callable[[], date] = date.today):
        self.gateway = gateway
        self.today = today

    async def add_weight_entry(
        self, user_id: int, submission: Optional[WeightEntrySubmission]
    ) -> SavedWeightEntry:
        """
        Validate and store a weight entry for ``user_id``.

        Raises:
            WeightEntryError: tagged with the first failing check, or
                WEIGHT_ENTRY_FAILED when the store rejects the row
        """
        weight_logger.info(f"Weight entry submitted by user {user_id}", "CREATE")

        if has_missing_fields(submission):
            weight_logger.warning("Submission is missing required fields", "VALIDATE", user_id=user_id)
            raise WeightEntryError(WeightErrorKind.MISSING_REQUIRED_FIELDS)

        date_of_birth = await self.gateway.fetch_date_of_birth(user_id)
        if date_of_birth is None:
            weight_logger.warning("No date of birth on record", "VALIDATE", user_id=user_id)
            raise WeightEntryError(WeightErrorKind.USER_NOT_FOUND)

        today = self.today()
        age = calculate_age(date_of_birth, today)

        checked = validate_measurements(submission, today)
        if not checked.ok:
            weight_logger.warning(f"Submission rejected: {checked.error.value}", "VALIDATE", user_id=user_id)
            raise WeightEntryError(checked.error)

        entry = checked.value
        result = await self.gateway.upsert_entry(
            user_id, entry.date, entry.weight, entry.height, age, entry.bmi
        )
        if not result.success:
            weight_logger.error("Store rejected weight entry", "CREATE", user_id=user_id, error=result.error)
            raise WeightEntryError(
                WeightErrorKind.WEIGHT_ENTRY_FAILED,
                result.error or "Failed to add weight entry.",
            )

        weight_logger.success(result.message, "CREATE", user_id=user_id, date=entry.date, age=age)
        return SavedWeightEntry(message=result.message, age=age)

    async def get_weight_history(self, user_id: int) -> List[WeightEntry]:
        history = await self.gateway.fetch_history(user_id)
        weight_logger.debug(f"Fetched {len(history)} weight entries", "HISTORY", user_id=user_id)
        return history

    async def get_latest_entry(self, user_id: int) -> Optional[WeightEntry]:
        return await self.gateway.fetch_latest_entry(user_id)
