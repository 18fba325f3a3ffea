from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from app.api import deps
from app.api.responses import (
    entry_created_response,
    error_response,
    history_response,
    internal_error_response,
    latest_entry_response,
)
from app.schemas.weight import (
    ErrorResponse,
    LatestWeightEntryResponse,
    WeightEntryCreatedResponse,
    WeightEntrySubmission,
    WeightHistoryResponse,
)
from app.services.async_weight import AsyncWeightService
from app.services.weight_validation import WeightEntryError
from app.utils.logger import weight_logger

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=WeightEntryCreatedResponse,
    responses=ERROR_RESPONSES,
)
async def add_weight_entry(
    submission: Optional[WeightEntrySubmission] = Body(None),
    current_user: Dict[str, Any] = Depends(deps.get_current_user),
    service: AsyncWeightService = Depends(deps.get_weight_service),
) -> JSONResponse:
    """
    Record weight, height and BMI for a date. A second submission for the
    same date overwrites the first. Age is derived from the stored date of
    birth.
    """
    try:
        saved = await service.add_weight_entry(current_user["id"], submission)
    except WeightEntryError as e:
        return error_response(e)
    except Exception as e:
        weight_logger.error(f"Add weight entry error: {e}", "CREATE", user_id=current_user["id"])
        return internal_error_response()

    return entry_created_response(saved.message, saved.age)


@router.get(
    "/history",
    response_model=WeightHistoryResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def get_weight_history(
    current_user: Dict[str, Any] = Depends(deps.get_current_user),
    service: AsyncWeightService = Depends(deps.get_weight_service),
) -> JSONResponse:
    """All weight entries of the current user, oldest first."""
    try:
        history = await service.get_weight_history(current_user["id"])
    except Exception as e:
        weight_logger.error(f"Get weight history error: {e}", "HISTORY", user_id=current_user["id"])
        return internal_error_response()

    return history_response(history)


@router.get(
    "/latest",
    response_model=LatestWeightEntryResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def get_latest_weight_entry(
    current_user: Dict[str, Any] = Depends(deps.get_current_user),
    service: AsyncWeightService = Depends(deps.get_weight_service),
) -> JSONResponse:
    """Most recent weight entry of the current user, or null."""
    try:
        entry = await service.get_latest_entry(current_user["id"])
    except Exception as e:
        weight_logger.error(f"Get latest weight entry error: {e}", "LATEST", user_id=current_user["id"])
        return internal_error_response()

    return latest_entry_response(entry)
