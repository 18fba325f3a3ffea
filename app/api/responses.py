"""
JSON envelopes for weight tracking responses.

Every body carries ``success`` and ``message``; failures add an ``error``
kind, successes add ``data``, ``history`` or ``entry``.
"""

from typing import List, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from app.models.weight_entry import WeightEntry
from app.schemas.weight import (
    ErrorResponse,
    LatestWeightEntryResponse,
    WeightEntryCreatedResponse,
    WeightEntryData,
    WeightEntryRecord,
    WeightHistoryResponse,
)
from app.services.weight_validation import ERROR_MESSAGES, WeightEntryError, WeightErrorKind

HISTORY_FOUND_MESSAGE = "Weight history retrieved successfully"
HISTORY_EMPTY_MESSAGE = "No weight entries found"
LATEST_FOUND_MESSAGE = "Latest weight entry retrieved successfully"


def _json(status_code: int, body) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def error_response(error: WeightEntryError) -> JSONResponse:
    return _json(error.status_code, ErrorResponse(message=error.message, error=error.kind.value))


def internal_error_response() -> JSONResponse:
    kind = WeightErrorKind.INTERNAL_SERVER_ERROR
    return _json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message=ERROR_MESSAGES[kind], error=kind.value),
    )


def entry_created_response(message: str, age: int) -> JSONResponse:
    return _json(
        status.HTTP_201_CREATED,
        WeightEntryCreatedResponse(message=message, data=WeightEntryData(age=age)),
    )


def history_response(entries: List[WeightEntry]) -> JSONResponse:
    history = [WeightEntryRecord.model_validate(entry) for entry in entries]
    message = HISTORY_FOUND_MESSAGE if history else HISTORY_EMPTY_MESSAGE
    return _json(status.HTTP_200_OK, WeightHistoryResponse(history=history, message=message))


def latest_entry_response(entry: Optional[WeightEntry]) -> JSONResponse:
    record = WeightEntryRecord.model_validate(entry) if entry is not None else None
    message = LATEST_FOUND_MESSAGE if record else HISTORY_EMPTY_MESSAGE
    return _json(status.HTTP_200_OK, LatestWeightEntryResponse(entry=record, message=message))
