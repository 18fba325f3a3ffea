"""Weight tracking schemas.

Request bodies are accepted loosely (any JSON value per field) so that the
weight-entry validator, not FastAPI's 422 handling, decides which error kind
a malformed submission gets. Responses use the stored column names
(``userId``) and the ``success``/``message`` envelope the browser client reads.
"""

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WeightEntrySubmission(BaseModel):
    """Body of ``POST /weight``. ``userId`` and ``age`` are never read from it."""

    model_config = ConfigDict(extra="ignore")

    weight: Optional[Any] = None
    height: Optional[Any] = None
    bmi: Optional[Any] = None
    date: Optional[Any] = None


class WeightEntryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    user_id: int = Field(serialization_alias="userId")
    date: date
    weight: float
    height: float
    age: int
    bmi: float


class WeightEntryData(BaseModel):
    age: int


class WeightEntryCreatedResponse(BaseModel):
    success: bool = True
    message: str
    data: WeightEntryData


class WeightHistoryResponse(BaseModel):
    success: bool = True
    history: List[WeightEntryRecord]
    message: str


class LatestWeightEntryResponse(BaseModel):
    success: bool = True
    entry: Optional[WeightEntryRecord] = None
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
