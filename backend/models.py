"""Flare Backend — Pydantic Models"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskBand(str, Enum):
    CRITICAL = "CRITICAL"
    ELEVATED = "ELEVATED"
    MODERATE = "MODERATE"
    LOW = "LOW"
    NONE = "NONE"


class Incident(BaseModel):
    """A persisted geotagged safety report (an "alert")."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    title: str
    description: str
    location: str
    timestamp: datetime
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive instants are treated as UTC so comparisons never mix naive/aware
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class IncidentCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    timestamp: Optional[datetime] = None  # defaults to "now" at submission
    latitude: float = Field(default=0.0, ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(default=0.0, ge=-180, le=180, allow_inf_nan=False)


class IncidentView(BaseModel):
    incident: Incident
    riskBand: RiskBand
    markerColor: str
    relativeTime: str


class SelectRequest(BaseModel):
    id: uuid.UUID


class PlaceResult(BaseModel):
    name: str
    address: str = ""
    latitude: float
    longitude: float


class AnalysisState(BaseModel):
    pending: bool = False
    resultText: Optional[str] = None
    error: Optional[str] = None


class AnalysisSegment(BaseModel):
    text: str
    bold: bool = False


class AnalysisResponse(BaseModel):
    pending: bool
    resultText: Optional[str] = None
    error: Optional[str] = None
    segments: list[AnalysisSegment] = []


class DragUpdate(BaseModel):
    delta: float


class SheetResponse(BaseModel):
    state: str
    offset: float
    minHeight: float
    maxHeight: float
    backgroundColor: str
