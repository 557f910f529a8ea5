# models.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawLegRow(BaseModel):
    """One scraped table row, every cell kept as free text."""

    date: str = ""
    aircraft_id: str = ""
    aircraft_type: str = ""
    origin: str = ""
    destination: str = ""
    departure_text: str = ""
    arrival_text: str = ""
    duration_text: str = ""
    status: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v


class FlightRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str = Field("", description="YYYY-MM-DD departure date, empty when unknown")
    aircraft_id: str = Field("", alias="aircraftId")
    aircraft_type: str = Field("", alias="aircraftType")
    origin: str = ""
    destination: str = ""
    departure: str = Field("", description="HH:MM [offset]")
    arrival: str = Field("", description="HH:MM [offset]")
    duration: str = Field("", description="H:MM, 'En Route' or empty")
    status: str = ""

    def sort_key(self) -> str:
        return f"{self.date}{self.departure}"


class LookupResult(BaseModel):
    data: List[FlightRecord] = Field(default_factory=list)
    error: Optional[str] = None
    source: Optional[str] = None


class FlightsResponse(BaseModel):
    error: List[str] = Field(default_factory=list)
    total: int = 0
    source: List[str] = Field(default_factory=list)
    data: List[FlightRecord] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    example: Optional[str] = None
