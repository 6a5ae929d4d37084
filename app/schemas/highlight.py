"""Pydantic schemas for highlight endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from app.schemas.base import CamelModel

HighlightColor = Literal["yellow", "blue", "green", "purple"]


class HighlightCreate(CamelModel):
    audio_content_id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    start_time: float = Field(ge=0)
    end_time: float = Field(ge=0)
    color: HighlightColor = "yellow"
    note: str | None = None

    @model_validator(mode="after")
    def check_time_range(self) -> "HighlightCreate":
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be before startTime")
        return self


class HighlightUpdate(CamelModel):
    text: str | None = Field(default=None, min_length=1)
    start_time: float | None = Field(default=None, ge=0)
    end_time: float | None = Field(default=None, ge=0)
    color: HighlightColor | None = None
    note: str | None = None


class HighlightResponse(CamelModel):
    id: str
    audio_content_id: str
    user_id: str
    text: str
    start_time: float
    end_time: float
    color: str
    note: str | None
    created_at: datetime
