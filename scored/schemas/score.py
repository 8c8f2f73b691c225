import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class MoodResponse(BaseModel):
    band: str  # low, mid, high
    label: str
    color: str


class ScoreResponse(BaseModel):
    id: uuid.UUID
    score: int
    description: str | None
    date: date
    created_at: datetime
    updated_at: datetime
    mood: MoodResponse


class ScoreStats(BaseModel):
    count: int
    average: int
    current_streak: int
    longest_streak: int


class ScoreCreate(BaseModel):
    user_id: uuid.UUID = Field(alias="userId")
    score: int
    description: str | None = Field(default=None, max_length=1000)


class ScoreListResponse(BaseModel):
    scores: list[ScoreResponse]
    stats: ScoreStats


class ScoreSaveResponse(BaseModel):
    success: bool = True
    score: ScoreResponse


class SuccessResponse(BaseModel):
    success: bool = True
