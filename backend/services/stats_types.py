from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel


class GetStatsRequest(BaseModel):
    userId: UUID


class TodayProgress(BaseModel):
    completed: int
    total: int
    percentage: int


class CurrentStreak(BaseModel):
    days: int


class WeeklyCompliance(BaseModel):
    percentage: int
    completed: int
    total: int


class StatsResponse(BaseModel):
    todayProgress: TodayProgress
    currentStreak: CurrentStreak
    weeklyCompliance: WeeklyCompliance


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ErrorResponse(BaseModel):
    error: ErrorBody
