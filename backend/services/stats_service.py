"""Consumer dashboard stats: today's progress, current streak, weekly compliance.

Dates are bucketed in the user's own timezone. The clock is injected so callers
can pin the current instant.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Union

from config import settings
from services.stats_repository import StatsRepository, make_stats_repo
from services.stats_types import CurrentStreak, StatsResponse, TodayProgress, WeeklyCompliance
from utils.datetime_utils import format_date, local_date_for, resolve_timezone, utcnow, week_start_date_string

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
STATS_FETCH_FAILED = "Failed to fetch user stats"


@dataclass(frozen=True)
class StatsSuccess:
    data: StatsResponse
    success: Literal[True] = True


@dataclass(frozen=True)
class StatsFailure:
    error: str
    success: Literal[False] = False


StatsResult = Union[StatsSuccess, StatsFailure]


def calculate_percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    # round half up, kept in integers: floor(completed * 100 / total + 1/2)
    return (completed * 200 + total) // (total * 2)


class StatsService:
    def __init__(
        self,
        repo: StatsRepository | None = None,
        now: Callable[[], datetime] | None = None,
        default_timezone: str | None = None,
    ) -> None:
        self.repo = repo if repo is not None else make_stats_repo()
        self.now = now or utcnow
        self.default_timezone = default_timezone or settings.DEFAULT_TIMEZONE

    async def get_stats(self, auth_user_id: str) -> StatsResult:
        try:
            profile = await asyncio.to_thread(self.repo.get_user_profile_id, auth_user_id)
            if profile is None:
                return StatsFailure(error=USER_NOT_FOUND)

            tz = resolve_timezone(profile.timezone, self.default_timezone)
            today_date = format_date(local_date_for(self.now(), tz))
            # The local date is already timezone-resolved; week start is plain date math.
            week_start_date = week_start_date_string(today_date)

            today, streak_days, week = await asyncio.gather(
                asyncio.to_thread(self.repo.get_today_progress, profile.id, today_date),
                asyncio.to_thread(self.repo.get_current_streak, profile.id, today_date),
                asyncio.to_thread(self.repo.get_weekly_compliance, profile.id, week_start_date, today_date),
            )

            data = StatsResponse(
                todayProgress=TodayProgress(
                    completed=today.completed,
                    total=today.total,
                    percentage=calculate_percentage(today.completed, today.total),
                ),
                currentStreak=CurrentStreak(days=streak_days),
                weeklyCompliance=WeeklyCompliance(
                    percentage=calculate_percentage(week.completed, week.total),
                    completed=week.completed,
                    total=week.total,
                ),
            )
            return StatsSuccess(data=data)
        except Exception:
            logger.exception(f"Error fetching stats for user {auth_user_id}")
            return StatsFailure(error=STATS_FETCH_FAILED)


def make_stats_service(
    repo: StatsRepository | None = None,
    now: Callable[[], datetime] | None = None,
) -> StatsService:
    return StatsService(repo=repo, now=now)
