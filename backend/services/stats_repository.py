"""Read-only aggregate queries over routine step completions.

Every query is scoped to a single user profile. Each call opens its own session
from the injected factory, so calls are safe to run side by side on worker threads.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Protocol

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from db.database import SessionLocal
from db.models import COMPLETED_STATUSES, RoutineStepCompletion, UserProfile
from utils.datetime_utils import parse_date


@dataclass(frozen=True)
class UserProfileRef:
    id: str
    timezone: str | None


@dataclass(frozen=True)
class CompletionCounts:
    total: int = 0
    completed: int = 0


class StatsRepository(Protocol):
    def get_user_profile_id(self, auth_user_id: str) -> UserProfileRef | None:
        ...

    def get_today_progress(self, profile_id: str, today_date: str | date) -> CompletionCounts:
        ...

    def get_current_streak(self, profile_id: str, today_date: str | date) -> int:
        ...

    def get_weekly_compliance(
        self, profile_id: str, start_date: str | date, end_date: str | date
    ) -> CompletionCounts:
        ...


def count_streak(daily_counts: Iterable[tuple[date, int, int]], today: date) -> int:
    """Count consecutive perfect days walking back from today.

    daily_counts holds (scheduled_date, total, completed) groups, newest first.
    A day is perfect when at least one step was scheduled and every step reached
    on-time or late. The walk stops at the first imperfect day, and at the first
    calendar day with no group at all.
    """
    streak = 0
    expected = today
    for scheduled_date, total, completed in daily_counts:
        if scheduled_date != expected:
            break
        if total <= 0 or completed != total:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def _completed_count():
    return func.sum(case((RoutineStepCompletion.status.in_(COMPLETED_STATUSES), 1), else_=0))


class SqlStatsRepository:
    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def get_user_profile_id(self, auth_user_id: str) -> UserProfileRef | None:
        with self._session_factory() as db:
            row = (
                db.query(UserProfile.id, UserProfile.timezone)
                .filter(UserProfile.user_id == auth_user_id)
                .first()
            )
        if not row:
            return None
        return UserProfileRef(id=row.id, timezone=row.timezone)

    def get_today_progress(self, profile_id: str, today_date: str | date) -> CompletionCounts:
        day = parse_date(today_date)
        return self._count_between(profile_id, day, day)

    def get_current_streak(self, profile_id: str, today_date: str | date) -> int:
        day = parse_date(today_date)
        with self._session_factory() as db:
            rows = (
                db.query(
                    RoutineStepCompletion.scheduled_date,
                    func.count(RoutineStepCompletion.id).label("total"),
                    _completed_count().label("completed"),
                )
                .filter(
                    RoutineStepCompletion.user_profile_id == profile_id,
                    RoutineStepCompletion.scheduled_date <= day,
                )
                .group_by(RoutineStepCompletion.scheduled_date)
                .order_by(RoutineStepCompletion.scheduled_date.desc())
                .all()
            )
        return count_streak(
            ((parse_date(row.scheduled_date), int(row.total or 0), int(row.completed or 0)) for row in rows),
            today=day,
        )

    def get_weekly_compliance(
        self, profile_id: str, start_date: str | date, end_date: str | date
    ) -> CompletionCounts:
        return self._count_between(profile_id, parse_date(start_date), parse_date(end_date))

    def _count_between(self, profile_id: str, start: date, end: date) -> CompletionCounts:
        with self._session_factory() as db:
            row = (
                db.query(
                    func.count(RoutineStepCompletion.id).label("total"),
                    _completed_count().label("completed"),
                )
                .filter(
                    RoutineStepCompletion.user_profile_id == profile_id,
                    RoutineStepCompletion.scheduled_date >= start,
                    RoutineStepCompletion.scheduled_date <= end,
                )
                .one()
            )
        return CompletionCounts(total=int(row.total or 0), completed=int(row.completed or 0))


def make_stats_repo(session_factory: Callable[[], Session] | None = None) -> SqlStatsRepository:
    return SqlStatsRepository(session_factory=session_factory)
