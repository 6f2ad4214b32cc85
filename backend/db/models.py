import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Index, String, Text,
)
from sqlalchemy.orm import relationship, validates
from db.database import Base


COMPLETION_STATUSES = ("pending", "on-time", "late", "missed")
COMPLETED_STATUSES = ("on-time", "late")
TIMES_OF_DAY = ("morning", "evening")


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Auth user. Consumer-app requests identify users by this id."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(Text, unique=True, nullable=False)
    name = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text)
    timezone = Column(Text, default="Europe/London")  # IANA name
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")
    completions = relationship("RoutineStepCompletion", back_populates="user_profile", cascade="all, delete-orphan")


class RoutineStepCompletion(Base):
    __tablename__ = "routine_step_completions"

    id = Column(String(36), primary_key=True, default=_new_id)
    routine_product_id = Column(String(36), nullable=False)
    user_profile_id = Column(String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False)
    scheduled_date = Column(Date, nullable=False)  # user's local calendar day
    scheduled_time_of_day = Column(Text, nullable=False, default="morning")  # morning | evening
    on_time_deadline = Column(DateTime)
    grace_period_end = Column(DateTime)
    completed_at = Column(DateTime, nullable=True)
    status = Column(Text, nullable=False, default="pending")  # pending | on-time | late | missed
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user_profile = relationship("UserProfile", back_populates="completions")

    @validates("status")
    def _validate_status(self, key, value):
        if value not in COMPLETION_STATUSES:
            raise ValueError(f"{key} must be one of {list(COMPLETION_STATUSES)}")
        return value

    @validates("scheduled_time_of_day")
    def _validate_time_of_day(self, key, value):
        if value not in TIMES_OF_DAY:
            raise ValueError(f"{key} must be one of {list(TIMES_OF_DAY)}")
        return value


# Indexes
Index("idx_completions_user_date", RoutineStepCompletion.user_profile_id, RoutineStepCompletion.scheduled_date)
Index(
    "idx_completions_user_date_status",
    RoutineStepCompletion.user_profile_id,
    RoutineStepCompletion.scheduled_date,
    RoutineStepCompletion.status,
)
Index(
    "idx_completions_unique_schedule",
    RoutineStepCompletion.routine_product_id,
    RoutineStepCompletion.scheduled_date,
    RoutineStepCompletion.scheduled_time_of_day,
    unique=True,
)
Index("idx_completions_status_grace", RoutineStepCompletion.status, RoutineStepCompletion.grace_period_end)
