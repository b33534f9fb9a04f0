# lessonflow/models/user/learner_profile_model.py

from __future__ import annotations
from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Date, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessonflow.db.base_class import Base
from lessonflow.models.content.lesson_model import Language

if TYPE_CHECKING:
    from .user_model import User


class LearnerProfile(Base):
    """Agrégats de gamification d'un apprenant (XP, série, succès)."""

    __tablename__ = "learner_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    current_language: Mapped[Language] = mapped_column(
        Enum(Language, name="language", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    daily_goal_minutes: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    total_xp: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    completed_lessons_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    achievements: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    last_active_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped["User"] = relationship(back_populates="learner_profile")
    daily_activity: Mapped[List["LearnerDailyActivity"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="LearnerDailyActivity.activity_date",
    )

    @property
    def weekly_activity(self) -> list[dict]:
        return [{"date": entry.activity_date, "minutes": entry.minutes} for entry in self.daily_activity]


class LearnerDailyActivity(Base):
    """Minutes d'étude cumulées par jour calendaire (UTC)."""

    __tablename__ = "learner_daily_activity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    profile_id: Mapped[int] = mapped_column(ForeignKey("learner_profiles.id"), index=True)
    activity_date: Mapped[date] = mapped_column(Date, nullable=False)
    minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    profile: Mapped["LearnerProfile"] = relationship(back_populates="daily_activity")

    __table_args__ = (UniqueConstraint("profile_id", "activity_date", name="_profile_activity_day_uc"),)
