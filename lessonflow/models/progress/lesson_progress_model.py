from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
import enum

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessonflow.db.base_class import Base

if TYPE_CHECKING:
    from lessonflow.models.user.user_model import User
    from lessonflow.models.content.lesson_model import Lesson


class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class StepStatus(str, enum.Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


class LessonProgress(Base):
    """
    Progression d'un apprenant sur une leçon (une ligne par couple apprenant/leçon).
    """
    __tablename__ = "lesson_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    lesson_id: Mapped[int] = mapped_column(ForeignKey("lessons.id"), index=True)
    status: Mapped[ProgressStatus] = mapped_column(
        Enum(ProgressStatus, name="progressstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=ProgressStatus.NOT_STARTED,
    )
    progress_percent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    xp_earned: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    user: Mapped["User"] = relationship(back_populates="lesson_progress")
    lesson: Mapped["Lesson"] = relationship()
    steps: Mapped[List["LessonStepProgress"]] = relationship(
        back_populates="progress",
        cascade="all, delete-orphan",
        order_by="LessonStepProgress.position",
    )

    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="_user_lesson_progress_uc"),)


class LessonStepProgress(Base):
    """
    État d'une étape (vocabulary, practice, listening, review) pour une progression.
    """
    __tablename__ = "lesson_step_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    progress_id: Mapped[int] = mapped_column(ForeignKey("lesson_progress.id", ondelete="CASCADE"), index=True)
    step_key: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[StepStatus] = mapped_column(
        Enum(StepStatus, name="stepstatus", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=StepStatus.AVAILABLE,
    )
    score: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    progress: Mapped["LessonProgress"] = relationship(back_populates="steps")

    __table_args__ = (UniqueConstraint("progress_id", "step_key", name="_progress_step_uc"),)
