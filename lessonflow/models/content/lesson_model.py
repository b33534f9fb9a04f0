# lessonflow/models/content/lesson_model.py

from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional
import enum

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessonflow.db.base_class import Base

if TYPE_CHECKING:
    from .phrase_model import Phrase
    from .question_model import Question


class Language(str, enum.Enum):
    YORUBA = "yoruba"
    IGBO = "igbo"
    HAUSA = "hausa"


class LessonLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ContentStatus(str, enum.Enum):
    """Cycle éditorial partagé par les leçons, phrases, proverbes et questions."""

    DRAFT = "draft"
    FINISHED = "finished"
    PUBLISHED = "published"


class BlockType(str, enum.Enum):
    TEXT = "text"
    PHRASE = "phrase"
    PROVERB = "proverb"
    QUESTION = "question"
    LISTENING = "listening"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda obj: [e.value for e in obj])


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    language: Mapped[Language] = mapped_column(_enum_column(Language, "language"), index=True, nullable=False)
    level: Mapped[LessonLevel] = mapped_column(
        _enum_column(LessonLevel, "lessonlevel"), nullable=False, default=LessonLevel.BEGINNER
    )
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    topics: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    # Ordered flow: [{"type": "text", "content": ...} | {"type": "phrase", "ref_id": 3} | ...]
    blocks: Mapped[List[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[ContentStatus] = mapped_column(
        _enum_column(ContentStatus, "contentstatus"), index=True, nullable=False, default=ContentStatus.DRAFT
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0", nullable=False)
    created_by: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    phrases: Mapped[List["Phrase"]] = relationship(secondary="lesson_phrases", back_populates="lessons")
    questions: Mapped[List["Question"]] = relationship(back_populates="lesson")

    def __repr__(self):
        return f"<Lesson(id={self.id}, title='{self.title}', status='{self.status}')>"
