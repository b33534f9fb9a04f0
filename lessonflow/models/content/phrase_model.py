# lessonflow/models/content/phrase_model.py

from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessonflow.db.base_class import Base
from lessonflow.models.content.lesson_model import ContentStatus, Language, _enum_column

if TYPE_CHECKING:
    from .lesson_model import Lesson


lesson_phrases = Table(
    "lesson_phrases",
    Base.metadata,
    Column("lesson_id", ForeignKey("lessons.id", ondelete="CASCADE"), primary_key=True),
    Column("phrase_id", ForeignKey("phrases.id", ondelete="CASCADE"), primary_key=True),
)


class Phrase(Base):
    __tablename__ = "phrases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    language: Mapped[Language] = mapped_column(_enum_column(Language, "language"), nullable=False)
    text: Mapped[str] = mapped_column(String(500), nullable=False)
    translation: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    pronunciation: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    explanation: Mapped[str] = mapped_column(Text, default="", nullable=False)
    # [{"original": ..., "translation": ...}]
    examples: Mapped[List[dict[str, str]]] = mapped_column(JSON, default=list, nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # {"provider", "voice", "locale", "format", "url", ...}
    audio: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    status: Mapped[ContentStatus] = mapped_column(
        _enum_column(ContentStatus, "contentstatus"), nullable=False, default=ContentStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    lessons: Mapped[List["Lesson"]] = relationship(secondary=lesson_phrases, back_populates="phrases")
