# lessonflow/models/content/question_model.py

from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional
import enum

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessonflow.db.base_class import Base
from lessonflow.models.content.lesson_model import ContentStatus, _enum_column

if TYPE_CHECKING:
    from .lesson_model import Lesson
    from .phrase_model import Phrase


class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_IN_THE_GAP = "fill-in-the-gap"
    LISTENING = "listening"


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    lesson_id: Mapped[int] = mapped_column(ForeignKey("lessons.id"), index=True)
    phrase_id: Mapped[Optional[int]] = mapped_column(ForeignKey("phrases.id"), nullable=True)
    type: Mapped[QuestionType] = mapped_column(_enum_column(QuestionType, "questiontype"), nullable=False)
    # ex: "mc-select-translation", "fg-word-order", "ls-dictation"
    subtype: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    prompt_template: Mapped[str] = mapped_column(Text, default="", nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    correct_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # {"sentence": str, "words": [str], "correct_order": [int], "meaning": str}
    review_data: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    explanation: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ContentStatus] = mapped_column(
        _enum_column(ContentStatus, "contentstatus"), nullable=False, default=ContentStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    lesson: Mapped["Lesson"] = relationship(back_populates="questions")
    phrase: Mapped[Optional["Phrase"]] = relationship()
