# lessonflow/models/content/proverb_model.py

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lessonflow.db.base_class import Base
from lessonflow.models.content.lesson_model import ContentStatus, Language, _enum_column


class Proverb(Base):
    __tablename__ = "proverbs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    language: Mapped[Language] = mapped_column(_enum_column(Language, "language"), nullable=False)
    text: Mapped[str] = mapped_column(String(500), nullable=False)
    translation: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    context_note: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ContentStatus] = mapped_column(
        _enum_column(ContentStatus, "contentstatus"), nullable=False, default=ContentStatus.DRAFT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
