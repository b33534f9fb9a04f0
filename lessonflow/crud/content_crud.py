# Fichier: lessonflow/crud/content_crud.py
"""Lectures seules sur les phrases, proverbes et questions d'une leçon."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from lessonflow.models.content.lesson_model import ContentStatus
from lessonflow.models.content.phrase_model import Phrase, lesson_phrases
from lessonflow.models.content.proverb_model import Proverb
from lessonflow.models.content.question_model import Question, QuestionType


def get_questions_by_ids(db: Session, question_ids: Iterable[int]) -> List[Question]:
    ids = list(question_ids)
    if not ids:
        return []
    return db.query(Question).filter(Question.id.in_(ids)).all()


def list_questions(
    db: Session,
    *,
    lesson_id: int,
    question_type: Optional[QuestionType] = None,
    status: Optional[ContentStatus] = None,
) -> List[Question]:
    """Questions d'une leçon, des plus anciennes aux plus récentes."""
    query = db.query(Question).filter(Question.lesson_id == lesson_id)
    if question_type is not None:
        query = query.filter(Question.type == question_type)
    if status is not None:
        query = query.filter(Question.status == status)
    return query.order_by(Question.created_at.asc(), Question.id.asc()).all()


def get_phrases_by_ids(db: Session, phrase_ids: Iterable[int]) -> List[Phrase]:
    ids = [phrase_id for phrase_id in set(phrase_ids) if phrase_id is not None]
    if not ids:
        return []
    return db.query(Phrase).filter(Phrase.id.in_(ids)).all()


def list_lesson_phrases(db: Session, lesson_id: int, *, status: Optional[ContentStatus] = None) -> List[Phrase]:
    """Phrases rattachées explicitement à la leçon."""
    query = (
        db.query(Phrase)
        .join(lesson_phrases, lesson_phrases.c.phrase_id == Phrase.id)
        .filter(lesson_phrases.c.lesson_id == lesson_id)
    )
    if status is not None:
        query = query.filter(Phrase.status == status)
    return query.order_by(Phrase.created_at.asc(), Phrase.id.asc()).all()


def get_proverbs_by_ids(db: Session, proverb_ids: Iterable[int]) -> List[Proverb]:
    ids = list(set(proverb_ids))
    if not ids:
        return []
    return db.query(Proverb).filter(Proverb.id.in_(ids)).all()
