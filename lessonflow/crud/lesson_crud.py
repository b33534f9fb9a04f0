# Fichier: lessonflow/crud/lesson_crud.py

from typing import List, Optional

from sqlalchemy.orm import Session

from lessonflow.models.content.lesson_model import ContentStatus, Language, Lesson


def get_lesson(db: Session, lesson_id: int) -> Optional[Lesson]:
    """Récupère une leçon non supprimée par son identifiant."""
    lesson = db.get(Lesson, lesson_id)
    if lesson is None or lesson.is_deleted:
        return None
    return lesson


def get_published_lesson(db: Session, lesson_id: int) -> Optional[Lesson]:
    """Renvoie la leçon seulement si elle est visible par les apprenants."""
    lesson = get_lesson(db, lesson_id)
    if lesson is None or lesson.status != ContentStatus.PUBLISHED:
        return None
    return lesson


def list_lessons(
    db: Session,
    *,
    status: Optional[ContentStatus] = None,
    language: Optional[Language] = None,
) -> List[Lesson]:
    """Liste les leçons dans l'ordre du parcours (order_index puis date de création)."""
    query = db.query(Lesson).filter(Lesson.is_deleted.is_(False))
    if status is not None:
        query = query.filter(Lesson.status == status)
    if language is not None:
        query = query.filter(Lesson.language == language)
    return query.order_by(Lesson.order_index.asc(), Lesson.created_at.asc(), Lesson.id.asc()).all()
