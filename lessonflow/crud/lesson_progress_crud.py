# Fichier: lessonflow/crud/lesson_progress_crud.py

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from lessonflow.models.progress.lesson_progress_model import (
    LessonProgress,
    LessonStepProgress,
    ProgressStatus,
    StepStatus,
)


def get_by_user_and_lesson(
    db: Session,
    user_id: int,
    lesson_id: int,
    *,
    for_update: bool = False,
) -> Optional[LessonProgress]:
    """Récupère la progression d'un apprenant sur une leçon.

    ``for_update`` verrouille la ligne jusqu'au commit pour sérialiser les
    lectures-modifications-écritures concurrentes (sans effet sur SQLite).
    """
    query = db.query(LessonProgress).filter(
        LessonProgress.user_id == user_id,
        LessonProgress.lesson_id == lesson_id,
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def list_by_user_and_lesson_ids(db: Session, user_id: int, lesson_ids: Iterable[int]) -> List[LessonProgress]:
    ids = list(lesson_ids)
    if not ids:
        return []
    return (
        db.query(LessonProgress)
        .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id.in_(ids))
        .all()
    )


def create_progress(
    db: Session,
    *,
    user_id: int,
    lesson_id: int,
    steps: Sequence[tuple[str, StepStatus]],
) -> LessonProgress:
    """Crée une progression vierge avec ses étapes dans l'ordre fourni.

    N'effectue qu'un flush : l'appelant gère le commit (et l'éventuelle
    ``IntegrityError`` si une autre requête a créé la ligne entre-temps).
    """
    progress = LessonProgress(
        user_id=user_id,
        lesson_id=lesson_id,
        status=ProgressStatus.NOT_STARTED,
        progress_percent=0,
        xp_earned=0,
    )
    for position, (step_key, status) in enumerate(steps):
        progress.steps.append(
            LessonStepProgress(step_key=step_key, position=position, status=status, score=0.0)
        )
    db.add(progress)
    db.flush()
    return progress


def update_step(db: Session, progress_id: int, step_key: str, values: Dict[str, Any]) -> int:
    """Met à jour une seule étape sans réécrire les autres. Renvoie le nombre de lignes touchées."""
    return (
        db.query(LessonStepProgress)
        .filter(LessonStepProgress.progress_id == progress_id, LessonStepProgress.step_key == step_key)
        .update(values, synchronize_session="fetch")
    )


def count_completed_steps(db: Session, progress_id: int) -> int:
    return (
        db.query(LessonStepProgress)
        .filter(
            LessonStepProgress.progress_id == progress_id,
            LessonStepProgress.status == StepStatus.COMPLETED,
        )
        .count()
    )


def update_progress_by_id(db: Session, progress_id: int, patch: Dict[str, Any]) -> Optional[LessonProgress]:
    """Applique ``patch`` sur la progression. Renvoie ``None`` si elle n'existe plus."""
    progress = db.get(LessonProgress, progress_id)
    if progress is None:
        return None
    for field, value in patch.items():
        setattr(progress, field, value)
    db.flush()
    return progress


def complete_all_steps(db: Session, progress_id: int, completed_at: datetime) -> None:
    """Force toutes les étapes à ``completed`` ; conserve les dates de complétion existantes."""
    steps = db.query(LessonStepProgress).filter(LessonStepProgress.progress_id == progress_id)
    steps.update({"status": StepStatus.COMPLETED}, synchronize_session="fetch")
    steps.filter(LessonStepProgress.completed_at.is_(None)).update(
        {"completed_at": completed_at}, synchronize_session="fetch"
    )
