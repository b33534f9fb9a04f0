"""Progression d'un apprenant dans les quatre étapes d'une leçon.

Step completion unlocks the adjacent step, recomputes the percentage and the
status, and the first full completion of a lesson credits the learner profile
(XP, lessons count, daily minutes, "First Step").
"""
import logging
import math
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lessonflow.core.config import settings
from lessonflow.core.lesson_steps import LESSON_STEPS, initial_step_status, is_valid_step_key
from lessonflow.crud import learner_profile_crud, lesson_crud, lesson_progress_crud
from lessonflow.gamification.achievement_rules import with_first_step
from lessonflow.models.content.lesson_model import ContentStatus, Lesson
from lessonflow.models.progress.lesson_progress_model import (
    LessonProgress,
    LessonStepProgress,
    ProgressStatus,
    StepStatus,
)
from lessonflow.schemas.lesson_schema import ComingNextEntry, LessonOverviewLesson, LessonOverviewResponse
from lessonflow.schemas.progress_schema import (
    LessonCompletionResponse,
    LessonStepsResponse,
    StepCompletionResponse,
    StepView,
)
from lessonflow.services.results import Err, LessonError, Ok, Result
from lessonflow.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def compute_progress_percent(completed_count: int, total: int = len(LESSON_STEPS)) -> int:
    """``round(completed / total * 100)`` avec arrondi au demi supérieur."""
    if total <= 0:
        return 0
    return int(math.floor(completed_count / total * 100 + 0.5))


def merge_step_progress(saved_steps: Iterable[LessonStepProgress]) -> List[StepView]:
    """Fusionne l'état sauvegardé avec la définition statique des étapes."""
    by_key = {step.step_key: step for step in saved_steps}
    views: List[StepView] = []
    for index, definition in enumerate(LESSON_STEPS):
        saved = by_key.get(definition.key)
        views.append(
            StepView(
                id=index + 1,
                key=definition.key,
                title=definition.title,
                description=definition.description,
                status=saved.status if saved is not None else initial_step_status(index),
                score=(saved.score or 0) if saved is not None else 0,
                route=definition.route,
            )
        )
    return views


class LessonProgressService:
    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    # -----------------------------
    # Helpers
    # -----------------------------

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Échec de l'enregistrement de la progression (utilisateur %s).", self.user_id)
            raise

    def _get_published_lesson(self, lesson_id: int) -> Optional[Lesson]:
        return lesson_crud.get_published_lesson(self.db, lesson_id)

    def ensure_progress(self, lesson: Lesson, *, lock: bool = False) -> LessonProgress:
        """Renvoie la progression (apprenant, leçon), en la créant au premier accès.

        With ``lock`` the row is selected ``FOR UPDATE`` so the caller's
        read-modify-write is serialized per (learner, lesson).
        """
        lesson_id = lesson.id
        existing = lesson_progress_crud.get_by_user_and_lesson(self.db, self.user_id, lesson_id, for_update=lock)
        if existing is not None:
            return existing

        try:
            lesson_progress_crud.create_progress(
                self.db,
                user_id=self.user_id,
                lesson_id=lesson_id,
                steps=[(step.key, initial_step_status(index)) for index, step in enumerate(LESSON_STEPS)],
            )
            self.db.commit()
        except IntegrityError:
            # Another request created the record first.
            self.db.rollback()
            logger.info(
                "Progression déjà créée en parallèle (utilisateur %s, leçon %s).", self.user_id, lesson_id
            )
        else:
            logger.info("Progression initialisée (utilisateur %s, leçon %s).", self.user_id, lesson_id)

        progress = lesson_progress_crud.get_by_user_and_lesson(self.db, self.user_id, lesson_id, for_update=lock)
        if progress is None:  # pragma: no cover - the insert or the concurrent one must exist
            raise RuntimeError(f"lesson progress missing for user {self.user_id} and lesson {lesson_id}")
        return progress

    # -----------------------------
    # Lecture
    # -----------------------------

    def get_lesson_steps(self, lesson_id: int) -> Result[LessonStepsResponse]:
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        progress = self.ensure_progress(lesson)
        return Ok(
            LessonStepsResponse(
                steps=merge_step_progress(progress.steps),
                progress_percent=progress.progress_percent,
            )
        )

    def get_next_lesson(self) -> Result[Optional[Lesson]]:
        """Première leçon publiée non terminée dans la langue courante (sinon la première)."""
        profile = learner_profile_crud.get_by_user_id(self.db, self.user_id)
        if profile is None:
            return Err(LessonError.PROFILE_NOT_FOUND)

        lessons = lesson_crud.list_lessons(
            self.db, status=ContentStatus.PUBLISHED, language=profile.current_language
        )
        progresses = lesson_progress_crud.list_by_user_and_lesson_ids(
            self.db, self.user_id, [lesson.id for lesson in lessons]
        )
        completed = {p.lesson_id for p in progresses if p.status == ProgressStatus.COMPLETED}

        upcoming = next((lesson for lesson in lessons if lesson.id not in completed), None)
        if upcoming is None and lessons:
            upcoming = lessons[0]
        return Ok(upcoming)

    def get_lesson_overview(self, lesson_id: int) -> Result[LessonOverviewResponse]:
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        progress = self.ensure_progress(lesson)
        profile = learner_profile_crud.get_by_user_id(self.db, self.user_id)
        language = profile.current_language if profile is not None else lesson.language

        current_order = lesson.order_index or 0
        coming_next = [
            item
            for item in lesson_crud.list_lessons(self.db, status=ContentStatus.PUBLISHED, language=language)
            if item.order_index > current_order
        ][: settings.COMING_NEXT_LIMIT]

        return Ok(
            LessonOverviewResponse(
                lesson=LessonOverviewLesson(
                    id=lesson.id,
                    title=lesson.title,
                    description=lesson.description,
                    language=lesson.language,
                    level=lesson.level,
                    progress_percent=progress.progress_percent,
                    status=progress.status,
                ),
                steps=merge_step_progress(progress.steps),
                coming_next=[ComingNextEntry(id=item.id, title=item.title) for item in coming_next],
            )
        )

    # -----------------------------
    # Écriture
    # -----------------------------

    def complete_step(self, lesson_id: int, step_key: str, score: Optional[float] = None) -> Result[StepCompletionResponse]:
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        if not is_valid_step_key(step_key):
            return Err(LessonError.INVALID_STEP_KEY)

        progress = self.ensure_progress(lesson, lock=True)
        steps = list(progress.steps)
        index = next((i for i, step in enumerate(steps) if step.step_key == step_key), None)
        if index is None:
            self.db.rollback()
            logger.warning(
                "Étape '%s' absente de la progression %s (utilisateur %s).", step_key, progress.id, self.user_id
            )
            return Err(LessonError.STEP_NOT_FOUND)

        now = utcnow()
        current = steps[index]
        lesson_progress_crud.update_step(
            self.db,
            progress.id,
            step_key,
            {
                "status": StepStatus.COMPLETED,
                "score": float(score) if score else (current.score or 0.0),
                "completed_at": now,
            },
        )

        # Only the adjacent step is unlocked, whatever the completion order.
        if index + 1 < len(steps) and steps[index + 1].status == StepStatus.LOCKED:
            lesson_progress_crud.update_step(
                self.db, progress.id, steps[index + 1].step_key, {"status": StepStatus.AVAILABLE}
            )

        completed_count = lesson_progress_crud.count_completed_steps(self.db, progress.id)
        progress_percent = compute_progress_percent(completed_count)
        status = ProgressStatus.COMPLETED if progress_percent >= 100 else ProgressStatus.IN_PROGRESS

        updated = lesson_progress_crud.update_progress_by_id(
            self.db,
            progress.id,
            {
                "progress_percent": progress_percent,
                "status": status,
                "started_at": progress.started_at or now,
                "completed_at": (progress.completed_at or now)
                if status == ProgressStatus.COMPLETED
                else progress.completed_at,
            },
        )
        if updated is None:
            self.db.rollback()
            return Err(LessonError.LESSON_NOT_FOUND)

        self._commit()
        logger.info(
            "Étape '%s' terminée (utilisateur %s, leçon %s) : %s%%.",
            step_key,
            self.user_id,
            lesson_id,
            updated.progress_percent,
        )
        return Ok(
            StepCompletionResponse(
                progress_percent=updated.progress_percent,
                status=updated.status,
                steps=merge_step_progress(updated.steps),
            )
        )

    def complete_lesson(
        self,
        lesson_id: int,
        xp_earned: Optional[int] = None,
        minutes_spent: Optional[int] = None,
    ) -> Result[LessonCompletionResponse]:
        """Termine toute la leçon d'un coup (sans passer par le déverrouillage séquentiel)."""
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        progress = self.ensure_progress(lesson, lock=True)
        was_completed = progress.status == ProgressStatus.COMPLETED
        now = utcnow()

        lesson_progress_crud.complete_all_steps(self.db, progress.id, now)

        requested_xp = xp_earned if xp_earned and xp_earned > 0 else settings.LESSON_DEFAULT_XP
        updated = lesson_progress_crud.update_progress_by_id(
            self.db,
            progress.id,
            {
                "status": ProgressStatus.COMPLETED,
                "progress_percent": 100,
                "xp_earned": max(progress.xp_earned or 0, requested_xp),
                "started_at": progress.started_at or now,
                "completed_at": now,
            },
        )
        if updated is None:
            self.db.rollback()
            return Err(LessonError.LESSON_NOT_FOUND)

        if not was_completed:
            self._credit_profile(updated.xp_earned, minutes_spent)

        self._commit()
        logger.info(
            "Leçon %s terminée par l'utilisateur %s (%s XP).", lesson_id, self.user_id, updated.xp_earned
        )
        return Ok(
            LessonCompletionResponse(
                lesson_id=lesson_id,
                xp_earned=updated.xp_earned,
                progress_percent=updated.progress_percent,
                status=updated.status,
            )
        )

    def _credit_profile(self, xp_earned: int, minutes_spent: Optional[int]) -> None:
        profile = learner_profile_crud.get_by_user_id(self.db, self.user_id, for_update=True)
        if profile is None:
            logger.warning(
                "Profil apprenant introuvable pour l'utilisateur %s : crédit de leçon ignoré.", self.user_id
            )
            return

        now = utcnow()
        learner_profile_crud.add_daily_minutes(
            self.db,
            profile,
            now.date(),
            minutes_spent if minutes_spent else settings.LESSON_DEFAULT_MINUTES,
            retention_days=settings.WEEKLY_ACTIVITY_RETENTION_DAYS,
        )
        learner_profile_crud.update_by_user_id(
            self.db,
            self.user_id,
            {
                "total_xp": (profile.total_xp or 0) + xp_earned,
                "completed_lessons_count": (profile.completed_lessons_count or 0) + 1,
                "achievements": with_first_step(profile.achievements),
                "last_active_date": now,
            },
        )
