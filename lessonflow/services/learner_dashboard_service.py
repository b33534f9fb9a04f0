import logging
from datetime import timedelta
from typing import Dict, List

from sqlalchemy.orm import Session

from lessonflow.core.config import settings
from lessonflow.crud import learner_profile_crud, lesson_crud, lesson_progress_crud
from lessonflow.gamification.achievement_rules import display_achievements
from lessonflow.models.content.lesson_model import ContentStatus, Language
from lessonflow.models.progress.lesson_progress_model import ProgressStatus
from lessonflow.models.user.learner_profile_model import LearnerProfile
from lessonflow.schemas.dashboard_schema import (
    CompletedLessonEntry,
    DashboardOverviewResponse,
    DashboardStats,
    LearnerProfileCreate,
    LearningSessionResponse,
    WeeklyOverviewEntry,
)
from lessonflow.schemas.lesson_schema import LessonSummary
from lessonflow.services.results import Err, LessonError, Ok, Result
from lessonflow.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class LearnerDashboardService:
    """Tableau de bord apprenant : statistiques, série de jours, objectifs."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def create_profile(self, payload: LearnerProfileCreate) -> Result[LearnerProfile]:
        if learner_profile_crud.get_by_user_id(self.db, self.user_id) is not None:
            return Err(LessonError.PROFILE_EXISTS)

        profile = learner_profile_crud.create_profile(
            self.db,
            user_id=self.user_id,
            display_name=payload.display_name,
            current_language=payload.current_language,
            daily_goal_minutes=payload.daily_goal_minutes,
        )
        logger.info("Profil apprenant créé pour l'utilisateur %s.", self.user_id)
        return Ok(profile)

    def get_overview(self) -> Result[DashboardOverviewResponse]:
        profile = learner_profile_crud.get_by_user_id(self.db, self.user_id)
        if profile is None:
            return Err(LessonError.PROFILE_NOT_FOUND)

        lessons = lesson_crud.list_lessons(
            self.db, status=ContentStatus.PUBLISHED, language=profile.current_language
        )
        progresses = lesson_progress_crud.list_by_user_and_lesson_ids(
            self.db, self.user_id, [lesson.id for lesson in lessons]
        )
        progress_by_lesson = {p.lesson_id: p for p in progresses}
        completed_ids = {p.lesson_id for p in progresses if p.status == ProgressStatus.COMPLETED}

        next_lesson = next((lesson for lesson in lessons if lesson.id not in completed_ids), None)

        completed_lessons = [
            CompletedLessonEntry(
                id=lesson.id,
                title=lesson.title,
                description=lesson.description,
                level=lesson.level,
                completed_at=progress_by_lesson[lesson.id].completed_at,
            )
            for lesson in lessons
            if lesson.id in completed_ids
        ]
        completed_lessons.sort(
            key=lambda entry: entry.completed_at.timestamp() if entry.completed_at else 0, reverse=True
        )

        weekly_overview = self._weekly_overview(profile)
        today_minutes = weekly_overview[-1].minutes if weekly_overview else 0

        return Ok(
            DashboardOverviewResponse(
                stats=DashboardStats(
                    current_language=profile.current_language,
                    streak_days=profile.current_streak,
                    total_xp=profile.total_xp,
                    daily_goal_minutes=profile.daily_goal_minutes,
                    today_minutes=today_minutes,
                    completed_lessons_count=profile.completed_lessons_count,
                ),
                next_lesson=LessonSummary.model_validate(next_lesson) if next_lesson else None,
                completed_lessons=completed_lessons[: settings.RECENT_COMPLETED_LESSONS_LIMIT],
                weekly_overview=weekly_overview,
                achievements=display_achievements(profile),
            )
        )

    def _weekly_overview(self, profile: LearnerProfile) -> List[WeeklyOverviewEntry]:
        """Les sept derniers jours, du plus ancien à aujourd'hui."""
        today = utcnow().date()
        minutes_by_day: Dict = {entry.activity_date: entry.minutes for entry in profile.daily_activity}
        overview = []
        for offset in range(6, -1, -1):
            day = today - timedelta(days=offset)
            minutes = minutes_by_day.get(day, 0)
            overview.append(WeeklyOverviewEntry(day=WEEKDAY_LABELS[day.weekday()], minutes=minutes, completed=minutes > 0))
        return overview

    def update_daily_goal(self, minutes: int) -> Result[LearnerProfile]:
        profile = learner_profile_crud.update_by_user_id(self.db, self.user_id, {"daily_goal_minutes": minutes})
        if profile is None:
            return Err(LessonError.PROFILE_NOT_FOUND)
        self.db.commit()
        return Ok(profile)

    def update_current_language(self, language: Language) -> Result[LearnerProfile]:
        profile = learner_profile_crud.update_by_user_id(self.db, self.user_id, {"current_language": language})
        if profile is None:
            return Err(LessonError.PROFILE_NOT_FOUND)
        self.db.commit()
        return Ok(profile)

    def mark_learning_session(self, minutes: int) -> Result[LearningSessionResponse]:
        """Enregistre une session d'étude et met à jour la série de jours consécutifs."""
        profile = learner_profile_crud.get_by_user_id(self.db, self.user_id, for_update=True)
        if profile is None:
            return Err(LessonError.PROFILE_NOT_FOUND)

        now = utcnow()
        today = now.date()
        streak = profile.current_streak or 0
        if profile.last_active_date is None:
            streak = 1
        else:
            gap = (today - profile.last_active_date.date()).days
            if gap == 1:
                streak += 1
            elif gap > 1:
                streak = 1
            else:
                # Same day: a session today counts as at least a one-day streak.
                streak = max(streak, 1)

        learner_profile_crud.add_daily_minutes(
            self.db, profile, today, minutes, retention_days=settings.WEEKLY_ACTIVITY_RETENTION_DAYS
        )
        learner_profile_crud.update_by_user_id(
            self.db,
            self.user_id,
            {
                "current_streak": streak,
                "longest_streak": max(profile.longest_streak or 0, streak),
                "last_active_date": now,
            },
        )
        self.db.commit()

        return Ok(LearningSessionResponse(streak_days=profile.current_streak, longest_streak=profile.longest_streak))
