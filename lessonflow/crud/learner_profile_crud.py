# Fichier: lessonflow/crud/learner_profile_crud.py

from datetime import date, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from lessonflow.models.content.lesson_model import Language
from lessonflow.models.user.learner_profile_model import LearnerDailyActivity, LearnerProfile


def get_by_user_id(db: Session, user_id: int, *, for_update: bool = False) -> Optional[LearnerProfile]:
    """Récupère le profil apprenant d'un utilisateur.

    ``for_update`` verrouille la ligne du profil jusqu'au commit : les crédits
    d'XP et de minutes concurrents d'un même apprenant sont alors sérialisés.
    """
    query = db.query(LearnerProfile).filter(LearnerProfile.user_id == user_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    return query.first()


def create_profile(
    db: Session,
    *,
    user_id: int,
    display_name: str,
    current_language: Language,
    daily_goal_minutes: int = 10,
) -> LearnerProfile:
    """Crée le profil apprenant avec des compteurs à zéro."""
    profile = LearnerProfile(
        user_id=user_id,
        display_name=display_name,
        current_language=current_language,
        daily_goal_minutes=daily_goal_minutes,
        total_xp=0,
        current_streak=0,
        longest_streak=0,
        completed_lessons_count=0,
        achievements=[],
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def update_by_user_id(db: Session, user_id: int, patch: Dict[str, Any]) -> Optional[LearnerProfile]:
    """Applique ``patch`` au profil puis flush. Renvoie ``None`` si le profil n'existe pas."""
    profile = get_by_user_id(db, user_id)
    if profile is None:
        return None
    for field, value in patch.items():
        setattr(profile, field, value)
    db.flush()
    return profile


def add_daily_minutes(
    db: Session,
    profile: LearnerProfile,
    day: date,
    minutes: int,
    *,
    retention_days: int,
) -> LearnerDailyActivity:
    """Ajoute des minutes au jour ``day`` puis purge les jours hors rétention.

    Une seule entrée par jour et par profil ; les entrées antérieures à
    ``day - retention_days`` sont supprimées.
    """
    entry = next((item for item in profile.daily_activity if item.activity_date == day), None)
    if entry is None:
        entry = LearnerDailyActivity(activity_date=day, minutes=minutes)
        profile.daily_activity.append(entry)
    else:
        entry.minutes = (entry.minutes or 0) + minutes

    cutoff = day - timedelta(days=retention_days)
    for stale in [item for item in profile.daily_activity if item.activity_date < cutoff]:
        profile.daily_activity.remove(stale)

    db.flush()
    return entry
