"""
Définition centralisée des succès (achievements) affichés sur le tableau de bord.

 - Seul "First Step" est persisté, lors de la première leçon terminée.
 - Les autres sont dérivés à l'affichage quand le profil n'a encore rien stocké.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from lessonflow.models.user.learner_profile_model import LearnerProfile


FIRST_STEP = "First Step"
ON_FIRE = "On Fire"
PERFECT_SCORE = "Perfect Score"


@dataclass(frozen=True)
class AchievementRule:
    name: str
    unlocked: Callable[["LearnerProfile"], bool]


DERIVED_ACHIEVEMENTS: Tuple[AchievementRule, ...] = (
    AchievementRule(FIRST_STEP, lambda profile: (profile.completed_lessons_count or 0) > 0),
    AchievementRule(ON_FIRE, lambda profile: (profile.current_streak or 0) >= 3),
    AchievementRule(PERFECT_SCORE, lambda profile: (profile.total_xp or 0) >= 100),
)


def with_first_step(achievements: List[str]) -> List[str]:
    """Renvoie une nouvelle liste contenant "First Step" (sans doublon)."""
    updated = list(achievements or [])
    if FIRST_STEP not in updated:
        updated.append(FIRST_STEP)
    return updated


def display_achievements(profile: "LearnerProfile") -> List[str]:
    if profile.achievements:
        return list(profile.achievements)
    return [rule.name for rule in DERIVED_ACHIEVEMENTS if rule.unlocked(profile)]
