"""Déclare l'ensemble des modèles SQLAlchemy pour la création des tables."""

from lessonflow.db.base_class import Base

# Utilisateurs
from lessonflow.models.user.user_model import User
from lessonflow.models.user.learner_profile_model import LearnerProfile, LearnerDailyActivity

# Contenu pédagogique
from lessonflow.models.content.lesson_model import Lesson
from lessonflow.models.content.phrase_model import Phrase, lesson_phrases
from lessonflow.models.content.proverb_model import Proverb
from lessonflow.models.content.question_model import Question

# Progression
from lessonflow.models.progress.lesson_progress_model import LessonProgress, LessonStepProgress

__all__ = (
    "Base",
    "User",
    "LearnerProfile",
    "LearnerDailyActivity",
    "Lesson",
    "Phrase",
    "lesson_phrases",
    "Proverb",
    "Question",
    "LessonProgress",
    "LessonStepProgress",
)
