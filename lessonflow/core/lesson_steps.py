"""Structure fixe d'une leçon côté apprenant.

Single source of truth for the four lesson steps: progress seeding and the
display merge both read ``LESSON_STEPS``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from lessonflow.models.progress.lesson_progress_model import StepStatus


@dataclass(frozen=True)
class LessonStepDefinition:
    key: str
    title: str
    description: str
    route: str


LESSON_STEPS: Tuple[LessonStepDefinition, ...] = (
    LessonStepDefinition("vocabulary", "Vocabulary", "Learn essential words", "/exercise?type=multiple-choice"),
    LessonStepDefinition("practice", "Practice", "Fill in the blanks", "/exercise?type=practice"),
    LessonStepDefinition("listening", "Listening", "Hear native speakers", "/exercise?type=listening"),
    LessonStepDefinition("review", "Review", "Test your knowledge", "/sentence-builder"),
)

STEP_KEYS = tuple(step.key for step in LESSON_STEPS)

# La révision reste verrouillée tant que l'étape précédente n'est pas terminée.
LOCKED_STEP_INDEX = 3


def initial_step_status(index: int) -> StepStatus:
    return StepStatus.LOCKED if index == LOCKED_STEP_INDEX else StepStatus.AVAILABLE


def is_valid_step_key(step_key: str) -> bool:
    return step_key in STEP_KEYS
