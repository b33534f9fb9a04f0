"""Schémas Pydantic pour la progression dans une leçon."""
from typing import List, Optional

from pydantic import BaseModel, Field

from lessonflow.models.progress.lesson_progress_model import ProgressStatus, StepStatus


class StepView(BaseModel):
    """Étape prête à l'affichage : définition statique + état sauvegardé."""

    id: int
    key: str
    title: str
    description: str
    status: StepStatus
    score: float = 0
    route: str


class LessonStepsResponse(BaseModel):
    steps: List[StepView]
    progress_percent: int


class StepCompleteRequest(BaseModel):
    score: Optional[float] = Field(default=None, allow_inf_nan=False)


class StepCompletionResponse(BaseModel):
    progress_percent: int
    status: ProgressStatus
    steps: List[StepView]


class LessonCompleteRequest(BaseModel):
    xp_earned: Optional[int] = Field(default=None, ge=0)
    minutes_spent: Optional[int] = Field(default=None, ge=0)


class LessonCompletionResponse(BaseModel):
    lesson_id: int
    xp_earned: int
    progress_percent: int
    status: ProgressStatus

