"""Schémas Pydantic exposés aux apprenants pour les leçons et leur contenu."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from lessonflow.models.content.lesson_model import ContentStatus, Language, LessonLevel
from lessonflow.models.content.question_model import QuestionType
from lessonflow.models.progress.lesson_progress_model import ProgressStatus
from lessonflow.schemas.progress_schema import StepView


class LessonSummary(BaseModel):
    id: int
    title: str
    description: str
    language: Language
    level: LessonLevel

    class Config:
        from_attributes = True


class LessonRead(LessonSummary):
    order_index: int
    topics: List[str] = Field(default_factory=list)
    status: ContentStatus
    published_at: Optional[datetime] = None


class NextLessonResponse(BaseModel):
    lesson: LessonSummary


class LessonOverviewLesson(LessonSummary):
    progress_percent: int
    status: ProgressStatus


class ComingNextEntry(BaseModel):
    id: int
    title: str


class LessonOverviewResponse(BaseModel):
    lesson: LessonOverviewLesson
    steps: List[StepView]
    coming_next: List[ComingNextEntry]


class PhraseRead(BaseModel):
    id: int
    text: str
    translation: str
    pronunciation: str
    explanation: str
    examples: List[Dict[str, str]] = Field(default_factory=list)
    difficulty: int
    audio: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class PhraseSummary(BaseModel):
    id: int
    text: str
    translation: str
    pronunciation: str
    explanation: str
    audio: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class LessonPhrasesResponse(BaseModel):
    phrases: List[PhraseRead]


class ExerciseQuestion(BaseModel):
    id: int
    type: QuestionType
    prompt: str
    options: List[str] = Field(default_factory=list)
    correct_index: int
    explanation: str
    phrase: PhraseSummary


class LessonQuestionsResponse(BaseModel):
    total: int
    questions: List[ExerciseQuestion]


class ReviewExercise(BaseModel):
    id: int
    prompt: str
    sentence: str
    words: List[str]
    correct_order: List[int]
    meaning: str
    phrase: PhraseSummary


class LessonReviewExercisesResponse(BaseModel):
    total: int
    exercises: List[ReviewExercise]


class LessonFlowResponse(BaseModel):
    lesson: LessonRead
    # Blocs résolus : {"type": ..., "content"|"ref_id": ..., "data": {...}}
    blocks: List[Dict[str, Any]]
