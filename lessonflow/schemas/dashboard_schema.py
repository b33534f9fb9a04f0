"""Schémas Pydantic du tableau de bord apprenant."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from lessonflow.models.content.lesson_model import Language, LessonLevel
from lessonflow.schemas.lesson_schema import LessonSummary


class LearnerProfileCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    current_language: Language
    daily_goal_minutes: int = Field(default=10, ge=1, le=120)


class LearnerProfileRead(BaseModel):
    id: int
    user_id: int
    display_name: str
    current_language: Language
    daily_goal_minutes: int
    total_xp: int
    current_streak: int
    longest_streak: int
    completed_lessons_count: int
    achievements: List[str] = Field(default_factory=list)
    last_active_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    current_language: Language
    streak_days: int
    total_xp: int
    daily_goal_minutes: int
    today_minutes: int
    completed_lessons_count: int


class CompletedLessonEntry(BaseModel):
    id: int
    title: str
    description: str
    level: LessonLevel
    completed_at: Optional[datetime] = None


class WeeklyOverviewEntry(BaseModel):
    day: str
    minutes: int
    completed: bool


class DashboardOverviewResponse(BaseModel):
    stats: DashboardStats
    next_lesson: Optional[LessonSummary] = None
    completed_lessons: List[CompletedLessonEntry]
    weekly_overview: List[WeeklyOverviewEntry]
    achievements: List[str]


class DailyGoalUpdate(BaseModel):
    minutes: int


class LanguageUpdate(BaseModel):
    language: str


class LearningSessionRequest(BaseModel):
    minutes: int


class LearningSessionResponse(BaseModel):
    streak_days: int
    longest_streak: int
