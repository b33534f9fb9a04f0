"""Endpoints du tableau de bord apprenant et du profil."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from lessonflow.api.v2.dependencies import get_db, get_current_learner
from lessonflow.api.v2.errors import unwrap
from lessonflow.models.content.lesson_model import Language
from lessonflow.models.user.user_model import User
from lessonflow.schemas.dashboard_schema import (
    DailyGoalUpdate,
    DashboardOverviewResponse,
    LanguageUpdate,
    LearnerProfileCreate,
    LearnerProfileRead,
    LearningSessionRequest,
    LearningSessionResponse,
)
from lessonflow.services.learner_dashboard_service import LearnerDashboardService

router = APIRouter()
profile_router = APIRouter()

DAILY_GOAL_MIN_MINUTES = 1
DAILY_GOAL_MAX_MINUTES = 120


@profile_router.post(
    "",
    response_model=LearnerProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Créer le profil apprenant",
)
def create_learner_profile(
    payload: LearnerProfileCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
):
    return unwrap(LearnerDashboardService(db=db, user_id=current_user.id).create_profile(payload))


@router.get("/overview", response_model=DashboardOverviewResponse, summary="Vue d'ensemble du tableau de bord")
def get_dashboard_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> DashboardOverviewResponse:
    return unwrap(LearnerDashboardService(db=db, user_id=current_user.id).get_overview())


@router.put("/daily-goal", response_model=dict, summary="Modifier l'objectif quotidien")
def update_daily_goal(
    payload: DailyGoalUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> dict:
    if not DAILY_GOAL_MIN_MINUTES <= payload.minutes <= DAILY_GOAL_MAX_MINUTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_minutes")

    profile = unwrap(LearnerDashboardService(db=db, user_id=current_user.id).update_daily_goal(payload.minutes))
    return {"daily_goal_minutes": profile.daily_goal_minutes}


@router.put("/language", response_model=dict, summary="Changer la langue étudiée")
def update_current_language(
    payload: LanguageUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> dict:
    try:
        language = Language(payload.language)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_language")

    profile = unwrap(LearnerDashboardService(db=db, user_id=current_user.id).update_current_language(language))
    return {"current_language": profile.current_language.value}


@router.post("/session", response_model=LearningSessionResponse, summary="Enregistrer une session d'étude")
def mark_learning_session(
    payload: LearningSessionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LearningSessionResponse:
    if payload.minutes < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_minutes")

    return unwrap(LearnerDashboardService(db=db, user_id=current_user.id).mark_learning_session(payload.minutes))
