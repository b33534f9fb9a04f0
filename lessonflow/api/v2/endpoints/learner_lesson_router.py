"""Endpoints apprenant : parcours d'une leçon et progression par étapes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from lessonflow.api.v2.dependencies import get_db, get_current_learner
from lessonflow.api.v2.errors import unwrap
from lessonflow.models.content.question_model import QuestionType
from lessonflow.models.user.user_model import User
from lessonflow.schemas.lesson_schema import (
    LessonFlowResponse,
    LessonOverviewResponse,
    LessonPhrasesResponse,
    LessonQuestionsResponse,
    LessonReviewExercisesResponse,
    LessonSummary,
    NextLessonResponse,
    PhraseRead,
)
from lessonflow.schemas.progress_schema import (
    LessonCompleteRequest,
    LessonCompletionResponse,
    LessonStepsResponse,
    StepCompleteRequest,
    StepCompletionResponse,
)
from lessonflow.services.lesson_content_service import LessonContentService
from lessonflow.services.lesson_progress_service import LessonProgressService

router = APIRouter()


@router.get("/next", response_model=NextLessonResponse, summary="Prochaine leçon à suivre")
def get_next_lesson(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> NextLessonResponse:
    lesson = unwrap(LessonProgressService(db=db, user_id=current_user.id).get_next_lesson())
    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no_published_lessons")
    return NextLessonResponse(lesson=LessonSummary.model_validate(lesson))


@router.get("/{lesson_id}/flow", response_model=LessonFlowResponse, summary="Contenu résolu de la leçon")
def get_lesson_flow(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonFlowResponse:
    return unwrap(LessonContentService(db=db).get_lesson_flow(lesson_id))


@router.get("/{lesson_id}/overview", response_model=LessonOverviewResponse, summary="Vue d'ensemble de la leçon")
def get_lesson_overview(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonOverviewResponse:
    """Progression, étapes et leçons suivantes (même langue)."""
    return unwrap(LessonProgressService(db=db, user_id=current_user.id).get_lesson_overview(lesson_id))


@router.get("/{lesson_id}/steps", response_model=LessonStepsResponse, summary="Étapes de la leçon")
def get_lesson_steps(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonStepsResponse:
    return unwrap(LessonProgressService(db=db, user_id=current_user.id).get_lesson_steps(lesson_id))


@router.get("/{lesson_id}/phrases", response_model=LessonPhrasesResponse, summary="Phrases de la leçon")
def get_lesson_phrases(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonPhrasesResponse:
    phrases = unwrap(LessonContentService(db=db).get_lesson_phrases(lesson_id))
    return LessonPhrasesResponse(phrases=[PhraseRead.model_validate(phrase) for phrase in phrases])


@router.get("/{lesson_id}/questions", response_model=LessonQuestionsResponse, summary="Questions d'un type donné")
def get_lesson_questions(
    lesson_id: int,
    type: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonQuestionsResponse:
    try:
        question_type = QuestionType(type)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_type")

    questions = unwrap(LessonContentService(db=db).get_lesson_questions(lesson_id, question_type))
    return LessonQuestionsResponse(total=len(questions), questions=questions)


@router.get(
    "/{lesson_id}/review-exercises",
    response_model=LessonReviewExercisesResponse,
    summary="Exercices de remise en ordre",
)
def get_lesson_review_exercises(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonReviewExercisesResponse:
    exercises = unwrap(LessonContentService(db=db).get_lesson_review_exercises(lesson_id))
    return LessonReviewExercisesResponse(total=len(exercises), exercises=exercises)


@router.put(
    "/{lesson_id}/steps/{step_key}/complete",
    response_model=StepCompletionResponse,
    summary="Terminer une étape",
)
def complete_step(
    lesson_id: int,
    step_key: str,
    payload: Optional[StepCompleteRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> StepCompletionResponse:
    """Marque l'étape comme terminée et déverrouille l'étape suivante."""
    score = payload.score if payload is not None else None
    service = LessonProgressService(db=db, user_id=current_user.id)
    return unwrap(service.complete_step(lesson_id, step_key, score=score))


@router.post("/{lesson_id}/complete", response_model=LessonCompletionResponse, summary="Terminer la leçon")
def complete_lesson(
    lesson_id: int,
    payload: Optional[LessonCompleteRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_learner),
) -> LessonCompletionResponse:
    """Termine toutes les étapes ; la première complétion crédite le profil apprenant."""
    payload = payload or LessonCompleteRequest()
    service = LessonProgressService(db=db, user_id=current_user.id)
    return unwrap(
        service.complete_lesson(lesson_id, xp_earned=payload.xp_earned, minutes_spent=payload.minutes_spent)
    )
