from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from pydantic import ValidationError

from lessonflow.api.v2.dependencies import get_current_learner, get_db
from lessonflow.api.v2.endpoints.learner_dashboard_router import (
    create_learner_profile,
    get_dashboard_overview,
    mark_learning_session,
    update_current_language,
    update_daily_goal,
)
from lessonflow.api.v2.endpoints.learner_lesson_router import (
    complete_lesson,
    complete_step,
    get_lesson_flow,
    get_lesson_overview,
    get_lesson_phrases,
    get_lesson_questions,
    get_lesson_review_exercises,
    get_lesson_steps,
    get_next_lesson,
)
from lessonflow.models.content.lesson_model import ContentStatus, Language
from lessonflow.models.content.question_model import QuestionType
from lessonflow.models.progress.lesson_progress_model import LessonStepProgress
from lessonflow.main import app
from lessonflow.schemas.dashboard_schema import (
    DailyGoalUpdate,
    LanguageUpdate,
    LearnerProfileCreate,
    LearningSessionRequest,
)
from lessonflow.schemas.progress_schema import LessonCompleteRequest, StepCompleteRequest
from tests.utils import create_lesson, create_phrase, create_profile, create_question, create_user


@pytest.fixture()
def user(db_session):
    return create_user(db_session, username="ade", email="ade@example.com")


@pytest.fixture()
def lesson(db_session):
    return create_lesson(db_session)


def test_steps_and_step_completion(db_session, user, lesson):
    steps = get_lesson_steps(lesson.id, db=db_session, current_user=user)
    assert steps.progress_percent == 0

    result = complete_step(
        lesson.id, "vocabulary", payload=StepCompleteRequest(score=90), db=db_session, current_user=user
    )
    assert result.progress_percent == 25
    assert result.steps[0].score == 90


def test_complete_step_without_body(db_session, user, lesson):
    result = complete_step(lesson.id, "practice", payload=None, db=db_session, current_user=user)
    assert result.steps[1].score == 0


def test_invalid_step_key_is_bad_request(db_session, user, lesson):
    with pytest.raises(HTTPException) as exc:
        complete_step(lesson.id, "grammar", payload=None, db=db_session, current_user=user)
    assert exc.value.status_code == 400
    assert exc.value.detail == "invalid_step_key"


def test_missing_step_row_is_not_found(db_session, user, lesson):
    get_lesson_steps(lesson.id, db=db_session, current_user=user)
    db_session.query(LessonStepProgress).filter_by(step_key="listening").delete()
    db_session.commit()

    with pytest.raises(HTTPException) as exc:
        complete_step(lesson.id, "listening", payload=None, db=db_session, current_user=user)
    assert exc.value.status_code == 404
    assert exc.value.detail == "step_not_found"


@pytest.fixture()
def client(db_session, user):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_learner] = lambda: user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.mark.parametrize("raw_score", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_score_is_rejected(db_session, client, lesson, raw_score):
    response = client.put(
        f"/api/v2/learner/lessons/{lesson.id}/steps/vocabulary/complete",
        content=f'{{"score": {raw_score}}}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "score"]
    assert db_session.query(LessonStepProgress).count() == 0


def test_step_score_must_be_finite():
    with pytest.raises(ValidationError):
        StepCompleteRequest(score=float("nan"))
    assert StepCompleteRequest(score=87.5).score == 87.5


def test_draft_lesson_is_not_found(db_session, user):
    draft = create_lesson(db_session, status=ContentStatus.DRAFT)
    with pytest.raises(HTTPException) as exc:
        get_lesson_steps(draft.id, db=db_session, current_user=user)
    assert exc.value.status_code == 404
    assert exc.value.detail == "lesson_not_found"


def test_complete_lesson_defaults(db_session, user, lesson):
    result = complete_lesson(lesson.id, payload=None, db=db_session, current_user=user)
    assert result.xp_earned == 50
    assert result.progress_percent == 100

    result = complete_lesson(
        lesson.id, payload=LessonCompleteRequest(xp_earned=120), db=db_session, current_user=user
    )
    assert result.xp_earned == 120


def test_next_lesson_requires_profile(db_session, user, lesson):
    with pytest.raises(HTTPException) as exc:
        get_next_lesson(db=db_session, current_user=user)
    assert exc.value.status_code == 404
    assert exc.value.detail == "learner_profile_not_found"


def test_next_lesson_without_lessons(db_session, user):
    create_profile(db_session, user, current_language=Language.HAUSA)
    with pytest.raises(HTTPException) as exc:
        get_next_lesson(db=db_session, current_user=user)
    assert exc.value.status_code == 404
    assert exc.value.detail == "no_published_lessons"


def test_next_lesson(db_session, user, lesson):
    create_profile(db_session, user)
    assert get_next_lesson(db=db_session, current_user=user).lesson.id == lesson.id


def test_overview_flow_and_phrases(db_session, user, lesson):
    phrase = create_phrase(db_session, lesson)
    lesson.blocks = [{"type": "phrase", "ref_id": phrase.id}]
    db_session.commit()

    overview = get_lesson_overview(lesson.id, db=db_session, current_user=user)
    assert overview.lesson.title == lesson.title

    flow = get_lesson_flow(lesson.id, db=db_session, current_user=user)
    assert flow.blocks[0]["data"]["id"] == phrase.id

    phrases = get_lesson_phrases(lesson.id, db=db_session, current_user=user)
    assert [item.id for item in phrases.phrases] == [phrase.id]


@pytest.mark.parametrize("question_type", [None, "essay", ""])
def test_questions_reject_unknown_type(db_session, user, lesson, question_type):
    with pytest.raises(HTTPException) as exc:
        get_lesson_questions(lesson.id, type=question_type, db=db_session, current_user=user)
    assert exc.value.status_code == 400
    assert exc.value.detail == "invalid_type"


def test_questions_and_review_exercises(db_session, user, lesson):
    phrase = create_phrase(db_session, lesson, text="Báwo ni")
    create_question(db_session, lesson, phrase, type=QuestionType.LISTENING)
    create_question(db_session, lesson, phrase, type=QuestionType.FILL_IN_THE_GAP)

    questions = get_lesson_questions(lesson.id, type="listening", db=db_session, current_user=user)
    assert questions.total == 1
    assert questions.questions[0].type == QuestionType.LISTENING

    exercises = get_lesson_review_exercises(lesson.id, db=db_session, current_user=user)
    assert exercises.total == 1
    assert exercises.exercises[0].words == ["Báwo", "ni"]


def test_profile_creation_conflict(db_session, user):
    payload = LearnerProfileCreate(display_name="Ade", current_language=Language.YORUBA)
    profile = create_learner_profile(payload, db=db_session, current_user=user)
    assert profile.display_name == "Ade"

    with pytest.raises(HTTPException) as exc:
        create_learner_profile(payload, db=db_session, current_user=user)
    assert exc.value.status_code == 409
    assert exc.value.detail == "profile_exists"


def test_dashboard_overview_requires_profile(db_session, user):
    with pytest.raises(HTTPException) as exc:
        get_dashboard_overview(db=db_session, current_user=user)
    assert exc.value.status_code == 404


@pytest.mark.parametrize("minutes", [0, 121, -5])
def test_daily_goal_bounds(db_session, user, minutes):
    create_profile(db_session, user)
    with pytest.raises(HTTPException) as exc:
        update_daily_goal(DailyGoalUpdate(minutes=minutes), db=db_session, current_user=user)
    assert exc.value.status_code == 400
    assert exc.value.detail == "invalid_minutes"


def test_daily_goal_and_language_updates(db_session, user):
    create_profile(db_session, user)

    assert update_daily_goal(DailyGoalUpdate(minutes=120), db=db_session, current_user=user) == {
        "daily_goal_minutes": 120
    }
    assert update_current_language(LanguageUpdate(language="igbo"), db=db_session, current_user=user) == {
        "current_language": "igbo"
    }


def test_unknown_language(db_session, user):
    create_profile(db_session, user)
    with pytest.raises(HTTPException) as exc:
        update_current_language(LanguageUpdate(language="swahili"), db=db_session, current_user=user)
    assert exc.value.status_code == 400
    assert exc.value.detail == "invalid_language"


def test_learning_session(db_session, user):
    create_profile(db_session, user)

    with pytest.raises(HTTPException) as exc:
        mark_learning_session(LearningSessionRequest(minutes=0), db=db_session, current_user=user)
    assert exc.value.detail == "invalid_minutes"

    response = mark_learning_session(LearningSessionRequest(minutes=20), db=db_session, current_user=user)
    assert response.streak_days == 1
