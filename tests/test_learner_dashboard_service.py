from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from lessonflow.crud import learner_profile_crud
from lessonflow.models.content.lesson_model import Language
from lessonflow.models.user.learner_profile_model import LearnerDailyActivity, LearnerProfile
from lessonflow.schemas.dashboard_schema import LearnerProfileCreate
from lessonflow.services import learner_dashboard_service as dashboard_module
from lessonflow.services.learner_dashboard_service import LearnerDashboardService
from lessonflow.services.lesson_progress_service import LessonProgressService
from lessonflow.services.results import Err, LessonError
from tests.utils import create_lesson, create_profile, create_user

NOW = datetime(2024, 5, 15, 9, 30)  # a Wednesday


@pytest.fixture()
def user(db_session):
    return create_user(db_session)


@pytest.fixture()
def service(db_session, user):
    return LearnerDashboardService(db=db_session, user_id=user.id)


@pytest.fixture()
def frozen_now(monkeypatch):
    monkeypatch.setattr(dashboard_module, "utcnow", lambda: NOW)
    return NOW


def test_create_profile_once(db_session, service, user):
    payload = LearnerProfileCreate(display_name="Ade", current_language=Language.YORUBA)

    profile = service.create_profile(payload).value
    assert profile.user_id == user.id
    assert profile.daily_goal_minutes == 10
    assert profile.total_xp == 0

    assert service.create_profile(payload) == Err(LessonError.PROFILE_EXISTS)


def test_overview_requires_profile(service):
    assert service.get_overview() == Err(LessonError.PROFILE_NOT_FOUND)


def test_overview_aggregates_progress(db_session, service, user):
    create_profile(db_session, user)
    first = create_lesson(db_session, title="Greetings", order_index=1)
    second = create_lesson(db_session, title="Numbers", order_index=2)
    create_lesson(db_session, title="Sannu", order_index=1, language=Language.HAUSA)

    LessonProgressService(db=db_session, user_id=user.id).complete_lesson(first.id, minutes_spent=15)

    overview = service.get_overview().value

    assert overview.stats.total_xp == 50
    assert overview.stats.completed_lessons_count == 1
    assert overview.stats.today_minutes == 15
    assert overview.stats.current_language == Language.YORUBA
    assert overview.next_lesson.id == second.id
    assert [entry.id for entry in overview.completed_lessons] == [first.id]
    assert len(overview.weekly_overview) == 7
    assert overview.weekly_overview[-1].completed is True
    assert overview.achievements == ["First Step"]


def test_overview_derives_achievements_when_none_stored(db_session, service, user):
    create_profile(db_session, user, current_streak=4, total_xp=150, completed_lessons_count=2)

    assert service.get_overview().value.achievements == ["First Step", "On Fire", "Perfect Score"]


def test_weekly_overview_labels_last_seven_days(db_session, service, user, frozen_now):
    profile = create_profile(db_session, user)
    profile.daily_activity.append(LearnerDailyActivity(activity_date=date(2024, 5, 13), minutes=20))
    profile.daily_activity.append(LearnerDailyActivity(activity_date=date(2024, 5, 1), minutes=5))
    db_session.commit()

    weekly = service.get_overview().value.weekly_overview

    assert [entry.day for entry in weekly] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
    assert [entry.minutes for entry in weekly] == [0, 0, 0, 0, 20, 0, 0]
    assert [entry.completed for entry in weekly].count(True) == 1


def test_update_daily_goal_and_language(db_session, service, user):
    create_profile(db_session, user)

    assert service.update_daily_goal(25).value.daily_goal_minutes == 25
    assert service.update_current_language(Language.IGBO).value.current_language == Language.IGBO


def test_updates_without_profile(service):
    assert service.update_daily_goal(25) == Err(LessonError.PROFILE_NOT_FOUND)
    assert service.update_current_language(Language.IGBO) == Err(LessonError.PROFILE_NOT_FOUND)
    assert service.mark_learning_session(5) == Err(LessonError.PROFILE_NOT_FOUND)


def test_first_session_starts_streak(db_session, service, user, frozen_now):
    create_profile(db_session, user)

    response = service.mark_learning_session(12).value

    assert response.streak_days == 1
    assert response.longest_streak == 1


def test_consecutive_day_extends_streak(db_session, service, user, frozen_now):
    create_profile(db_session, user, current_streak=2, longest_streak=2, last_active_date=NOW - timedelta(days=1))

    response = service.mark_learning_session(12).value

    assert response.streak_days == 3
    assert response.longest_streak == 3


def test_gap_resets_streak_but_keeps_longest(db_session, service, user, frozen_now):
    create_profile(db_session, user, current_streak=5, longest_streak=5, last_active_date=NOW - timedelta(days=3))

    response = service.mark_learning_session(12).value

    assert response.streak_days == 1
    assert response.longest_streak == 5


def test_same_day_session_keeps_streak(db_session, service, user, frozen_now):
    create_profile(db_session, user, current_streak=3, longest_streak=4, last_active_date=NOW - timedelta(hours=2))

    assert service.mark_learning_session(5).value.streak_days == 3


def test_sessions_accumulate_and_prune_old_days(db_session, service, user, frozen_now):
    profile = create_profile(db_session, user)
    profile.daily_activity.append(LearnerDailyActivity(activity_date=date(2024, 4, 1), minutes=30))
    db_session.commit()

    service.mark_learning_session(10)
    service.mark_learning_session(5)

    entries = db_session.query(LearnerDailyActivity).all()
    assert [(entry.activity_date, entry.minutes) for entry in entries] == [(date(2024, 5, 15), 15)]


def test_learning_session_locks_the_profile_row(db_session, service, user, frozen_now, monkeypatch):
    create_profile(db_session, user)
    original = learner_profile_crud.get_by_user_id
    lock_flags = []

    def recording_get_by_user_id(db, user_id, *, for_update=False):
        lock_flags.append(for_update)
        return original(db, user_id, for_update=for_update)

    monkeypatch.setattr(learner_profile_crud, "get_by_user_id", recording_get_by_user_id)

    service.mark_learning_session(10)

    assert lock_flags[0] is True


def test_locked_lookup_reloads_profile_state(db_session, user):
    profile = create_profile(db_session, user, total_xp=10)
    db_session.query(LearnerProfile).filter_by(id=profile.id).update({"total_xp": 40}, synchronize_session=False)

    assert profile.total_xp == 10
    locked = learner_profile_crud.get_by_user_id(db_session, user.id, for_update=True)
    assert locked is profile
    assert locked.total_xp == 40
