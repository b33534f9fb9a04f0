"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime

from lessonflow.models.content.lesson_model import ContentStatus, Language, Lesson, LessonLevel
from lessonflow.models.content.phrase_model import Phrase
from lessonflow.models.content.proverb_model import Proverb
from lessonflow.models.content.question_model import Question, QuestionType
from lessonflow.models.user.learner_profile_model import LearnerProfile
from lessonflow.models.user.user_model import User, UserRole


def create_user(db, **kwargs) -> User:
    defaults = {
        "username": "learner",
        "email": "learner@example.com",
        "role": UserRole.LEARNER,
        "is_active": True,
        "created_at": datetime.utcnow(),
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_profile(db, user: User, **kwargs) -> LearnerProfile:
    defaults = {
        "user_id": user.id,
        "display_name": user.username,
        "current_language": Language.YORUBA,
        "daily_goal_minutes": 10,
        "total_xp": 0,
        "current_streak": 0,
        "longest_streak": 0,
        "completed_lessons_count": 0,
        "achievements": [],
    }
    defaults.update(kwargs)
    profile = LearnerProfile(**defaults)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def create_lesson(db, **kwargs) -> Lesson:
    defaults = {
        "title": "Greetings",
        "language": Language.YORUBA,
        "level": LessonLevel.BEGINNER,
        "order_index": 1,
        "description": "Say hello",
        "topics": ["greetings"],
        "blocks": [],
        "status": ContentStatus.PUBLISHED,
    }
    defaults.update(kwargs)
    lesson = Lesson(**defaults)
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


def create_phrase(db, lesson: Lesson | None = None, **kwargs) -> Phrase:
    defaults = {
        "language": Language.YORUBA,
        "text": "Ẹ káàárọ̀",
        "translation": "Good morning",
        "pronunciation": "eh kah-ah-roh",
        "explanation": "Respectful morning greeting",
        "examples": [],
        "difficulty": 1,
        "status": ContentStatus.PUBLISHED,
    }
    defaults.update(kwargs)
    phrase = Phrase(**defaults)
    if lesson is not None:
        phrase.lessons.append(lesson)
    db.add(phrase)
    db.commit()
    db.refresh(phrase)
    return phrase


def create_proverb(db, **kwargs) -> Proverb:
    defaults = {
        "language": Language.YORUBA,
        "text": "Àgbà kì í wà lọ́jà, kí orí ọmọ tuntun wọ́",
        "translation": "Elders do not stand by while things go wrong",
        "context_note": "Responsibility of elders",
        "status": ContentStatus.PUBLISHED,
    }
    defaults.update(kwargs)
    proverb = Proverb(**defaults)
    db.add(proverb)
    db.commit()
    db.refresh(proverb)
    return proverb


def create_question(db, lesson: Lesson, phrase: Phrase | None = None, **kwargs) -> Question:
    defaults = {
        "lesson_id": lesson.id,
        "phrase_id": phrase.id if phrase is not None else None,
        "type": QuestionType.MULTIPLE_CHOICE,
        "prompt_template": "What does '{phrase}' mean?",
        "options": ["Good morning", "Good night", "Thank you", "Welcome"],
        "correct_index": 0,
        "explanation": "Morning greeting",
        "status": ContentStatus.PUBLISHED,
    }
    defaults.update(kwargs)
    question = Question(**defaults)
    db.add(question)
    db.commit()
    db.refresh(question)
    return question
