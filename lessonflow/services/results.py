"""Résultats métier typés renvoyés par les services apprenant.

Expected outcomes (unknown lesson, bad step key...) come back as ``Err`` so
that routers can branch on them; database failures still raise.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class LessonError(str, enum.Enum):
    LESSON_NOT_FOUND = "lesson_not_found"
    INVALID_STEP_KEY = "invalid_step_key"
    STEP_NOT_FOUND = "step_not_found"
    PROFILE_NOT_FOUND = "profile_not_found"
    PROFILE_EXISTS = "profile_exists"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: LessonError


Result = Union[Ok[T], Err]
