"""Traduction des résultats métier en réponses HTTP."""
from typing import TypeVar

from fastapi import HTTPException, status

from lessonflow.services.results import Err, LessonError, Result

T = TypeVar("T")

ERROR_STATUS_CODES = {
    LessonError.LESSON_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LessonError.STEP_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LessonError.INVALID_STEP_KEY: status.HTTP_400_BAD_REQUEST,
    LessonError.PROFILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LessonError.PROFILE_EXISTS: status.HTTP_409_CONFLICT,
}

# Tokens renvoyés au frontend quand ils diffèrent du nom interne.
ERROR_DETAILS = {
    LessonError.PROFILE_NOT_FOUND: "learner_profile_not_found",
}


def unwrap(result: Result[T]) -> T:
    """Renvoie la valeur d'un ``Ok`` ou lève l'``HTTPException`` correspondant à l'``Err``."""
    if isinstance(result, Err):
        raise HTTPException(
            status_code=ERROR_STATUS_CODES[result.kind],
            detail=ERROR_DETAILS.get(result.kind, result.kind.value),
        )
    return result.value
