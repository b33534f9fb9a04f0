"""Assemblage du contenu d'une leçon pour l'apprenant (flow, phrases, exercices)."""
import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from lessonflow.crud import content_crud, lesson_crud
from lessonflow.models.content.lesson_model import BlockType, ContentStatus, Lesson
from lessonflow.models.content.phrase_model import Phrase
from lessonflow.models.content.proverb_model import Proverb
from lessonflow.models.content.question_model import Question, QuestionType
from lessonflow.schemas.lesson_schema import (
    ExerciseQuestion,
    LessonFlowResponse,
    LessonRead,
    PhraseRead,
    PhraseSummary,
    ReviewExercise,
)
from lessonflow.services.results import Err, LessonError, Ok, Result

logger = logging.getLogger(__name__)

QUESTION_BLOCK_TYPES = {BlockType.QUESTION.value, BlockType.LISTENING.value}


def _coerce_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _valid_order(order: Any, size: int) -> Optional[List[int]]:
    """Return ``order`` as ints if it is a permutation of ``range(size)``."""
    if not isinstance(order, (list, tuple)) or len(order) != size:
        return None
    indices = [_coerce_index(value) for value in order]
    if any(index is None or not 0 <= index < size for index in indices):
        return None
    if len(set(indices)) != len(indices):
        return None
    return indices


def build_review_fallback(
    review_data: Optional[Mapping[str, Any]],
    phrase: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Construit un exercice « remettre les mots dans l'ordre ».

    ``review_data`` is the authored content (sentence, words, correct_order,
    meaning); ``phrase`` supplies ``text``/``translation`` when the authored
    sentence or meaning is empty. Malformed orders fall back to the identity.
    """
    review = review_data or {}
    fallback = phrase or {}

    sentence = str(review.get("sentence") or fallback.get("text") or "").strip()
    meaning = str(review.get("meaning") or fallback.get("translation") or "").strip()

    raw_words = review.get("words")
    authored_words = (
        [str(word).strip() for word in raw_words if word is not None and str(word).strip()]
        if isinstance(raw_words, (list, tuple))
        else []
    )
    words = authored_words if len(authored_words) > 1 else sentence.split()

    correct_order = _valid_order(review.get("correct_order"), len(words))
    if correct_order is None:
        correct_order = list(range(len(words)))

    return {"sentence": sentence, "words": words, "correct_order": correct_order, "meaning": meaning}


def render_prompt(template: Optional[str], phrase_text: Optional[str]) -> str:
    return (template or "").replace("{phrase}", phrase_text or "", 1)


def _phrase_fallback(phrase: Optional[Phrase]) -> Optional[Dict[str, str]]:
    if phrase is None:
        return None
    return {"text": phrase.text, "translation": phrase.translation}


def _proverb_payload(proverb: Proverb) -> Dict[str, Any]:
    return {
        "id": proverb.id,
        "text": proverb.text,
        "translation": proverb.translation,
        "context_note": proverb.context_note,
    }


def _question_payload(question: Question, phrase: Optional[Phrase]) -> Dict[str, Any]:
    interaction_data: Dict[str, Any] = {}
    if question.type == QuestionType.FILL_IN_THE_GAP:
        interaction_data = build_review_fallback(question.review_data, _phrase_fallback(phrase))

    return {
        "id": question.id,
        "type": question.type.value,
        "subtype": question.subtype,
        "prompt": render_prompt(question.prompt_template, phrase.text if phrase else None),
        "options": list(question.options or []),
        "correct_index": question.correct_index,
        "explanation": question.explanation,
        "phrase": PhraseRead.model_validate(phrase).model_dump() if phrase else None,
        "interaction_data": interaction_data,
    }


class LessonContentService:
    def __init__(self, db: Session):
        self.db = db

    def _get_published_lesson(self, lesson_id: int) -> Optional[Lesson]:
        return lesson_crud.get_published_lesson(self.db, lesson_id)

    def get_lesson_flow(self, lesson_id: int) -> Result[LessonFlowResponse]:
        """Résout chaque bloc de la leçon ; les blocs dont la référence manque sont ignorés."""
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        blocks = list(lesson.blocks or [])
        question_ids = [b.get("ref_id") for b in blocks if b.get("type") in QUESTION_BLOCK_TYPES]
        proverb_ids = [b.get("ref_id") for b in blocks if b.get("type") == BlockType.PROVERB.value]
        manual_phrase_ids = [b.get("ref_id") for b in blocks if b.get("type") == BlockType.PHRASE.value]

        questions = {q.id: q for q in content_crud.get_questions_by_ids(self.db, question_ids)}
        proverbs = {p.id: p for p in content_crud.get_proverbs_by_ids(self.db, proverb_ids)}
        phrase_ids = manual_phrase_ids + [q.phrase_id for q in questions.values()]
        phrases = {p.id: p for p in content_crud.get_phrases_by_ids(self.db, phrase_ids)}

        populated: List[Dict[str, Any]] = []
        for block in blocks:
            block_type = block.get("type")
            if block_type == BlockType.TEXT.value:
                populated.append(dict(block))
                continue

            ref_id = block.get("ref_id")
            if block_type == BlockType.PHRASE.value:
                phrase = phrases.get(ref_id)
                if phrase is not None:
                    populated.append({**block, "data": PhraseRead.model_validate(phrase).model_dump()})
            elif block_type == BlockType.PROVERB.value:
                proverb = proverbs.get(ref_id)
                if proverb is not None:
                    populated.append({**block, "data": _proverb_payload(proverb)})
            elif block_type in QUESTION_BLOCK_TYPES:
                question = questions.get(ref_id)
                if question is not None:
                    phrase = phrases.get(question.phrase_id)
                    populated.append({**block, "data": _question_payload(question, phrase)})
            else:
                logger.warning("Bloc de type inconnu '%s' ignoré (leçon %s).", block_type, lesson_id)

        return Ok(LessonFlowResponse(lesson=LessonRead.model_validate(lesson), blocks=populated))

    def get_lesson_phrases(self, lesson_id: int) -> Result[List[Phrase]]:
        """Phrases publiées de la leçon + phrases citées par ses questions, sans doublon."""
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        lesson_phrases = content_crud.list_lesson_phrases(self.db, lesson.id, status=ContentStatus.PUBLISHED)

        question_ids = [b.get("ref_id") for b in (lesson.blocks or []) if b.get("type") in QUESTION_BLOCK_TYPES]
        referenced: List[Phrase] = []
        if question_ids:
            questions = content_crud.get_questions_by_ids(self.db, question_ids)
            referenced = content_crud.get_phrases_by_ids(self.db, [q.phrase_id for q in questions])

        unique = {phrase.id: phrase for phrase in [*lesson_phrases, *referenced]}
        return Ok(sorted(unique.values(), key=lambda p: (p.created_at, p.id)))

    def _published_questions_with_phrases(
        self, lesson_id: int, question_type: QuestionType
    ) -> List[tuple[Question, Phrase]]:
        questions = content_crud.list_questions(
            self.db, lesson_id=lesson_id, question_type=question_type, status=ContentStatus.PUBLISHED
        )
        phrases = {p.id: p for p in content_crud.get_phrases_by_ids(self.db, [q.phrase_id for q in questions])}
        pairs = []
        for question in questions:
            phrase = phrases.get(question.phrase_id)
            if phrase is None:
                logger.warning("Question %s sans phrase associée : ignorée.", question.id)
                continue
            pairs.append((question, phrase))
        return pairs

    def get_lesson_questions(self, lesson_id: int, question_type: QuestionType) -> Result[List[ExerciseQuestion]]:
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        return Ok(
            [
                ExerciseQuestion(
                    id=question.id,
                    type=question.type,
                    prompt=render_prompt(question.prompt_template, phrase.text),
                    options=list(question.options or []),
                    correct_index=question.correct_index,
                    explanation=question.explanation,
                    phrase=PhraseSummary.model_validate(phrase),
                )
                for question, phrase in self._published_questions_with_phrases(lesson.id, question_type)
            ]
        )

    def get_lesson_review_exercises(self, lesson_id: int) -> Result[List[ReviewExercise]]:
        lesson = self._get_published_lesson(lesson_id)
        if lesson is None:
            return Err(LessonError.LESSON_NOT_FOUND)

        exercises: List[ReviewExercise] = []
        for question, phrase in self._published_questions_with_phrases(lesson.id, QuestionType.FILL_IN_THE_GAP):
            review = build_review_fallback(question.review_data, _phrase_fallback(phrase))
            exercises.append(
                ReviewExercise(
                    id=question.id,
                    prompt=render_prompt(question.prompt_template, phrase.text),
                    phrase=PhraseSummary.model_validate(phrase),
                    **review,
                )
            )
        return Ok(exercises)
