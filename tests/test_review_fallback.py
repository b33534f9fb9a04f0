import pytest

from lessonflow.services.lesson_content_service import build_review_fallback, render_prompt


PHRASE = {"text": "Mo fẹ́ jẹun", "translation": "I want to eat"}


def test_valid_permutation_is_kept():
    review = build_review_fallback({"sentence": "a b c", "correct_order": [0, 2, 1]})
    assert review["words"] == ["a", "b", "c"]
    assert review["correct_order"] == [0, 2, 1]


@pytest.mark.parametrize(
    "order",
    [
        [0, 0, 1],
        [0, 1, 3],
        [0, 1],
        [0, 1, 2, 3],
        [-1, 0, 1],
        [0, "1", 2],
        [0, 1.5, 2],
        [True, 0, 2],
        "0,1,2",
        None,
    ],
)
def test_malformed_order_falls_back_to_identity(order):
    review = build_review_fallback({"sentence": "a b c", "correct_order": order})
    assert review["correct_order"] == [0, 1, 2]


def test_integral_floats_are_accepted():
    review = build_review_fallback({"sentence": "a b c", "correct_order": [2.0, 0.0, 1.0]})
    assert review["correct_order"] == [2, 0, 1]


def test_authored_content_wins_over_phrase():
    review = build_review_fallback(
        {"sentence": "Ẹ káàbọ̀ o", "words": ["Ẹ", "káàbọ̀", "o"], "meaning": "Welcome"},
        PHRASE,
    )
    assert review == {
        "sentence": "Ẹ káàbọ̀ o",
        "words": ["Ẹ", "káàbọ̀", "o"],
        "correct_order": [0, 1, 2],
        "meaning": "Welcome",
    }


def test_phrase_fills_empty_sentence_and_meaning():
    review = build_review_fallback({"sentence": "", "meaning": None}, PHRASE)
    assert review["sentence"] == "Mo fẹ́ jẹun"
    assert review["meaning"] == "I want to eat"
    assert review["words"] == ["Mo", "fẹ́", "jẹun"]


def test_single_authored_word_is_replaced_by_sentence_split():
    review = build_review_fallback({"sentence": "Báwo ni", "words": ["Báwo"]})
    assert review["words"] == ["Báwo", "ni"]


def test_missing_everything_yields_empty_exercise():
    assert build_review_fallback(None) == {"sentence": "", "words": [], "correct_order": [], "meaning": ""}


def test_input_is_not_mutated():
    data = {"sentence": "a b", "words": ["b", "a"], "correct_order": [1, 0]}
    snapshot = {key: list(value) if isinstance(value, list) else value for key, value in data.items()}
    assert build_review_fallback(data) == build_review_fallback(data)
    assert data == snapshot


def test_render_prompt_replaces_first_placeholder():
    assert render_prompt("What does '{phrase}' mean? {phrase}", "Ẹ ṣé") == "What does 'Ẹ ṣé' mean? {phrase}"
    assert render_prompt(None, "x") == ""
