import pytest
from pydantic import ValidationError

from examcore.core.constants import QuestionTypeEnum
from examcore.schemas.question import IdentificationKey, MultipleChoiceKey, QuestionCreate


def test_answer_key_is_discriminated_by_kind():
    q = QuestionCreate.model_validate({
        "question_text": "2 + 2?",
        "points": 2,
        "answer_key": {"kind": "multiple_choice", "options": ["3", "4"], "correct_option_index": 1},
    })
    assert isinstance(q.answer_key, MultipleChoiceKey)
    assert q.answer_key.to_columns()["question_type"] == QuestionTypeEnum.MULTIPLE_CHOICE

    q = QuestionCreate.model_validate({
        "question_text": "Largest planet?",
        "answer_key": {"kind": "identification", "correct_answer": "Jupiter"},
    })
    assert isinstance(q.answer_key, IdentificationKey)
    assert q.points == 1
    assert q.answer_key.to_columns()["options"] is None


@pytest.mark.parametrize("key", [
    {"kind": "multiple_choice", "options": ["only"], "correct_option_index": 0},
    {"kind": "multiple_choice", "options": ["a", "b"], "correct_option_index": 2},
    {"kind": "multiple_choice", "options": ["a", "b"], "correct_option_index": -1},
    {"kind": "identification", "correct_answer": "   "},
    {"kind": "essay", "correct_answer": "anything"},
])
def test_invalid_answer_keys_are_rejected(key):
    with pytest.raises(ValidationError):
        QuestionCreate.model_validate({"question_text": "Q", "answer_key": key})


def test_points_must_be_positive():
    with pytest.raises(ValidationError):
        QuestionCreate.model_validate({
            "question_text": "Q", "points": 0,
            "answer_key": {"kind": "identification", "correct_answer": "x"},
        })
