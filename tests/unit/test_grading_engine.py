import pytest

from examcore.core.constants import QuestionTypeEnum
from examcore.models.question import Question
from examcore.services.grading import grading_engine, normalize_answers
from examcore.schemas.exam_attempt import AnswerIn


def _mc(correct=1, points=2, options=None, qid=1):
    return Question(
        id=qid, exam_id=1, question_text="Capital of France?",
        question_type=QuestionTypeEnum.MULTIPLE_CHOICE,
        options=options or ["Berlin", "Paris", "Rome"],
        correct_option_index=correct, points=points,
    )


def _ident(answer="Photosynthesis", points=3, qid=2):
    return Question(
        id=qid, exam_id=1, question_text="Process plants use to make food?",
        question_type=QuestionTypeEnum.IDENTIFICATION,
        correct_answer=answer, points=points,
    )


@pytest.mark.parametrize("raw, expected", [
    ("1", True),
    (" 1 ", True),
    ("0", False),
    ("2", False),
    ("7", False),
    ("-1", False),
    ("Paris", False),
    ("0_1", False),
    ("\u0661", False),
    ("+1", True),
    ("1.0", False),
    ("", False),
    (None, False),
])
def test_multiple_choice_grading(raw, expected):
    graded = grading_engine.grade(_mc(), raw)
    assert graded.is_correct is expected
    assert graded.points_awarded == (2 if expected else 0)


@pytest.mark.parametrize("raw, expected", [
    ("Photosynthesis", True),
    ("  photosynthesis ", True),
    ("PHOTOSYNTHESIS", True),
    ("photo synthesis", False),
    ("", False),
    ("   ", False),
    (None, False),
])
def test_identification_grading_trims_and_ignores_case(raw, expected):
    graded = grading_engine.grade(_ident(), raw)
    assert graded.is_correct is expected
    assert graded.points_awarded == (3 if expected else 0)


def test_identification_key_is_trimmed_too():
    assert grading_engine.grade(_ident(answer="  Mitochondria "), "mitochondria").is_correct


def test_grade_questions_scores_unanswered_as_zero():
    questions = [_mc(qid=1), _ident(qid=2)]
    results = grading_engine.grade_questions(questions, {1: "1"})

    assert [r.number for r in results] == [1, 2]
    assert results[0].is_correct and results[0].points_awarded == 2
    assert results[0].correct_answer == "Paris"
    assert results[1].answer_text is None
    assert results[1].points_awarded == 0
    assert results[1].correct_answer == "Photosynthesis"


def test_normalize_answers_accepts_mapping_and_list():
    assert normalize_answers(None) == {}
    assert normalize_answers({"3": "a"}) == {3: "a"}
    assert normalize_answers([AnswerIn(question_id=4, answer_text="b")]) == {4: "b"}
