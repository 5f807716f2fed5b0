from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from examcore.core.constants import AttemptStatusEnum, StudentExamStatusEnum
from examcore.core.exceptions import (
    AlreadyAttempted, AttemptClosed, AttemptNotFound, CannotUnpublish, DeadlinePassed,
    ExamHasNoQuestions, ExamNotFound, NotPublished, QuestionNotFound,
)
from examcore.crud.student_answer import student_answer as crud_student_answer
from examcore.schemas.exam import ExamCreate
from examcore.services.exam import exam_service
from examcore.services.exam_lifecycle import exam_lifecycle
from tests.helpers.factories import T0, id_question, make_course, make_exam, mc_question


def test_start_answer_and_submit(db_session: Session):
    print("\n[TEST] Start, answer and submit an exam")
    course = make_course(db_session, students=[1])
    exam, questions = make_exam(db_session, course.id, questions=[
        mc_question(correct=1, points=2), id_question("Paris", points=3), mc_question(correct=0, points=5),
    ])
    q_mc, q_id, q_last = questions

    attempt = exam_lifecycle.start_attempt(db_session, student_id=1, exam_id=exam.id, now=T0)
    assert attempt.status == AttemptStatusEnum.IN_PROGRESS
    assert attempt.started_at == T0
    assert attempt.submitted_at is None
    assert exam_lifecycle.get_attempt_state(db_session, 1, exam.id) == StudentExamStatusEnum.IN_PROGRESS

    saved = exam_lifecycle.record_answer(db_session, 1, exam.id, q_mc.id, "1", now=T0 + timedelta(minutes=2))
    assert saved.is_correct is None
    assert saved.answer_text == "1"

    report = exam_lifecycle.submit_attempt(
        db_session, 1, exam.id, answers={q_id.id: "  paris "}, now=T0 + timedelta(minutes=5)
    )
    assert report.status == AttemptStatusEnum.COMPLETED
    assert report.submitted_at == T0 + timedelta(minutes=5)
    assert report.total_score == 5
    assert report.max_score == 10
    assert report.percentage == 50.0

    stored = crud_student_answer.get_map(db_session, student_id=1, exam_id=exam.id)
    assert stored[q_mc.id].is_correct is True
    assert stored[q_id.id].is_correct is True
    assert q_last.id not in stored
    assert exam_lifecycle.get_attempt_state(db_session, 1, exam.id) == StudentExamStatusEnum.COMPLETED
    print("[OK] Completed with 5/10")


def test_start_rejections(db_session: Session):
    course = make_course(db_session, students=[1])
    draft, _ = make_exam(db_session, course.id, published=False)

    with pytest.raises(ExamNotFound):
        exam_lifecycle.start_attempt(db_session, 1, 9999, now=T0)

    with pytest.raises(NotPublished):
        exam_lifecycle.start_attempt(db_session, 1, draft.id, now=T0)

    closed, _ = make_exam(db_session, course.id, deadline=T0)
    with pytest.raises(DeadlinePassed):
        exam_lifecycle.start_attempt(db_session, 1, closed.id, now=T0)

    exam, _ = make_exam(db_session, course.id)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    with pytest.raises(AlreadyAttempted):
        exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0 + timedelta(seconds=1))

    exam_lifecycle.submit_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=1))
    with pytest.raises(AlreadyAttempted):
        exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=2))

    assert exam_lifecycle.get_attempt_state(db_session, 2, exam.id) == StudentExamStatusEnum.NOT_STARTED


def test_record_answers_rejections(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id, duration_minutes=10)
    other_exam, (foreign_question,) = make_exam(db_session, course.id)

    with pytest.raises(AttemptNotFound):
        exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0)

    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    with pytest.raises(QuestionNotFound):
        exam_lifecycle.record_answer(db_session, 1, exam.id, foreign_question.id, "0", now=T0)
    assert exam_lifecycle.get_recorded_answers(db_session, 1, exam.id) == []

    with pytest.raises(DeadlinePassed):
        exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0 + timedelta(minutes=10))

    exam_lifecycle.finalize_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=11), reason=AttemptStatusEnum.TIMEOUT)
    with pytest.raises(AttemptClosed):
        exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0 + timedelta(minutes=12))


def test_answers_can_be_overwritten_while_open(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id, questions=[mc_question(correct=2, points=4)])

    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0 + timedelta(minutes=1))
    exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "2", now=T0 + timedelta(minutes=2))

    answers = exam_lifecycle.get_recorded_answers(db_session, 1, exam.id)
    assert len(answers) == 1
    assert answers[0].answer_text == "2"

    report = exam_lifecycle.submit_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=3))
    assert report.total_score == 4


def test_submit_with_unknown_question_is_rejected(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)

    with pytest.raises(QuestionNotFound):
        exam_lifecycle.submit_attempt(db_session, 1, exam.id, answers={424242: "0"}, now=T0)
    assert exam_lifecycle.get_attempt(db_session, 1, exam.id).status == AttemptStatusEnum.IN_PROGRESS


def test_finalize_is_idempotent(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id, questions=[mc_question(correct=0, points=3)])
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)

    first = exam_lifecycle.finalize_attempt(db_session, 1, exam.id, answers={question.id: "0"}, now=T0 + timedelta(minutes=1))
    second = exam_lifecycle.finalize_attempt(
        db_session, 1, exam.id, answers={question.id: "3"}, now=T0 + timedelta(minutes=9),
        reason=AttemptStatusEnum.TIMEOUT,
    )
    third = exam_lifecycle.submit_attempt(db_session, 1, exam.id, now=T0 + timedelta(hours=5))

    assert first.model_dump_json() == second.model_dump_json() == third.model_dump_json()
    assert second.status == AttemptStatusEnum.COMPLETED
    assert second.total_score == 3


def test_finalize_without_attempt(db_session: Session):
    course = make_course(db_session)
    exam, _ = make_exam(db_session, course.id)
    with pytest.raises(AttemptNotFound):
        exam_lifecycle.finalize_attempt(db_session, 1, exam.id, now=T0)


def test_finalize_rejects_non_terminal_reason(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    with pytest.raises(ValueError):
        exam_lifecycle.finalize_attempt(db_session, 1, exam.id, now=T0, reason=AttemptStatusEnum.IN_PROGRESS)


def test_submit_after_expiry_is_rejected(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id, duration_minutes=30)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)

    with pytest.raises(DeadlinePassed):
        exam_lifecycle.submit_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=30))
    assert exam_lifecycle.get_attempt(db_session, 1, exam.id).status == AttemptStatusEnum.IN_PROGRESS


def test_max_score_covers_unanswered_questions(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id, questions=[
        mc_question(points=2), id_question("Oxygen", points=3), mc_question(points=5),
    ])
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    report = exam_lifecycle.submit_attempt(db_session, 1, exam.id, now=T0 + timedelta(minutes=1))

    assert report.max_score == 10
    assert report.total_score == 0
    assert 0 <= report.total_score <= report.max_score


def test_publish_and_unpublish(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id, published=False)

    published = exam_lifecycle.set_published(db_session, exam.id, True, now=T0)
    assert published.published is True
    assert exam_lifecycle.set_published(db_session, exam.id, True, now=T0).published is True

    assert exam_lifecycle.set_published(db_session, exam.id, False, now=T0).published is False
    exam_lifecycle.set_published(db_session, exam.id, True, now=T0)

    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    with pytest.raises(CannotUnpublish):
        exam_lifecycle.set_published(db_session, exam.id, False, now=T0)
    assert exam_lifecycle.set_published(db_session, exam.id, True, now=T0).published is True


def test_publish_requires_questions(db_session: Session):
    course = make_course(db_session)
    exam = exam_service.create_exam(
        db_session, exam_in=ExamCreate(title="Empty", course_id=course.id, duration_minutes=10), instructor_id=100
    )
    with pytest.raises(ExamHasNoQuestions):
        exam_lifecycle.set_published(db_session, exam.id, True, now=T0)
    with pytest.raises(ExamNotFound):
        exam_lifecycle.set_published(db_session, 9999, True, now=T0)


def test_list_student_exams(db_session: Session):
    course = make_course(db_session, students=[1])
    other_course = make_course(db_session, students=[2], name="Databases")

    open_exam, _ = make_exam(db_session, course.id, title="Open", duration_minutes=30)
    make_exam(db_session, course.id, title="Draft", published=False)
    done_exam, _ = make_exam(db_session, course.id, title="Done")
    make_exam(db_session, other_course.id, title="Elsewhere")

    exam_lifecycle.start_attempt(db_session, 1, open_exam.id, now=T0)
    exam_lifecycle.start_attempt(db_session, 1, done_exam.id, now=T0)
    exam_lifecycle.submit_attempt(db_session, 1, done_exam.id, now=T0 + timedelta(minutes=1))

    views = exam_lifecycle.list_student_exams(db_session, 1, now=T0 + timedelta(minutes=10))
    by_title = {v.exam.title: v for v in views}
    assert set(by_title) == {"Open", "Done"}
    assert by_title["Open"].status == StudentExamStatusEnum.IN_PROGRESS
    assert by_title["Open"].remaining_seconds == 20 * 60
    assert by_title["Done"].status == StudentExamStatusEnum.COMPLETED
    assert by_title["Done"].remaining_seconds is None

    assert exam_lifecycle.list_student_exams(db_session, 3, now=T0) == []


def test_attempt_detail(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id, duration_minutes=15)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0)

    detail = exam_lifecycle.get_attempt_detail(db_session, 1, exam.id, now=T0 + timedelta(minutes=5))
    assert detail.remaining_seconds == 600
    assert [a.question_id for a in detail.answers] == [question.id]
    assert detail.attempt.status == AttemptStatusEnum.IN_PROGRESS
