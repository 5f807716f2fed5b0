from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from examcore.core.exceptions import CourseNotFound, ExamLocked, ExamNotFound, QuestionNotFound, StoreUnavailable
from examcore.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examcore.crud.question import question as crud_question
from examcore.schemas.exam import ExamCreate, ExamUpdate
from examcore.schemas.question import IdentificationKey, QuestionUpdate
from examcore.services.exam import exam_service
from examcore.services.exam_lifecycle import exam_lifecycle
from examcore.services.report import report_aggregator
from tests.helpers.factories import T0, id_question, make_course, make_exam, mc_question


def test_create_exam_is_a_draft(db_session: Session):
    course = make_course(db_session)
    exam = exam_service.create_exam(
        db_session, exam_in=ExamCreate(title="Quiz 1", course_id=course.id, duration_minutes=20), instructor_id=100
    )
    assert exam.published is False
    assert exam.instructor_id == 100
    assert [e.id for e in exam_service.list_course_exams(db_session, course.id)] == [exam.id]

    with pytest.raises(CourseNotFound):
        exam_service.create_exam(
            db_session, exam_in=ExamCreate(title="Orphan", course_id=9999, duration_minutes=20), instructor_id=100
        )


def test_enrollment_is_idempotent(db_session: Session):
    course = make_course(db_session, students=[1])
    again = exam_service.enroll_student(db_session, course_id=course.id, student_id=1)
    assert again.student_id == 1
    assert report_aggregator.enrolled_count(db_session, course.id) == 1


def test_questions_hide_answer_keys_for_students(db_session: Session):
    course = make_course(db_session)
    exam, _ = make_exam(db_session, course.id, questions=[mc_question(correct=1), id_question("Hopper")])

    for_instructor = exam_service.get_exam_questions(db_session, exam.id, include_answer_keys=True)
    for_student = exam_service.get_exam_questions(db_session, exam.id, include_answer_keys=False)
    assert for_instructor[0].answer_key.correct_option_index == 1
    assert for_instructor[1].answer_key.correct_answer == "Hopper"
    assert all(q.answer_key is None for q in for_student)
    assert for_student[0].options == ["A", "B", "C", "D"]


def test_question_set_locks_once_attempted(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id)

    updated = exam_service.update_question(
        db_session, question.id, QuestionUpdate(answer_key=IdentificationKey(correct_answer="Knuth"), points=4)
    )
    assert updated.answer_key.correct_answer == "Knuth"
    assert updated.options is None
    assert updated.points == 4

    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    with pytest.raises(ExamLocked):
        exam_service.add_question(db_session, exam.id, mc_question())
    with pytest.raises(ExamLocked):
        exam_service.update_question(db_session, question.id, QuestionUpdate(points=10))
    with pytest.raises(ExamLocked):
        exam_service.delete_question(db_session, question.id)
    with pytest.raises(ExamLocked):
        exam_service.update_exam(db_session, exam.id, ExamUpdate(duration_minutes=90))

    with pytest.raises(QuestionNotFound):
        exam_service.delete_question(db_session, 9999)


def test_update_draft_exam(db_session: Session):
    course = make_course(db_session)
    exam, _ = make_exam(db_session, course.id, published=False)
    updated = exam_service.update_exam(
        db_session, exam.id, ExamUpdate(title="Renamed", deadline=T0 + timedelta(days=1))
    )
    assert updated.title == "Renamed"
    assert updated.duration_minutes == 30
    assert updated.deadline is not None


def test_delete_exam_cascades(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, (question,) = make_exam(db_session, course.id)
    exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    exam_lifecycle.record_answer(db_session, 1, exam.id, question.id, "0", now=T0)

    deleted = exam_service.delete_exam(db_session, exam.id)
    assert deleted.id == exam.id
    assert crud_exam_attempt.count_by_exam(db_session, exam_id=exam.id) == 0
    assert crud_question.count_by_exam(db_session, exam_id=exam.id) == 0
    assert db_session.execute(text("SELECT COUNT(*) FROM student_answers")).scalar() == 0
    with pytest.raises(ExamNotFound):
        exam_service.get_exam(db_session, exam.id)


def test_store_failures_surface_as_store_unavailable(db_session: Session):
    course = make_course(db_session, students=[1])
    exam, _ = make_exam(db_session, course.id)
    db_session.execute(text("DROP TABLE student_answers"))
    db_session.execute(text("DROP TABLE exam_attempts"))
    db_session.commit()

    with pytest.raises(StoreUnavailable) as excinfo:
        exam_lifecycle.start_attempt(db_session, 1, exam.id, now=T0)
    assert excinfo.value.status_code == 503
    assert excinfo.value.details["operation"].startswith("CRUDExamAttempt.")


def test_identification_question_stores_null_options(db_session: Session):
    course = make_course(db_session)
    exam, _ = make_exam(db_session, course.id, published=False)

    created = exam_service.add_question(db_session, exam.id, id_question("Hopper", points=2))
    assert created.question_type.value == "identification"
    assert created.options is None

    row = db_session.execute(
        text("SELECT options IS NULL, correct_option_index IS NULL, correct_answer FROM questions WHERE id = :id"),
        {"id": created.id},
    ).one()
    assert tuple(row) == (1, 1, "Hopper")

    switched = exam_service.update_question(
        db_session, created.id, QuestionUpdate(answer_key=IdentificationKey(correct_answer="Lovelace"))
    )
    assert switched.answer_key.correct_answer == "Lovelace"
