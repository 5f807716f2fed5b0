from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from examcore.schemas.course import CourseCreate
from examcore.schemas.exam import ExamCreate
from examcore.schemas.question import IdentificationKey, MultipleChoiceKey, QuestionCreate
from examcore.services.exam import exam_service
from examcore.services.exam_lifecycle import exam_lifecycle

INSTRUCTOR_ID = 100
T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def mc_question(correct: int = 0, points: int = 1, options: Optional[List[str]] = None) -> QuestionCreate:
    return QuestionCreate(
        question_text=f"Pick option {correct}",
        points=points,
        answer_key=MultipleChoiceKey(options=options or ["A", "B", "C", "D"], correct_option_index=correct),
    )


def id_question(answer: str, points: int = 1) -> QuestionCreate:
    return QuestionCreate(
        question_text=f"Name the answer ({answer})",
        points=points,
        answer_key=IdentificationKey(correct_answer=answer),
    )


def make_course(db: Session, students: List[int] = (), name: str = "Algorithms"):
    course = exam_service.create_course(db, course_in=CourseCreate(name=name), instructor_id=INSTRUCTOR_ID)
    for student_id in students:
        exam_service.enroll_student(db, course_id=course.id, student_id=student_id)
    return course


def make_exam(
    db: Session, course_id: int, questions: Optional[List[QuestionCreate]] = None,
    duration_minutes: int = 30, deadline: Optional[datetime] = None, published: bool = True,
    title: str = "Midterm",
):
    exam = exam_service.create_exam(
        db,
        exam_in=ExamCreate(title=title, course_id=course_id, duration_minutes=duration_minutes, deadline=deadline),
        instructor_id=INSTRUCTOR_ID,
    )
    created = exam_service.add_questions(db, exam_id=exam.id, questions_in=questions or [mc_question()])
    if published:
        exam = exam_lifecycle.set_published(db, exam_id=exam.id, published=True)
    return exam, created
