import logging
from typing import List

from sqlalchemy.orm import Session

from examcore.core.exceptions import CourseNotFound, ExamLocked, ExamNotFound, QuestionNotFound
from examcore.crud.course import course as crud_course, course_enrollment as crud_enrollment
from examcore.crud.exam import exam as crud_exam
from examcore.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examcore.crud.question import question as crud_question
from examcore.models.exam import Exam as ExamModel
from examcore.schemas.course import Course, CourseCreate, CourseEnrollment
from examcore.schemas.exam import Exam, ExamCreate, ExamUpdate
from examcore.schemas.question import Question, QuestionCreate, QuestionUpdate

logger = logging.getLogger(__name__)


class ExamService:
    """Authoring side: courses, exams and their question sets."""

    def _get_exam(self, db: Session, exam_id: int) -> ExamModel:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise ExamNotFound(exam_id=exam_id)
        return exam

    def _has_attempts(self, db: Session, exam_id: int) -> bool:
        return crud_exam_attempt.count_by_exam(db, exam_id=exam_id) > 0

    def _require_question_set_editable(self, db: Session, exam_id: int):
        if self._has_attempts(db, exam_id):
            raise ExamLocked(exam_id=exam_id)

    def create_course(self, db: Session, course_in: CourseCreate, instructor_id: int) -> Course:
        data = course_in.model_dump()
        data["instructor_id"] = instructor_id
        course = crud_course.create(db, obj_in=data)
        db.commit()
        db.refresh(course)
        logger.info(f"Instructor {instructor_id} created course {course.id}")
        return Course.model_validate(course)

    def get_course(self, db: Session, course_id: int):
        course = crud_course.get(db, id=course_id)
        if not course:
            raise CourseNotFound(course_id=course_id)
        return course

    def enroll_student(self, db: Session, course_id: int, student_id: int) -> CourseEnrollment:
        self.get_course(db, course_id)
        enrollment = crud_enrollment.get_by_student_and_course(db, student_id=student_id, course_id=course_id)
        if enrollment is None:
            enrollment = crud_enrollment.create(db, obj_in={"course_id": course_id, "student_id": student_id})
            db.commit()
            db.refresh(enrollment)
            logger.info(f"Student {student_id} enrolled in course {course_id}")
        return CourseEnrollment.model_validate(enrollment)

    def create_exam(self, db: Session, exam_in: ExamCreate, instructor_id: int) -> Exam:
        self.get_course(db, exam_in.course_id)
        data = exam_in.model_dump()
        data["instructor_id"] = instructor_id
        data["published"] = False
        exam = crud_exam.create(db, obj_in=data)
        db.commit()
        db.refresh(exam)
        logger.info(f"Instructor {instructor_id} created draft exam {exam.id} in course {exam.course_id}")
        return Exam.model_validate(exam)

    def get_exam(self, db: Session, exam_id: int) -> Exam:
        return Exam.model_validate(self._get_exam(db, exam_id))

    def list_course_exams(self, db: Session, course_id: int) -> List[Exam]:
        self.get_course(db, course_id)
        return [Exam.model_validate(e) for e in crud_exam.get_by_course(db, course_id=course_id)]

    def update_exam(self, db: Session, exam_id: int, exam_in: ExamUpdate) -> Exam:
        exam = self._get_exam(db, exam_id)
        if exam.published and self._has_attempts(db, exam_id):
            raise ExamLocked(exam_id=exam_id)

        updated = crud_exam.update(db, db_obj=exam, obj_in=exam_in)
        db.commit()
        db.refresh(updated)
        logger.info(f"Exam {exam_id} updated")
        return Exam.model_validate(updated)

    def delete_exam(self, db: Session, exam_id: int) -> Exam:
        """Delete the exam with its questions, answers and attempts."""
        exam = self._get_exam(db, exam_id)
        snapshot = Exam.model_validate(exam)
        crud_exam.delete(db, id=exam_id)
        db.commit()
        logger.info(f"Exam {exam_id} deleted")
        return snapshot

    def get_exam_questions(self, db: Session, exam_id: int, include_answer_keys: bool = True) -> List[Question]:
        self._get_exam(db, exam_id)
        return [
            Question.from_model(q, include_answer_key=include_answer_keys)
            for q in crud_question.get_by_exam(db, exam_id=exam_id)
        ]

    def add_question(self, db: Session, exam_id: int, question_in: QuestionCreate) -> Question:
        self._get_exam(db, exam_id)
        self._require_question_set_editable(db, exam_id)

        data = {
            "exam_id": exam_id,
            "question_text": question_in.question_text,
            "points": question_in.points,
            **question_in.answer_key.to_columns(),
        }
        question = crud_question.create(db, obj_in=data)
        db.commit()
        db.refresh(question)
        return Question.from_model(question)

    def add_questions(self, db: Session, exam_id: int, questions_in: List[QuestionCreate]) -> List[Question]:
        return [self.add_question(db, exam_id, q) for q in questions_in]

    def get_question(self, db: Session, question_id: int):
        question = crud_question.get(db, id=question_id)
        if not question:
            raise QuestionNotFound(question_id=question_id)
        return question

    def update_question(self, db: Session, question_id: int, question_in: QuestionUpdate) -> Question:
        question = self.get_question(db, question_id)
        self._require_question_set_editable(db, question.exam_id)

        data = question_in.model_dump(exclude_unset=True, exclude={"answer_key"})
        if question_in.answer_key is not None:
            data.update(question_in.answer_key.to_columns())
        updated = crud_question.update(db, db_obj=question, obj_in=data)
        db.commit()
        db.refresh(updated)
        return Question.from_model(updated)

    def delete_question(self, db: Session, question_id: int) -> Question:
        question = self.get_question(db, question_id)
        self._require_question_set_editable(db, question.exam_id)

        snapshot = Question.from_model(question)
        crud_question.delete(db, id=question_id)
        db.commit()
        return snapshot


exam_service = ExamService()
