from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from examcore.core.decorators import store_operation
from examcore.crud.base import CRUDBase
from examcore.models.question import Question
from examcore.models.student_answer import StudentAnswer
from examcore.schemas.exam_attempt import StudentAnswer as StudentAnswerSchema

class CRUDStudentAnswer(CRUDBase[StudentAnswer, StudentAnswerSchema, StudentAnswerSchema]):

    @store_operation
    def get_all_by_student_and_exam(self, db: Session, *, student_id: int, exam_id: int) -> List[StudentAnswer]:
        return (
            db.query(StudentAnswer)
            .join(Question, Question.id == StudentAnswer.question_id)
            .filter(StudentAnswer.student_id == student_id)
            .filter(Question.exam_id == exam_id)
            .order_by(StudentAnswer.question_id)
            .all()
        )

    def get_map(self, db: Session, *, student_id: int, exam_id: int) -> Dict[int, StudentAnswer]:
        answers = self.get_all_by_student_and_exam(db, student_id=student_id, exam_id=exam_id)
        return {ans.question_id: ans for ans in answers}

    @store_operation
    def upsert(
        self, db: Session, *, student_id: int, question_id: int, answer_text: Optional[str],
        answered_at: Optional[datetime] = None, is_correct: Optional[bool] = None
    ) -> StudentAnswer:
        existing = (
            db.query(StudentAnswer)
            .filter(StudentAnswer.student_id == student_id)
            .filter(StudentAnswer.question_id == question_id)
            .first()
        )
        if existing:
            existing.answer_text = answer_text
            existing.is_correct = is_correct
            if answered_at is not None:
                existing.answered_at = answered_at
            db.add(existing)
            db.flush()
            return existing

        db_obj = StudentAnswer(
            student_id=student_id,
            question_id=question_id,
            answer_text=answer_text,
            is_correct=is_correct,
            answered_at=answered_at,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    @store_operation
    def set_correctness(self, db: Session, *, answer: StudentAnswer, is_correct: bool) -> StudentAnswer:
        answer.is_correct = is_correct
        db.add(answer)
        db.flush()
        return answer


student_answer = CRUDStudentAnswer(StudentAnswer)
