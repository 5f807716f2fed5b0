from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examcore.core.constants import AttemptStatusEnum, TERMINAL_ATTEMPT_STATUSES
from examcore.core.decorators import store_operation
from examcore.core.exceptions import AlreadyAttempted
from examcore.crud.base import CRUDBase
from examcore.models.exam import Exam
from examcore.models.exam_attempt import ExamAttempt
from examcore.schemas.exam_attempt import AttemptReport

class CRUDExamAttempt(CRUDBase[ExamAttempt, AttemptReport, AttemptReport]):

    @store_operation
    def get_by_student_and_exam(self, db: Session, *, student_id: int, exam_id: int) -> Optional[ExamAttempt]:
        return (
            db.query(ExamAttempt)
            .filter(ExamAttempt.student_id == student_id)
            .filter(ExamAttempt.exam_id == exam_id)
            .first()
        )

    @store_operation
    def create_in_progress(self, db: Session, *, student_id: int, exam_id: int, started_at: datetime) -> ExamAttempt:
        """Insert the attempt row; the (student_id, exam_id) unique constraint decides races."""
        db_obj = ExamAttempt(
            student_id=student_id,
            exam_id=exam_id,
            status=AttemptStatusEnum.IN_PROGRESS,
            started_at=started_at,
        )
        try:
            db.add(db_obj)
            db.flush()
        except IntegrityError:
            db.rollback()
            raise AlreadyAttempted(student_id=student_id, exam_id=exam_id)
        return db_obj

    @store_operation
    def finalize_if_in_progress(
        self, db: Session, *, attempt_id: int, status: AttemptStatusEnum,
        submitted_at: datetime, total_score: int, max_score: int
    ) -> bool:
        """Compare-and-swap in_progress -> terminal. Returns False when another caller got there first."""
        updated = (
            db.query(ExamAttempt)
            .filter(ExamAttempt.id == attempt_id)
            .filter(ExamAttempt.status == AttemptStatusEnum.IN_PROGRESS)
            .update(
                {
                    ExamAttempt.status: status,
                    ExamAttempt.submitted_at: submitted_at,
                    ExamAttempt.total_score: total_score,
                    ExamAttempt.max_score: max_score,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    @store_operation
    def get_all_in_progress(self, db: Session) -> List[ExamAttempt]:
        return (
            db.query(ExamAttempt)
            .join(Exam, Exam.id == ExamAttempt.exam_id)
            .filter(ExamAttempt.status == AttemptStatusEnum.IN_PROGRESS)
            .order_by(ExamAttempt.started_at, ExamAttempt.id)
            .all()
        )

    @store_operation
    def get_all_by_exam(self, db: Session, *, exam_id: int) -> List[ExamAttempt]:
        return (
            db.query(ExamAttempt)
            .filter(ExamAttempt.exam_id == exam_id)
            .order_by(ExamAttempt.submitted_at.desc(), ExamAttempt.id.desc())
            .all()
        )

    @store_operation
    def get_finalized_by_exam(self, db: Session, *, exam_id: int) -> List[ExamAttempt]:
        return (
            db.query(ExamAttempt)
            .filter(ExamAttempt.exam_id == exam_id)
            .filter(ExamAttempt.status.in_(TERMINAL_ATTEMPT_STATUSES))
            .all()
        )

    @store_operation
    def get_finalized_by_student(self, db: Session, *, student_id: int) -> List[ExamAttempt]:
        return (
            db.query(ExamAttempt)
            .filter(ExamAttempt.student_id == student_id)
            .filter(ExamAttempt.status.in_(TERMINAL_ATTEMPT_STATUSES))
            .order_by(ExamAttempt.submitted_at.desc(), ExamAttempt.id.desc())
            .all()
        )

    @store_operation
    def get_by_student(self, db: Session, *, student_id: int) -> List[ExamAttempt]:
        return db.query(ExamAttempt).filter(ExamAttempt.student_id == student_id).all()

    @store_operation
    def count_by_exam(self, db: Session, *, exam_id: int) -> int:
        return (
            db.query(func.count(ExamAttempt.id))
            .filter(ExamAttempt.exam_id == exam_id)
            .scalar()
        ) or 0


exam_attempt = CRUDExamAttempt(ExamAttempt)
