from typing import List
from sqlalchemy.orm import Session

from examcore.core.decorators import store_operation
from examcore.crud.base import CRUDBase
from examcore.models.exam import Exam
from examcore.models.exam_attempt import ExamAttempt
from examcore.schemas.exam import ExamCreate, ExamUpdate

class CRUDExam(CRUDBase[Exam, ExamCreate, ExamUpdate]):

    @store_operation
    def get_by_course(self, db: Session, *, course_id: int) -> List[Exam]:
        return (
            db.query(Exam)
            .filter(Exam.course_id == course_id)
            .order_by(Exam.id)
            .all()
        )

    @store_operation
    def get_published_by_courses(self, db: Session, *, course_ids: List[int]) -> List[Exam]:
        if not course_ids:
            return []
        return (
            db.query(Exam)
            .filter(Exam.course_id.in_(course_ids))
            .filter(Exam.published.is_(True))
            .order_by(Exam.id)
            .all()
        )

    @store_operation
    def set_published(self, db: Session, *, exam_id: int, published: bool) -> int:
        """Flip the publish flag. Unpublishing only matches exams that have no attempt rows."""
        query = db.query(Exam).filter(Exam.id == exam_id)
        if not published:
            has_attempts = (
                db.query(ExamAttempt.id)
                .filter(ExamAttempt.exam_id == exam_id)
                .exists()
            )
            query = query.filter(~has_attempts)
        return query.update({Exam.published: published}, synchronize_session=False)


exam = CRUDExam(Exam)
