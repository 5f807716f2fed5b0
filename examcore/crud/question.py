from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from examcore.core.decorators import store_operation
from examcore.crud.base import CRUDBase
from examcore.models.question import Question
from examcore.schemas.question import QuestionCreate, QuestionUpdate

class CRUDQuestion(CRUDBase[Question, QuestionCreate, QuestionUpdate]):

    @store_operation
    def get_by_exam(self, db: Session, *, exam_id: int) -> List[Question]:
        return (
            db.query(self.model)
            .filter(self.model.exam_id == exam_id)
            .order_by(self.model.id)
            .all()
        )

    @store_operation
    def get_in_exam(self, db: Session, *, exam_id: int, question_id: int) -> Optional[Question]:
        return (
            db.query(self.model)
            .filter(self.model.exam_id == exam_id)
            .filter(self.model.id == question_id)
            .first()
        )

    @store_operation
    def count_by_exam(self, db: Session, *, exam_id: int) -> int:
        return db.query(func.count(self.model.id)).filter(self.model.exam_id == exam_id).scalar() or 0


question = CRUDQuestion(Question)
