from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from examcore.core.decorators import store_operation
from examcore.crud.base import CRUDBase
from examcore.models.course import Course, CourseEnrollment
from examcore.schemas.course import CourseCreate, CourseUpdate, CourseEnrollmentCreate

class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):
    pass


class CRUDCourseEnrollment(CRUDBase[CourseEnrollment, CourseEnrollmentCreate, CourseEnrollmentCreate]):

    @store_operation
    def get_by_student_and_course(self, db: Session, *, student_id: int, course_id: int) -> Optional[CourseEnrollment]:
        return (
            db.query(CourseEnrollment)
            .filter(CourseEnrollment.student_id == student_id)
            .filter(CourseEnrollment.course_id == course_id)
            .first()
        )

    @store_operation
    def get_course_ids_for_student(self, db: Session, *, student_id: int) -> List[int]:
        rows = (
            db.query(CourseEnrollment.course_id)
            .filter(CourseEnrollment.student_id == student_id)
            .all()
        )
        return [row[0] for row in rows]

    @store_operation
    def get_student_ids_for_course(self, db: Session, *, course_id: int) -> List[int]:
        rows = (
            db.query(CourseEnrollment.student_id)
            .filter(CourseEnrollment.course_id == course_id)
            .order_by(CourseEnrollment.student_id)
            .all()
        )
        return [row[0] for row in rows]

    @store_operation
    def count_by_course(self, db: Session, *, course_id: int) -> int:
        return (
            db.query(func.count(CourseEnrollment.id))
            .filter(CourseEnrollment.course_id == course_id)
            .scalar()
        ) or 0


course = CRUDCourse(Course)
course_enrollment = CRUDCourseEnrollment(CourseEnrollment)
