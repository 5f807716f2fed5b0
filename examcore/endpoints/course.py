from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from examcore.schemas.course import Course, CourseCreate, CourseEnrollment
from examcore.schemas.exam import Exam
from examcore.schemas.report import StudentCourseReport
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.exam import exam_service
from examcore.services.report import report_aggregator
from examcore.utils import deps
from examcore.utils.permission import PermissionHelper as permission_helper

router = APIRouter()


@router.post("/", response_model=APIResponse[Course], status_code=status.HTTP_201_CREATED)
async def create_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_in: CourseCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_instructor(context)
    course = exam_service.create_course(db, course_in=course_in, instructor_id=context.user_id)
    return APIResponse(message="Course created successfully", data=course)


@router.post("/{course_id}/students/{student_id}", response_model=APIResponse[CourseEnrollment], status_code=status.HTTP_201_CREATED)
async def enroll_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_course(db, course_id))
    enrollment = exam_service.enroll_student(db, course_id=course_id, student_id=student_id)
    return APIResponse(message="Student enrolled successfully", data=enrollment)


@router.get("/{course_id}/exams", response_model=APIResponse[List[Exam]])
async def list_course_exams(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_course(db, course_id))
    exams = exam_service.list_course_exams(db, course_id=course_id)
    return APIResponse(message="Exams retrieved successfully", data=exams)


@router.get("/{course_id}/report", response_model=APIResponse[List[StudentCourseReport]])
async def get_course_report(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_course(db, course_id))
    report = report_aggregator.course_report(db, course_id=course_id)
    return APIResponse(message="Course report retrieved successfully", data=report)
