from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from examcore.core.clock import Clock
from examcore.schemas.exam import StudentExamView
from examcore.schemas.report import ExamResult
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.exam_lifecycle import exam_lifecycle
from examcore.services.report import report_aggregator
from examcore.utils import deps
from examcore.utils.permission import PermissionHelper as permission_helper

router = APIRouter()


@router.get("/me/exams", response_model=APIResponse[List[StudentExamView]])
async def get_my_exams(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_student(context)
    exams = exam_lifecycle.list_student_exams(db, student_id=context.user_id, now=clock.now())
    return APIResponse(message="Exams retrieved successfully", data=exams)


@router.get("/me/results", response_model=APIResponse[List[ExamResult]])
async def get_my_results(
    *,
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_student(context)
    results = report_aggregator.student_results(db, student_id=context.user_id)
    return APIResponse(message="Results retrieved successfully", data=results)
