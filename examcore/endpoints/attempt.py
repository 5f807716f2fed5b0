from typing import List, Optional
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from examcore.core.clock import Clock
from examcore.schemas.exam_attempt import AnswersIn, AttemptDetail, AttemptReport, StudentAnswer
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.exam_lifecycle import exam_lifecycle
from examcore.utils import deps
from examcore.utils.permission import PermissionHelper as permission_helper

router = APIRouter()


@router.post("/{exam_id}/attempt", response_model=APIResponse[AttemptReport], status_code=status.HTTP_201_CREATED)
async def start_attempt(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_student(context)
    attempt = exam_lifecycle.start_attempt(db, student_id=context.user_id, exam_id=exam_id, now=clock.now())
    return APIResponse(message="Exam attempt started", data=attempt)


@router.put("/{exam_id}/attempt/answers", response_model=APIResponse[List[StudentAnswer]])
async def save_answers(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    answers_in: AnswersIn,
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_student(context)
    saved = exam_lifecycle.record_answers(
        db, student_id=context.user_id, exam_id=exam_id, answers=answers_in.answers, now=clock.now()
    )
    return APIResponse(message="Answers saved", data=saved)


@router.post("/{exam_id}/attempt/submit", response_model=APIResponse[AttemptReport])
async def submit_attempt(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    answers_in: Optional[AnswersIn] = Body(None),
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_student(context)
    answers = answers_in.answers if answers_in else None
    report = exam_lifecycle.submit_attempt(
        db, student_id=context.user_id, exam_id=exam_id, answers=answers, now=clock.now()
    )
    return APIResponse(message="Exam submitted successfully", data=report)


@router.get("/{exam_id}/attempt", response_model=APIResponse[AttemptDetail])
async def get_attempt(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_student(context)
    detail = exam_lifecycle.get_attempt_detail(db, student_id=context.user_id, exam_id=exam_id, now=clock.now())
    return APIResponse(message="Exam attempt retrieved successfully", data=detail)
