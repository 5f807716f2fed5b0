from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from examcore.core.clock import Clock
from examcore.core.constants import TERMINAL_ATTEMPT_STATUSES
from examcore.core.exceptions import NotPublished, PermissionDenied
from examcore.schemas.exam import Exam, ExamCreate, ExamUpdate
from examcore.schemas.grading import AttemptGrade
from examcore.schemas.exam_attempt import AttemptReport
from examcore.schemas.question import Question, QuestionCreate, QuestionUpdate
from examcore.schemas.report import ExamStats
from examcore.schemas.response import APIResponse
from examcore.schemas.user import UserContext
from examcore.services.exam import exam_service
from examcore.services.exam_lifecycle import exam_lifecycle
from examcore.services.grading import grading_engine
from examcore.services.report import report_aggregator
from examcore.utils import deps
from examcore.utils.permission import PermissionHelper as permission_helper

router = APIRouter()


@router.post("/", response_model=APIResponse[Exam], status_code=status.HTTP_201_CREATED)
async def create_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_in: ExamCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_course(db, exam_in.course_id))
    new_exam = exam_service.create_exam(db, exam_in=exam_in, instructor_id=context.user_id)
    return APIResponse(message="Exam created successfully", data=new_exam)


@router.get("/{exam_id}", response_model=APIResponse[Exam])
async def get_exam(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.get_exam(db, exam_id=exam_id)
    if context.is_instructor:
        permission_helper.require_owner(context, exam)
    elif not exam.published:
        raise NotPublished(exam_id=exam_id)
    return APIResponse(message="Exam retrieved successfully", data=exam)


@router.put("/{exam_id}", response_model=APIResponse[Exam])
async def update_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    exam_in: ExamUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    updated_exam = exam_service.update_exam(db, exam_id=exam_id, exam_in=exam_in)
    return APIResponse(message="Exam updated successfully", data=updated_exam)


@router.delete("/{exam_id}", response_model=APIResponse[Exam])
async def delete_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    deleted_exam = exam_service.delete_exam(db, exam_id=exam_id)
    return APIResponse(message="Exam deleted successfully", data=deleted_exam)


@router.post("/{exam_id}/publish", response_model=APIResponse[Exam])
async def publish_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    exam = exam_lifecycle.set_published(db, exam_id=exam_id, published=True, now=clock.now())
    return APIResponse(message="Exam published successfully", data=exam)


@router.post("/{exam_id}/unpublish", response_model=APIResponse[Exam])
async def unpublish_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context),
    clock: Clock = Depends(deps.get_clock)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    exam = exam_lifecycle.set_published(db, exam_id=exam_id, published=False, now=clock.now())
    return APIResponse(message="Exam unpublished successfully", data=exam)


@router.get("/{exam_id}/questions", response_model=APIResponse[List[Question]])
async def get_exam_questions(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.get_exam(db, exam_id=exam_id)
    if context.is_instructor:
        permission_helper.require_owner(context, exam)
    elif not exam.published:
        raise NotPublished(exam_id=exam_id)
    questions = exam_service.get_exam_questions(
        db, exam_id=exam_id, include_answer_keys=context.is_instructor
    )
    return APIResponse(message="Exam questions retrieved successfully", data=questions)


@router.post("/{exam_id}/questions", response_model=APIResponse[List[Question]], status_code=status.HTTP_201_CREATED)
async def create_questions(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    questions_in: List[QuestionCreate],
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    new_questions = exam_service.add_questions(db, exam_id=exam_id, questions_in=questions_in)
    return APIResponse(message="Questions created successfully", data=new_questions)


@router.put("/questions/{question_id}", response_model=APIResponse[Question])
async def update_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    question_id: int,
    question_in: QuestionUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    existing = exam_service.get_question(db, question_id=question_id)
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=existing.exam_id))
    question = exam_service.update_question(db, question_id=question_id, question_in=question_in)
    return APIResponse(message="Question updated successfully", data=question)


@router.delete("/questions/{question_id}", response_model=APIResponse[Question])
async def delete_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    question_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    existing = exam_service.get_question(db, question_id=question_id)
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=existing.exam_id))
    question = exam_service.delete_question(db, question_id=question_id)
    return APIResponse(message="Question deleted successfully", data=question)


@router.get("/{exam_id}/stats", response_model=APIResponse[ExamStats])
async def get_exam_stats(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    stats = report_aggregator.exam_summary(db, exam_id=exam_id)
    return APIResponse(message="Exam statistics retrieved successfully", data=stats)


@router.get("/{exam_id}/reports", response_model=APIResponse[List[AttemptReport]])
async def get_exam_reports(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    permission_helper.require_owner(context, exam_service.get_exam(db, exam_id=exam_id))
    reports = report_aggregator.exam_reports(db, exam_id=exam_id)
    return APIResponse(message="Exam reports retrieved successfully", data=reports)


@router.get("/{exam_id}/grade/{student_id}", response_model=APIResponse[AttemptGrade])
async def get_student_grade(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.get_exam(db, exam_id=exam_id)
    if context.is_instructor:
        permission_helper.require_owner(context, exam)
    permission_helper.require_self_or_instructor(context, student_id)
    attempt = exam_lifecycle.get_attempt(db, student_id=student_id, exam_id=exam_id)
    if context.is_student and attempt.status not in TERMINAL_ATTEMPT_STATUSES:
        raise PermissionDenied("Results are available once the exam has been submitted.")
    grade = grading_engine.grade_attempt(db, exam_id=exam_id, student_id=student_id)
    return APIResponse(message="Grade computed successfully", data=grade)
