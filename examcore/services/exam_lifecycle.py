import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from examcore.core.clock import Clock, system_clock, utc
from examcore.core.constants import AttemptStatusEnum, StudentExamStatusEnum, TERMINAL_ATTEMPT_STATUSES
from examcore.core.exceptions import (
    AlreadyAttempted, AttemptClosed, AttemptNotFound, CannotUnpublish, DeadlinePassed,
    ExamHasNoQuestions, ExamNotFound, NotPublished, QuestionNotFound,
)
from examcore.crud.course import course_enrollment as crud_enrollment
from examcore.crud.exam import exam as crud_exam
from examcore.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examcore.crud.question import question as crud_question
from examcore.crud.student_answer import student_answer as crud_student_answer
from examcore.models.exam_attempt import ExamAttempt
from examcore.schemas.exam import Exam, StudentExamView
from examcore.schemas.exam_attempt import AttemptDetail, AttemptReport, StudentAnswer
from examcore.services import budget
from examcore.services.grading import GradingEngine, SubmittedAnswers, grading_engine, normalize_answers

logger = logging.getLogger(__name__)


class ExamLifecycle:
    """State machine of an exam's publish flag and of each (student, exam) attempt.

    NotStarted -> InProgress -> Completed | Timeout. Each public operation is
    one unit of work on the given session and commits before returning.
    """

    def __init__(self, grading: GradingEngine = grading_engine, clock: Clock = system_clock):
        self.grading = grading
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return utc(now) if now is not None else self.clock.now()

    def _get_exam(self, db: Session, exam_id: int):
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise ExamNotFound(exam_id=exam_id)
        return exam

    def _get_attempt(self, db: Session, student_id: int, exam_id: int) -> ExamAttempt:
        attempt = crud_exam_attempt.get_by_student_and_exam(db, student_id=student_id, exam_id=exam_id)
        if not attempt:
            raise AttemptNotFound(student_id=student_id, exam_id=exam_id)
        return attempt

    def _require_open_attempt(self, db: Session, student_id: int, exam_id: int, now: datetime) -> ExamAttempt:
        attempt = self._get_attempt(db, student_id, exam_id)
        if attempt.status in TERMINAL_ATTEMPT_STATUSES:
            raise AttemptClosed(student_id=student_id, exam_id=exam_id)
        if budget.is_expired(attempt, attempt.exam, now):
            raise DeadlinePassed(student_id=student_id, exam_id=exam_id)
        return attempt

    def start_attempt(self, db: Session, student_id: int, exam_id: int, now: Optional[datetime] = None) -> AttemptReport:
        now = self._now(now)
        exam = self._get_exam(db, exam_id)

        if not exam.published:
            logger.warning(f"Student {student_id} tried to start draft exam {exam_id}")
            raise NotPublished(exam_id=exam_id)

        if crud_exam_attempt.get_by_student_and_exam(db, student_id=student_id, exam_id=exam_id):
            logger.warning(f"Student {student_id} tried to restart exam {exam_id}")
            raise AlreadyAttempted(student_id=student_id, exam_id=exam_id)

        deadline = utc(exam.deadline)
        if deadline is not None and now >= deadline:
            logger.warning(f"Student {student_id} tried to start exam {exam_id} after its deadline")
            raise DeadlinePassed(exam_id=exam_id)

        attempt = crud_exam_attempt.create_in_progress(db, student_id=student_id, exam_id=exam_id, started_at=now)
        db.commit()
        db.refresh(attempt)
        logger.info(f"Student {student_id} started exam {exam_id}")
        return AttemptReport.model_validate(attempt)

    def record_answer(
        self, db: Session, student_id: int, exam_id: int, question_id: int,
        answer_text: Optional[str], now: Optional[datetime] = None
    ) -> StudentAnswer:
        return self.record_answers(db, student_id, exam_id, {question_id: answer_text}, now=now)[0]

    def record_answers(
        self, db: Session, student_id: int, exam_id: int, answers: SubmittedAnswers,
        now: Optional[datetime] = None
    ) -> List[StudentAnswer]:
        """Save raw answers while the attempt is open. Grading happens on finalize."""
        now = self._now(now)
        submitted = normalize_answers(answers)
        self._require_open_attempt(db, student_id, exam_id, now)

        saved = []
        for question_id, answer_text in submitted.items():
            if not crud_question.get_in_exam(db, exam_id=exam_id, question_id=question_id):
                db.rollback()
                raise QuestionNotFound(question_id=question_id, exam_id=exam_id)
            saved.append(crud_student_answer.upsert(
                db, student_id=student_id, question_id=question_id,
                answer_text=answer_text, answered_at=now,
            ))
        db.commit()
        return [StudentAnswer.model_validate(ans) for ans in saved]

    def finalize_attempt(
        self, db: Session, student_id: int, exam_id: int, answers: Optional[SubmittedAnswers] = None,
        now: Optional[datetime] = None, reason: AttemptStatusEnum = AttemptStatusEnum.COMPLETED
    ) -> AttemptReport:
        """Grade the attempt and move it to ``reason`` (completed or timeout).

        ``answers`` are merged over whatever was already recorded. Calling this
        on an attempt that is already terminal returns the stored report as is.
        """
        if reason not in TERMINAL_ATTEMPT_STATUSES:
            raise ValueError(f"Cannot finalize an attempt as {reason}")

        now = self._now(now)
        attempt = self._get_attempt(db, student_id, exam_id)
        if attempt.status in TERMINAL_ATTEMPT_STATUSES:
            logger.debug(f"Attempt of student {student_id} on exam {exam_id} already {attempt.status.value}")
            return AttemptReport.model_validate(attempt)

        questions = crud_question.get_by_exam(db, exam_id=exam_id)
        submitted = normalize_answers(answers)
        self.grading.validate_answers(questions, submitted)

        merged: Dict[int, Optional[str]] = {
            qid: ans.answer_text
            for qid, ans in crud_student_answer.get_map(db, student_id=student_id, exam_id=exam_id).items()
        }
        merged.update(submitted)

        results = self.grading.grade_questions(questions, merged)
        total_score = sum(r.points_awarded for r in results)
        max_score = sum(q.points for q in questions)

        won = crud_exam_attempt.finalize_if_in_progress(
            db, attempt_id=attempt.id, status=reason, submitted_at=now,
            total_score=total_score, max_score=max_score,
        )
        if not won:
            db.rollback()
            logger.info(f"Attempt of student {student_id} on exam {exam_id} was finalized concurrently")
            return AttemptReport.model_validate(self._get_attempt(db, student_id, exam_id))

        for result in results:
            if result.question_id not in merged:
                continue
            crud_student_answer.upsert(
                db, student_id=student_id, question_id=result.question_id,
                answer_text=merged[result.question_id], is_correct=result.is_correct,
                answered_at=now if result.question_id in submitted else None,
            )
        db.commit()
        db.refresh(attempt)
        logger.info(
            f"Attempt of student {student_id} on exam {exam_id} finalized as {reason.value}: "
            f"{total_score}/{max_score}"
        )
        return AttemptReport.model_validate(attempt)

    def submit_attempt(
        self, db: Session, student_id: int, exam_id: int, answers: Optional[SubmittedAnswers] = None,
        now: Optional[datetime] = None
    ) -> AttemptReport:
        """Student-initiated submission. Expired attempts are left for the sweep."""
        now = self._now(now)
        attempt = self._get_attempt(db, student_id, exam_id)
        if attempt.status in TERMINAL_ATTEMPT_STATUSES:
            return AttemptReport.model_validate(attempt)

        if budget.is_expired(attempt, attempt.exam, now):
            logger.warning(f"Student {student_id} submitted exam {exam_id} after time ran out")
            raise DeadlinePassed(student_id=student_id, exam_id=exam_id)

        return self.finalize_attempt(
            db, student_id, exam_id, answers=answers, now=now, reason=AttemptStatusEnum.COMPLETED
        )

    def set_published(self, db: Session, exam_id: int, published: bool, now: Optional[datetime] = None) -> Exam:
        now = self._now(now)
        exam = self._get_exam(db, exam_id)
        if exam.published == published:
            return Exam.model_validate(exam)

        if published and crud_question.count_by_exam(db, exam_id=exam_id) == 0:
            raise ExamHasNoQuestions(exam_id=exam_id)

        updated = crud_exam.set_published(db, exam_id=exam_id, published=published)
        if not updated:
            db.rollback()
            logger.warning(f"Refused to unpublish exam {exam_id}: it already has attempts")
            raise CannotUnpublish(exam_id=exam_id)

        db.commit()
        db.refresh(exam)
        logger.info(f"Exam {exam_id} {'published' if published else 'unpublished'} at {now.isoformat()}")
        return Exam.model_validate(exam)

    def get_attempt(self, db: Session, student_id: int, exam_id: int) -> AttemptReport:
        return AttemptReport.model_validate(self._get_attempt(db, student_id, exam_id))

    def get_attempt_detail(self, db: Session, student_id: int, exam_id: int, now: Optional[datetime] = None) -> AttemptDetail:
        now = self._now(now)
        attempt = self._get_attempt(db, student_id, exam_id)
        remaining = None
        if attempt.status == AttemptStatusEnum.IN_PROGRESS:
            remaining = budget.remaining_seconds(attempt, attempt.exam, now)
        return AttemptDetail(
            attempt=AttemptReport.model_validate(attempt),
            answers=self.get_recorded_answers(db, student_id, exam_id),
            remaining_seconds=remaining,
        )

    def get_recorded_answers(self, db: Session, student_id: int, exam_id: int) -> List[StudentAnswer]:
        self._get_attempt(db, student_id, exam_id)
        answers = crud_student_answer.get_all_by_student_and_exam(db, student_id=student_id, exam_id=exam_id)
        return [StudentAnswer.model_validate(ans) for ans in answers]

    def get_attempt_state(self, db: Session, student_id: int, exam_id: int) -> StudentExamStatusEnum:
        attempt = crud_exam_attempt.get_by_student_and_exam(db, student_id=student_id, exam_id=exam_id)
        if not attempt:
            return StudentExamStatusEnum.NOT_STARTED
        return StudentExamStatusEnum(attempt.status.value)

    def list_student_exams(self, db: Session, student_id: int, now: Optional[datetime] = None) -> List[StudentExamView]:
        """Published exams of every course the student is enrolled in, with the student's state."""
        now = self._now(now)
        course_ids = crud_enrollment.get_course_ids_for_student(db, student_id=student_id)
        exams = crud_exam.get_published_by_courses(db, course_ids=course_ids)
        attempts = {a.exam_id: a for a in crud_exam_attempt.get_by_student(db, student_id=student_id)}

        views = []
        for exam in exams:
            attempt = attempts.get(exam.id)
            if attempt is None:
                views.append(StudentExamView(exam=Exam.model_validate(exam), status=StudentExamStatusEnum.NOT_STARTED))
                continue
            remaining = None
            if attempt.status == AttemptStatusEnum.IN_PROGRESS:
                remaining = budget.remaining_seconds(attempt, exam, now)
            views.append(StudentExamView(
                exam=Exam.model_validate(exam),
                status=StudentExamStatusEnum(attempt.status.value),
                remaining_seconds=remaining,
            ))
        return views


exam_lifecycle = ExamLifecycle()
