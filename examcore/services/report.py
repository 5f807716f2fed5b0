import logging
from typing import List

from sqlalchemy.orm import Session

from examcore.core.exceptions import CourseNotFound, ExamNotFound
from examcore.crud.course import course as crud_course, course_enrollment as crud_enrollment
from examcore.crud.exam import exam as crud_exam
from examcore.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examcore.crud.student_answer import student_answer as crud_student_answer
from examcore.schemas.exam_attempt import AttemptReport
from examcore.schemas.grading import QuestionResult
from examcore.schemas.report import ExamResult, ExamStats, StudentCourseReport
from examcore.services.grading import GradingEngine, grading_engine

logger = logging.getLogger(__name__)


def _percentage(total_score, max_score) -> float:
    if not max_score:
        return 0.0
    return (total_score or 0) / max_score * 100


class ReportAggregator:
    """Read-only statistics over persisted attempt reports."""

    def __init__(self, grading: GradingEngine = grading_engine):
        self.grading = grading

    def average_score_percent(self, db: Session, exam_id: int) -> float:
        attempts = crud_exam_attempt.get_finalized_by_exam(db, exam_id=exam_id)
        if not attempts:
            return 0.0
        return sum(_percentage(a.total_score, a.max_score) for a in attempts) / len(attempts)

    def attempted_count(self, db: Session, exam_id: int) -> int:
        return crud_exam_attempt.count_by_exam(db, exam_id=exam_id)

    def enrolled_count(self, db: Session, course_id: int) -> int:
        return crud_enrollment.count_by_course(db, course_id=course_id)

    def exam_summary(self, db: Session, exam_id: int) -> ExamStats:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise ExamNotFound(exam_id=exam_id)
        return ExamStats(
            exam_id=exam_id,
            attempted_count=self.attempted_count(db, exam_id),
            enrolled_count=self.enrolled_count(db, exam.course_id),
            average_score_percent=self.average_score_percent(db, exam_id),
        )

    def exam_reports(self, db: Session, exam_id: int) -> List[AttemptReport]:
        if not crud_exam.get(db, id=exam_id):
            raise ExamNotFound(exam_id=exam_id)
        return [AttemptReport.model_validate(a) for a in crud_exam_attempt.get_all_by_exam(db, exam_id=exam_id)]

    def _to_result(self, attempt) -> ExamResult:
        report = AttemptReport.model_validate(attempt)
        return ExamResult(
            exam_id=attempt.exam_id,
            exam_title=attempt.exam.title,
            student_id=attempt.student_id,
            status=attempt.status,
            total_score=attempt.total_score or 0,
            max_score=attempt.max_score or 0,
            percentage=report.percentage,
            started_at=report.started_at,
            submitted_at=report.submitted_at,
        )

    def student_results(self, db: Session, student_id: int) -> List[ExamResult]:
        return [self._to_result(a) for a in crud_exam_attempt.get_finalized_by_student(db, student_id=student_id)]

    def course_report(self, db: Session, course_id: int) -> List[StudentCourseReport]:
        if not crud_course.get(db, id=course_id):
            raise CourseNotFound(course_id=course_id)

        exam_ids = {e.id for e in crud_exam.get_by_course(db, course_id=course_id)}
        reports = []
        for student_id in crud_enrollment.get_student_ids_for_course(db, course_id=course_id):
            results = [
                self._to_result(a)
                for a in crud_exam_attempt.get_finalized_by_student(db, student_id=student_id)
                if a.exam_id in exam_ids
            ]
            total = sum(r.total_score for r in results)
            maximum = sum(r.max_score for r in results)
            reports.append(StudentCourseReport(
                student_id=student_id,
                course_id=course_id,
                exams_taken=len(results),
                total_score=total,
                max_score=maximum,
                average_percentage=_percentage(total, maximum),
                exam_results=results,
            ))
        return reports

    def question_results(self, db: Session, student_id: int, exam_id: int) -> List[QuestionResult]:
        """Per-question breakdown of the questions the student answered."""
        grade = self.grading.grade_attempt(db, exam_id=exam_id, student_id=student_id)
        answered = crud_student_answer.get_map(db, student_id=student_id, exam_id=exam_id)
        return [r for r in grade.results if r.question_id in answered]


report_aggregator = ReportAggregator()
