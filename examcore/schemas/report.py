from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from examcore.core.constants import AttemptStatusEnum


class ExamStats(BaseModel):
    exam_id: int
    attempted_count: int
    enrolled_count: int
    average_score_percent: float


class ExamResult(BaseModel):
    exam_id: int
    exam_title: str
    student_id: int
    status: AttemptStatusEnum
    total_score: int
    max_score: int
    percentage: float
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None


class StudentCourseReport(BaseModel):
    student_id: int
    course_id: int
    exams_taken: int
    total_score: int
    max_score: int
    average_percentage: float
    exam_results: List[ExamResult] = []
