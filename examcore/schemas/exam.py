from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from examcore.core.constants import StudentExamStatusEnum

class ExamBase(BaseModel):
    title: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0)
    deadline: Optional[datetime] = None

class ExamCreate(ExamBase):
    course_id: int

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Midterm Exam",
                "course_id": 1,
                "duration_minutes": 60,
                "deadline": "2026-11-01T17:00:00Z"
            }
        }

class ExamUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    duration_minutes: Optional[int] = Field(None, gt=0)
    deadline: Optional[datetime] = None

class Exam(ExamBase):
    id: int
    course_id: int
    instructor_id: int
    published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class StudentExamView(BaseModel):
    exam: Exam
    status: StudentExamStatusEnum
    remaining_seconds: Optional[int] = None
