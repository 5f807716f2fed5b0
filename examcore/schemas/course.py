from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class CourseBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None

class CourseCreate(CourseBase):
    pass

class CourseUpdate(CourseBase):
    name: Optional[str] = None

class Course(CourseBase):
    id: int
    instructor_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class CourseEnrollmentCreate(BaseModel):
    course_id: int
    student_id: int

class CourseEnrollment(CourseEnrollmentCreate):
    id: int
    enrolled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
