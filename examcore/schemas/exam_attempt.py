from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from examcore.core.clock import utc
from examcore.core.constants import AttemptStatusEnum


class AttemptReport(BaseModel):
    """Persisted outcome of one student's attempt at one exam."""
    student_id: int
    exam_id: int
    status: AttemptStatusEnum
    started_at: datetime
    submitted_at: Optional[datetime] = None
    total_score: Optional[int] = None
    max_score: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("started_at", "submitted_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return utc(v)

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return (self.total_score or 0) / self.max_score * 100


class AnswerIn(BaseModel):
    question_id: int
    answer_text: Optional[str] = None

class AnswersIn(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)

class StudentAnswer(BaseModel):
    student_id: int
    question_id: int
    answer_text: Optional[str] = None
    is_correct: Optional[bool] = None
    answered_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AttemptDetail(BaseModel):
    attempt: AttemptReport
    answers: List[StudentAnswer] = Field(default_factory=list)
    remaining_seconds: Optional[int] = None
