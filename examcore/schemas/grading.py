from pydantic import BaseModel, computed_field
from typing import List, Optional


class GradedAnswer(BaseModel):
    is_correct: bool
    points_awarded: int


class QuestionResult(BaseModel):
    question_id: int
    number: int
    question_text: str
    answer_text: Optional[str] = None
    correct_answer: str
    is_correct: bool
    points_awarded: int
    points: int


class AttemptGrade(BaseModel):
    exam_id: int
    student_id: int
    total_score: int
    max_score: int
    results: List[QuestionResult] = []

    @computed_field
    @property
    def percentage(self) -> float:
        return self.total_score / self.max_score * 100 if self.max_score else 0.0
