from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime

from examcore.core.constants import QuestionTypeEnum


class MultipleChoiceKey(BaseModel):
    kind: Literal["multiple_choice"] = "multiple_choice"
    options: List[str] = Field(..., min_length=2)
    correct_option_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_index_in_range(self):
        if self.correct_option_index >= len(self.options):
            raise ValueError("correct_option_index must point at one of the options")
        return self

    def to_columns(self) -> Dict[str, Any]:
        return {
            "question_type": QuestionTypeEnum.MULTIPLE_CHOICE,
            "options": list(self.options),
            "correct_option_index": self.correct_option_index,
            "correct_answer": None,
        }


class IdentificationKey(BaseModel):
    kind: Literal["identification"] = "identification"
    correct_answer: str

    @field_validator("correct_answer")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("correct_answer must not be blank")
        return v

    def to_columns(self) -> Dict[str, Any]:
        return {
            "question_type": QuestionTypeEnum.IDENTIFICATION,
            "options": None,
            "correct_option_index": None,
            "correct_answer": self.correct_answer,
        }


AnswerKey = Annotated[Union[MultipleChoiceKey, IdentificationKey], Field(discriminator="kind")]


def answer_key_from_model(question) -> Union[MultipleChoiceKey, IdentificationKey]:
    if question.question_type == QuestionTypeEnum.MULTIPLE_CHOICE:
        return MultipleChoiceKey(options=question.options or [], correct_option_index=question.correct_option_index)
    return IdentificationKey(correct_answer=question.correct_answer)


class QuestionBase(BaseModel):
    question_text: str = Field(..., min_length=1)
    points: int = Field(default=1, gt=0)

class QuestionCreate(QuestionBase):
    answer_key: AnswerKey

    class Config:
        json_schema_extra = {
            "example": {
                "question_text": "What is 2 + 2?",
                "points": 5,
                "answer_key": {"kind": "multiple_choice", "options": ["3", "4", "5"], "correct_option_index": 1}
            }
        }

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(None, min_length=1)
    points: Optional[int] = Field(None, gt=0)
    answer_key: Optional[AnswerKey] = None

class Question(QuestionBase):
    id: int
    exam_id: int
    question_type: QuestionTypeEnum
    options: Optional[List[str]] = None
    answer_key: Optional[AnswerKey] = None # Hidden from students
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, question, include_answer_key: bool = True) -> "Question":
        return cls(
            id=question.id,
            exam_id=question.exam_id,
            question_text=question.question_text,
            points=question.points,
            question_type=question.question_type,
            options=question.options,
            answer_key=answer_key_from_model(question) if include_answer_key else None,
            created_at=question.created_at,
        )
