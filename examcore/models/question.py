from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from examcore.core.database import Base
from examcore.core.constants import QuestionTypeEnum

class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("points > 0", name="ck_questions_positive_points"),
        # Exactly one answer-key shape per question.
        CheckConstraint(
            "(options IS NOT NULL AND correct_option_index IS NOT NULL AND correct_answer IS NULL)"
            " OR (options IS NULL AND correct_option_index IS NULL AND correct_answer IS NOT NULL)",
            name="ck_questions_single_answer_key",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(String, nullable=False)
    question_type = Column(Enum(QuestionTypeEnum), nullable=False)
    options = Column(JSON(none_as_null=True), nullable=True) # Multiple choice only
    correct_option_index = Column(Integer, nullable=True) # Zero-based index into options
    correct_answer = Column(String, nullable=True) # Identification only
    points = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="questions")
    answers = relationship("StudentAnswer", back_populates="question", cascade="all, delete-orphan")

    @property
    def is_multiple_choice(self) -> bool:
        return self.question_type == QuestionTypeEnum.MULTIPLE_CHOICE

    @property
    def correct_answer_text(self) -> str:
        if self.is_multiple_choice:
            options = self.options or []
            if self.correct_option_index is not None and 0 <= self.correct_option_index < len(options):
                return options[self.correct_option_index]
            return ""
        return self.correct_answer or ""
