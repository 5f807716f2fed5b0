from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from examcore.core.database import Base

class StudentAnswer(Base):
    __tablename__ = "student_answers"
    __table_args__ = (
        UniqueConstraint("student_id", "question_id", name="uq_student_answers_student_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    answer_text = Column(String, nullable=True) # Raw input: option index as text, or free text
    is_correct = Column(Boolean, nullable=True) # Set by grading
    answered_at = Column(DateTime(timezone=True), nullable=True)

    question = relationship("Question", back_populates="answers")
