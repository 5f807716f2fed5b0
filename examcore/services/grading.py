import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy.orm import Session

from examcore.core.exceptions import ExamNotFound, QuestionNotFound
from examcore.crud.exam import exam as crud_exam
from examcore.crud.question import question as crud_question
from examcore.crud.student_answer import student_answer as crud_student_answer
from examcore.models.question import Question
from examcore.schemas.exam_attempt import AnswerIn
from examcore.schemas.grading import AttemptGrade, GradedAnswer, QuestionResult

logger = logging.getLogger(__name__)

SubmittedAnswers = Union[Mapping[int, Optional[str]], Iterable[AnswerIn]]


def normalize_answers(answers: Optional[SubmittedAnswers]) -> Dict[int, Optional[str]]:
    """Accept either ``{question_id: text}`` or a list of ``AnswerIn``."""
    if answers is None:
        return {}
    if isinstance(answers, Mapping):
        return {int(qid): text for qid, text in answers.items()}
    return {ans.question_id: ans.answer_text for ans in answers}


class GradingEngine:

    def grade(self, question: Question, raw_answer: Optional[str]) -> GradedAnswer:
        if question.is_multiple_choice:
            is_correct = self._grade_multiple_choice(question, raw_answer)
        else:
            is_correct = self._grade_identification(question, raw_answer)
        return GradedAnswer(is_correct=is_correct, points_awarded=question.points if is_correct else 0)

    def _grade_multiple_choice(self, question: Question, raw_answer: Optional[str]) -> bool:
        if raw_answer is None:
            return False
        text = str(raw_answer).strip()
        if not re.fullmatch(r"[+-]?[0-9]+", text):
            return False
        chosen = int(text)
        if not 0 <= chosen < len(question.options or []):
            return False
        return chosen == question.correct_option_index

    def _grade_identification(self, question: Question, raw_answer: Optional[str]) -> bool:
        if raw_answer is None:
            return False
        given = str(raw_answer).strip()
        if not given:
            return False
        return given.lower() == (question.correct_answer or "").strip().lower()

    def grade_questions(self, questions: List[Question], answers: Mapping[int, Optional[str]]) -> List[QuestionResult]:
        results = []
        for number, question in enumerate(questions, start=1):
            raw_answer = answers.get(question.id)
            graded = self.grade(question, raw_answer)
            results.append(QuestionResult(
                question_id=question.id,
                number=number,
                question_text=question.question_text,
                answer_text=raw_answer,
                correct_answer=question.correct_answer_text,
                is_correct=graded.is_correct,
                points_awarded=graded.points_awarded,
                points=question.points,
            ))
        return results

    def validate_answers(self, questions: List[Question], answers: Mapping[int, Optional[str]]) -> None:
        known = {q.id for q in questions}
        unknown = sorted(qid for qid in answers if qid not in known)
        if unknown:
            raise QuestionNotFound(
                f"Question(s) {unknown} do not belong to this exam.", question_ids=unknown
            )

    def grade_attempt(
        self, db: Session, exam_id: int, student_id: int, answers: Optional[SubmittedAnswers] = None
    ) -> AttemptGrade:
        """Score an attempt without writing anything.

        With ``answers=None`` the answers recorded for the student are used.
        Questions without an answer score zero but still count towards
        ``max_score``.
        """
        if not crud_exam.get(db, id=exam_id):
            raise ExamNotFound(exam_id=exam_id)

        questions = crud_question.get_by_exam(db, exam_id=exam_id)
        if answers is None:
            recorded = crud_student_answer.get_map(db, student_id=student_id, exam_id=exam_id)
            submitted = {qid: ans.answer_text for qid, ans in recorded.items()}
        else:
            submitted = normalize_answers(answers)
            self.validate_answers(questions, submitted)

        results = self.grade_questions(questions, submitted)
        return AttemptGrade(
            exam_id=exam_id,
            student_id=student_id,
            total_score=sum(r.points_awarded for r in results),
            max_score=sum(q.points for q in questions),
            results=results,
        )

    def regrade_answers(self, db: Session, student_id: int, exam_id: int) -> AttemptGrade:
        """Recompute ``is_correct`` for every recorded answer against the current key."""
        grade = self.grade_attempt(db, exam_id=exam_id, student_id=student_id)
        recorded = crud_student_answer.get_map(db, student_id=student_id, exam_id=exam_id)
        for result in grade.results:
            answer = recorded.get(result.question_id)
            if answer is not None and answer.is_correct != result.is_correct:
                crud_student_answer.set_correctness(db, answer=answer, is_correct=result.is_correct)
        db.commit()
        logger.info(f"Regraded answers of student {student_id} for exam {exam_id}: {grade.total_score}/{grade.max_score}")
        return grade


grading_engine = GradingEngine()
