import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from examcore.core.clock import Clock, system_clock, utc
from examcore.core.constants import AttemptStatusEnum
from examcore.crud.exam_attempt import exam_attempt as crud_exam_attempt
from examcore.schemas.exam_attempt import AttemptReport
from examcore.services import budget
from examcore.services.exam_lifecycle import ExamLifecycle, exam_lifecycle

logger = logging.getLogger(__name__)


class AttemptScheduler:
    """Server-side enforcement of attempt time budgets."""

    def __init__(self, lifecycle: ExamLifecycle = exam_lifecycle, clock: Clock = system_clock):
        self.lifecycle = lifecycle
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return utc(now) if now is not None else self.clock.now()

    def expires_at(self, attempt, exam) -> datetime:
        return budget.expires_at(attempt, exam)

    def is_expired(self, attempt, exam, now: Optional[datetime] = None) -> bool:
        return budget.is_expired(attempt, exam, self._now(now))

    def remaining_seconds(self, attempt, exam, now: Optional[datetime] = None) -> int:
        return budget.remaining_seconds(attempt, exam, self._now(now))

    def sweep_expired_attempts(self, db: Session, now: Optional[datetime] = None) -> List[AttemptReport]:
        """Finalize every expired in-progress attempt as timed out.

        Answers recorded so far are graded; unanswered questions score zero.
        Safe to run at any frequency.
        """
        now = self._now(now)
        expired = [
            (attempt.student_id, attempt.exam_id)
            for attempt in crud_exam_attempt.get_all_in_progress(db)
            if budget.is_expired(attempt, attempt.exam, now)
        ]

        reports = []
        for student_id, exam_id in expired:
            report = self.lifecycle.finalize_attempt(
                db, student_id, exam_id, answers=None, now=now, reason=AttemptStatusEnum.TIMEOUT
            )
            reports.append(report)

        if reports:
            logger.info(f"Sweep at {now.isoformat()} timed out {len(reports)} attempt(s)")
        return reports


attempt_scheduler = AttemptScheduler()
