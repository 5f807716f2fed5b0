"""Time budgets of an in-progress attempt.

An attempt has two independent budgets and the stricter one wins: the
exam duration counted from when the student started, and the exam-wide
deadline if one is set.
"""
from datetime import datetime, timedelta

from examcore.core.clock import utc


def expires_at(attempt, exam) -> datetime:
    duration_end = utc(attempt.started_at) + timedelta(minutes=exam.duration_minutes)
    deadline = utc(exam.deadline)
    if deadline is not None and deadline < duration_end:
        return deadline
    return duration_end


def is_expired(attempt, exam, now: datetime) -> bool:
    return utc(now) >= expires_at(attempt, exam)


def remaining_seconds(attempt, exam, now: datetime) -> int:
    left = (expires_at(attempt, exam) - utc(now)).total_seconds()
    return max(0, int(left))
