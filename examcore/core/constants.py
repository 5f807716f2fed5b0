from enum import Enum


class RoleEnum(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"

class QuestionTypeEnum(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    IDENTIFICATION = "identification"

class AttemptStatusEnum(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TIMEOUT = "timeout"

class StudentExamStatusEnum(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    TIMEOUT = "timeout"


TERMINAL_ATTEMPT_STATUSES = (AttemptStatusEnum.COMPLETED, AttemptStatusEnum.TIMEOUT)
