from typing import Any, Dict, Optional


class ExamEngineError(Exception):
    """Base class for every error the exam engine reports to its callers.

    Each subclass is one error kind with a stable ``code``, the HTTP status
    the API layer answers with and a single user-facing message.
    """

    code: str = "EXAM_ENGINE_ERROR"
    status_code: int = 400
    message: str = "The exam request could not be completed."

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.message
        self.details: Dict[str, Any] = details
        super().__init__(self.message)


class NotPublished(ExamEngineError):
    code = "NOT_PUBLISHED"
    status_code = 403
    message = "This exam is not available."


class AlreadyAttempted(ExamEngineError):
    code = "ALREADY_ATTEMPTED"
    status_code = 409
    message = "You have already taken this exam."


class DeadlinePassed(ExamEngineError):
    code = "DEADLINE_PASSED"
    status_code = 403
    message = "The deadline for this exam has passed."


class CannotUnpublish(ExamEngineError):
    code = "CANNOT_UNPUBLISH"
    status_code = 409
    message = "This exam cannot be unpublished because students have already attempted it."


class AttemptNotFound(ExamEngineError):
    code = "ATTEMPT_NOT_FOUND"
    status_code = 404
    message = "You have not started this exam."


class AttemptClosed(ExamEngineError):
    code = "ATTEMPT_CLOSED"
    status_code = 409
    message = "This exam attempt has already been submitted."


class StoreUnavailable(ExamEngineError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
    message = "The exam service is temporarily unavailable."


class ExamNotFound(ExamEngineError):
    code = "EXAM_NOT_FOUND"
    status_code = 404
    message = "Exam not found."


class QuestionNotFound(ExamEngineError):
    code = "QUESTION_NOT_FOUND"
    status_code = 404
    message = "Question not found."


class CourseNotFound(ExamEngineError):
    code = "COURSE_NOT_FOUND"
    status_code = 404
    message = "Course not found."


class ExamLocked(ExamEngineError):
    code = "EXAM_LOCKED"
    status_code = 409
    message = "This exam can no longer be modified because students have attempted it."


class ExamHasNoQuestions(ExamEngineError):
    code = "EXAM_HAS_NO_QUESTIONS"
    status_code = 400
    message = "An exam needs at least one question before it can be published."


class PermissionDenied(ExamEngineError):
    code = "PERMISSION_DENIED"
    status_code = 403
    message = "You do not have permission to perform this action."
