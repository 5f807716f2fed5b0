from examcore.core.exceptions import PermissionDenied
from examcore.schemas.user import UserContext


class PermissionHelper:
    @staticmethod
    def require_instructor(context: UserContext):
        if not context.is_instructor:
            raise PermissionDenied("Only instructors can perform this action.")

    @staticmethod
    def require_student(context: UserContext):
        if not context.is_student:
            raise PermissionDenied("Only students can take exams.")

    @staticmethod
    def require_owner(context: UserContext, resource):
        """Instructor must own the course or exam being managed."""
        PermissionHelper.require_instructor(context)
        if resource.instructor_id != context.user_id:
            raise PermissionDenied("You can only manage your own courses and exams.")

    @staticmethod
    def require_self_or_instructor(context: UserContext, student_id: int):
        if context.is_student and context.user_id != student_id:
            raise PermissionDenied("You can only view your own results.")
