from examcore.models.course import Course, CourseEnrollment
from examcore.models.exam import Exam
from examcore.models.question import Question
from examcore.models.exam_attempt import ExamAttempt
from examcore.models.student_answer import StudentAnswer
