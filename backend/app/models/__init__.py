from app.models.user import User, UserRole
from app.models.quiz import Question, Quiz
from app.models.attempt import QuizAttempt
from app.models.follow import InstructorFollow
from app.models.security_audit import SecurityAuditEvent

__all__ = [
    "User",
    "UserRole",
    "Quiz",
    "Question",
    "QuizAttempt",
    "InstructorFollow",
    "SecurityAuditEvent",
]
