from app.routers import auth, dashboard, health, instructors, quizzes

__all__ = [
    "auth",
    "dashboard",
    "health",
    "instructors",
    "quizzes",
]
