from .users import User, UserRole
from .user_sessions import UserSession
from .quizzes import Quiz, Question, QuizResult, Bookmark, Difficulty

# Expose module-level names for `from quizhub.models import *`
__all__ = [
	"User",
	"UserRole",
	"UserSession",
	"Quiz",
	"Question",
	"QuizResult",
	"Bookmark",
	"Difficulty",
]
