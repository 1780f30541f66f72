"""Schemas package."""

from .quiz import (
    AdminQuizOut,
    AnswerIn,
    BookmarkOut,
    BookmarkToggleOut,
    FeaturedToggleOut,
    QuestionIn,
    QuizCreateIn,
    QuizOut,
    QuizResultOut,
    QuizSummaryOut,
    QuizUpdateIn,
    SubmitResultIn,
    UserResultOut,
)

__all__ = [
    # Requests
    "AnswerIn",
    "QuestionIn",
    "QuizCreateIn",
    "QuizUpdateIn",
    "SubmitResultIn",
    # Responses
    "AdminQuizOut",
    "BookmarkOut",
    "BookmarkToggleOut",
    "FeaturedToggleOut",
    "QuizOut",
    "QuizResultOut",
    "QuizSummaryOut",
    "UserResultOut",
]
