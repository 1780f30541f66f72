"""
Quiz-related Pydantic schemas.

Wire names are camelCase. Request models are deliberately loose about
required fields so the services can report every missing field as a
``ValidationError`` with one consistent message.
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from quizhub.models import Bookmark, Question, Quiz, QuizResult


class QuestionIn(BaseModel):
    text: str = ""
    options: List[str] = Field(default_factory=list)
    correctAnswer: Any = None
    explanation: str = ""


class QuizCreateIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    timeLimit: Optional[int] = Field(default=None, gt=0)
    isFeatured: Optional[bool] = None
    questions: List[QuestionIn] = Field(default_factory=list)


class QuizUpdateIn(QuizCreateIn):
    """Same fields as create; everything omitted is left untouched."""


class AnswerIn(BaseModel):
    questionId: int
    # checked by the scoring engine so bad types surface as ValidationError
    selectedOption: Any = None


class SubmitResultIn(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)
    # seconds; fractions allowed
    timeTaken: float = 0


class QuestionPublicOut(BaseModel):
    id: int
    text: str
    options: List[str]


class QuestionOut(QuestionPublicOut):
    correctAnswer: int
    explanation: str


class QuizSummaryOut(BaseModel):
    id: int
    title: str
    description: str
    difficulty: str
    category: str
    timeLimit: int
    isFeatured: bool
    enrolled: int
    rating: float
    createdAt: datetime


class QuizOut(QuizSummaryOut):
    questions: List[QuestionPublicOut]


class CreatorOut(BaseModel):
    id: int
    name: str
    email: str


class AdminQuizOut(QuizSummaryOut):
    questions: List[QuestionOut]
    createdBy: Optional[CreatorOut] = None


class GradedAnswerOut(BaseModel):
    question: int
    selectedOption: Union[int, float]
    isCorrect: bool


class QuizResultOut(BaseModel):
    id: int
    user: int
    quiz: int
    score: int
    totalQuestions: int
    timeTaken: float
    answers: List[GradedAnswerOut]
    createdAt: datetime


class UserResultOut(QuizResultOut):
    quizSummary: Optional[QuizSummaryOut] = None


class BookmarkToggleOut(BaseModel):
    bookmarked: bool
    message: str


class BookmarkOut(BaseModel):
    id: int
    quiz: QuizSummaryOut
    createdAt: datetime


class FeaturedToggleOut(BaseModel):
    id: int
    isFeatured: bool
    message: str


# ---------------------------------------------------------------------------
# ORM -> wire dicts. The route's response_model decides which keys survive,
# so correct answers only leave the API through admin routes.
# ---------------------------------------------------------------------------

def question_to_dict(q: Question) -> dict:
    return {
        "id": q.id,
        "text": q.text,
        "options": list(q.options or []),
        "correctAnswer": q.correct_answer,
        "explanation": q.explanation,
    }


def quiz_summary_to_dict(quiz: Quiz) -> dict:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "difficulty": quiz.difficulty,
        "category": quiz.category,
        "timeLimit": quiz.time_limit,
        "isFeatured": quiz.is_featured,
        "enrolled": quiz.enrolled,
        "rating": quiz.rating,
        "createdAt": quiz.created_at,
    }


def quiz_to_dict(quiz: Quiz, with_creator: bool = False) -> dict:
    out = quiz_summary_to_dict(quiz)
    out["questions"] = [question_to_dict(q) for q in quiz.questions]
    if with_creator:
        creator = quiz.creator
        out["createdBy"] = (
            {"id": creator.id, "name": creator.name, "email": creator.email}
            if creator is not None
            else None
        )
    return out


def result_to_dict(result: QuizResult, with_quiz: bool = False) -> dict:
    out = {
        "id": result.id,
        "user": result.user_id,
        "quiz": result.quiz_id,
        "score": result.score,
        "totalQuestions": result.total_questions,
        "timeTaken": result.time_taken,
        "answers": list(result.answers or []),
        "createdAt": result.created_at,
    }
    if with_quiz:
        out["quizSummary"] = quiz_summary_to_dict(result.quiz) if result.quiz is not None else None
    return out


def bookmark_to_dict(bookmark: Bookmark) -> dict:
    return {
        "id": bookmark.id,
        "quiz": quiz_summary_to_dict(bookmark.quiz),
        "createdAt": bookmark.created_at,
    }
