from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quizhub.db.base import Base


class Difficulty(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"


DEFAULT_TIME_LIMIT = 15  # minutes


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = (
        CheckConstraint("enrolled >= 0", name="ck_quizzes_enrolled_non_negative"),
        CheckConstraint("rating >= 0", name="ck_quizzes_rating_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    time_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_TIME_LIMIT)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enrolled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.position",
    )
    creator = relationship("User")


class Question(Base):
    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list] = mapped_column(JSON, nullable=False)  # ["A", "B", "C", "D"]
    correct_answer: Mapped[int] = mapped_column(Integer, nullable=False)  # index into options
    explanation: Mapped[str] = mapped_column(Text, nullable=False, default="")

    quiz = relationship("Quiz", back_populates="questions")


class QuizResult(Base):
    """Immutable grading outcome of one submission."""

    __tablename__ = "quiz_results"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_quiz_results_score_non_negative"),
        CheckConstraint("score <= total_questions", name="ck_quiz_results_score_bounded"),
        CheckConstraint("time_taken >= 0", name="ck_quiz_results_time_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    time_taken: Mapped[float] = mapped_column(Float, nullable=False)  # seconds
    # [{"question": id, "selectedOption": number, "isCorrect": bool}, ...]
    answers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    quiz = relationship("Quiz")


class Bookmark(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", name="uq_bookmarks_user_quiz"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    quiz = relationship("Quiz")
