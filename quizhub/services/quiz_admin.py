"""
Admin-side quiz lifecycle: create, update, delete and featuring.

Every multi-row mutation commits once, so a quiz never exists without its
questions and a delete never leaves half of its dependants behind.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.core.exceptions import UnavailableError, ValidationError
from quizhub.db.session import store_call
from quizhub.models import Bookmark, Difficulty, Question, Quiz, QuizResult
from quizhub.models.quizzes import DEFAULT_TIME_LIMIT
from quizhub.schemas.quiz import QuestionIn, QuizCreateIn, QuizUpdateIn
from quizhub.services.catalog import get_quiz

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "category", "difficulty")
DIFFICULTIES = {d.value for d in Difficulty}


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _validate_difficulty(difficulty: str) -> None:
    if difficulty not in DIFFICULTIES:
        raise ValidationError(
            f"difficulty must be one of {', '.join(sorted(DIFFICULTIES))}", field="difficulty"
        )


def _build_questions(items: List[QuestionIn]) -> List[Question]:
    questions = []
    for position, item in enumerate(items):
        label = f"Question {position + 1}"
        text = _clean(item.text)
        if not text:
            raise ValidationError(f"{label} has no text", field="questions")
        options = list(item.options)
        if len(options) < 2:
            raise ValidationError(f"{label} needs at least two options", field="questions")
        answer = item.correctAnswer
        if isinstance(answer, bool) or not isinstance(answer, int):
            raise ValidationError(f"{label} correctAnswer must be an option index", field="questions")
        if not 0 <= answer < len(options):
            raise ValidationError(
                f"{label} correctAnswer {answer} is outside its {len(options)} options",
                field="questions",
            )
        questions.append(
            Question(
                position=position,
                text=text,
                options=options,
                correct_answer=answer,
                explanation=_clean(item.explanation),
            )
        )
    return questions


async def create_quiz(db: AsyncSession, payload: QuizCreateIn, created_by: Optional[int]) -> Quiz:
    values = {name: _clean(getattr(payload, name)) for name in REQUIRED_FIELDS}
    if not all(values.values()) or not payload.questions:
        raise ValidationError("Please include all required fields and at least one question")
    _validate_difficulty(values["difficulty"])

    quiz = Quiz(
        **values,
        time_limit=payload.timeLimit or DEFAULT_TIME_LIMIT,
        is_featured=bool(payload.isFeatured),
        enrolled=0,
        rating=0,
        created_by=created_by,
    )
    quiz.questions = _build_questions(payload.questions)

    db.add(quiz)
    try:
        await store_call(db.commit())
    except Exception:
        await db.rollback()
        raise

    logger.info("Quiz %s created with %s questions", quiz.id, len(quiz.questions), extra={"quiz_id": quiz.id})
    return await get_quiz(db, quiz.id, with_creator=True)


async def update_quiz(db: AsyncSession, quiz_id: int, payload: QuizUpdateIn) -> Quiz:
    quiz = await get_quiz(db, quiz_id)

    changes = {name: _clean(getattr(payload, name)) for name in REQUIRED_FIELDS}
    changes = {name: value for name, value in changes.items() if value}
    if "difficulty" in changes:
        _validate_difficulty(changes["difficulty"])
    new_questions = _build_questions(payload.questions) if payload.questions else None

    for name, value in changes.items():
        setattr(quiz, name, value)
    if payload.timeLimit:
        quiz.time_limit = payload.timeLimit
    if payload.isFeatured is not None:
        quiz.is_featured = payload.isFeatured

    if new_questions is not None:
        # replace, not merge: delete-orphan drops the old rows on flush
        quiz.questions = new_questions

    try:
        await store_call(db.commit())
    except Exception:
        await db.rollback()
        raise

    logger.info("Quiz %s updated", quiz_id, extra={"quiz_id": quiz_id})
    return await get_quiz(db, quiz_id, with_creator=True)


async def delete_quiz(db: AsyncSession, quiz_id: int) -> None:
    """Delete a quiz and everything that points at it, in one transaction.

    Order: bookmarks, results, questions, quiz. On failure nothing is
    removed and the caller is told to run the delete again.
    """
    await get_quiz(db, quiz_id)

    try:
        await store_call(db.execute(delete(Bookmark).where(Bookmark.quiz_id == quiz_id)))
        await store_call(db.execute(delete(QuizResult).where(QuizResult.quiz_id == quiz_id)))
        await store_call(db.execute(delete(Question).where(Question.quiz_id == quiz_id)))
        await store_call(
            db.execute(
                delete(Quiz).where(Quiz.id == quiz_id).execution_options(synchronize_session=False)
            )
        )
        await store_call(db.commit())
    except (SQLAlchemyError, UnavailableError) as e:
        await db.rollback()
        logger.error("Cascade delete of quiz %s failed", quiz_id, exc_info=True, extra={"quiz_id": quiz_id})
        raise UnavailableError(
            f"Deleting quiz {quiz_id} did not complete; nothing was removed, please run the delete again"
        ) from e

    logger.info("Quiz %s deleted with its questions, results and bookmarks", quiz_id, extra={"quiz_id": quiz_id})


async def toggle_featured(db: AsyncSession, quiz_id: int) -> Quiz:
    quiz = await get_quiz(db, quiz_id)
    quiz.is_featured = not quiz.is_featured
    try:
        await store_call(db.commit())
    except Exception:
        await db.rollback()
        raise

    logger.info("Quiz %s featured=%s", quiz_id, quiz.is_featured, extra={"quiz_id": quiz_id})
    return quiz
