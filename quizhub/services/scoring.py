"""
Quiz submission and grading.

Grading is lenient about *values* and strict about *shape*: a selection that
is out of range, negative or fractional is simply wrong, but a selection that
is not a number, or an answer pointing at a question outside the quiz, rejects the
whole submission before anything is written.
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.core.config import settings
from quizhub.core.exceptions import ConflictError, ValidationError
from quizhub.db.session import store_call
from quizhub.models import Question, Quiz, QuizResult, User
from quizhub.services.catalog import get_quiz

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid option index
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return _is_int(value) or (isinstance(value, float) and math.isfinite(value))


def grade_answers(
    questions: Sequence[Question],
    answers: Iterable[Mapping[str, Any]],
) -> Tuple[int, List[dict]]:
    """Grade ``answers`` against ``questions``.

    Each answer is a mapping with ``questionId`` and ``selectedOption``.
    Returns ``(score, graded)`` where ``graded`` keeps submission order.
    Raises ``ValidationError`` for unknown or repeated question ids and for
    non-numeric selections. A numeric selection is compared with ``==``, so
    ``0.0`` matches option 0 and ``1.5`` matches nothing.
    """
    by_id = {q.id: q for q in questions}
    seen = set()
    graded = []
    score = 0

    for answer in answers:
        question_id = answer.get("questionId")
        selected = answer.get("selectedOption")

        if not _is_int(question_id):
            raise ValidationError(f"Invalid question id: {question_id!r}", field="questionId")
        question = by_id.get(question_id)
        if question is None:
            raise ValidationError(
                f"Question {question_id} does not belong to this quiz", field="questionId"
            )
        if question_id in seen:
            raise ValidationError(f"Question {question_id} answered more than once", field="questionId")
        seen.add(question_id)

        if not _is_number(selected):
            raise ValidationError(
                f"selectedOption for question {question_id} must be a number", field="selectedOption"
            )

        is_correct = selected == question.correct_answer
        if is_correct:
            score += 1
        graded.append({"question": question_id, "selectedOption": selected, "isCorrect": is_correct})

    return score, graded


def _submitter_lock(user_id: int):
    return select(User.id).where(User.id == user_id).with_for_update()


async def _has_previous_result(db: AsyncSession, quiz_id: int, user_id: int) -> bool:
    """Count earlier results while holding the submitter's row lock.

    The lock lives until the submission commits or rolls back, so two
    concurrent first submissions by one user are serialised and the second
    sees the first one's row.
    """
    await store_call(db.execute(_submitter_lock(user_id)))
    stmt = select(func.count(QuizResult.id)).where(
        QuizResult.quiz_id == quiz_id, QuizResult.user_id == user_id
    )
    res = await store_call(db.execute(stmt))
    return res.scalar_one() > 0


async def submit_result(
    db: AsyncSession,
    quiz_id: int,
    user_id: int,
    answers: Iterable[Mapping[str, Any]],
    time_taken: float,
) -> QuizResult:
    """Grade a submission, store the result and bump the quiz's ``enrolled``.

    The result insert and the counter increment commit together. The
    increment is a single ``UPDATE ... SET enrolled = enrolled + 1`` so
    concurrent submissions never lose a count.
    """
    if not _is_number(time_taken) or time_taken < 0:
        raise ValidationError("timeTaken must be a non-negative number of seconds", field="timeTaken")

    quiz = await get_quiz(db, quiz_id)
    score, graded = grade_answers(quiz.questions, answers)

    if not settings.allow_resubmission and await _has_previous_result(db, quiz_id, user_id):
        await db.rollback()
        raise ConflictError("You have already submitted this quiz")

    result = QuizResult(
        user_id=user_id,
        quiz_id=quiz.id,
        score=score,
        total_questions=len(quiz.questions),
        time_taken=time_taken,
        answers=graded,
    )
    db.add(result)
    try:
        await store_call(
            db.execute(
                update(Quiz)
                .where(Quiz.id == quiz.id)
                .values(enrolled=Quiz.enrolled + 1)
                .execution_options(synchronize_session=False)
            )
        )
        await store_call(db.commit())
    except Exception:
        await db.rollback()
        raise

    # id and created_at are already populated; no round trip after the commit
    logger.info(
        "Quiz %s submitted by user %s: %s/%s",
        quiz.id,
        user_id,
        score,
        result.total_questions,
        extra={"quiz_id": quiz.id, "user_id": user_id},
    )
    return result
