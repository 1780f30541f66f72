"""
Read side of the quiz collection: filtered listing, featured picks, the admin
view, single-quiz lookup and a user's result history.

Ordering is by the chosen sort key only. Rows that tie on that key come back
in whatever order the database produces; there is no secondary key. Sort keys
are case-sensitive: anything other than "rating", "newest" or "popular" sorts
by popularity.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quizhub.core.exceptions import NotFoundError
from quizhub.db.session import store_call
from quizhub.models import Quiz, QuizResult

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 3

SORT_COLUMNS = {
    "rating": Quiz.rating,
    "newest": Quiz.created_at,
    "popular": Quiz.enrolled,
}


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_catalog_query(
    search: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
):
    stmt = select(Quiz).options(selectinload(Quiz.questions))

    if search:
        pattern = f"%{_escape_like(search)}%"
        stmt = stmt.where(
            or_(
                Quiz.title.ilike(pattern, escape="\\"),
                Quiz.description.ilike(pattern, escape="\\"),
            )
        )
    if difficulty:
        stmt = stmt.where(Quiz.difficulty == difficulty)
    if category:
        stmt = stmt.where(Quiz.category == category)

    # exact keys only; anything else sorts by popularity
    column = SORT_COLUMNS.get(sort or "", Quiz.enrolled)
    return stmt.order_by(column.desc())


async def list_quizzes(
    db: AsyncSession,
    search: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[Quiz]:
    stmt = build_catalog_query(search=search, difficulty=difficulty, category=category, sort=sort)
    res = await store_call(db.execute(stmt))
    return list(res.scalars().all())


async def featured_quizzes(db: AsyncSession, limit: int = FEATURED_LIMIT) -> List[Quiz]:
    stmt = (
        select(Quiz)
        .options(selectinload(Quiz.questions))
        .where(Quiz.is_featured.is_(True))
        .order_by(Quiz.enrolled.desc())
        .limit(min(limit, FEATURED_LIMIT))
    )
    res = await store_call(db.execute(stmt))
    return list(res.scalars().all())


async def admin_quizzes(db: AsyncSession) -> List[Quiz]:
    stmt = (
        select(Quiz)
        .options(selectinload(Quiz.questions), selectinload(Quiz.creator))
        .order_by(Quiz.created_at.desc())
        .execution_options(populate_existing=True)
    )
    res = await store_call(db.execute(stmt))
    return list(res.scalars().all())


async def get_quiz(db: AsyncSession, quiz_id: int, with_creator: bool = False) -> Quiz:
    options = [selectinload(Quiz.questions)]
    if with_creator:
        options.append(selectinload(Quiz.creator))
    stmt = (
        select(Quiz)
        .options(*options)
        .where(Quiz.id == quiz_id)
        .execution_options(populate_existing=True)
    )
    res = await store_call(db.execute(stmt))
    quiz = res.scalar_one_or_none()
    if quiz is None:
        raise NotFoundError("Quiz not found")
    return quiz


async def list_user_results(db: AsyncSession, user_id: int) -> List[QuizResult]:
    stmt = (
        select(QuizResult)
        .options(selectinload(QuizResult.quiz))
        .where(QuizResult.user_id == user_id)
        .order_by(QuizResult.created_at.desc())
        .execution_options(populate_existing=True)
    )
    res = await store_call(db.execute(stmt))
    return list(res.scalars().all())
