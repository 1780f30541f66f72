import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quizhub.core.exceptions import NotFoundError
from quizhub.db.session import store_call
from quizhub.models import Bookmark, Quiz

logger = logging.getLogger(__name__)


async def _ensure_quiz_exists(db: AsyncSession, quiz_id: int) -> None:
    res = await store_call(db.execute(select(Quiz.id).where(Quiz.id == quiz_id)))
    if res.scalar_one_or_none() is None:
        raise NotFoundError("Quiz not found")


async def _delete_existing(db: AsyncSession, user_id: int, quiz_id: int) -> int:
    res = await store_call(
        db.execute(
            delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.quiz_id == quiz_id)
        )
    )
    return res.rowcount or 0


async def toggle_bookmark(db: AsyncSession, quiz_id: int, user_id: int) -> bool:
    """Flip the (user, quiz) bookmark; returns the new presence state.

    Uniqueness lives in the ``uq_bookmarks_user_quiz`` constraint. When two
    toggles race and both try to create, the loser's insert fails and it
    reports the bookmark as present, which it is.
    """
    await _ensure_quiz_exists(db, quiz_id)

    removed = await _delete_existing(db, user_id, quiz_id)
    if removed:
        await store_call(db.commit())
        logger.info("Bookmark removed: user=%s quiz=%s", user_id, quiz_id)
        return False

    db.add(Bookmark(user_id=user_id, quiz_id=quiz_id))
    try:
        await store_call(db.commit())
    except IntegrityError:
        await db.rollback()
        logger.info("Bookmark already present (concurrent toggle): user=%s quiz=%s", user_id, quiz_id)
        return True

    logger.info("Bookmark added: user=%s quiz=%s", user_id, quiz_id)
    return True


async def list_user_bookmarks(db: AsyncSession, user_id: int) -> List[Bookmark]:
    stmt = (
        select(Bookmark)
        .options(selectinload(Bookmark.quiz))
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc())
        .execution_options(populate_existing=True)
    )
    res = await store_call(db.execute(stmt))
    return list(res.scalars().all())
