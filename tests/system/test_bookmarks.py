import pytest
from sqlalchemy.exc import IntegrityError

from quizhub.core.exceptions import NotFoundError
from quizhub.models import Bookmark
from quizhub.services import bookmarks
from tests.helpers import count_rows, make_quiz, make_user

pytestmark = pytest.mark.anyio


async def test_toggle_twice_returns_to_original_state(db):
    user = await make_user(db)
    quiz = await make_quiz(db)

    assert await bookmarks.toggle_bookmark(db, quiz.id, user.id) is True
    assert await count_rows(db, Bookmark, quiz.id) == 1

    assert await bookmarks.toggle_bookmark(db, quiz.id, user.id) is False
    assert await count_rows(db, Bookmark, quiz.id) == 0


async def test_bookmarks_are_per_user(db):
    alice = await make_user(db, email="alice@example.com")
    bob = await make_user(db, email="bob@example.com")
    quiz = await make_quiz(db)

    assert await bookmarks.toggle_bookmark(db, quiz.id, alice.id) is True
    assert await bookmarks.toggle_bookmark(db, quiz.id, bob.id) is True
    assert await count_rows(db, Bookmark, quiz.id) == 2


async def test_store_rejects_duplicate_pair(db):
    user = await make_user(db)
    quiz = await make_quiz(db)
    db.add(Bookmark(user_id=user.id, quiz_id=quiz.id))
    await db.commit()

    db.add(Bookmark(user_id=user.id, quiz_id=quiz.id))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


async def test_lost_create_race_reports_bookmarked(db, monkeypatch):
    user = await make_user(db)
    quiz = await make_quiz(db)
    # the competing toggle has already inserted the row
    db.add(Bookmark(user_id=user.id, quiz_id=quiz.id))
    await db.commit()

    async def _nothing_deleted(*args, **kwargs):
        return 0

    monkeypatch.setattr(bookmarks, "_delete_existing", _nothing_deleted)
    # the failed insert rolls the session back and expires loaded objects
    quiz_id, user_id = quiz.id, user.id

    assert await bookmarks.toggle_bookmark(db, quiz_id, user_id) is True
    assert await count_rows(db, Bookmark, quiz_id) == 1


async def test_toggle_unknown_quiz(db):
    user = await make_user(db)
    with pytest.raises(NotFoundError):
        await bookmarks.toggle_bookmark(db, 4242, user.id)


async def test_list_user_bookmarks_newest_first(db):
    user = await make_user(db)
    first = await make_quiz(db, title="First")
    second = await make_quiz(db, title="Second")
    await bookmarks.toggle_bookmark(db, first.id, user.id)
    await bookmarks.toggle_bookmark(db, second.id, user.id)

    listed = await bookmarks.list_user_bookmarks(db, user.id)

    assert {b.quiz.title for b in listed} == {"First", "Second"}
    assert listed[0].created_at >= listed[1].created_at
