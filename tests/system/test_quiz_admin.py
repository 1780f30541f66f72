import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from quizhub.core.exceptions import NotFoundError, UnavailableError, ValidationError
from quizhub.models import Bookmark, Question, Quiz, QuizResult
from quizhub.schemas.quiz import QuestionIn, QuizCreateIn, QuizUpdateIn
from quizhub.services import bookmarks, quiz_admin
from quizhub.services.scoring import submit_result
from tests.helpers import count_rows, make_quiz, make_user

pytestmark = pytest.mark.anyio


def _payload(**overrides) -> QuizCreateIn:
    data = dict(
        title="Git Essentials",
        description="Branches, merges and rebases",
        category="Tooling",
        difficulty="Intermediate",
        questions=[
            QuestionIn(text="Create a branch?", options=["git branch", "git add"], correctAnswer=0),
            QuestionIn(text="Stage a file?", options=["git push", "git add", "git log"], correctAnswer=1,
                       explanation="add stages changes"),
        ],
    )
    data.update(overrides)
    return QuizCreateIn(**data)


async def test_create_quiz_with_defaults(db):
    admin = await make_user(db, email="admin@example.com", role="admin")

    quiz = await quiz_admin.create_quiz(db, _payload(), created_by=admin.id)

    assert quiz.id is not None
    assert quiz.time_limit == 15
    assert quiz.is_featured is False
    assert quiz.enrolled == 0
    assert [q.correct_answer for q in quiz.questions] == [0, 1]
    assert quiz.creator.email == "admin@example.com"


@pytest.mark.parametrize("field", ["title", "description", "category", "difficulty"])
async def test_create_requires_fields(db, field):
    with pytest.raises(ValidationError):
        await quiz_admin.create_quiz(db, _payload(**{field: "  "}), created_by=None)
    assert await count_rows(db, Quiz) == 0


async def test_create_requires_a_question(db):
    with pytest.raises(ValidationError):
        await quiz_admin.create_quiz(db, _payload(questions=[]), created_by=None)


async def test_create_rejects_unknown_difficulty(db):
    with pytest.raises(ValidationError):
        await quiz_admin.create_quiz(db, _payload(difficulty="Expert"), created_by=None)


@pytest.mark.parametrize("answer", [2, -1, "0", None, True])
async def test_create_rejects_bad_correct_answer(db, answer):
    bad = QuestionIn(text="Pick", options=["x", "y"], correctAnswer=answer)
    with pytest.raises(ValidationError):
        await quiz_admin.create_quiz(db, _payload(questions=[bad]), created_by=None)
    assert await count_rows(db, Question) == 0


async def test_update_replaces_question_set(db):
    quiz = await make_quiz(db, questions=[(("a", "b"), 0), (("a", "b"), 1), (("a", "b"), 0)])
    quiz_id = quiz.id

    updated = await quiz_admin.update_quiz(
        db,
        quiz_id,
        QuizUpdateIn(
            title="Renamed",
            questions=[QuestionIn(text="Only one", options=["yes", "no"], correctAnswer=1)],
        ),
    )

    assert updated.title == "Renamed"
    assert updated.description == "Warm-up questions on the Python language"
    assert [q.text for q in updated.questions] == ["Only one"]
    assert await count_rows(db, Question, quiz_id) == 1


async def test_update_keeps_questions_when_none_given(db):
    quiz = await make_quiz(db)
    updated = await quiz_admin.update_quiz(db, quiz.id, QuizUpdateIn(isFeatured=True, timeLimit=30))
    assert updated.is_featured is True
    assert updated.time_limit == 30
    assert len(updated.questions) == 2


async def test_update_missing_quiz(db):
    with pytest.raises(NotFoundError):
        await quiz_admin.update_quiz(db, 404, QuizUpdateIn(title="x"))


async def test_delete_cascades_everything(db):
    user = await make_user(db)
    quiz = await make_quiz(db)
    other = await make_quiz(db, title="Keep me")
    quiz_id, other_id, user_id = quiz.id, other.id, user.id
    await submit_result(db, quiz_id=quiz_id, user_id=user_id, answers=[], time_taken=3)
    await bookmarks.toggle_bookmark(db, quiz_id, user_id)
    await bookmarks.toggle_bookmark(db, other_id, user_id)

    await quiz_admin.delete_quiz(db, quiz_id)

    for model in (Question, QuizResult, Bookmark):
        assert await count_rows(db, model, quiz_id) == 0
    remaining = await db.execute(select(Quiz.id).where(Quiz.id == quiz_id))
    assert remaining.scalar_one_or_none() is None
    assert await count_rows(db, Question, other_id) == 2
    assert await count_rows(db, Bookmark, other_id) == 1


async def test_delete_failure_rolls_back_and_is_unavailable(db, monkeypatch):
    user = await make_user(db)
    quiz = await make_quiz(db)
    quiz_id, user_id = quiz.id, user.id
    await bookmarks.toggle_bookmark(db, quiz_id, user_id)

    real_execute = db.execute
    calls = {"n": 0}

    async def flaky_execute(stmt, *args, **kwargs):
        calls["n"] += 1
        # fail on the question delete, after bookmarks and results went
        if calls["n"] == 4:
            raise OperationalError("DELETE", {}, Exception("connection lost"))
        return await real_execute(stmt, *args, **kwargs)

    monkeypatch.setattr(db, "execute", flaky_execute)
    with pytest.raises(UnavailableError) as exc:
        await quiz_admin.delete_quiz(db, quiz_id)
    monkeypatch.undo()

    assert "run the delete again" in exc.value.message
    assert await count_rows(db, Bookmark, quiz_id) == 1
    assert await count_rows(db, Question, quiz_id) == 2


async def test_toggle_featured_flips(db):
    quiz = await make_quiz(db)
    assert (await quiz_admin.toggle_featured(db, quiz.id)).is_featured is True
    assert (await quiz_admin.toggle_featured(db, quiz.id)).is_featured is False


async def test_toggle_featured_failure_rolls_back(db, monkeypatch):
    quiz = await make_quiz(db)
    quiz_id = quiz.id

    async def lost_connection():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "commit", lost_connection)
    with pytest.raises(UnavailableError):
        await quiz_admin.toggle_featured(db, quiz_id)
    monkeypatch.undo()

    # a dirty flag left in the session would autoflush into this read
    flag = await db.execute(select(Quiz.is_featured).where(Quiz.id == quiz_id))
    assert flag.scalar_one() is False
