from typing import Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.core import security
from quizhub.models import Question, Quiz, User, UserRole


class FakeDenylist:
    """In-memory stand-in for the Redis denylist (no TTL handling)."""

    def __init__(self):
        self.revoked: dict[str, int] = {}

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        if ttl_seconds > 0:
            self.revoked[jti] = ttl_seconds

    async def is_revoked(self, jti: str) -> bool:
        return jti in self.revoked


async def make_user(
    db: AsyncSession,
    email: str = "player@example.com",
    name: str = "Player",
    role: str = UserRole.user.value,
    password_hash: str = "hashed",
) -> User:
    user = User(name=name, email=email, password_hash=password_hash, role=role, is_active=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_quiz(
    db: AsyncSession,
    title: str = "Python Basics",
    description: str = "Warm-up questions on the Python language",
    difficulty: str = "Beginner",
    category: str = "Programming",
    questions: Sequence[Tuple[Sequence[str], int]] = ((("a", "b", "c"), 0), (("a", "b", "c"), 2)),
    **fields,
) -> Quiz:
    quiz = Quiz(
        title=title,
        description=description,
        difficulty=difficulty,
        category=category,
        **fields,
    )
    quiz.questions = [
        Question(position=i, text=f"Question {i + 1}", options=list(options), correct_answer=correct, explanation="")
        for i, (options, correct) in enumerate(questions)
    ]
    db.add(quiz)
    await db.commit()
    return quiz


def auth_header(user: User) -> dict:
    token = security.create_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


async def count_rows(db: AsyncSession, model, quiz_id: Optional[int] = None) -> int:
    stmt = select(func.count()).select_from(model)
    if quiz_id is not None:
        stmt = stmt.where(model.quiz_id == quiz_id)
    res = await db.execute(stmt)
    return res.scalar_one()
