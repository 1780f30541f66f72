from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.api.deps import require_admin
from quizhub.db.session import get_db
from quizhub.models.users import User
from quizhub.schemas.quiz import (
    AdminQuizOut,
    FeaturedToggleOut,
    QuizCreateIn,
    QuizUpdateIn,
    quiz_to_dict,
)
from quizhub.services import catalog, quiz_admin

# Shares the /quizzes prefix; included before the public router so
# /quizzes/admin/all is matched ahead of /quizzes/{quiz_id}.
router = APIRouter(prefix="/quizzes", tags=["admin"])


@router.get("/admin/all", response_model=List[AdminQuizOut])
async def all_quizzes(_: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return [quiz_to_dict(q, with_creator=True) for q in await catalog.admin_quizzes(db)]


@router.post("", response_model=AdminQuizOut, status_code=status.HTTP_201_CREATED)
async def create_quiz(
    payload: QuizCreateIn,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    quiz = await quiz_admin.create_quiz(db, payload, created_by=admin.id)
    return quiz_to_dict(quiz, with_creator=True)


@router.put("/{quiz_id}", response_model=AdminQuizOut)
async def update_quiz(
    quiz_id: int,
    payload: QuizUpdateIn,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    quiz = await quiz_admin.update_quiz(db, quiz_id, payload)
    return quiz_to_dict(quiz, with_creator=True)


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: int, _: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    await quiz_admin.delete_quiz(db, quiz_id)
    return {"message": "Quiz removed"}


@router.put("/{quiz_id}/featured", response_model=FeaturedToggleOut)
async def toggle_featured(quiz_id: int, _: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    quiz = await quiz_admin.toggle_featured(db, quiz_id)
    where = "added to" if quiz.is_featured else "removed from"
    return {"id": quiz.id, "isFeatured": quiz.is_featured, "message": f"Quiz {where} featured"}
