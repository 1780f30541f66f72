from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.api.deps import get_current_user
from quizhub.db.session import get_db
from quizhub.models.users import User
from quizhub.schemas.quiz import (
    BookmarkToggleOut,
    QuizOut,
    QuizResultOut,
    SubmitResultIn,
    quiz_to_dict,
    result_to_dict,
)
from quizhub.services import bookmarks, catalog, scoring

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.get("", response_model=List[QuizOut])
async def list_quizzes(
    search: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    quizzes = await catalog.list_quizzes(db, search=search, difficulty=difficulty, category=category, sort=sort)
    return [quiz_to_dict(q) for q in quizzes]


@router.get("/featured", response_model=List[QuizOut])
async def featured_quizzes(db: AsyncSession = Depends(get_db)):
    return [quiz_to_dict(q) for q in await catalog.featured_quizzes(db)]


@router.get("/{quiz_id}", response_model=QuizOut)
async def get_quiz(quiz_id: int, db: AsyncSession = Depends(get_db)):
    return quiz_to_dict(await catalog.get_quiz(db, quiz_id))


@router.post("/{quiz_id}/bookmark", response_model=BookmarkToggleOut)
async def toggle_bookmark(
    quiz_id: int,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    bookmarked = await bookmarks.toggle_bookmark(db, quiz_id, user.id)
    if bookmarked:
        response.status_code = status.HTTP_201_CREATED
        return {"bookmarked": True, "message": "Bookmark added"}
    return {"bookmarked": False, "message": "Bookmark removed"}


@router.post("/{quiz_id}/results", response_model=QuizResultOut, status_code=status.HTTP_201_CREATED)
async def submit_results(
    quiz_id: int,
    payload: SubmitResultIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await scoring.submit_result(
        db,
        quiz_id=quiz_id,
        user_id=user.id,
        answers=[a.model_dump() for a in payload.answers],
        time_taken=payload.timeTaken,
    )
    return result_to_dict(result)
