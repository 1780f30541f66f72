from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.api.deps import get_current_user
from quizhub.db.session import get_db
from quizhub.models.users import User
from quizhub.schemas.quiz import BookmarkOut, UserResultOut, bookmark_to_dict, result_to_dict
from quizhub.services import bookmarks, catalog

router = APIRouter(tags=["me"])


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role}


@router.get("/users/results", response_model=List[UserResultOut])
async def my_results(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    results = await catalog.list_user_results(db, user.id)
    return [result_to_dict(r, with_quiz=True) for r in results]


@router.get("/users/bookmarks", response_model=List[BookmarkOut])
async def my_bookmarks(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return [bookmark_to_dict(b) for b in await bookmarks.list_user_bookmarks(db, user.id)]
