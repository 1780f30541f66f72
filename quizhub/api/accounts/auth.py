from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import BaseModel, EmailStr
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quizhub.api.deps import bearer as auth_bearer
from quizhub.core import security
from quizhub.core.config import settings
from quizhub.core.exceptions import ConflictError
from quizhub.core.token_denylist import TokenDenylist, get_denylist
from quizhub.db.session import get_db, store_call
from quizhub.models.users import User, UserRole
from quizhub.models.user_sessions import UserSession

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterIn(BaseModel):
    name: str
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class RefreshIn(BaseModel):
    refresh_token: str


class LogoutIn(BaseModel):
    refresh_token: Optional[str] = None


async def _issue_tokens(db: AsyncSession, user: User) -> TokenOut:
    raw_refresh = security.create_refresh_token()
    db.add(
        UserSession(
            user_id=user.id,
            refresh_token_hash=security.hash_refresh_token(raw_refresh),
            expires_at=UserSession.default_expiry(settings.refresh_token_expire_days),
        )
    )
    await store_call(db.commit())
    access = security.create_access_token(user_id=user.id, role=user.role)
    return TokenOut(access_token=access, refresh_token=raw_refresh)


@router.post("/register", response_model=dict)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    res = await store_call(db.execute(select(User).where(User.email == payload.email)))
    if res.scalar_one_or_none():
        raise ConflictError("User already exists")
    try:
        password_hash = security.hash_password(payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    u = User(
        name=payload.name.strip(),
        email=payload.email,
        password_hash=password_hash,
        role=UserRole.user.value,
    )
    db.add(u)
    try:
        await store_call(db.commit())
    except IntegrityError:
        # concurrent registration won the unique email index
        await db.rollback()
        raise ConflictError("User already exists")
    await store_call(db.refresh(u))
    return {"id": u.id, "name": u.name, "email": u.email, "role": u.role}


@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    res = await store_call(db.execute(select(User).where(User.email == payload.email)))
    user = res.scalar_one_or_none()
    if not user or not user.is_active or not security.verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return await _issue_tokens(db, user)


@router.post("/refresh", response_model=TokenOut)
async def refresh(payload: RefreshIn, db: AsyncSession = Depends(get_db)):
    token_hash = security.hash_refresh_token(payload.refresh_token)

    res = await store_call(db.execute(select(UserSession).where(UserSession.refresh_token_hash == token_hash)))
    session = res.scalar_one_or_none()
    if not session:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    if not session.is_usable():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token expired or revoked")

    # rotate refresh token: revoke old & create new
    session.revoked_at = datetime.now(timezone.utc)

    res2 = await store_call(db.execute(select(User).where(User.id == session.user_id)))
    user = res2.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    return await _issue_tokens(db, user)


@router.post("/logout", response_model=dict)
async def logout(
    payload: LogoutIn | None = None,
    creds: HTTPAuthorizationCredentials | None = Depends(auth_bearer),
    db: AsyncSession = Depends(get_db),
    denylist: TokenDenylist = Depends(get_denylist),
):
    """Revoke the bearer access token and, when given, the refresh token.

    Idempotent: unknown or already-revoked tokens still return ok.
    """
    if creds:
        try:
            claims = security.decode_access_token(creds.credentials)
        except JWTError:
            raise HTTPException(status_code=400, detail="Invalid token")
        if claims.get("jti"):
            await denylist.revoke(claims["jti"], security.seconds_until_expiry(claims))

    if payload and payload.refresh_token:
        token_hash = security.hash_refresh_token(payload.refresh_token)
        res = await store_call(db.execute(select(UserSession).where(UserSession.refresh_token_hash == token_hash)))
        session = res.scalar_one_or_none()
        if session and session.revoked_at is None:
            session.revoked_at = datetime.now(timezone.utc)
            await store_call(db.commit())

    return {"ok": True}
