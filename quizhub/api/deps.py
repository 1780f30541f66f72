from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from quizhub.core import security
from quizhub.core.exceptions import AuthorizationError
from quizhub.core.token_denylist import TokenDenylist, get_denylist
from quizhub.db.session import get_db, store_call
from quizhub.models.users import User

bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    denylist: TokenDenylist = Depends(get_denylist),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    token = creds.credentials
    try:
        payload = security.decode_access_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    jti = payload.get("jti")
    if jti and await denylist.is_revoked(jti):
        raise HTTPException(status_code=401, detail="Token has been revoked")

    res = await store_call(db.execute(select(User).where(User.id == user_id)))
    user = res.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def require_roles(*roles: str):
    async def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationError("Not authorized as an admin" if roles == ("admin",) else "Forbidden")
        return user
    return _guard


require_admin = require_roles("admin")
