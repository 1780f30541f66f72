"""
Redis-backed denylist for revoked access tokens.

A logged-out token is stored under ``revoked:<jti>`` with a TTL equal to the
token's remaining lifetime, so the entry disappears on its own once the token
would have expired anyway. Every API instance pointing at the same Redis sees
the same revocations.
"""

import logging
from typing import Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from quizhub.core.exceptions import UnavailableError

logger = logging.getLogger(__name__)

KEY_PREFIX = "revoked:"


class TokenDenylist:
    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str, socket_timeout: int = 5) -> "TokenDenylist":
        pool = ConnectionPool.from_url(
            redis_url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(Redis(connection_pool=pool))

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        """Deny ``jti`` for ``ttl_seconds``. Already-expired tokens are skipped."""
        if ttl_seconds <= 0:
            return
        try:
            await self.client.set(f"{KEY_PREFIX}{jti}", "1", ex=ttl_seconds)
        except RedisError as e:
            logger.error(f"Redis revoke error for token {jti[:8]}...: {e}")
            raise UnavailableError("Token revocation store unavailable") from e

    async def is_revoked(self, jti: str) -> bool:
        try:
            return bool(await self.client.exists(f"{KEY_PREFIX}{jti}"))
        except RedisError as e:
            logger.error(f"Redis lookup error for token {jti[:8]}...: {e}")
            raise UnavailableError("Token revocation store unavailable") from e

    async def close(self) -> None:
        await self.client.aclose()


_denylist: Optional[TokenDenylist] = None


def get_denylist() -> TokenDenylist:
    """Return the process-wide denylist client (connections are opened lazily)."""
    global _denylist

    if _denylist is None:
        from quizhub.core.config import settings

        _denylist = TokenDenylist.from_url(
            settings.redis_url,
            socket_timeout=settings.redis_socket_timeout,
        )
    return _denylist


async def close_denylist() -> None:
    global _denylist
    if _denylist is not None:
        await _denylist.close()
        _denylist = None
