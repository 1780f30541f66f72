import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from quizhub.core.exceptions import UnavailableError
from quizhub.core.token_denylist import KEY_PREFIX, TokenDenylist

pytestmark = pytest.mark.anyio


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.data = {}
        self.fail = fail

    async def set(self, key, value, ex=None):
        if self.fail:
            raise RedisConnectionError("redis down")
        self.data[key] = (value, ex)

    async def exists(self, key):
        if self.fail:
            raise RedisConnectionError("redis down")
        return int(key in self.data)


async def test_revoke_stores_key_with_ttl():
    client = FakeRedis()
    denylist = TokenDenylist(client)

    await denylist.revoke("abc123", 900)

    assert client.data[f"{KEY_PREFIX}abc123"] == ("1", 900)
    assert await denylist.is_revoked("abc123") is True
    assert await denylist.is_revoked("other") is False


async def test_expired_token_is_not_stored():
    client = FakeRedis()
    await TokenDenylist(client).revoke("gone", 0)
    assert client.data == {}


async def test_redis_failure_is_unavailable():
    denylist = TokenDenylist(FakeRedis(fail=True))
    with pytest.raises(UnavailableError):
        await denylist.is_revoked("abc123")
    with pytest.raises(UnavailableError):
        await denylist.revoke("abc123", 60)
