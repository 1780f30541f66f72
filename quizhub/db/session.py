import asyncio
import logging
from typing import Awaitable, Optional, TypeVar
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from quizhub.core.config import settings
from quizhub.core.exceptions import UnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _sanitize_db_url(url: str) -> str:
    """Remove any `sslmode` query param which asyncpg does not accept as a keyword arg.

    This keeps URLs like `postgresql+asyncpg://.../?sslmode=require` from raising
    `TypeError: connect() got an unexpected keyword argument 'sslmode'`.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    qs = parse_qsl(parts.query, keep_blank_values=True)
    filtered = [(k, v) for (k, v) in qs if k.lower() != "sslmode"]
    new_query = urlencode(filtered)
    if new_query == parts.query:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, new_query, parts.fragment))


def get_engine():
    """Create the engine; no connection is opened until first use."""
    db_url = _sanitize_db_url(settings.database_url)
    return create_async_engine(db_url, echo=False, pool_pre_ping=True)


def get_sessionmaker(engine=None):
    if engine is None:
        engine = get_engine()
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = get_engine()
SessionLocal = get_sessionmaker(engine)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def store_call(awaitable: Awaitable[T], timeout: Optional[float] = None) -> T:
    """Await one store round trip, bounded by ``store_timeout_seconds``.

    Timeouts and connection-level failures become ``UnavailableError``;
    integrity and programming errors pass through untouched.
    """
    limit = settings.store_timeout_seconds if timeout is None else timeout
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError as e:
        logger.error("Store round trip exceeded %.1fs", limit)
        raise UnavailableError("The data store timed out; please retry") from e
    except (OperationalError, InterfaceError) as e:
        logger.error("Store connection failure: %s", e)
        raise UnavailableError("The data store is unavailable; please retry") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error("Store connection invalidated: %s", e)
            raise UnavailableError("The data store is unavailable; please retry") from e
        raise
