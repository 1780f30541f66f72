"""Create all tables from the SQLAlchemy models using DATABASE_URL_SYNC.

Usage:
    python scripts/create_tables.py

Handy for a throwaway local database. Real deployments run `alembic upgrade head`.
"""
from sqlalchemy import create_engine

from quizhub.core.config import settings
from quizhub.db.base import Base
import quizhub.models  # noqa: F401  registers every table on Base.metadata


def main() -> int:
    url = settings.database_url_sync
    if not url:
        print("DATABASE_URL_SYNC is not set. Check .env")
        return 2

    print(f"Creating tables on {url} ...")
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    print("Done.")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
