import os
from pathlib import Path

import pytest
from alembic import command, config


def _alembic_config():
    repo_root = Path(__file__).resolve().parents[2]
    cfg = config.Config(str(repo_root / "alembic.ini"))
    # absolute path so the suite can run from any working directory
    cfg.set_main_option("script_location", str(repo_root / "migrations"))
    return cfg


def _run_alembic_upgrade(sync_url: str):
    cfg = _alembic_config()
    cfg.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(cfg, "head")


@pytest.fixture(scope="session")
def sync_database_url():
    """
    Sync database URL for migration tests.

    Read from `TEST_DATABASE_URL_SYNC` rather than `DATABASE_URL_SYNC`, since
    the suite-wide conftest fills in throwaway app settings. When it is not
    set the tests are skipped with a hint on how to run them locally.
    """
    sync_url = os.environ.get("TEST_DATABASE_URL_SYNC")
    if not sync_url:
        pytest.skip(
            "Integration tests require TEST_DATABASE_URL_SYNC. "
            "Start a local Postgres and point this env var at an empty database."
        )
    return sync_url


@pytest.fixture(scope="session")
def apply_migrations(sync_database_url):
    """Apply Alembic migrations once per test session."""
    _run_alembic_upgrade(sync_database_url)
    return True
