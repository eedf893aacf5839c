"""
Schema registry test configuration.

Every test gets its own SQLite file under tmp_path, so no Postgres is
required and nothing leaks between tests.
"""
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from schema_registry.config import Settings
from schema_registry.services import RegistryService


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}",
        DB_SCHEMA="",
        CREATE_TABLES=True,
        LOG_LEVEL="DEBUG",
    )


@pytest_asyncio.fixture
async def registry(settings):
    """A RegistryService over a fresh, empty table."""
    service = RegistryService.from_settings(settings)
    await service.database.create_all()
    yield service
    await service.close()


@pytest.fixture
def store(registry):
    return registry.store


@pytest.fixture
def orders_v1():
    return {
        "type": "object",
        "properties": {"orderId": {"type": "string"}},
        "required": ["orderId"],
    }


class SteppingClock:
    """Each call returns a time one second after the previous one."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock(monkeypatch) -> SteppingClock:
    """Replace the record store's clock so timestamps strictly advance."""
    stepping = SteppingClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
    monkeypatch.setattr("schema_registry.store.records.utcnow", stepping)
    return stepping
