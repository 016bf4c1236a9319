"""Shared builders for tests: isolated settings, a controllable clock and in-memory stores."""

import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from truckore.container import Container, build_container
from truckore.core.config import Settings

STRONG_PASSWORD = "Weigh!Bridge1"


class FakeClock:
    """Callable clock returning a fixed, manually advanced time."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 6, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def memory_engine() -> Engine:
    return create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def make_settings(directory: str | Path, **overrides) -> Settings:
    values = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "FALLBACK_STORE_DIR": str(Path(directory) / "fallback"),
        "BCRYPT_ROUNDS": 4,
        "JWT_SECRET": "test-secret-with-enough-length-for-hs256",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class ContainerTestCase:
    """
    Mixin that gives each test a fresh container over a temp directory.

    Use with unittest.TestCase; native=False runs on the fallback store only.
    """

    native = True

    def setUp(self) -> None:
        super().setUp()
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.clock = FakeClock()
        self.settings = make_settings(self._tmp.name, NATIVE_STORE_ENABLED=self.native)
        engine = memory_engine() if self.native else None
        self.container: Container = build_container(self.settings, engine=engine, clock=self.clock)
        self.addCleanup(self.container.close)
