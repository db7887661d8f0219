from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from outage_board.config import Settings
from outage_board.database import init_db
from outage_board.main import create_app
from outage_board.services.outage_service import OutageService
from outage_board.services.outage_store import OutageStore

ADMIN_PASSWORD = "letmein"


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc))


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'outage_board.db'}",
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def app(test_settings, clock):
    application = create_app(test_settings, clock=clock)
    init_db(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def service(db, test_settings, clock) -> OutageService:
    return OutageService(OutageStore(db), test_settings, clock=clock)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
