import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from weather_pusher.core.db import get_db
from weather_pusher.core.dependencies import get_pipeline, get_scheduler
from weather_pusher.main import app
from weather_pusher.models import Base
from weather_pusher.services.errors import FetchError
from weather_pusher.services.pipeline import PushPipeline
from weather_pusher.services.scheduler import PushScheduler

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TARGET_ID = "e6f74576-8913-4def-9f54-fb08f926b7b2"

SAMPLE_PAYLOAD = {
    "datetime_utc": "2026-01-01T12:00:00Z",
    "location": {"name": "Lleida"},
    "clouds": {"cloudiness_percent": 40},
    "main": {"temperature_c": 21.5, "humidity_percent": 55, "pressure_hpa": 1013},
    "precipitation": {"rain_3h_mm": 0.4, "snow_3h_mm": "N/A"},
    "weather": {"description": "Light rain", "icon": "10d"},
    "wind": {"speed_ms": 3.2, "gust_ms": "N/A", "direction_degrees": 270},
}


class FakeWeatherClient:
    """
    Stand-in for `WeatherClient` returning canned documents in order.

    An exception in `payloads` is raised instead of returned.
    """

    def __init__(self, *payloads):
        self.payloads = list(payloads) or [SAMPLE_PAYLOAD]
        self.calls = 0

    async def fetch_raw(self):
        payload = self.payloads[min(self.calls, len(self.payloads) - 1)]
        self.calls += 1
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest_asyncio.fixture
async def test_engine():
    """
    Create an in-memory SQLite async engine with all tables.

    StaticPool keeps every session on the same connection, so they all
    see the same in-memory database.
    """
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """
    Provide a fresh AsyncSession for each test.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def weather_client():
    return FakeWeatherClient()


@pytest.fixture
def pipeline(weather_client, session_factory):
    return PushPipeline(client=weather_client, session_factory=session_factory, target_id=TARGET_ID)


@pytest_asyncio.fixture
async def scheduler(pipeline):
    scheduler = PushScheduler(pipeline, interval_seconds=3600)
    yield scheduler
    await scheduler.shutdown()


@pytest.fixture
def test_app(db_session, pipeline, scheduler):
    """
    Return the FastAPI app with its database session, pipeline and
    scheduler dependencies pointed at the test fixtures.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def failing_client():
    return FakeWeatherClient(FetchError("fetch status 503", status=503))
