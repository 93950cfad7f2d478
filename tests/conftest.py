import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pcms.main import app
from pcms.api.deps import get_patient_service
from pcms.core.security import create_dev_token
from pcms.domain.patients.service import PatientService
from pcms.infrastructure.database import Base, enable_sqlite_foreign_keys
import pcms.domain.patients.models  # noqa: F401
from tests.fakes import FakeObjectStore


# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()

    await engine.dispose()


@pytest.fixture(scope="function")
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture(scope="function")
def patient_service(db_session: AsyncSession, object_store: FakeObjectStore) -> PatientService:
    return PatientService(db_session, object_store)


@pytest.fixture(scope="function")
async def client(patient_service: PatientService) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client wired to the test database and fake object store."""
    app.dependency_overrides[get_patient_service] = lambda: patient_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_token() -> str:
    """Development JWT token for authentication."""
    return create_dev_token()


@pytest.fixture(scope="function")
async def authenticated_client(
    client: AsyncClient,
    test_token: str
) -> AsyncGenerator[AsyncClient, None]:
    """Create an authenticated test client."""
    client.headers.update({"Authorization": f"Bearer {test_token}"})
    yield client


@pytest.fixture(scope="function")
def sample_patient_data() -> dict:
    """Sample patient data for testing."""
    return {
        "name": "Ann",
        "age": 40,
        "contactPhone": "+1234567890",
        "contactEmail": "ann@example.com",
        "contactAddress": "123 Main St",
        "medicalHistory": [
            {
                "condition": "Hypertension",
                "notes": "Controlled with medication",
                "since": "2019",
                "frequency": "Daily",
                "history": "Family history",
                "status": "Active"
            },
            {
                "condition": "Asthma",
                "since": "Childhood",
                "status": "Resolved"
            }
        ]
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as authentication related"
    )
    config.addinivalue_line(
        "markers", "patients: mark test as patient management related"
    )
