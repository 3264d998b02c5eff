"""Pytest fixtures for HR compliance tests."""

from __future__ import annotations

import os

# Cheap hashing and a fixed secret; must be set before settings are loaded
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["ENCRYPTION_KEY"] = "dGVzdC1lbmNyeXB0aW9uLWtleS0zMi1ieXRlcy0hISE="

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hr_compliance.api.app import create_app
from hr_compliance.api.dependencies import get_db_session
from hr_compliance.api.limits import limiter
from hr_compliance.models import (
    Base,
    ClinicLicense,
    Employee,
    LicenseType,
    Location,
    User,
)
from hr_compliance.services.rate_limiter import rate_limiter
from hr_compliance.services.user_service import UserService

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite database per test, with foreign keys enforced."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    limiter.reset()
    yield
    rate_limiter.reset()
    limiter.reset()


@pytest.fixture
def app(session_factory):
    """Application wired to the test database."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest_asyncio.fixture
async def make_client(app) -> AsyncGenerator[Callable[..., AsyncClient], None]:
    """Factory for independent clients; each keeps its own session cookie."""
    clients: list[AsyncClient] = []

    def factory(headers: dict[str, str] | None = None) -> AsyncClient:
        client = AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test", headers=headers
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(make_client) -> AsyncClient:
    """Anonymous client."""
    return make_client()


@pytest.fixture
def create_user(session_factory) -> Callable[..., Awaitable[User]]:
    async def factory(username: str, role: str = "hr") -> User:
        async with session_factory() as db:
            user = await UserService(db).register(username, PASSWORD, role)
            await db.commit()
            return user

    return factory


@pytest.fixture
def login_as(make_client, create_user) -> Callable[..., Awaitable[AsyncClient]]:
    """Create a user with ``role`` and return a client logged in as them."""

    async def factory(role: str, username: str | None = None) -> AsyncClient:
        username = username or f"{role}_user"
        await create_user(username, role)
        client = make_client()
        response = await client.post(
            "/api/login", json={"username": username, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        return client

    return factory


@pytest_asyncio.fixture
async def admin_client(login_as) -> AsyncClient:
    return await login_as("admin")


@pytest_asyncio.fixture
async def hr_client(login_as) -> AsyncClient:
    return await login_as("hr")


@pytest_asyncio.fixture
async def viewer_client(login_as) -> AsyncClient:
    return await login_as("viewer")


@pytest.fixture
def issue_api_key(admin_client, make_client):
    """Create a key through the API and return a client authenticated by it."""

    async def factory(permissions: list[str], **extra) -> tuple[AsyncClient, dict]:
        response = await admin_client.post(
            "/api/settings/api-keys",
            json={"name": "Integration", "permissions": permissions, **extra},
        )
        assert response.status_code == 201, response.text
        created = response.json()
        return make_client({"Authorization": f"Bearer {created['key']}"}), created

    return factory


@pytest_asyncio.fixture
async def employee(session_factory) -> Employee:
    async with session_factory() as db:
        employee = Employee(
            first_name="Alice",
            last_name="Nguyen",
            work_email="alice.nguyen@clinic.org",
            job_title="Nurse Practitioner",
            work_location="Downtown",
        )
        db.add(employee)
        await db.commit()
        return employee


@pytest_asyncio.fixture
async def clinic_setup(session_factory) -> dict:
    """An organisation with one clinic and a licence type."""
    async with session_factory() as db:
        org = Location(name="Healthy Health Group", type="main_org", code="HHG")
        db.add(org)
        await db.flush()
        clinic = Location(name="Eastside Clinic", parent_id=org.id, code="EAST")
        license_type = LicenseType(name="Facility License", code="FAC", category="facility")
        db.add_all([clinic, license_type])
        await db.commit()
        return {"org": org, "clinic": clinic, "license_type": license_type}


@pytest.fixture
def add_clinic_license(session_factory, clinic_setup):
    async def factory(number: str, expiration_date: date, **extra) -> ClinicLicense:
        async with session_factory() as db:
            clinic_license = ClinicLicense(
                location_id=extra.pop("location_id", clinic_setup["clinic"].id),
                license_type_id=clinic_setup["license_type"].id,
                license_number=number,
                issue_date=extra.pop("issue_date", date(2020, 1, 1)),
                expiration_date=expiration_date,
                **extra,
            )
            db.add(clinic_license)
            await db.commit()
            return clinic_license

    return factory
