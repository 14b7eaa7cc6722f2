"""Global test configuration and fixtures for PharmaStock API."""

import os

# Must be set before any settings class is instantiated
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-key-for-testing-only")
os.environ.setdefault("ENVIRONMENT", "TEST")

from collections.abc import AsyncGenerator
from typing import Callable
from urllib.parse import urlparse

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy_utils import create_database, database_exists, drop_database

from src.api.core.constants import JWT_ALGORITHM
from src.api.core.dependencies import get_notification_publisher
from src.core.context import AuthContext
from src.database.models import Base, Organization, Profile, StaffRole
from src.utils.settings.auth import AuthSettings
from tests.factories import (
    NotificationFactory,
    OrganizationFactory,
    ProfileFactory,
    RoleChangeRequestFactory,
)

BASE_URL = "http://test-pharmastock-api"


class RecordingPublisher:
    """Collects realtime events instead of publishing them to Redis."""

    def __init__(self):
        self.events: list[tuple[str, str, str]] = []

    async def publish(self, event, notification) -> None:
        self.events.append(
            (event.value, str(notification.id), str(notification.user_id))
        )

    def events_for(self, user_id) -> list[tuple[str, str, str]]:
        return [e for e in self.events if e[2] == str(user_id)]


@pytest.fixture
def organization_factory():
    return OrganizationFactory


@pytest.fixture
def profile_factory():
    return ProfileFactory


@pytest.fixture
def role_change_request_factory():
    return RoleChangeRequestFactory


@pytest.fixture
def notification_factory():
    return NotificationFactory


@pytest.fixture(autouse=True)
def disable_external_cache(monkeypatch):
    """Stub cache helpers so tests do not require Redis."""

    async def _noop_get_cache(*_args, **_kwargs):
        return None

    async def _noop_set_cache(*_args, **_kwargs):
        return True

    async def _noop_invalidate(*_args, **_kwargs):
        return 0

    monkeypatch.setattr("src.cache.decorator._get_cache", _noop_get_cache)
    monkeypatch.setattr("src.cache.decorator._set_cache", _noop_set_cache)
    monkeypatch.setattr("src.cache.decorator._invalidate_by_tag", _noop_invalidate)


@pytest.fixture(scope="session")
def worker_id(request):
    """Get pytest-xdist worker ID or 'main' for single process."""
    if hasattr(request.config, "workerinput"):
        return request.config.workerinput["workerid"]
    return "main"


@pytest.fixture(scope="session")
def test_database_uri(worker_id, tmp_path_factory):
    """Create a throwaway database per worker.

    SQLite by default; Postgres when TEST_DATABASE_URL points at a server.
    """
    base_database_url = os.getenv("TEST_DATABASE_URL")

    if not base_database_url:
        database_file = tmp_path_factory.mktemp("db") / f"test_{worker_id}.sqlite"
        yield f"sqlite+aiosqlite:///{database_file}"
        return

    parsed = urlparse(base_database_url)
    test_database = parsed._replace(path=f"/test_pharmastock_{worker_id}")
    sync_dsn = test_database._replace(scheme="postgresql+psycopg2").geturl()
    async_dsn = test_database._replace(scheme="postgresql+asyncpg").geturl()

    if database_exists(sync_dsn):
        drop_database(sync_dsn)
    create_database(sync_dsn)

    yield async_dsn

    if database_exists(sync_dsn):
        drop_database(sync_dsn)


@pytest_asyncio.fixture
async def async_engine(test_database_uri):
    """Async engine with a fresh schema for every test."""
    engine = create_async_engine(test_database_uri, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests and by services under test.

    Services commit for real; API tests read the same database through the
    app's session factory.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest_asyncio.fixture
async def app(session_factory, publisher):
    """FastAPI application bound to the test database, run under its lifespan."""
    from src.main import app

    app.state.session_factory = session_factory
    app.dependency_overrides[get_notification_publisher] = lambda: publisher

    async with LifespanManager(app):
        yield app

    app.dependency_overrides.clear()
    app.state.session_factory = None


# Test Data Fixtures
@pytest_asyncio.fixture
async def test_organization(db_session: AsyncSession, organization_factory) -> Organization:
    org = await organization_factory.create_async(db_session, name="Main Street Pharmacy")
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def other_organization(db_session: AsyncSession, organization_factory) -> Organization:
    org = await organization_factory.create_async(db_session, name="Riverside Pharmacy")
    await db_session.commit()
    return org


@pytest.fixture
def create_profile(db_session: AsyncSession, profile_factory, test_organization):
    """Factory for staff profiles; defaults to the test organization."""

    async def _create(
        role: StaffRole = StaffRole.PHARMACY_TECH,
        organization: Organization | None = None,
        **kwargs,
    ) -> Profile:
        profile = await profile_factory.create_async(
            db_session,
            organization_id=(organization or test_organization).id,
            role=role.value,
            **kwargs,
        )
        await db_session.commit()
        return profile

    return _create


@pytest_asyncio.fixture
async def admin_profile(create_profile) -> Profile:
    return await create_profile(StaffRole.ADMINISTRATOR, full_name="Ada Admin")


@pytest_asyncio.fixture
async def manager_profile(create_profile) -> Profile:
    return await create_profile(StaffRole.MANAGER, full_name="Max Manager")


@pytest_asyncio.fixture
async def pharmacist_profile(create_profile) -> Profile:
    return await create_profile(
        StaffRole.PHARMACIST,
        full_name="Pat Pharmacist",
        email="pat@mainstreet.example",
    )


@pytest_asyncio.fixture
async def tech_profile(create_profile) -> Profile:
    return await create_profile(StaffRole.PHARMACY_TECH, full_name="Terry Tech")


@pytest_asyncio.fixture
async def outsider_profile(create_profile, other_organization) -> Profile:
    """Administrator of a different organization."""
    return await create_profile(
        StaffRole.ADMINISTRATOR,
        organization=other_organization,
        full_name="Olive Outsider",
    )


@pytest.fixture
def context_for() -> Callable[[Profile], AuthContext]:
    return AuthContext.from_profile


# JWT Token Fixtures
@pytest.fixture()
def jwt_token_factory() -> Callable[..., str]:
    """Factory for creating hosted-auth style JWTs."""
    auth_settings = AuthSettings()

    def create_token(
        user_id: str,
        email: str = "staff@example.com",
        role: str = "authenticated",
        audience: str = "authenticated",
        secret: str | None = None,
    ) -> str:
        payload = {
            "sub": user_id,
            "email": email,
            "role": role,
            "aud": audience,
            "app_metadata": {"provider": "email", "providers": ["email"]},
            "is_anonymous": role == "anon",
        }
        return jwt.encode(
            payload,
            secret or auth_settings.SUPABASE_JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )

    return create_token


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create HTTP client for testing public endpoints."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_factory(app: FastAPI, jwt_token_factory):
    """Factory for creating HTTP clients authenticated as a given profile."""
    clients: list[AsyncClient] = []

    def create_client_for_profile(profile: Profile) -> AsyncClient:
        token = jwt_token_factory(str(profile.user_id), profile.email)
        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url=BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
        )
        clients.append(client)
        return client

    yield create_client_for_profile

    for client in clients:
        await client.aclose()


@pytest.fixture
def admin_client(client_factory, admin_profile) -> AsyncClient:
    return client_factory(admin_profile)


@pytest.fixture
def manager_client(client_factory, manager_profile) -> AsyncClient:
    return client_factory(manager_profile)


@pytest.fixture
def pharmacist_client(client_factory, pharmacist_profile) -> AsyncClient:
    return client_factory(pharmacist_profile)


@pytest.fixture
def tech_client(client_factory, tech_profile) -> AsyncClient:
    return client_factory(tech_profile)
