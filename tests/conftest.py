"""Pytest fixtures for hrbridge tests."""

import json
import re
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hrbridge.config.settings import Settings
from hrbridge.db.models.base import Base
from hrbridge.remote.client import WorkforceApiClient
from hrbridge.remote.token import InMemoryTokenCache, OAuth2TokenManager

API_BASE_URL = "https://workforce.test/v1"
TOKEN_URL = "https://idp.test/oauth/token"


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Fake clock
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock for cache and circuit breaker tests."""
    return FakeClock()


# =============================================================================
# Workforce API stub
# =============================================================================


class WorkforceApiStub:
    """In-process stand-in for the OAuth2 token endpoint and workforce API.

    Serves ``POST /oauth/token`` plus ``POST /employees``,
    ``PUT /employees/{id}`` and ``GET /employees/{id}``. Responses for
    the employee endpoints can be queued with ``queue_response``.
    """

    def __init__(self):
        self.employees: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.token_response: tuple[int, dict[str, Any]] | None = None
        self.transport_error: Exception | None = None
        self._queued: list[tuple[int, Any]] = []
        self._next_id = 1

    def queue_response(self, status_code: int, body: Any = None) -> None:
        """Answer the next employee request with this status and body."""
        self._queued.append((status_code, body))

    @property
    def employee_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/employees" in r.url.path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if str(request.url) == TOKEN_URL:
            return self._token(request)

        if self.transport_error is not None:
            raise self.transport_error

        if self._queued:
            status_code, body = self._queued.pop(0)
            return httpx.Response(status_code, json=body)

        return self._employees(request)

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_calls += 1
        if self.token_response is not None:
            status_code, body = self.token_response
            return httpx.Response(status_code, json=body)
        return httpx.Response(
            200,
            json={
                "access_token": f"token-{self.token_calls}",
                "expires_in": 3600,
                "token_type": "Bearer",
            },
        )

    def _employees(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        match = re.fullmatch(r"/v1/employees/([^/]+)", path)

        if request.method == "POST" and path == "/v1/employees":
            remote_id = f"tt-{self._next_id}"
            self._next_id += 1
            self.employees[remote_id] = {"id": remote_id, **json.loads(request.content)}
            return httpx.Response(201, json={"data": self.employees[remote_id]})

        if match is None or match.group(1) not in self.employees:
            return httpx.Response(404, json={"error": {"message": "Employee does not exist"}})

        remote_id = match.group(1)
        if request.method == "PUT":
            self.employees[remote_id].update(json.loads(request.content))
        return httpx.Response(200, json={"data": self.employees[remote_id]})


@pytest.fixture
def workforce_api() -> WorkforceApiStub:
    """Create the workforce API stub."""
    return WorkforceApiStub()


@pytest_asyncio.fixture
async def http_client(workforce_api: WorkforceApiStub) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client routed to the workforce API stub."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(workforce_api.handle), timeout=5.0
    ) as client:
        yield client


@pytest.fixture
def token_cache(clock: FakeClock) -> InMemoryTokenCache:
    """In-memory token cache driven by the fake clock."""
    return InMemoryTokenCache(clock=clock)


@pytest.fixture
def token_manager(
    http_client: httpx.AsyncClient, token_cache: InMemoryTokenCache
) -> OAuth2TokenManager:
    """Token manager pointed at the stub token endpoint."""
    return OAuth2TokenManager(
        http_client,
        token_url=TOKEN_URL,
        client_id="test-client",
        client_secret="test-secret",
        scope="employees:read employees:write",
        cache=token_cache,
    )


@pytest.fixture
def remote_client(
    http_client: httpx.AsyncClient, token_manager: OAuth2TokenManager
) -> WorkforceApiClient:
    """Workforce API client backed by the stub."""
    return WorkforceApiClient(http_client, token_manager, base_url=API_BASE_URL)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Employee payloads
# =============================================================================


@pytest.fixture
def provider1_payload() -> dict[str, Any]:
    """A valid flat Provider 1 payload."""
    return {
        "emp_id": "EMP001",
        "first_name": "John",
        "last_name": "Doe",
        "email_address": "john@example.com",
        "phone": "+1-555-0100",
        "job_title": "Engineer",
        "dept": "R&D",
        "hire_date": "2024-03-01",
        "employment_status": "active",
    }


@pytest.fixture
def provider2_payload() -> dict[str, Any]:
    """A valid nested Provider 2 payload."""
    return {
        "employee_number": "E-42",
        "personal_info": {
            "given_name": "Ada",
            "family_name": "Lovelace",
            "email": "ada@example.com",
            "mobile": "+44-20-0000",
        },
        "work_info": {
            "role": "Analyst",
            "division": "Engines",
            "start_date": "2023-01-15",
            "current_status": "on_leave",
        },
    }


# =============================================================================
# API test fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for API testing."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REMOTE_API_BASE_URL=API_BASE_URL,
        REMOTE_TOKEN_URL=TOKEN_URL,
        REMOTE_CLIENT_ID="test-client",
        REMOTE_CLIENT_SECRET=SecretStr("test-secret"),
        PROVIDER_AUTH_ENABLED=False,
        API_SECRET_KEY=None,
    )


@pytest.fixture
def make_app(
    session_factory: async_sessionmaker[AsyncSession],
    remote_client: WorkforceApiClient,
) -> Callable[[Settings], FastAPI]:
    """Build apps wired to the test database and workforce API stub."""
    from hrbridge.api.app import create_app
    from hrbridge.api.dependencies import get_remote_client
    from hrbridge.db.config import get_db

    def _make(settings: Settings) -> FastAPI:
        app = create_app(settings=settings)

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_remote_client] = lambda: remote_client
        return app

    return _make


@pytest.fixture
def test_app(make_app: Callable[[Settings], FastAPI], test_settings: Settings) -> FastAPI:
    """Create a FastAPI test application.

    Uses test settings, the in-memory database and the workforce API stub.
    """
    return make_app(test_settings)


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client
