from __future__ import annotations

import time
from typing import Any

import pytest
from fastapi import Depends, Header
from jose import jwt
from jose.exceptions import JWTError
from starlette.testclient import TestClient

from hris.core.auth import extract_bearer_token
from hris.core.config import Settings, settings
from hris.core.dependencies import (
    get_auth_gate,
    get_current_session,
    get_effects,
    get_employee_service,
    get_identity_client,
)
from hris.core.effects import RecordedEffects
from hris.main import app
from hris.models.auth import Session
from hris.services.auth_gate import AuthGate
from hris.services.data_service import DataError, DataResult, DataService, TableQuery
from hris.services.employee_service import EmployeeService
from hris.services.identity_service import IdentityClient, IdentityService

TEST_JWT_SECRET = "test-jwt-secret-with-enough-length-0000"
ADMIN_ID = "user-admin-1"
STAFF_ID = "user-staff-1"
ORPHAN_ID = "user-orphan-1"


def make_token(user_id: str, email: str, *, expired: bool = False, secret: str = TEST_JWT_SECRET) -> str:
    now = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now - 60,
        "exp": now - 3600 if expired else now + 3600,
    }
    return jwt.encode(claims, secret, algorithm="HS256")


class FakeDataService(DataService):
    """Answers queries from per-table queues and records every query it sees."""

    def __init__(self) -> None:
        super().__init__()
        self.initialized = True
        self.queries: list[TableQuery] = []
        self.responses: dict[str, list[DataResult]] = {}

    def queue(self, table: str, data: Any = None, *, error: str | None = None, code: str | None = None) -> None:
        result = DataResult(data=data, error=DataError(message=error, code=code) if error else None)
        self.responses.setdefault(table, []).append(result)

    async def execute(self, query: TableQuery) -> DataResult:
        self.queries.append(query)
        queued = self.responses.get(query.table)
        if not queued:
            return DataResult(error=DataError(message=f"No response queued for {query.table}"))
        return queued.pop(0)


class FakeIdentityService(IdentityService):
    """In-memory GoTrue stand-in; tokens are real HS256 JWTs."""

    def __init__(self) -> None:
        super().__init__()
        self.initialized = True
        self.accounts: dict[str, tuple[str, str]] = {}
        self.revoked: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.logout_status = 204

    def add_account(self, email: str, password: str, user_id: str) -> None:
        self.accounts[email] = (password, user_id)

    async def request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        self.calls.append((method, path))

        if path == "token":
            account = self.accounts.get((payload or {}).get("email", ""))
            if account is None or account[0] != payload.get("password"):
                return 400, {"error": "invalid_grant", "error_description": "Invalid login credentials"}
            token = make_token(account[1], payload["email"])
            return 200, {
                "access_token": token,
                "token_type": "bearer",
                "expires_in": 3600,
                "refresh_token": f"refresh-{account[1]}",
                "user": {"id": account[1], "email": payload["email"]},
            }

        if path == "logout":
            if access_token:
                self.revoked.add(access_token)
            return self.logout_status, None

        if path == "user":
            if not access_token or access_token in self.revoked:
                return 401, {"msg": "Invalid token"}
            try:
                claims = jwt.decode(access_token, TEST_JWT_SECRET, algorithms=["HS256"], audience="authenticated")
            except JWTError:
                return 401, {"msg": "Invalid token"}
            return 200, {"id": claims["sub"], "email": claims.get("email")}

        if path == "health":
            return 200, {}

        return 404, None


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_data() -> FakeDataService:
    return FakeDataService()


@pytest.fixture
def fake_identity() -> FakeIdentityService:
    identity = FakeIdentityService()
    identity.add_account("admin@company.test", "secret", ADMIN_ID)
    identity.add_account("staff@company.test", "secret", STAFF_ID)
    identity.add_account("orphan@company.test", "secret", ORPHAN_ID)
    return identity


@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def make_gate(fake_identity, fake_data, test_settings):
    def _make(token: str | None = None) -> AuthGate:
        return AuthGate(IdentityClient(fake_identity, token), fake_data, RecordedEffects(), test_settings)

    return _make


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def admin_token() -> str:
    return make_token(ADMIN_ID, "admin@company.test")


@pytest.fixture
def staff_token() -> str:
    return make_token(STAFF_ID, "staff@company.test")


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(fake_identity, fake_data):
    def _identity(authorization: str | None = Header(None)) -> IdentityClient:
        return fake_identity.client(extract_bearer_token(authorization))

    def _gate(
        identity: IdentityClient = Depends(get_identity_client),
        effects: RecordedEffects = Depends(get_effects),
    ) -> AuthGate:
        return AuthGate(identity, fake_data, effects, settings)

    def _employees(session: Session = Depends(get_current_session)) -> EmployeeService:
        return EmployeeService(fake_data, session.access_token)

    app.dependency_overrides[get_identity_client] = _identity
    app.dependency_overrides[get_auth_gate] = _gate
    app.dependency_overrides[get_employee_service] = _employees
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
