"""Supabase GoTrue identity client: sign in, sign out and session lookup."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from hris.core.auth import TokenError, is_expired, token_expires_at, verify_token
from hris.core.config import Settings
from hris.models.auth import (
    AuthChangeEvent,
    AuthError,
    AuthResponse,
    AuthUser,
    Session,
    SessionResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthChangeEvent, Session | None], None]

_REQUEST_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, RuntimeError)


def _auth_error(status: int, body: Any) -> AuthError:
    if isinstance(body, dict):
        for key in ("error_description", "msg", "message", "error"):
            if body.get(key):
                return AuthError(message=str(body[key]), status=status)
    if isinstance(body, str) and body:
        return AuthError(message=body, status=status)
    return AuthError(message=f"HTTP {status}", status=status)


def _session_from_payload(body: dict[str, Any]) -> Session:
    token = body["access_token"]
    user = body.get("user") or {}
    expires_in = body.get("expires_in")
    expires_at = body.get("expires_at")
    if expires_at is None and isinstance(expires_in, int):
        expires_at = int(time.time()) + expires_in
    if expires_at is None:
        expires_at = token_expires_at(token)

    return Session(
        access_token=token,
        token_type=body.get("token_type") or "bearer",
        refresh_token=body.get("refresh_token"),
        expires_in=expires_in,
        expires_at=expires_at,
        user=AuthUser(id=str(user.get("id", "")), email=user.get("email")),
    )


class IdentityService:
    """Shared GoTrue endpoint configuration. Sessions live in ``IdentityClient``."""

    def __init__(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""
        self.jwt_secret = ""
        self.timeout = 15.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            logger.warning("Supabase credentials missing — IdentityService not initialized")
            return

        self.base_url = settings.SUPABASE_URL.rstrip("/")
        self.api_key = settings.SUPABASE_ANON_KEY
        self.jwt_secret = settings.SUPABASE_JWT_SECRET
        self.timeout = settings.SUPABASE_TIMEOUT_SECONDS
        self.initialized = True

    async def close(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""
        self.jwt_secret = ""

    async def request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        if not self.initialized:
            raise RuntimeError("IdentityService not initialized")

        url = f"{self.base_url}/auth/v1/{path}"
        headers = {"apikey": self.api_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(method, url, params=params, headers=headers, json=payload) as response:
                text = await response.text()
                try:
                    body = json.loads(text) if text else None
                except ValueError:
                    body = text
                return response.status, body

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            status, _ = await self.request("GET", "health")
            return status == 200
        except Exception:
            logger.exception("IdentityService connection check failed")
            return False

    def client(self, access_token: str | None = None) -> IdentityClient:
        return IdentityClient(self, access_token)


class IdentityClient:
    """Per-visitor session holder.

    A bearer token handed in from a request is only trusted after
    ``get_session`` has validated it, either locally against the JWT secret or
    with a round trip to the identity service.
    """

    def __init__(self, service: IdentityService, access_token: str | None = None) -> None:
        self._service = service
        self._session: Session | None = None
        self._pending_token = access_token
        self._listeners: list[AuthListener] = []

    @property
    def session(self) -> Session | None:
        return self._session

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: AuthChangeEvent, session: Session | None) -> None:
        logger.info("Auth state changed: %s", event.value)
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth state listener failed on %s", event.value)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        try:
            status, body = await self._service.request(
                "POST",
                "token",
                params={"grant_type": "password"},
                payload={"email": email, "password": password},
            )
        except _REQUEST_ERRORS as e:
            logger.error("Sign-in request failed: %s", e)
            return AuthResponse(error=AuthError(message=str(e) or "Identity service unavailable"))

        if status != 200 or not isinstance(body, dict) or not body.get("access_token"):
            return AuthResponse(error=_auth_error(status, body))

        session = _session_from_payload(body)
        self._session = session
        self._pending_token = None
        self._emit(AuthChangeEvent.SIGNED_IN, session)
        return AuthResponse(session=session)

    async def sign_out(self) -> AuthError | None:
        token = self._session.access_token if self._session else self._pending_token
        self._session = None
        self._pending_token = None

        error: AuthError | None = None
        if token:
            try:
                status, body = await self._service.request("POST", "logout", access_token=token)
                # 401/404 mean the token is already gone server-side
                if status >= 300 and status not in (401, 403, 404):
                    error = _auth_error(status, body)
            except _REQUEST_ERRORS as e:
                logger.error("Sign-out request failed: %s", e)
                error = AuthError(message=str(e) or "Identity service unavailable")

        self._emit(AuthChangeEvent.SIGNED_OUT, None)
        return error

    async def get_user(self, access_token: str | None = None) -> UserResponse:
        token = access_token or (self._session.access_token if self._session else None)
        if not token:
            return UserResponse(error=AuthError(message="No active session", status=401))

        try:
            status, body = await self._service.request("GET", "user", access_token=token)
        except _REQUEST_ERRORS as e:
            logger.error("User lookup failed: %s", e)
            return UserResponse(error=AuthError(message=str(e) or "Identity service unavailable"))

        if status != 200 or not isinstance(body, dict) or not body.get("id"):
            return UserResponse(error=_auth_error(status, body))
        return UserResponse(user=AuthUser(id=str(body["id"]), email=body.get("email")))

    async def _restore_session(self, token: str) -> SessionResponse:
        if self._service.jwt_secret:
            try:
                claims = verify_token(token, self._service.jwt_secret)
            except TokenError as e:
                return SessionResponse(error=AuthError(message=str(e), status=401))
            user = AuthUser(id=str(claims["sub"]), email=claims.get("email"))
            return SessionResponse(session=Session(access_token=token, expires_at=claims.get("exp"), user=user))

        response = await self.get_user(token)
        if response.error or response.user is None:
            return SessionResponse(error=response.error)
        return SessionResponse(
            session=Session(access_token=token, expires_at=token_expires_at(token), user=response.user)
        )

    async def get_session(self) -> SessionResponse:
        if self._session is None and self._pending_token:
            token = self._pending_token
            self._pending_token = None
            restored = await self._restore_session(token)
            if restored.session is None:
                return restored
            self._session = restored.session

        if self._session is not None and is_expired(self._session.expires_at):
            logger.info("Session for %s expired", self._session.user.id)
            self._session = None
            self._emit(AuthChangeEvent.SIGNED_OUT, None)

        return SessionResponse(session=self._session)


identity_service = IdentityService()
