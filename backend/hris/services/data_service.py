"""Supabase PostgREST client: table reads and writes returning ``{data, error}`` results."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any

import aiohttp
from pydantic import BaseModel

from hris.core.config import Settings

logger = logging.getLogger(__name__)

NOT_FOUND_CODE = "PGRST116"

_WHITESPACE = re.compile(r"\s+")


class DataError(BaseModel):
    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None
    status: int | None = None


class DataServiceError(Exception):
    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE


class DataResult(BaseModel):
    data: Any = None
    error: DataError | None = None

    def raise_for_error(self) -> Any:
        if self.error:
            raise DataServiceError(self.error.message, code=self.error.code, status=self.error.status)
        return self.data


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class TableQuery:
    """Fluent builder for one PostgREST request, e.g.
    ``table("employees").select("*").eq("id", 1).single().execute()``.
    """

    def __init__(self, service: DataService, table: str, access_token: str | None = None) -> None:
        self._service = service
        self.table = table
        self.access_token = access_token
        self.method = "GET"
        self.columns: str | None = None
        self.filters: list[tuple[str, str]] = []
        self.payload: dict[str, Any] | list[dict[str, Any]] | None = None
        self.expect_single = False

    def select(self, columns: str = "*") -> TableQuery:
        self.columns = _WHITESPACE.sub("", columns)
        return self

    def eq(self, column: str, value: object) -> TableQuery:
        self.filters.append((column, f"eq.{_format_value(value)}"))
        return self

    def order(self, column: str, *, ascending: bool = True) -> TableQuery:
        self.filters.append(("order", f"{column}.{'asc' if ascending else 'desc'}"))
        return self

    def limit(self, count: int) -> TableQuery:
        self.filters.append(("limit", str(count)))
        return self

    def single(self) -> TableQuery:
        self.expect_single = True
        return self

    def insert(self, payload: dict[str, Any] | list[dict[str, Any]]) -> TableQuery:
        self.method = "POST"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> TableQuery:
        self.method = "PATCH"
        self.payload = payload
        return self

    def delete(self) -> TableQuery:
        self.method = "DELETE"
        return self

    def build_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.columns:
            params.append(("select", self.columns))
        params.extend(self.filters)
        return params

    async def execute(self) -> DataResult:
        return await self._service.execute(self)


def _parse_error(status: int, body: str) -> DataError:
    try:
        payload = json.loads(body) if body else {}
    except ValueError:
        payload = {}

    if isinstance(payload, dict) and payload.get("message"):
        return DataError(
            message=str(payload["message"]),
            code=payload.get("code"),
            details=payload.get("details"),
            hint=payload.get("hint"),
            status=status,
        )
    return DataError(message=body or f"HTTP {status}", status=status)


class DataService:
    def __init__(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""
        self.timeout = 15.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
            logger.warning("Supabase credentials missing — DataService not initialized")
            return

        self.base_url = settings.SUPABASE_URL.rstrip("/")
        self.api_key = settings.SUPABASE_ANON_KEY
        self.timeout = settings.SUPABASE_TIMEOUT_SECONDS
        self.initialized = True
        logger.info("DataService initialized (%s)", self.base_url)

    async def close(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.api_key = ""

    def table(self, name: str, access_token: str | None = None) -> TableQuery:
        return TableQuery(self, name, access_token)

    def _headers(self, query: TableQuery) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {query.access_token or self.api_key}",
            "Content-Type": "application/json",
        }
        if query.expect_single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        if query.method != "GET":
            headers["Prefer"] = "return=representation" if query.columns else "return=minimal"
        return headers

    async def execute(self, query: TableQuery) -> DataResult:
        if not self.initialized:
            return DataResult(error=DataError(message="Data service not configured", code="not_configured"))

        url = f"{self.base_url}/rest/v1/{query.table}"

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    query.method,
                    url,
                    params=query.build_params(),
                    headers=self._headers(query),
                    json=query.payload,
                ) as response:
                    body = await response.text()
                    if response.status >= 300:
                        error = _parse_error(response.status, body)
                        logger.error(
                            "%s %s failed (%s): %s",
                            query.method,
                            query.table,
                            response.status,
                            error.message,
                        )
                        return DataResult(error=error)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("%s %s request error: %s", query.method, query.table, e)
            return DataResult(error=DataError(message=str(e) or "Network error", code="network_error"))

        if not body:
            return DataResult()
        try:
            return DataResult(data=json.loads(body))
        except ValueError:
            logger.error("%s %s returned invalid JSON", query.method, query.table)
            return DataResult(error=DataError(message="Invalid response from data service", code="invalid_json"))

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False

        url = f"{self.base_url}/rest/v1/"
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=headers) as response:
                    return response.status == 200
        except Exception:
            logger.exception("DataService connection check failed")
            return False


data_service = DataService()
