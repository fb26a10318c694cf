"""Supabase employee service: reference data, employee reads and writes."""

from __future__ import annotations

import logging
from typing import Any

from hris.models.employee import (
    DepartmentRef,
    EmployeeForm,
    EmployeeRecord,
    PositionRef,
    ReferenceData,
    ShiftRef,
)
from hris.services.data_service import DataService, DataServiceError, TableQuery
from hris.services.record_view import generate_employee_id

logger = logging.getLogger(__name__)

EMPLOYEE_SELECT = """
    *,
    department:departments(id, dept_name, dept_code),
    position:positions(id, position_name),
    shift:shifts(id, shift_name, start_time, end_time)
"""


class EmployeeService:
    """Reads and writes employees on behalf of one signed-in user.

    Remote failures surface as ``DataServiceError``; callers decide whether
    that becomes an HTTP error or a notification.
    """

    def __init__(self, data: DataService, access_token: str | None = None, *, id_prefix: str = "EMP") -> None:
        self.data = data
        self.access_token = access_token
        self.id_prefix = id_prefix

    def _table(self, name: str) -> TableQuery:
        return self.data.table(name, self.access_token)

    async def _load_active(self, table: str, order_column: str) -> list[dict[str, Any]]:
        result = await self._table(table).select("*").eq("is_active", True).order(order_column).execute()
        return result.raise_for_error() or []

    async def load_reference_data(self) -> ReferenceData:
        departments = await self._load_active("departments", "dept_name")
        positions = await self._load_active("positions", "position_name")
        shifts = await self._load_active("shifts", "shift_name")
        logger.info(
            "Reference data loaded (%d departments, %d positions, %d shifts)",
            len(departments),
            len(positions),
            len(shifts),
        )
        return ReferenceData(
            departments=[DepartmentRef.model_validate(row) for row in departments],
            positions=[PositionRef.model_validate(row) for row in positions],
            shifts=[ShiftRef.model_validate(row) for row in shifts],
        )

    async def load_employees(self) -> list[EmployeeRecord]:
        result = await self._table("employees").select(EMPLOYEE_SELECT).order("full_name").execute()
        rows = result.raise_for_error() or []
        employees = [EmployeeRecord.model_validate(row) for row in rows]
        logger.info("Loaded %d employees", len(employees))
        return employees

    async def get_employee(self, record_id: str) -> EmployeeRecord | None:
        result = await self._table("employees").select(EMPLOYEE_SELECT).eq("id", record_id).single().execute()
        try:
            row = result.raise_for_error()
        except DataServiceError as err:
            if err.is_not_found:
                return None
            raise
        return EmployeeRecord.model_validate(row)

    async def next_employee_id(self) -> str:
        result = await (
            self._table("employees").select("employee_id").order("created_at", ascending=False).limit(1).execute()
        )
        rows = result.raise_for_error() or []
        last_id = rows[0].get("employee_id") if rows else None
        return generate_employee_id(last_id, self.id_prefix)

    async def create_employee(self, form: EmployeeForm) -> EmployeeRecord:
        payload = form.to_payload()
        payload["employee_id"] = await self.next_employee_id()

        result = await self._table("employees").insert(payload).select(EMPLOYEE_SELECT).single().execute()
        record = EmployeeRecord.model_validate(result.raise_for_error())
        logger.info("Created employee %s", record.employee_id)
        return record

    async def update_employee(self, record_id: str, form: EmployeeForm) -> EmployeeRecord:
        result = await (
            self._table("employees")
            .update(form.to_payload())
            .eq("id", record_id)
            .select(EMPLOYEE_SELECT)
            .single()
            .execute()
        )
        record = EmployeeRecord.model_validate(result.raise_for_error())
        logger.info("Updated employee %s", record.employee_id)
        return record

    async def delete_employee(self, record_id: str) -> None:
        result = await self._table("employees").delete().eq("id", record_id).execute()
        result.raise_for_error()
        logger.info("Deleted employee %s", record_id)

    async def get_employee_for_user(self, user_id: str) -> EmployeeRecord | None:
        result = await self._table("employees").select(EMPLOYEE_SELECT).eq("user_id", user_id).single().execute()
        try:
            row = result.raise_for_error()
        except DataServiceError as err:
            if err.is_not_found:
                return None
            raise
        return EmployeeRecord.model_validate(row)
