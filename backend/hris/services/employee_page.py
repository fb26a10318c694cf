"""Controller behind the employee management page.

One instance holds the state of one page view. The HTTP page endpoint builds a
fresh controller per request, loads it and returns the first rendered page; a
long-lived UI can instead keep one instance per visitor and drive its actions
(sort a column, open the edit form, save, delete, export) directly. The
controller owns the record store and reports outcomes through ``Effects``; it
never raises remote errors.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ValidationError

from hris.core.effects import Effects, NotificationKind
from hris.models.auth import AuthResult, UserProfile
from hris.models.employee import EmployeeCard, EmployeeForm, EmployeeRecord, EmployeeStats, ReferenceData
from hris.models.view import (
    DEFAULT_ITEMS_PER_PAGE,
    ChangeItemsPerPage,
    GoToPage,
    PageView,
    SetDepartmentFilter,
    SetSearch,
    SetStatusFilter,
    SortBy,
)
from hris.services.auth_gate import AuthGate
from hris.services.data_service import DataServiceError
from hris.services.debounce import Debouncer
from hris.services.employee_service import EmployeeService
from hris.services.export_service import ExportFile, export_employees
from hris.services.formatting import build_card
from hris.services.record_store import RecordStore

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load data. Please try again."
NOT_FOUND_MESSAGE = "Employee not found"

_EMPLOYEES_SLOT = "employees"

_FORM_FIELDS = (
    "full_name",
    "email",
    "phone",
    "nik",
    "birth_date",
    "gender",
    "marital_status",
    "address",
    "department_id",
    "position_id",
    "shift_id",
    "join_date",
    "employment_status",
)


class ModalMode(str, Enum):
    ADD = "add"
    EDIT = "edit"


class OperationResult(BaseModel):
    success: bool
    error: str | None = None
    record: EmployeeRecord | None = None


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    if field == "full_name":
        return "Full name is required"
    return f"{field}: {first['msg']}"


class EmployeePage:
    def __init__(
        self,
        gate: AuthGate,
        employees: EmployeeService,
        effects: Effects,
        *,
        page_size: int = DEFAULT_ITEMS_PER_PAGE,
        search_delay_ms: int = 300,
    ) -> None:
        self.gate = gate
        self.employees = employees
        self.effects = effects
        self.store = RecordStore(default_page_size=page_size)
        self.reference = ReferenceData()
        self.user: UserProfile | None = None
        self.load_error: str | None = None
        self.modal_mode: ModalMode | None = None
        self.editing_id: str | None = None
        self.deleting_id: str | None = None
        self.viewing: EmployeeCard | None = None
        self._search = Debouncer(search_delay_ms, self._apply_search)

    async def init(self) -> bool:
        if not await self.gate.protect_page():
            return False
        return await self.load()

    async def load(self) -> bool:
        request_id = self.store.sequencer.issue(_EMPLOYEES_SLOT)
        try:
            reference = await self.employees.load_reference_data()
            records = await self.employees.load_employees()
        except DataServiceError as err:
            logger.error("Initialization error: %s", err)
            self.load_error = LOAD_ERROR_MESSAGE
            return False

        if not self.store.sequencer.is_current(_EMPLOYEES_SLOT, request_id):
            logger.info("Discarding stale employee load %d", request_id)
            return False

        self.reference = reference
        self.load_error = None
        self.store.replace_all(records)
        self.user = await self.gate.get_user_info()
        logger.info("Employee management initialized")
        return True

    async def retry(self) -> bool:
        return await self.load()

    def page(self) -> PageView:
        return self.store.page()

    def stats(self) -> EmployeeStats:
        return self.store.stats()

    # table

    def search(self, term: str) -> asyncio.Task[None]:
        return self._search(term)

    def _apply_search(self, term: str) -> None:
        self.store.dispatch(SetSearch(term=term))

    def set_status_filter(self, status: str) -> PageView:
        return self.store.dispatch(SetStatusFilter(status=status))

    def set_department_filter(self, department_id: str) -> PageView:
        return self.store.dispatch(SetDepartmentFilter(department_id=department_id))

    def sort_table(self, column: str) -> PageView:
        return self.store.dispatch(SortBy(column=column))

    def go_to_page(self, page: int) -> PageView:
        return self.store.dispatch(GoToPage(page=page))

    def change_items_per_page(self, value: int | str | None) -> PageView:
        return self.store.dispatch(ChangeItemsPerPage(value=value))

    # modals

    def open_modal(self, mode: ModalMode | str = ModalMode.ADD) -> None:
        self.modal_mode = ModalMode(mode)
        self.editing_id = None

    def close_modal(self) -> None:
        self.modal_mode = None
        self.editing_id = None

    def view_employee(self, record_id: str) -> EmployeeCard | None:
        record = self.store.find(record_id)
        if record is None:
            self.effects.notify(NOT_FOUND_MESSAGE, NotificationKind.ERROR)
            return None
        self.viewing = build_card(record)
        return self.viewing

    def close_view_modal(self) -> None:
        self.viewing = None

    def edit_employee(self, record_id: str) -> dict[str, Any] | None:
        record = self.store.find(record_id)
        if record is None:
            self.effects.notify(NOT_FOUND_MESSAGE, NotificationKind.ERROR)
            return None
        self.open_modal(ModalMode.EDIT)
        self.editing_id = record_id
        return {field: getattr(record, field) or "" for field in _FORM_FIELDS}

    def confirm_delete(self, record_id: str) -> EmployeeRecord | None:
        record = self.store.find(record_id)
        if record is None:
            self.effects.notify(NOT_FOUND_MESSAGE, NotificationKind.ERROR)
            return None
        self.deleting_id = record_id
        return record

    def close_delete_modal(self) -> None:
        self.deleting_id = None

    def close_all(self) -> None:
        self.close_modal()
        self.close_view_modal()
        self.close_delete_modal()

    # writes

    async def save_employee(self, values: dict[str, Any]) -> OperationResult:
        try:
            form = EmployeeForm.model_validate(values)
        except ValidationError as err:
            message = _validation_message(err)
            self.effects.notify(message, NotificationKind.ERROR)
            return OperationResult(success=False, error=message)

        try:
            if self.editing_id:
                record = await self.employees.update_employee(self.editing_id, form)
                self.store.update(record)
                self.effects.notify("Employee updated successfully")
            else:
                record = await self.employees.create_employee(form)
                self.store.insert(record)
                self.effects.notify(f"Employee added with ID: {record.employee_id}")
        except DataServiceError as err:
            logger.error("Save employee error: %s", err)
            message = err.message or "Failed to save employee"
            self.effects.notify(message, NotificationKind.ERROR)
            return OperationResult(success=False, error=message)

        self.close_modal()
        return OperationResult(success=True, record=record)

    async def delete_employee(self) -> OperationResult:
        record_id = self.deleting_id
        if not record_id:
            return OperationResult(success=False, error="No employee selected")

        try:
            await self.employees.delete_employee(record_id)
        except DataServiceError as err:
            logger.error("Delete employee error: %s", err)
            message = err.message or "Failed to delete employee"
            self.effects.notify(message, NotificationKind.ERROR)
            return OperationResult(success=False, error=message)

        self.store.remove(record_id)
        self.effects.notify("Employee deleted")
        self.close_delete_modal()
        return OperationResult(success=True)

    def export_employees(self, moment: datetime | None = None) -> ExportFile | None:
        if not self.store.filtered:
            self.effects.notify("No data to export", NotificationKind.WARNING)
            return None

        export = export_employees(self.store.filtered, moment)
        self.effects.notify(f"Exported {export.row_count} employees to {export.filename}")
        return export

    async def logout(self, confirmed: bool = True) -> AuthResult | None:
        if not confirmed:
            return None
        return await self.gate.logout()
