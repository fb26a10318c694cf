from __future__ import annotations

from datetime import datetime

import pytest

from hris.core.effects import NotificationKind
from hris.services.employee_page import LOAD_ERROR_MESSAGE, NOT_FOUND_MESSAGE, EmployeePage, ModalMode
from hris.services.employee_service import EmployeeService

EMPLOYEE_ROWS = [
    {"id": "1", "employee_id": "EMP001", "full_name": "Ali Hakim", "department_id": "d1", "employment_status": "Active"},
    {"id": "2", "employee_id": "EMP002", "full_name": "Budi", "department_id": "d2", "employment_status": "On Leave"},
    {"id": "3", "employee_id": "EMP003", "full_name": "Citra", "department_id": "d1", "employment_status": "Active"},
]


def _queue_initial_load(fake_data, rows=EMPLOYEE_ROWS):
    fake_data.queue("departments", [{"id": "d1", "dept_name": "Finance"}, {"id": "d2", "dept_name": "Sales"}])
    fake_data.queue("positions", [])
    fake_data.queue("shifts", [])
    fake_data.queue("employees", rows)
    fake_data.queue("users", {"email": "staff@company.test", "roles": {"role_name": "manager"}, "employees": []})


def _make_page(gate, fake_data) -> EmployeePage:
    return EmployeePage(
        gate,
        EmployeeService(fake_data, gate.access_token),
        gate.effects,
        page_size=10,
        search_delay_ms=5,
    )


async def _loaded_page(make_gate, fake_data, staff_token) -> EmployeePage:
    _queue_initial_load(fake_data)
    page = _make_page(make_gate(staff_token), fake_data)
    assert await page.init() is True
    return page


@pytest.mark.anyio
async def test_init_without_session_redirects(make_gate, fake_data, test_settings):
    gate = make_gate()
    page = _make_page(gate, fake_data)

    assert await page.init() is False
    assert gate.effects.redirect_to == test_settings.LOGIN_PAGE
    assert fake_data.queries == []


@pytest.mark.anyio
async def test_init_loads_reference_records_and_user(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    assert [d.name for d in loaded_page.reference.departments] == ["Finance", "Sales"]
    assert loaded_page.page().total_items == 3
    assert loaded_page.user.email == "staff@company.test"
    assert loaded_page.stats().on_leave == 1
    assert loaded_page.load_error is None


@pytest.mark.anyio
async def test_load_failure_sets_error_and_retry_recovers(make_gate, fake_data, staff_token):
    fake_data.queue("departments", error="upstream timeout", code="network_error")
    page = _make_page(make_gate(staff_token), fake_data)

    assert await page.init() is False
    assert page.load_error == LOAD_ERROR_MESSAGE
    assert page.page().is_empty is True

    _queue_initial_load(fake_data)
    assert await page.retry() is True
    assert page.load_error is None
    assert page.page().total_items == 3


@pytest.mark.anyio
async def test_search_is_debounced(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    loaded_page.search("b")
    loaded_page.search("bu")
    loaded_page.search("cit")
    assert loaded_page.page().total_items == 3

    await loaded_page._search.flush()

    assert [r.full_name for r in loaded_page.page().items] == ["Citra"]
    assert loaded_page.store.state.current_page == 1


@pytest.mark.anyio
async def test_filters_and_sorting(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    page = loaded_page.set_status_filter("Active")
    assert [r.id for r in page.items] == ["1", "3"]

    page = loaded_page.set_department_filter("d2")
    assert page.is_empty is True

    page = loaded_page.set_status_filter("")
    assert [r.id for r in page.items] == ["2"]

    loaded_page.set_department_filter("")
    page = loaded_page.sort_table("full_name")
    assert [r.full_name for r in page.items] == ["Citra", "Budi", "Ali Hakim"]


@pytest.mark.anyio
async def test_pagination_controls(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    page = loaded_page.change_items_per_page("2")
    assert page.total_pages == 2
    assert len(page.items) == 2

    page = loaded_page.go_to_page(2)
    assert page.current_page == 2
    assert [r.id for r in page.items] == ["3"]

    page = loaded_page.go_to_page(5)
    assert page.current_page == 2


@pytest.mark.anyio
async def test_view_employee(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    card = loaded_page.view_employee("1")

    assert card.initials == "AH"
    assert loaded_page.viewing is card

    loaded_page.close_view_modal()
    assert loaded_page.viewing is None


@pytest.mark.anyio
async def test_missing_record_notifies(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    assert loaded_page.view_employee("404") is None
    assert loaded_page.edit_employee("404") is None
    assert loaded_page.confirm_delete("404") is None

    notifications = loaded_page.effects.notifications
    assert [n.message for n in notifications] == [NOT_FOUND_MESSAGE] * 3
    assert all(n.kind == NotificationKind.ERROR for n in notifications)


@pytest.mark.anyio
async def test_add_employee(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    fake_data.queue("employees", [{"employee_id": "EMP003"}])
    fake_data.queue("employees", {"id": "4", "employee_id": "EMP004", "full_name": "Dewi", "employment_status": "Active"})
    loaded_page.open_modal(ModalMode.ADD)

    result = await loaded_page.save_employee({"full_name": "Dewi", "email": ""})

    assert result.success is True
    assert result.record.employee_id == "EMP004"
    assert loaded_page.store.records[0].id == "4"
    assert loaded_page.modal_mode is None
    assert loaded_page.effects.notifications[-1].message == "Employee added with ID: EMP004"


@pytest.mark.anyio
async def test_edit_employee_updates_record(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    values = loaded_page.edit_employee("2")

    assert loaded_page.modal_mode == ModalMode.EDIT
    assert loaded_page.editing_id == "2"
    assert values["full_name"] == "Budi"
    assert values["email"] == ""

    fake_data.queue("employees", {**EMPLOYEE_ROWS[1], "employment_status": "Active"})
    values["employment_status"] = "Active"
    result = await loaded_page.save_employee(values)

    assert result.success is True
    assert loaded_page.store.find("2").employment_status == "Active"
    assert loaded_page.editing_id is None
    assert loaded_page.effects.notifications[-1].message == "Employee updated successfully"
    assert fake_data.queries[-1].method == "PATCH"


@pytest.mark.anyio
async def test_save_requires_full_name(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    queries_before = len(fake_data.queries)
    loaded_page.open_modal()

    result = await loaded_page.save_employee({"full_name": "  "})

    assert result.success is False
    assert result.error == "Full name is required"
    assert loaded_page.modal_mode == ModalMode.ADD
    assert len(fake_data.queries) == queries_before


@pytest.mark.anyio
async def test_save_failure_keeps_modal_open(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    fake_data.queue("employees", [{"employee_id": "EMP003"}])
    fake_data.queue("employees", error='duplicate key value violates unique constraint "employees_email_key"')
    loaded_page.open_modal()

    result = await loaded_page.save_employee({"full_name": "Dewi", "email": "ali@company.test"})

    assert result.success is False
    assert "duplicate key" in result.error
    assert loaded_page.modal_mode == ModalMode.ADD
    assert loaded_page.page().total_items == 3
    assert loaded_page.effects.notifications[-1].kind == NotificationKind.ERROR


@pytest.mark.anyio
async def test_delete_employee(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    assert loaded_page.confirm_delete("3").full_name == "Citra"
    fake_data.queue("employees", None)

    result = await loaded_page.delete_employee()

    assert result.success is True
    assert loaded_page.store.find("3") is None
    assert loaded_page.deleting_id is None
    assert loaded_page.effects.notifications[-1].message == "Employee deleted"


@pytest.mark.anyio
async def test_delete_without_selection(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    result = await loaded_page.delete_employee()

    assert result.success is False


@pytest.mark.anyio
async def test_export_filtered_records(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    loaded_page.set_status_filter("Active")

    export = loaded_page.export_employees(datetime(2026, 10, 19, 8, 0))

    assert export.filename == "employees_20261019.csv"
    assert export.row_count == 2
    assert loaded_page.effects.notifications[-1].message == "Exported 2 employees to employees_20261019.csv"


@pytest.mark.anyio
async def test_export_with_no_rows_warns(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    loaded_page.set_status_filter("Terminated")

    assert loaded_page.export_employees() is None
    notification = loaded_page.effects.notifications[-1]
    assert notification.message == "No data to export"
    assert notification.kind == NotificationKind.WARNING


@pytest.mark.anyio
async def test_close_all(make_gate, fake_data, staff_token):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    loaded_page.edit_employee("1")
    loaded_page.view_employee("1")
    loaded_page.confirm_delete("1")

    loaded_page.close_all()

    assert loaded_page.modal_mode is None
    assert loaded_page.editing_id is None
    assert loaded_page.viewing is None
    assert loaded_page.deleting_id is None


@pytest.mark.anyio
async def test_logout_requires_confirmation(make_gate, fake_data, staff_token, fake_identity, test_settings):
    loaded_page = await _loaded_page(make_gate, fake_data, staff_token)
    assert await loaded_page.logout(confirmed=False) is None
    assert fake_identity.revoked == set()

    result = await loaded_page.logout()

    assert result.success is True
    assert loaded_page.effects.redirect_to == test_settings.LOGIN_PAGE
