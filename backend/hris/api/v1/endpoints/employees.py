from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from hris.core.config import settings
from hris.core.dependencies import get_employee_service, require_admin
from hris.models.auth import UserData
from hris.models.employee import EmployeeForm, EmployeeRecord, EmployeeStats, ReferenceData
from hris.models.view import DEFAULT_SORT_COLUMN, GoToPage, PageView, SortDirection, ViewState
from hris.services.data_service import DataServiceError
from hris.services.employee_service import EmployeeService
from hris.services.export_service import export_employees
from hris.services.record_view import build_page, compute_stats, order_records, reduce_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def get_view_state(
    search: str = "",
    status_filter: str = Query("", alias="status"),
    department: str = "",
    sort: str = DEFAULT_SORT_COLUMN,
    direction: SortDirection = SortDirection.ASC,
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
) -> ViewState:
    return ViewState(
        search_term=search,
        status_filter=status_filter,
        department_filter=department,
        sort_column=sort,
        sort_direction=direction,
        items_per_page=per_page,
    )


async def _load_records(service: EmployeeService) -> list[EmployeeRecord]:
    try:
        return await service.load_employees()
    except DataServiceError as err:
        logger.error("Failed to load employees: %s", err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to retrieve employees",
        ) from err


@router.get("", response_model=PageView)
async def list_employees(
    page: int = 1,
    state: ViewState = Depends(get_view_state),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    records = await _load_records(service)
    ordered = order_records(records, state)
    state = reduce_view(state, GoToPage(page=page), total_items=len(ordered))
    return build_page(ordered, state)


@router.get("/stats", response_model=EmployeeStats)
async def employee_stats(
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    return compute_stats(await _load_records(service))


@router.get("/reference-data", response_model=ReferenceData)
async def reference_data(
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.load_reference_data()
    except DataServiceError as err:
        logger.error("Failed to load reference data: %s", err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to retrieve reference data",
        ) from err


@router.get("/export")
async def export_employees_csv(
    state: ViewState = Depends(get_view_state),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    ordered = order_records(await _load_records(service), state)
    if not ordered:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No employees to export",
        )

    export = export_employees(ordered)
    logger.info("Exported %d employees to %s", export.row_count, export.filename)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/{record_id}", response_model=EmployeeRecord)
async def get_employee(
    record_id: str,
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        employee = await service.get_employee(record_id)
    except DataServiceError as err:
        logger.error("Failed to get employee %s: %s", record_id, err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to retrieve employee",
        ) from err

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee '{record_id}' not found",
        )

    return employee


@router.post("", response_model=EmployeeRecord, status_code=status.HTTP_201_CREATED)
async def create_employee(
    form: EmployeeForm,
    user: UserData = Depends(require_admin),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.create_employee(form)
    except DataServiceError as err:
        logger.error("Failed to create employee: %s", err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=err.message or "Failed to save employee",
        ) from err


@router.put("/{record_id}", response_model=EmployeeRecord)
async def update_employee(
    record_id: str,
    form: EmployeeForm,
    user: UserData = Depends(require_admin),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        return await service.update_employee(record_id, form)
    except DataServiceError as err:
        if err.is_not_found:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Employee '{record_id}' not found",
            ) from err
        logger.error("Failed to update employee %s: %s", record_id, err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=err.message or "Failed to save employee",
        ) from err


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    record_id: str,
    user: UserData = Depends(require_admin),  # noqa: B008
    service: EmployeeService = Depends(get_employee_service),  # noqa: B008
):
    try:
        await service.delete_employee(record_id)
    except DataServiceError as err:
        logger.error("Failed to delete employee %s: %s", record_id, err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=err.message or "Failed to delete employee",
        ) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)
