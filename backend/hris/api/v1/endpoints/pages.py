"""Page bootstrap endpoints. Unauthorized visitors are redirected like a browser page would be."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from hris.core.config import settings
from hris.core.dependencies import get_auth_gate, get_effects
from hris.core.effects import RecordedEffects
from hris.models.auth import UserProfile
from hris.models.employee import EmployeeStats, ReferenceData
from hris.models.view import PageView
from hris.services.auth_gate import AuthGate
from hris.services.employee_page import EmployeePage
from hris.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["pages"])


class EmployeePageBootstrap(BaseModel):
    user: UserProfile | None = None
    reference: ReferenceData
    stats: EmployeeStats
    page: PageView


class AdminPageBootstrap(BaseModel):
    user: UserProfile | None = None
    is_super_admin: bool = False


def _redirect(effects: RecordedEffects) -> RedirectResponse:
    response = RedirectResponse(url=effects.redirect_to or settings.LOGIN_PAGE, status_code=status.HTTP_303_SEE_OTHER)
    if effects.alerts:
        response.headers["X-Alert"] = effects.alerts[-1]
    return response


@router.get("/employees", response_model=EmployeePageBootstrap)
async def employees_page(
    gate: AuthGate = Depends(get_auth_gate),  # noqa: B008
    effects: RecordedEffects = Depends(get_effects),  # noqa: B008
):
    if not await gate.protect_page():
        return _redirect(effects)

    page = EmployeePage(
        gate,
        EmployeeService(gate.data, gate.access_token, id_prefix=settings.EMPLOYEE_ID_PREFIX),
        effects,
        page_size=settings.DEFAULT_PAGE_SIZE,
        search_delay_ms=settings.SEARCH_DEBOUNCE_MS,
    )
    if not await page.load():
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=page.load_error,
        )

    return EmployeePageBootstrap(
        user=page.user,
        reference=page.reference,
        stats=page.stats(),
        page=page.page(),
    )


@router.get("/admin", response_model=AdminPageBootstrap)
async def admin_page(
    gate: AuthGate = Depends(get_auth_gate),  # noqa: B008
    effects: RecordedEffects = Depends(get_effects),  # noqa: B008
):
    if not await gate.protect_admin_page():
        logger.info("Admin page denied (%s)", gate.state.value)
        return _redirect(effects)

    return AdminPageBootstrap(
        user=await gate.get_user_info(),
        is_super_admin=await gate.is_super_admin(),
    )
