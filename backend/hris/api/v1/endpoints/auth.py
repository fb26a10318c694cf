from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from hris.core.dependencies import get_auth_gate, get_current_session, get_effects
from hris.core.effects import RecordedEffects
from hris.models.auth import LoginRequest, LoginResponse, Session, UserProfile
from hris.services.auth_gate import AuthGate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, gate: AuthGate = Depends(get_auth_gate)):  # noqa: B008
    result = await gate.login(body.email, body.password)
    if not result.success or result.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Login failed",
        )

    session = result.session
    return LoginResponse(
        access_token=session.access_token,
        token_type=session.token_type,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user=session.user,
    )


@router.post("/logout")
async def logout(
    session: Session = Depends(get_current_session),  # noqa: B008
    gate: AuthGate = Depends(get_auth_gate),  # noqa: B008
    effects: RecordedEffects = Depends(get_effects),  # noqa: B008
):
    result = await gate.logout()
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error or "Logout failed",
        )
    return {"success": True, "redirect_to": effects.redirect_to}


@router.get("/me", response_model=UserProfile)
async def me(
    session: Session = Depends(get_current_session),  # noqa: B008
    gate: AuthGate = Depends(get_auth_gate),  # noqa: B008
):
    profile = await gate.get_user_info()
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User profile not found",
        )
    return profile
