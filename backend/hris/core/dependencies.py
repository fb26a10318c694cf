from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from hris.core.auth import extract_bearer_token
from hris.core.config import settings
from hris.core.effects import RecordedEffects
from hris.models.auth import ADMIN_ROLES, Session, UserData
from hris.services.auth_gate import AuthGate
from hris.services.data_service import data_service
from hris.services.employee_service import EmployeeService
from hris.services.identity_service import IdentityClient, identity_service


def get_effects() -> RecordedEffects:
    return RecordedEffects()


def get_identity_client(authorization: str | None = Header(None)) -> IdentityClient:
    return identity_service.client(extract_bearer_token(authorization))


def get_auth_gate(
    identity: IdentityClient = Depends(get_identity_client),  # noqa: B008
    effects: RecordedEffects = Depends(get_effects),  # noqa: B008
) -> AuthGate:
    return AuthGate(identity, data_service, effects, settings)


async def get_current_session(gate: AuthGate = Depends(get_auth_gate)) -> Session:  # noqa: B008
    if not await gate.is_authenticated() or gate.identity.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return gate.identity.session


def require_role(*roles: str):
    async def _check_role(
        session: Session = Depends(get_current_session),  # noqa: B008
        gate: AuthGate = Depends(get_auth_gate),  # noqa: B008
    ) -> UserData:
        user = await gate.get_current_user_data()
        if user is None or user.role_name not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(roles)}",
            )
        return user

    return _check_role


require_admin = require_role(*sorted(ADMIN_ROLES))


def get_employee_service(session: Session = Depends(get_current_session)) -> EmployeeService:  # noqa: B008
    return EmployeeService(data_service, session.access_token, id_prefix=settings.EMPLOYEE_ID_PREFIX)
