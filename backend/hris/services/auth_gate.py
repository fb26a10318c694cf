"""Page access decisions: session checks, app-role lookup, login and logout.

Every public method here is a predicate or returns a result object. Remote
failures are logged and turned into ``False``/``None``/a redirect; nothing is
raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from hris.core.config import Settings
from hris.core.effects import Effects
from hris.models.auth import ADMIN_ROLES, AuthResult, AuthUser, GateState, Role, Session, UserData, UserProfile
from hris.models.employee import EmployeeRecord
from hris.services.data_service import DataService
from hris.services.employee_service import EmployeeService
from hris.services.identity_service import IdentityClient

logger = logging.getLogger(__name__)

NOT_PROVISIONED_MESSAGE = "Account is not provisioned in this system. Contact your administrator."
NO_ACCESS_MESSAGE = "You do not have access to this page."

_USER_DATA_SELECT = """
    id,
    email,
    is_active,
    role_id,
    roles (
        id,
        role_name
    )
"""

_USER_INFO_SELECT = """
    email,
    roles(role_name),
    employees(full_name, employee_id, department:departments(dept_name))
"""


def _first(value: Any) -> dict[str, Any]:
    """Embedded relations come back as an object or a one-element list."""
    if isinstance(value, list):
        return value[0] if value and isinstance(value[0], dict) else {}
    if isinstance(value, dict):
        return value
    return {}


class AuthGate:
    def __init__(
        self,
        identity: IdentityClient,
        data: DataService,
        effects: Effects,
        settings: Settings,
    ) -> None:
        self.identity = identity
        self.data = data
        self.effects = effects
        self.settings = settings
        self.state = GateState.UNKNOWN

    @property
    def access_token(self) -> str | None:
        session = self.identity.session
        return session.access_token if session else None

    async def get_current_session(self) -> Session | None:
        try:
            response = await self.identity.get_session()
        except Exception:
            logger.exception("Session error")
            return None
        if response.error:
            logger.error("Error getting session: %s", response.error.message)
            return None
        return response.session

    async def get_current_user(self) -> AuthUser | None:
        session = await self.get_current_session()
        return session.user if session else None

    async def is_authenticated(self) -> bool:
        self.state = GateState.CHECKING
        session = await self.get_current_session()
        self.state = GateState.AUTHENTICATED if session else GateState.UNAUTHENTICATED
        return session is not None

    async def get_current_user_data(self) -> UserData | None:
        user = await self.get_current_user()
        if not user:
            return None

        try:
            result = await (
                self.data.table("users", self.access_token)
                .select(_USER_DATA_SELECT)
                .eq("id", user.id)
                .single()
                .execute()
            )
            if result.error:
                logger.error("Error getting user data: %s", result.error.message)
                return None

            row = result.data or {}
            role = _first(row.get("roles"))
            return UserData(
                id=str(row.get("id") or user.id),
                email=row.get("email"),
                is_active=row.get("is_active"),
                role_id=row.get("role_id"),
                role_name=role.get("role_name"),
            )
        except Exception:
            logger.exception("User data lookup failed")
            return None

    async def get_current_user_role(self) -> str | None:
        user_data = await self.get_current_user_data()
        return user_data.role_name if user_data else None

    async def is_admin(self) -> bool:
        return await self.get_current_user_role() in ADMIN_ROLES

    async def is_super_admin(self) -> bool:
        return await self.get_current_user_role() == Role.SUPER_ADMIN.value

    async def protect_page(self) -> bool:
        if not await self.is_authenticated():
            self.effects.redirect(self.settings.LOGIN_PAGE)
            return False
        return True

    async def protect_admin_page(self) -> bool:
        if not await self.is_authenticated():
            self.effects.redirect(self.settings.LOGIN_PAGE)
            return False

        if not await self.is_admin():
            self.state = GateState.NOT_AUTHORIZED
            self.effects.alert(NO_ACCESS_MESSAGE)
            self.effects.redirect(self.settings.DASHBOARD_PAGE)
            return False

        self.state = GateState.AUTHORIZED_FOR_ADMIN
        return True

    async def login(self, email: str, password: str) -> AuthResult:
        try:
            response = await self.identity.sign_in(email, password)
            if response.error or response.session is None:
                message = response.error.message if response.error else "Login failed"
                logger.error("Login error: %s", message)
                return AuthResult(success=False, error=message)

            # a valid identity without a row in the users table gets no access at all
            role = await self.get_current_user_role()
            if not role:
                logger.warning("Login rejected for %s: no application user", email)
                error = await self.identity.sign_out()
                if error:
                    logger.error("Failed to revoke session for %s: %s", email, error.message)
                self.state = GateState.UNAUTHENTICATED
                return AuthResult(success=False, error=NOT_PROVISIONED_MESSAGE)
        except Exception:
            logger.exception("Login error")
            await self._discard_session()
            return AuthResult(success=False, error="Login failed")

        self.state = GateState.AUTHENTICATED
        return AuthResult(success=True, session=response.session)

    async def _discard_session(self) -> None:
        if self.identity.session is None:
            return
        try:
            await self.identity.sign_out()
        except Exception:
            logger.exception("Failed to revoke session after login error")
        self.state = GateState.UNAUTHENTICATED

    async def logout(self) -> AuthResult:
        try:
            error = await self.identity.sign_out()
        except Exception:
            logger.exception("Logout error")
            return AuthResult(success=False, error="Logout failed")

        if error:
            logger.error("Logout error: %s", error.message)
            return AuthResult(success=False, error=error.message)

        self.state = GateState.UNAUTHENTICATED
        self.effects.redirect(self.settings.LOGIN_PAGE)
        return AuthResult(success=True)

    async def get_user_info(self) -> UserProfile | None:
        user = await self.get_current_user()
        if not user:
            return None

        try:
            result = await (
                self.data.table("users", self.access_token)
                .select(_USER_INFO_SELECT)
                .eq("id", user.id)
                .single()
                .execute()
            )
            if result.error:
                logger.error("Error getting user info: %s", result.error.message)
                return None

            row = result.data or {}
            role = _first(row.get("roles"))
            employee = _first(row.get("employees"))
            department = _first(employee.get("department"))
            return UserProfile(
                email=row.get("email"),
                role=role.get("role_name"),
                name=employee.get("full_name") or row.get("email"),
                employee_id=employee.get("employee_id"),
                department=department.get("dept_name"),
            )
        except Exception:
            logger.exception("User info lookup failed")
            return None

    async def get_current_employee(self) -> EmployeeRecord | None:
        user = await self.get_current_user()
        if not user:
            return None

        service = EmployeeService(self.data, self.access_token, id_prefix=self.settings.EMPLOYEE_ID_PREFIX)
        try:
            return await service.get_employee_for_user(user.id)
        except Exception:
            logger.exception("Error getting employee data")
            return None
