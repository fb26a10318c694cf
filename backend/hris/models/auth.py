"""Authentication models for Supabase identity sessions and app roles."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    HR_ADMIN = "hr_admin"
    MANAGER = "manager"


ADMIN_ROLES: frozenset[str] = frozenset({Role.SUPER_ADMIN.value, Role.HR_ADMIN.value})


class GateState(str, Enum):
    UNKNOWN = "unknown"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    AUTHORIZED_FOR_ADMIN = "authorized_for_admin"
    NOT_AUTHORIZED = "not_authorized"


class AuthChangeEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class AuthUser(BaseModel):
    id: str
    email: str | None = None


class Session(BaseModel):
    """Session issued by the identity service. Held in memory only."""

    access_token: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_in: int | None = None
    expires_at: int | None = None
    user: AuthUser


class AuthError(BaseModel):
    message: str
    status: int | None = None


class AuthResponse(BaseModel):
    session: Session | None = None
    error: AuthError | None = None


class SessionResponse(BaseModel):
    session: Session | None = None
    error: AuthError | None = None


class UserResponse(BaseModel):
    user: AuthUser | None = None
    error: AuthError | None = None


class AuthResult(BaseModel):
    success: bool
    error: str | None = None
    session: Session | None = None


class UserData(BaseModel):
    """Row of the application ``users`` table joined with its role."""

    id: str
    email: str | None = None
    is_active: bool | None = None
    role_id: str | int | None = None
    role_name: str | None = None


class UserProfile(BaseModel):
    email: str | None = None
    role: str | None = None
    name: str | None = None
    employee_id: str | None = None
    department: str | None = None


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_at: int | None = None
    user: AuthUser
