"""Employee models for Supabase employee data."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "On Leave"
    PROBATION = "Probation"
    TERMINATED = "Terminated"
    RESIGNED = "Resigned"


GENDER_OPTIONS: list[str] = ["Laki-laki", "Perempuan"]
MARITAL_STATUS_OPTIONS: list[str] = ["Belum Menikah", "Menikah", "Cerai Hidup", "Cerai Mati"]


class DepartmentRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "dept_name"))
    code: str | None = Field(default=None, validation_alias=AliasChoices("code", "dept_code"))


class PositionRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "position_name"))


class ShiftRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = Field(default="", validation_alias=AliasChoices("name", "shift_name"))
    start_time: str | None = None
    end_time: str | None = None


class EmployeeRecord(BaseModel):
    """Employee row with its department, position and shift resolved by the data service."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    employee_id: str | None = None
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    nik: str | None = None
    birth_date: str | None = None
    gender: str | None = None
    marital_status: str | None = None
    address: str | None = None
    department_id: str | None = None
    department: DepartmentRef | None = None
    position_id: str | None = None
    position: PositionRef | None = None
    shift_id: str | None = None
    shift: ShiftRef | None = None
    join_date: str | None = None
    employment_status: str | None = None
    user_id: str | None = None
    created_at: str | None = None


_OPTIONAL_TEXT_FIELDS = (
    "email",
    "phone",
    "nik",
    "gender",
    "marital_status",
    "address",
    "department_id",
    "position_id",
    "shift_id",
)


class EmployeeForm(BaseModel):
    """Writable employee fields, validated before anything is sent to the data service."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    full_name: str = Field(..., min_length=1, max_length=200)
    email: str | None = None
    phone: str | None = None
    nik: str | None = None
    birth_date: date | None = None
    gender: str | None = None
    marital_status: str | None = None
    address: str | None = None
    department_id: str | None = None
    position_id: str | None = None
    shift_id: str | None = None
    join_date: date | None = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE

    @field_validator("full_name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator(*_OPTIONAL_TEXT_FIELDS, "birth_date", "join_date", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("employment_status", mode="before")
    @classmethod
    def _default_status(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return EmploymentStatus.ACTIVE
        return value

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class EmployeeCard(BaseModel):
    """Employee record with the display values of the detail view."""

    record: EmployeeRecord
    initials: str
    avatar_color: str
    status_class: str
    birth_date: str
    join_date: str
    shift_hours: str | None = None


class EmployeeStats(BaseModel):
    total: int = 0
    active: int = 0
    on_leave: int = 0
    new_hires_this_month: int = 0


class ReferenceData(BaseModel):
    departments: list[DepartmentRef] = []
    positions: list[PositionRef] = []
    shifts: list[ShiftRef] = []
    genders: list[str] = GENDER_OPTIONS
    marital_statuses: list[str] = MARITAL_STATUS_OPTIONS
    employment_statuses: list[str] = [status.value for status in EmploymentStatus]
