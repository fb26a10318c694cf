"""Display helpers for the employee table and detail view (id-ID conventions)."""

from __future__ import annotations

from datetime import date, datetime

from hris.models.employee import EmployeeCard, EmployeeRecord, EmploymentStatus

NEUTRAL_BADGE = "bg-gray-100 text-gray-800"

STATUS_BADGE_CLASSES: dict[str, str] = {
    EmploymentStatus.ACTIVE.value: "bg-green-100 text-green-800",
    EmploymentStatus.INACTIVE.value: NEUTRAL_BADGE,
    EmploymentStatus.ON_LEAVE.value: "bg-yellow-100 text-yellow-800",
    EmploymentStatus.PROBATION.value: "bg-blue-100 text-blue-800",
    EmploymentStatus.TERMINATED.value: "bg-red-100 text-red-800",
    EmploymentStatus.RESIGNED.value: "bg-orange-100 text-orange-800",
}

AVATAR_COLORS = [
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
    "#F97316",
    "#6366F1",
]
DEFAULT_AVATAR_COLOR = "#6B7280"

_MONTHS_SHORT = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]
_MONTHS_LONG = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]
_WEEKDAYS = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]


def status_badge_class(status: str | None) -> str:
    return STATUS_BADGE_CLASSES.get(status or "", NEUTRAL_BADGE)


def get_initials(name: str | None) -> str:
    if not name:
        return "?"
    return "".join(part[0] for part in name.split(" ") if part).upper()[:2]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def get_avatar_color(name: str | None) -> str:
    if not name:
        return DEFAULT_AVATAR_COLOR
    hash_value = 0
    for char in name:
        hash_value = ord(char) + (_to_int32(_to_int32(hash_value) << 5) - hash_value)
    return AVATAR_COLORS[abs(hash_value) % len(AVATAR_COLORS)]


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def format_date_short(value: str | None) -> str:
    parsed = _parse_date(value)
    if parsed is None:
        return "-"
    return f"{parsed.day:02d} {_MONTHS_SHORT[parsed.month - 1]} {parsed.year}"


def format_date_long(value: str | None) -> str:
    parsed = _parse_date(value)
    if parsed is None:
        return "-"
    return f"{_WEEKDAYS[parsed.weekday()]}, {parsed.day} {_MONTHS_LONG[parsed.month - 1]} {parsed.year}"


def format_time(value: str | None) -> str:
    if not value:
        return "-"
    return value[:5]


def format_currency(amount: float | int | None) -> str:
    if not amount:
        return "Rp 0"
    sign = "-" if amount < 0 else ""
    digits = f"{round(abs(amount)):,}".replace(",", ".")
    return f"{sign}Rp {digits}"


def format_date_for_file(moment: datetime) -> str:
    return moment.strftime("%Y%m%d")


def build_card(record: EmployeeRecord) -> EmployeeCard:
    shift_hours = None
    if record.shift and (record.shift.start_time or record.shift.end_time):
        shift_hours = f"{format_time(record.shift.start_time)} - {format_time(record.shift.end_time)}"

    return EmployeeCard(
        record=record,
        initials=get_initials(record.full_name),
        avatar_color=get_avatar_color(record.full_name),
        status_class=status_badge_class(record.employment_status),
        birth_date=format_date_short(record.birth_date),
        join_date=format_date_long(record.join_date),
        shift_hours=shift_hours,
    )
