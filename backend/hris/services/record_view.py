"""Employee table pipeline: filter → sort → paginate, plus header statistics.

Everything here is pure: functions take records and a ``ViewState`` and return
new values, so the table can be derived without any UI attached.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from datetime import date

from hris.models.employee import EmployeeRecord, EmployeeStats, EmploymentStatus
from hris.models.view import (
    DEFAULT_ITEMS_PER_PAGE,
    ChangeItemsPerPage,
    GoToPage,
    PageView,
    SetDepartmentFilter,
    SetSearch,
    SetStatusFilter,
    SortBy,
    SortDirection,
    ViewAction,
    ViewState,
)

MAX_VISIBLE_PAGES = 5

_LEADING_INT = re.compile(r"\s*(\d+)")


def _search_fields(record: EmployeeRecord) -> tuple[str | None, ...]:
    return (
        record.full_name,
        record.employee_id,
        record.email,
        record.department.name if record.department else None,
        record.position.name if record.position else None,
    )


def matches_search(record: EmployeeRecord, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return any(value and needle in value.lower() for value in _search_fields(record))


def apply_filters(records: Iterable[EmployeeRecord], state: ViewState) -> list[EmployeeRecord]:
    return [
        record
        for record in records
        if matches_search(record, state.search_term)
        and (not state.status_filter or record.employment_status == state.status_filter)
        and (not state.department_filter or record.department_id == state.department_filter)
    ]


def sort_key(record: EmployeeRecord, column: str) -> str:
    if column == "department":
        value: object = record.department.name if record.department else None
    elif column == "position":
        value = record.position.name if record.position else None
    elif column == "shift":
        value = record.shift.name if record.shift else None
    elif column in EmployeeRecord.model_fields:
        value = getattr(record, column)
    else:
        value = None

    if value is None:
        return ""
    return str(value).lower()


def sort_data(
    records: Iterable[EmployeeRecord],
    column: str,
    direction: SortDirection,
) -> list[EmployeeRecord]:
    # sorted() is stable in both directions, so equal keys keep their input order
    return sorted(
        records,
        key=lambda record: sort_key(record, column),
        reverse=direction == SortDirection.DESC,
    )


def total_pages(total_items: int, items_per_page: int) -> int:
    if total_items <= 0:
        return 0
    return math.ceil(total_items / items_per_page)


def paginate(records: Sequence[EmployeeRecord], current_page: int, items_per_page: int) -> list[EmployeeRecord]:
    start = (current_page - 1) * items_per_page
    return list(records[start : start + items_per_page])


def page_window(current_page: int, pages: int, max_visible: int = MAX_VISIBLE_PAGES) -> list[int]:
    """Page numbers shown as buttons, centred on the current page where possible."""
    start = max(1, current_page - max_visible // 2)
    end = min(pages, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)
    return list(range(start, end + 1))


def parse_page_size(value: int | str | None, default: int = DEFAULT_ITEMS_PER_PAGE) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            size = int(match.group(1))
            return size if size > 0 else default
    return default


def reduce_view(
    state: ViewState,
    action: ViewAction,
    *,
    total_items: int = 0,
    default_page_size: int = DEFAULT_ITEMS_PER_PAGE,
) -> ViewState:
    """Apply one table action to the view state.

    Filter, search and sort changes always return to the first page. Page
    navigation outside ``[1, total_pages]`` leaves the state untouched, where
    ``total_pages`` is derived from ``total_items`` (the filtered count).
    """
    if isinstance(action, SetSearch):
        return state.model_copy(update={"search_term": action.term, "current_page": 1})

    if isinstance(action, SetStatusFilter):
        return state.model_copy(update={"status_filter": action.status, "current_page": 1})

    if isinstance(action, SetDepartmentFilter):
        return state.model_copy(update={"department_filter": action.department_id, "current_page": 1})

    if isinstance(action, SortBy):
        if action.column == state.sort_column:
            direction = SortDirection.DESC if state.sort_direction == SortDirection.ASC else SortDirection.ASC
        else:
            direction = SortDirection.ASC
        return state.model_copy(
            update={"sort_column": action.column, "sort_direction": direction, "current_page": 1}
        )

    if isinstance(action, GoToPage):
        pages = total_pages(total_items, state.items_per_page)
        if action.page < 1 or action.page > pages:
            return state
        return state.model_copy(update={"current_page": action.page})

    if isinstance(action, ChangeItemsPerPage):
        size = parse_page_size(action.value, default_page_size)
        return state.model_copy(update={"items_per_page": size, "current_page": 1})

    raise TypeError(f"Unsupported view action: {type(action).__name__}")


def build_page(ordered: Sequence[EmployeeRecord], state: ViewState) -> PageView:
    total = len(ordered)
    pages = total_pages(total, state.items_per_page)
    page = state.current_page
    items = paginate(ordered, page, state.items_per_page)
    numbers = page_window(page, pages)
    first = numbers[0] if numbers else 1
    last = numbers[-1] if numbers else pages

    return PageView(
        items=items,
        total_items=total,
        total_pages=pages,
        current_page=page,
        items_per_page=state.items_per_page,
        start_item=0 if total == 0 else (page - 1) * state.items_per_page + 1,
        end_item=min(page * state.items_per_page, total),
        page_numbers=numbers,
        show_first=first > 1,
        leading_ellipsis=first > 2,
        show_last=last < pages,
        trailing_ellipsis=last < pages - 1,
        has_previous=page > 1,
        has_next=page < pages,
        is_empty=not items,
        sort_column=state.sort_column,
        sort_direction=state.sort_direction,
    )


def order_records(records: Iterable[EmployeeRecord], state: ViewState) -> list[EmployeeRecord]:
    return sort_data(apply_filters(records, state), state.sort_column, state.sort_direction)


def render_view(records: Iterable[EmployeeRecord], state: ViewState) -> PageView:
    return build_page(order_records(records, state), state)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def compute_stats(records: Iterable[EmployeeRecord], today: date | None = None) -> EmployeeStats:
    first_of_month = (today or date.today()).replace(day=1)

    total = active = on_leave = new_hires = 0
    for record in records:
        total += 1
        if record.employment_status == EmploymentStatus.ACTIVE.value:
            active += 1
        elif record.employment_status == EmploymentStatus.ON_LEAVE.value:
            on_leave += 1
        joined = _parse_date(record.join_date)
        if joined is not None and joined >= first_of_month:
            new_hires += 1

    return EmployeeStats(
        total=total,
        active=active,
        on_leave=on_leave,
        new_hires_this_month=new_hires,
    )


def generate_employee_id(last_id: str | None, prefix: str = "EMP") -> str:
    """Next sequential employee id, e.g. ``EMP007`` → ``EMP008``; ``EMP001`` when none exists."""
    last_number = 0
    if last_id:
        match = _LEADING_INT.match(last_id.replace(prefix, "", 1))
        if match:
            last_number = int(match.group(1))
    return f"{prefix}{last_number + 1:03d}"
