"""Table view state, view actions and the derived page model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from hris.models.employee import EmployeeRecord

DEFAULT_SORT_COLUMN = "full_name"
DEFAULT_ITEMS_PER_PAGE = 10


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewState(BaseModel):
    """Search, filter, sort and pagination selection of the employee table."""

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    status_filter: str = ""
    department_filter: str = ""
    sort_column: str = DEFAULT_SORT_COLUMN
    sort_direction: SortDirection = SortDirection.ASC
    current_page: int = Field(default=1, ge=1)
    items_per_page: int = Field(default=DEFAULT_ITEMS_PER_PAGE, ge=1)


class SetSearch(BaseModel):
    term: str


class SetStatusFilter(BaseModel):
    status: str


class SetDepartmentFilter(BaseModel):
    department_id: str


class SortBy(BaseModel):
    column: str


class GoToPage(BaseModel):
    page: int


class ChangeItemsPerPage(BaseModel):
    value: int | str | None = None


ViewAction = SetSearch | SetStatusFilter | SetDepartmentFilter | SortBy | GoToPage | ChangeItemsPerPage


class PageView(BaseModel):
    """One rendered page of the employee table."""

    items: list[EmployeeRecord]
    total_items: int
    total_pages: int
    current_page: int
    items_per_page: int
    start_item: int
    end_item: int
    page_numbers: list[int]
    # first/last page buttons outside the window, and the gaps before them
    show_first: bool = False
    leading_ellipsis: bool = False
    show_last: bool = False
    trailing_ellipsis: bool = False
    has_previous: bool
    has_next: bool
    is_empty: bool
    sort_column: str
    sort_direction: SortDirection
