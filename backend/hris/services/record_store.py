from __future__ import annotations

import itertools
from collections.abc import Iterable
from datetime import date

from hris.models.employee import EmployeeRecord, EmployeeStats
from hris.models.view import DEFAULT_ITEMS_PER_PAGE, PageView, ViewAction, ViewState
from hris.services.record_view import build_page, compute_stats, order_records, reduce_view


class RequestSequencer:
    """Hands out monotonic request ids per state slot so late responses can be dropped."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}

    def issue(self, slot: str) -> int:
        request_id = next(self._counter)
        self._latest[slot] = request_id
        return request_id

    def is_current(self, slot: str, request_id: int) -> bool:
        return self._latest.get(slot) == request_id


class RecordStore:
    """In-memory employee snapshot plus the table's view state.

    ``filtered`` always holds the filtered and sorted records for ``state``.
    Every record mutation re-runs the filters, which returns the table to the
    first page.
    """

    def __init__(
        self,
        records: Iterable[EmployeeRecord] | None = None,
        state: ViewState | None = None,
        *,
        default_page_size: int = DEFAULT_ITEMS_PER_PAGE,
    ) -> None:
        self.default_page_size = default_page_size
        self.state = state or ViewState(items_per_page=default_page_size)
        self.records: list[EmployeeRecord] = list(records or [])
        self.filtered: list[EmployeeRecord] = []
        self.sequencer = RequestSequencer()
        self._refilter()

    def _refilter(self) -> None:
        self.filtered = order_records(self.records, self.state)

    def page(self) -> PageView:
        return build_page(self.filtered, self.state)

    def stats(self, today: date | None = None) -> EmployeeStats:
        return compute_stats(self.records, today)

    def apply_filters(self) -> PageView:
        self.state = self.state.model_copy(update={"current_page": 1})
        self._refilter()
        return self.page()

    def dispatch(self, action: ViewAction) -> PageView:
        self.state = reduce_view(
            self.state,
            action,
            total_items=len(self.filtered),
            default_page_size=self.default_page_size,
        )
        self._refilter()
        return self.page()

    def find(self, record_id: str) -> EmployeeRecord | None:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def replace_all(self, records: Iterable[EmployeeRecord]) -> PageView:
        self.records = list(records)
        return self.apply_filters()

    def insert(self, record: EmployeeRecord) -> PageView:
        self.records.insert(0, record)
        return self.apply_filters()

    def update(self, record: EmployeeRecord) -> PageView:
        for index, existing in enumerate(self.records):
            if existing.id == record.id:
                self.records[index] = record
                break
        return self.apply_filters()

    def remove(self, record_id: str) -> PageView:
        self.records = [record for record in self.records if record.id != record_id]
        return self.apply_filters()
