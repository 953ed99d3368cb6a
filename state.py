"""Session state: cached backend rows, memoized KPIs and guarded mutations."""

from __future__ import annotations

import datetime
import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import pandas as pd

from backend import COMPENSATION_KEY, DAILY_KEY, BackendResult, Gateways
from metrics import (
    compensation_frame,
    compensation_lookup,
    daily_metrics_table,
    filter_by_date_range,
    monthly_summary,
    monthly_with_compensation,
    record_averages,
    records_frame,
    total_metrics,
)
from validation import (
    coerce_compensation_payload,
    coerce_daily_payload,
    interpret_backend_error,
    validate_compensation,
    validate_daily_record,
)

logger = logging.getLogger(__name__)

ENTRY = "entry"
COMPENSATION = "compensation"

DUPLICATE_SUBMISSION_MESSAGE = "This record is already being saved. Wait for the current request to finish."

MEMO_SIZE = 128


class InFlightGuard:
    """Tracks (entity, key) pairs with a request still pending."""

    def __init__(self) -> None:
        self._pending: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def acquire(self, entity: str, key: Any) -> bool:
        marker = (entity, str(key))
        with self._lock:
            if marker in self._pending:
                return False
            self._pending.add(marker)
            return True

    def release(self, entity: str, key: Any) -> None:
        with self._lock:
            self._pending.discard((entity, str(key)))

    def is_pending(self, entity: str, key: Any) -> bool:
        with self._lock:
            return (entity, str(key)) in self._pending


@dataclass
class MutationOutcome:
    ok: bool
    messages: list[str] = field(default_factory=list)


class AppState:
    """Explicit container passed to every view.

    The record caches are replaced wholesale by ``reload`` after each
    successful write; derived tables are memoized per data version.
    """

    def __init__(self, gateways: Gateways) -> None:
        self.gateways = gateways
        self.entries = records_frame([])
        self.compensation_rows: list[dict[str, Any]] = []
        self.version = 0
        self.load_errors: dict[str, str] = {}
        self.guard = InFlightGuard()
        self._derive = functools.lru_cache(maxsize=MEMO_SIZE)(self._compute)

    @property
    def offline(self) -> bool:
        return self.gateways.offline

    @property
    def load_error(self) -> str | None:
        return next(iter(self.load_errors.values()), None)

    def _bump(self) -> None:
        self.version += 1
        self._derive.cache_clear()

    def reload_entries(self) -> bool:
        result = self.gateways.daily.list_rows(order_by=DAILY_KEY, ascending=False)
        if result.error:
            self.load_errors[ENTRY] = interpret_backend_error(result.error)
            logger.error("Could not load entries: %s", result.error.message)
            return False
        self.entries = records_frame(result.data)
        self.load_errors.pop(ENTRY, None)
        self._bump()
        return True

    def reload_compensation(self) -> bool:
        result = self.gateways.compensation.list_rows(order_by=COMPENSATION_KEY, ascending=False)
        if result.error:
            self.load_errors[COMPENSATION] = interpret_backend_error(result.error)
            logger.error("Could not load compensation: %s", result.error.message)
            return False
        self.compensation_rows = list(result.data)
        self.load_errors.pop(COMPENSATION, None)
        self._bump()
        return True

    def reload(self) -> bool:
        entries_ok = self.reload_entries()
        compensation_ok = self.reload_compensation()
        return entries_ok and compensation_ok

    def _compute(self, version: int, name: str, start: datetime.date | None, end: datetime.date | None) -> Any:
        if name == "filtered":
            return filter_by_date_range(self.entries, start, end)
        if name == "compensation_lookup":
            return compensation_lookup(self.compensation_rows)
        if name == "compensation_table":
            return compensation_frame(self.compensation_rows)
        frame = self._derive(version, "filtered", start, end)
        if name == "totals":
            return total_metrics(frame)
        if name == "history":
            return daily_metrics_table(frame)
        if name == "averages":
            return record_averages(frame)
        if name == "monthly":
            return monthly_with_compensation(monthly_summary(frame), self.compensation_by_month())
        raise ValueError(f"Unknown view: {name}")

    def _view(self, name: str, start: datetime.date | None = None, end: datetime.date | None = None) -> Any:
        return self._derive(self.version, name, start, end)

    def filtered_entries(
        self, start: datetime.date | None = None, end: datetime.date | None = None
    ) -> pd.DataFrame:
        return self._view("filtered", start, end)

    def totals(self, start: datetime.date | None = None, end: datetime.date | None = None) -> dict[str, float]:
        return self._view("totals", start, end)

    def history(self, start: datetime.date | None = None, end: datetime.date | None = None) -> pd.DataFrame:
        return self._view("history", start, end)

    def averages(self, start: datetime.date | None = None, end: datetime.date | None = None) -> dict[str, float]:
        return self._view("averages", start, end)

    def compensation_by_month(self) -> dict[str, float]:
        return self._view("compensation_lookup")

    def compensation_table(self) -> pd.DataFrame:
        return self._view("compensation_table")

    def monthly(self, start: datetime.date | None = None, end: datetime.date | None = None) -> pd.DataFrame:
        return self._view("monthly", start, end)

    def _mutate(
        self,
        entity: str,
        keys: tuple,
        action: Callable[[], BackendResult],
        reload: Callable[[], bool],
        success_message: str,
    ) -> MutationOutcome:
        held: list[str] = []
        for key in dict.fromkeys(str(value) for value in keys):
            if not self.guard.acquire(entity, key):
                logger.info("Rejected duplicate %s submission for %s", entity, key)
                for marker in held:
                    self.guard.release(entity, marker)
                return MutationOutcome(ok=False, messages=[DUPLICATE_SUBMISSION_MESSAGE])
            held.append(key)
        try:
            result = action()
        finally:
            for marker in held:
                self.guard.release(entity, marker)

        if result.error:
            return MutationOutcome(ok=False, messages=[interpret_backend_error(result.error)])

        reload()
        return MutationOutcome(ok=True, messages=[success_message])

    def add_entry(self, fields: Mapping[str, Any]) -> MutationOutcome:
        errors = validate_daily_record(fields)
        if errors:
            return MutationOutcome(ok=False, messages=errors)
        payload = coerce_daily_payload(fields)
        return self._mutate(
            ENTRY,
            (payload[DAILY_KEY],),
            lambda: self.gateways.daily.insert_row(payload),
            self.reload_entries,
            "Entry saved.",
        )

    def update_entry(self, row_id: Any, fields: Mapping[str, Any]) -> MutationOutcome:
        errors = validate_daily_record(fields)
        if errors:
            return MutationOutcome(ok=False, messages=errors)
        payload = coerce_daily_payload(fields)
        return self._mutate(
            ENTRY,
            (row_id, payload[DAILY_KEY]),
            lambda: self.gateways.daily.update_row(row_id, payload),
            self.reload_entries,
            "Entry updated.",
        )

    def delete_entry(self, row_id: Any) -> MutationOutcome:
        return self._mutate(
            ENTRY,
            (row_id,),
            lambda: self.gateways.daily.delete_row(row_id),
            self.reload_entries,
            "Entry deleted.",
        )

    def add_compensation(self, fields: Mapping[str, Any]) -> MutationOutcome:
        errors = validate_compensation(fields)
        if errors:
            return MutationOutcome(ok=False, messages=errors)
        payload = coerce_compensation_payload(fields)
        return self._mutate(
            COMPENSATION,
            (payload[COMPENSATION_KEY],),
            lambda: self.gateways.compensation.insert_row(payload),
            self.reload_compensation,
            "Compensation saved.",
        )

    def update_compensation(self, row_id: Any, fields: Mapping[str, Any]) -> MutationOutcome:
        errors = validate_compensation(fields)
        if errors:
            return MutationOutcome(ok=False, messages=errors)
        payload = coerce_compensation_payload(fields)
        return self._mutate(
            COMPENSATION,
            (row_id, payload[COMPENSATION_KEY]),
            lambda: self.gateways.compensation.update_row(row_id, payload),
            self.reload_compensation,
            "Compensation updated.",
        )

    def delete_compensation(self, row_id: Any) -> MutationOutcome:
        return self._mutate(
            COMPENSATION,
            (row_id,),
            lambda: self.gateways.compensation.delete_row(row_id),
            self.reload_compensation,
            "Compensation deleted.",
        )
