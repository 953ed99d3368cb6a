"""Table access over the hosted PostgREST backend, plus an offline demo table."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from config import Settings

logger = logging.getLogger(__name__)

DAILY_TABLE = "lancamentos"
COMPENSATION_TABLE = "prolabore"
DAILY_KEY = "data"
COMPENSATION_KEY = "mes_ano"

NETWORK_ERROR_CODE = "network"
PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_KEY = "placeholder-key"

DEMO_DAILY_ROWS = [
    {"id": "1", "data": "2025-01-15", "gasto_ads": 150.00, "valor_vendas": 800.00, "qtd_leads": 45, "qtd_vendas": 3},
    {"id": "2", "data": "2025-01-16", "gasto_ads": 200.00, "valor_vendas": 1200.00, "qtd_leads": 60, "qtd_vendas": 5},
    {"id": "3", "data": "2025-01-17", "gasto_ads": 180.00, "valor_vendas": 950.00, "qtd_leads": 50, "qtd_vendas": 4},
    {"id": "4", "data": "2025-01-18", "gasto_ads": 220.00, "valor_vendas": 1500.00, "qtd_leads": 70, "qtd_vendas": 6},
    {"id": "5", "data": "2025-01-19", "gasto_ads": 190.00, "valor_vendas": 1100.00, "qtd_leads": 55, "qtd_vendas": 5},
    {"id": "6", "data": "2025-02-01", "gasto_ads": 250.00, "valor_vendas": 1800.00, "qtd_leads": 80, "qtd_vendas": 7},
    {"id": "7", "data": "2025-02-02", "gasto_ads": 210.00, "valor_vendas": 1300.00, "qtd_leads": 65, "qtd_vendas": 6},
    {"id": "8", "data": "2025-02-03", "gasto_ads": 180.00, "valor_vendas": 1000.00, "qtd_leads": 58, "qtd_vendas": 4},
    {"id": "9", "data": "2025-02-04", "gasto_ads": 300.00, "valor_vendas": 2100.00, "qtd_leads": 95, "qtd_vendas": 8},
    {"id": "10", "data": "2025-02-05", "gasto_ads": 270.00, "valor_vendas": 1650.00, "qtd_leads": 85, "qtd_vendas": 7},
    {"id": "11", "data": "2025-03-01", "gasto_ads": 320.00, "valor_vendas": 2500.00, "qtd_leads": 100, "qtd_vendas": 10},
    {"id": "12", "data": "2025-03-02", "gasto_ads": 280.00, "valor_vendas": 1900.00, "qtd_leads": 90, "qtd_vendas": 8},
    {"id": "13", "data": "2025-03-03", "gasto_ads": 250.00, "valor_vendas": 1600.00, "qtd_leads": 75, "qtd_vendas": 6},
    {"id": "14", "data": "2025-03-04", "gasto_ads": 290.00, "valor_vendas": 2000.00, "qtd_leads": 88, "qtd_vendas": 9},
    {"id": "15", "data": "2025-03-05", "gasto_ads": 310.00, "valor_vendas": 2300.00, "qtd_leads": 95, "qtd_vendas": 10},
]


@dataclass
class BackendError:
    code: str
    message: str
    details: str = ""
    hint: str = ""


@dataclass
class BackendResult:
    data: list[dict[str, Any]] = field(default_factory=list)
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _safe_json_response(response: requests.Response) -> Any:
    try:
        return response.json()
    except Exception:
        return {}


def _error_from_response(response: requests.Response, payload: Any) -> BackendError:
    body = payload if isinstance(payload, dict) else {}
    return BackendError(
        code=str(body.get("code") or response.status_code),
        message=str(body.get("message") or response.reason or f"HTTP {response.status_code}"),
        details=str(body.get("details") or ""),
        hint=str(body.get("hint") or ""),
    )


class TableGateway:
    """List, insert, update and delete rows of one backend table.

    Errors are returned inside the result, never raised, and never retried.
    """

    def __init__(self, base_url: str, api_key: str, table: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.timeout = timeout
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    @property
    def url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _request(
        self,
        method: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
    ) -> BackendResult:
        try:
            response = requests.request(
                method,
                self.url,
                params=params,
                json=payload,
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, self.table, exc)
            return BackendResult(error=BackendError(code=NETWORK_ERROR_CODE, message=f"Network error: {exc}"))

        body = _safe_json_response(response)
        if not response.ok:
            error = _error_from_response(response, body)
            logger.warning("%s %s rejected (%s): %s", method, self.table, error.code, error.message)
            return BackendResult(error=error)

        if isinstance(body, list):
            return BackendResult(data=body)
        if isinstance(body, dict) and body:
            return BackendResult(data=[body])
        return BackendResult()

    def list_rows(self, order_by: str | None = None, ascending: bool = True) -> BackendResult:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'asc' if ascending else 'desc'}"
        return self._request("GET", params=params)

    def insert_row(self, payload: dict[str, Any]) -> BackendResult:
        return self._request("POST", payload=[payload])

    def update_row(self, key: Any, payload: dict[str, Any], key_field: str = "id") -> BackendResult:
        return self._request("PATCH", params={key_field: f"eq.{key}"}, payload=payload)

    def delete_row(self, key: Any, key_field: str = "id") -> BackendResult:
        return self._request("DELETE", params={key_field: f"eq.{key}"})


class InMemoryTable:
    """Local stand-in with the TableGateway interface, for offline development."""

    def __init__(self, table: str, unique_field: str, rows: list[dict[str, Any]] | None = None) -> None:
        self.table = table
        self.unique_field = unique_field
        self._rows = [dict(row) for row in copy.deepcopy(rows or [])]
        self._next_id = 1 + max((int(row["id"]) for row in self._rows if str(row.get("id", "")).isdigit()), default=0)

    def _duplicate(self, value: Any) -> BackendResult:
        return BackendResult(
            error=BackendError(
                code="23505",
                message=f'duplicate key value violates unique constraint "{self.table}_{self.unique_field}_key"',
                details=f"Key ({self.unique_field})=({value}) already exists.",
            )
        )

    def _taken(self, value: Any, exclude: list[dict[str, Any]] | None = None) -> bool:
        skip = {id(row) for row in exclude or []}
        return any(row.get(self.unique_field) == value and id(row) not in skip for row in self._rows)

    def list_rows(self, order_by: str | None = None, ascending: bool = True) -> BackendResult:
        rows = copy.deepcopy(self._rows)
        if order_by:
            present = [row for row in rows if row.get(order_by) is not None]
            missing = [row for row in rows if row.get(order_by) is None]
            present.sort(key=lambda row: row[order_by], reverse=not ascending)
            rows = present + missing
        return BackendResult(data=rows)

    def insert_row(self, payload: dict[str, Any]) -> BackendResult:
        if self._taken(payload.get(self.unique_field)):
            return self._duplicate(payload.get(self.unique_field))
        row = {"id": str(self._next_id), **payload}
        self._next_id += 1
        self._rows.append(row)
        return BackendResult(data=[copy.deepcopy(row)])

    def update_row(self, key: Any, payload: dict[str, Any], key_field: str = "id") -> BackendResult:
        matches = [row for row in self._rows if str(row.get(key_field)) == str(key)]
        if self.unique_field in payload and self._taken(payload[self.unique_field], exclude=matches):
            return self._duplicate(payload[self.unique_field])
        for row in matches:
            row.update(payload)
        return BackendResult(data=copy.deepcopy(matches))

    def delete_row(self, key: Any, key_field: str = "id") -> BackendResult:
        removed = [row for row in self._rows if str(row.get(key_field)) == str(key)]
        self._rows = [row for row in self._rows if str(row.get(key_field)) != str(key)]
        return BackendResult(data=removed)


@dataclass
class Gateways:
    daily: TableGateway | InMemoryTable
    compensation: TableGateway | InMemoryTable
    offline: bool = False


def build_gateways(settings: Settings) -> Gateways:
    """Wire both tables from settings, falling back to demo data in development."""
    if settings.has_credentials:
        return Gateways(
            daily=TableGateway(settings.supabase_url, settings.supabase_key, DAILY_TABLE, settings.request_timeout),
            compensation=TableGateway(
                settings.supabase_url, settings.supabase_key, COMPENSATION_TABLE, settings.request_timeout
            ),
        )

    if settings.is_development:
        logger.warning("Backend credentials missing; using in-memory demo data (development only)")
        return Gateways(
            daily=InMemoryTable(DAILY_TABLE, DAILY_KEY, DEMO_DAILY_ROWS),
            compensation=InMemoryTable(COMPENSATION_TABLE, COMPENSATION_KEY),
            offline=True,
        )

    logger.error("Backend credentials missing; requests will go to a placeholder endpoint and fail")
    return Gateways(
        daily=TableGateway(PLACEHOLDER_URL, PLACEHOLDER_KEY, DAILY_TABLE, settings.request_timeout),
        compensation=TableGateway(PLACEHOLDER_URL, PLACEHOLDER_KEY, COMPENSATION_TABLE, settings.request_timeout),
    )
