import requests

import backend
from backend import (
    DEMO_DAILY_ROWS,
    NETWORK_ERROR_CODE,
    InMemoryTable,
    TableGateway,
    build_gateways,
)
from config import Settings


class FakeResponse:
    def __init__(self, status_code: int, payload=None, reason: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


def test_list_rows_sends_order_and_auth_headers(monkeypatch) -> None:
    calls = []

    def fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        return FakeResponse(200, [{"id": 1, "data": "2025-01-01"}])

    monkeypatch.setattr(backend.requests, "request", fake_request)
    gateway = TableGateway("https://demo.supabase.co/", "secret", "lancamentos", timeout=3.0)

    result = gateway.list_rows(order_by="data", ascending=False)

    assert result.ok
    assert result.data == [{"id": 1, "data": "2025-01-01"}]
    method, url, kwargs = calls[0]
    assert method == "GET"
    assert url == "https://demo.supabase.co/rest/v1/lancamentos"
    assert kwargs["params"] == {"select": "*", "order": "data.desc"}
    assert kwargs["headers"]["apikey"] == "secret"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["timeout"] == 3.0


def test_update_and_delete_filter_by_key(monkeypatch) -> None:
    calls = []

    def fake_request(method, url, **kwargs):
        calls.append((method, kwargs))
        return FakeResponse(204)

    monkeypatch.setattr(backend.requests, "request", fake_request)
    gateway = TableGateway("https://demo.supabase.co", "secret", "prolabore")

    assert gateway.update_row(7, {"valor": 10.0}).ok
    assert gateway.delete_row("2025-01", key_field="mes_ano").data == []
    assert calls[0][0] == "PATCH"
    assert calls[0][1]["params"] == {"id": "eq.7"}
    assert calls[0][1]["json"] == {"valor": 10.0}
    assert calls[1][0] == "DELETE"
    assert calls[1][1]["params"] == {"mes_ano": "eq.2025-01"}


def test_backend_error_body_is_passed_through(monkeypatch) -> None:
    body = {"code": "23505", "message": "duplicate key value", "details": "Key (data)=(2025-01-01) already exists."}
    monkeypatch.setattr(backend.requests, "request", lambda method, url, **kwargs: FakeResponse(409, body, "Conflict"))

    result = TableGateway("https://demo.supabase.co", "secret", "lancamentos").insert_row({"data": "2025-01-01"})

    assert not result.ok
    assert result.error.code == "23505"
    assert result.error.message == "duplicate key value"
    assert "already exists" in result.error.details


def test_error_without_body_uses_status(monkeypatch) -> None:
    monkeypatch.setattr(backend.requests, "request", lambda method, url, **kwargs: FakeResponse(500, None, "Server Error"))

    result = TableGateway("https://demo.supabase.co", "secret", "lancamentos").list_rows()

    assert result.error.code == "500"
    assert result.error.message == "Server Error"


def test_network_failure_becomes_error_result(monkeypatch) -> None:
    def fake_request(method, url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(backend.requests, "request", fake_request)

    result = TableGateway("https://demo.supabase.co", "secret", "lancamentos").list_rows()

    assert result.error.code == NETWORK_ERROR_CODE
    assert result.error.message.startswith("Network error")


def test_in_memory_table_enforces_unique_key() -> None:
    table = InMemoryTable("prolabore", "mes_ano")

    first = table.insert_row({"mes_ano": "2025-01", "valor": 100.0})
    second = table.insert_row({"mes_ano": "2025-01", "valor": 200.0})

    assert first.ok
    assert second.error.code == "23505"
    assert "prolabore_mes_ano_key" in second.error.message


def test_in_memory_table_update_keeps_own_key_and_rejects_taken_key() -> None:
    table = InMemoryTable("lancamentos", "data", [{"id": "1", "data": "2025-01-01"}, {"id": "2", "data": "2025-01-02"}])

    assert table.update_row("1", {"data": "2025-01-01", "gasto_ads": 5.0}).ok
    clash = table.update_row("1", {"data": "2025-01-02"})

    assert clash.error.code == "23505"
    assert table.delete_row("2").data[0]["data"] == "2025-01-02"
    rows = table.list_rows(order_by="data", ascending=False).data
    assert [row["id"] for row in rows] == ["1"]
    assert rows[0]["gasto_ads"] == 5.0


def test_in_memory_table_assigns_next_id() -> None:
    table = InMemoryTable("lancamentos", "data", DEMO_DAILY_ROWS)

    created = table.insert_row({"data": "2025-04-01"}).data[0]

    assert created["id"] == str(len(DEMO_DAILY_ROWS) + 1)
    assert len(DEMO_DAILY_ROWS) == 15


def test_build_gateways_modes() -> None:
    online = build_gateways(Settings(supabase_url="https://x.supabase.co", supabase_key="k"))
    demo = build_gateways(Settings(app_env="development"))
    placeholder = build_gateways(Settings())

    assert isinstance(online.daily, TableGateway) and not online.offline
    assert isinstance(demo.daily, InMemoryTable) and demo.offline
    assert len(demo.daily.list_rows().data) == 15
    assert isinstance(placeholder.daily, TableGateway)
    assert placeholder.daily.base_url == backend.PLACEHOLDER_URL
