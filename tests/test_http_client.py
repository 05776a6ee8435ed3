from __future__ import annotations

import pytest
import requests
import responses

from milan_client_sdk import load_config
from milan_client_sdk.exceptions import ApiError, NotFoundError, ServerError, TransportError
from milan_client_sdk.http_client import HttpClient, ResponseCache
from milan_client_sdk.tracing import TRACE_HEADER, TraceContext


def _client(base_url: str) -> HttpClient:
    cfg = load_config()
    object.__setattr__(cfg, "api_base_url", base_url)
    return HttpClient(cfg, trace=TraceContext())


@responses.activate
def test_get_cache_serves_repeat_reads() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.GET, "https://api.example.com/cash-closing", json=[{"id": 1}], status=200)

    first = http.request("GET", "/cash-closing")
    second = http.request("GET", "/cash-closing")

    assert first == second == [{"id": 1}]
    assert len(responses.calls) == 1
    assert http.last_operation is not None
    assert http.last_operation.result == "success(cache)"


@responses.activate
def test_mutation_invalidates_cached_reads() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.GET, "https://api.example.com/cash-closing", json=[], status=200)
    responses.add(responses.POST, "https://api.example.com/cash-closing", json={"id": 1}, status=201)
    responses.add(responses.GET, "https://api.example.com/cash-closing", json=[{"id": 1}], status=200)

    assert http.request("GET", "/cash-closing") == []
    http.request("POST", "/cash-closing", json_body={"date": "2024-03-01"}, invalidate_paths=["/cash-closing"])
    assert http.request("GET", "/cash-closing") == [{"id": 1}]
    assert len(responses.calls) == 3


@responses.activate
def test_cache_key_depends_on_authorization() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.GET, "https://api.example.com/cash-session/active", json={"n": 1}, status=200)
    responses.add(responses.GET, "https://api.example.com/cash-session/active", json={"n": 2}, status=200)

    a = http.request("GET", "/cash-session/active", headers={"Authorization": "Bearer a"})
    b = http.request("GET", "/cash-session/active", headers={"Authorization": "Bearer b"})
    assert a == {"n": 1}
    assert b == {"n": 2}


@responses.activate
def test_get_retries_server_errors() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.GET, "https://api.example.com/cash-closing/summary", json={"message": "down"}, status=503)
    responses.add(responses.GET, "https://api.example.com/cash-closing/summary", json={"ok": True}, status=200)

    assert http.request("GET", "/cash-closing/summary") == {"ok": True}
    assert len(responses.calls) == 2


@responses.activate
def test_post_is_not_retried() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.POST, "https://api.example.com/cash-closing", json={"message": "boom"}, status=500)

    with pytest.raises(ServerError) as excinfo:
        http.request("POST", "/cash-closing", json_body={})
    assert excinfo.value.message == "boom"
    assert len(responses.calls) == 1


@responses.activate
def test_transport_error_after_retries() -> None:
    http = _client("https://api.example.com")
    responses.add(
        responses.GET,
        "https://api.example.com/cash-closing",
        body=requests.ConnectionError("refused"),
    )

    with pytest.raises(TransportError) as excinfo:
        http.request("GET", "/cash-closing")
    assert excinfo.value.code == "TRANSPORT_ERROR"
    assert excinfo.value.status_code == 0
    assert len(responses.calls) == http.config.retries + 1


@responses.activate
def test_trace_header_sent_and_updated_from_response() -> None:
    http = _client("https://api.example.com")
    responses.add(
        responses.GET,
        "https://api.example.com/cash-closing",
        json=[],
        status=200,
        headers={"X-Request-ID": "server-trace"},
    )

    http.request("GET", "/cash-closing")
    assert responses.calls[0].request.headers[TRACE_HEADER]
    assert http.trace is not None
    assert http.trace.trace_id == "server-trace"


@responses.activate
def test_each_request_gets_its_own_id_and_retries_reuse_it() -> None:
    http = _client("https://api.example.com")
    responses.add(responses.GET, "https://api.example.com/cash-closing/summary", json={}, status=503)
    responses.add(responses.GET, "https://api.example.com/cash-closing/summary", json={}, status=200)
    responses.add(responses.POST, "https://api.example.com/cash-closing", json={"id": 1}, status=201)

    http.request("GET", "/cash-closing/summary", use_get_cache=False)
    http.request("POST", "/cash-closing", json_body={})

    sent = [call.request.headers[TRACE_HEADER] for call in responses.calls]
    assert sent[0] == sent[1]
    assert sent[2] != sent[0]
    assert all(value.startswith("milan-") for value in sent)
    assert http.trace.trace_id == sent[2]
    assert list(http.trace.recent) == [sent[0], sent[2]]


@responses.activate
def test_error_body_request_id_is_reported() -> None:
    http = _client("https://api.example.com")
    responses.add(
        responses.GET,
        "https://api.example.com/cash-closing/summary",
        json={"success": False, "message": "Fecha invalida", "requestId": "srv-77"},
        status=400,
    )

    with pytest.raises(ApiError) as excinfo:
        http.request("GET", "/cash-closing/summary")
    assert excinfo.value.trace_id == "srv-77"
    assert http.trace.trace_id == "srv-77"


@responses.activate
def test_download_returns_bytes_and_maps_errors() -> None:
    http = _client("https://api.example.com")
    responses.add(
        responses.GET,
        "https://api.example.com/cash-closing/report/pdf/2024-03-01",
        body=b"%PDF-1.4",
        status=200,
        content_type="application/pdf",
    )
    responses.add(
        responses.GET,
        "https://api.example.com/cash-closing/report/pdf/2024-03-02",
        json={"message": "No existe cierre"},
        status=404,
    )

    assert http.download("/cash-closing/report/pdf/2024-03-01") == b"%PDF-1.4"
    assert responses.calls[0].request.headers["Accept"] == "application/pdf"
    with pytest.raises(NotFoundError):
        http.download("/cash-closing/report/pdf/2024-03-02")



def test_response_cache_expires_entries(monkeypatch) -> None:
    clock = {"now": 100.0}
    monkeypatch.setattr("milan_client_sdk.http_client.time.monotonic", lambda: clock["now"])
    cache = ResponseCache(ttl_seconds=3.0)
    key = ResponseCache.key("https://api.example.com/cash-closing", {"Authorization": "Bearer a"}, None)
    cache.put(key, [{"id": 1}])
    assert cache.get(key) == [{"id": 1}]

    clock["now"] = 103.0
    assert cache.get(key) is None
    assert len(cache) == 0


def test_response_cache_invalidates_by_path() -> None:
    cache = ResponseCache()
    closings = ResponseCache.key("https://api.example.com/cash-closing", {}, {"dateFrom": "2024-03-01"})
    session = ResponseCache.key("https://api.example.com/cash-session/active", {}, None)
    cache.put(closings, [])
    cache.put(session, {"success": True})
    assert cache.invalidate(["/cash-closing"]) == 1
    assert cache.get(session) == {"success": True}
