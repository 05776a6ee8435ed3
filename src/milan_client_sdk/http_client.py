from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import ApiError, TransportError
from .tracing import TRACE_HEADER, TraceContext

logger = logging.getLogger(__name__)

JsonPayload = dict[str, Any] | list[Any] | None

_RETRYABLE_METHODS = frozenset({"GET", "HEAD"})


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None


@dataclass
class ResponseCache:
    """Short-lived cache of GET payloads keyed by URL, params and bearer token."""

    ttl_seconds: float = 3.0
    entries: dict[str, tuple[float, JsonPayload]] = field(default_factory=dict)

    @staticmethod
    def key(url: str, headers: Mapping[str, str], params: Mapping[str, Any] | None) -> str:
        # Only the bearer token varies the payload.
        auth = headers.get("Authorization")
        return json.dumps({"url": url, "auth": auth, "params": dict(params or {})}, sort_keys=True, default=str)

    def get(self, key: str) -> JsonPayload:
        record = self.entries.get(key)
        if record is None:
            return None
        expires_at, payload = record
        if time.monotonic() >= expires_at:
            del self.entries[key]
            return None
        return payload

    def put(self, key: str, payload: JsonPayload) -> None:
        self.entries[key] = (time.monotonic() + self.ttl_seconds, payload)

    def invalidate(self, paths: Iterable[str]) -> int:
        paths = list(paths)
        stale = [key for key in self.entries if any(path in key for path in paths)]
        for key in stale:
            del self.entries[key]
        return len(stale)

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class HttpClient:
    config: ClientConfig
    trace: TraceContext | None = None
    session: requests.Session | None = None
    cache: ResponseCache | None = None
    enable_get_cache: bool = True
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        if self.cache is None:
            self.cache = ResponseCache()
        if self.trace is None:
            self.trace = TraceContext()

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry_mutation: bool = False,
        module: str = "unknown",
        operation: str = "unknown",
        use_get_cache: bool = True,
        invalidate_paths: list[str] | None = None,
    ) -> JsonPayload:
        """Send a JSON request and return the decoded body (``None`` when empty).

        GETs are served from the response cache for a few seconds unless
        ``use_get_cache`` is off. Successful mutations drop every cached entry
        whose URL contains one of ``invalidate_paths``.
        """
        verb = method.upper()
        url = self._url(path)
        cacheable = self.enable_get_cache and use_get_cache and verb == "GET"
        cache_key = ResponseCache.key(url, headers or {}, params) if cacheable else None

        if cache_key is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.last_operation = LastOperation(module, operation, 0, "success(cache)", self.trace.trace_id)
                return cached

        request_headers = self._headers("application/json", headers)
        started = time.monotonic()
        response = self._send(verb, url, request_headers, json_body=json_body, params=params, retry_mutation=retry_mutation)
        self.trace.update_from_headers(response.headers)
        if not response.ok:
            self._record(module, operation, started, "error")
            raise self._error_from(response)

        payload: JsonPayload = response.json() if response.content else None
        if cache_key is not None and payload is not None:
            self.cache.put(cache_key, payload)
        if verb != "GET" and invalidate_paths:
            dropped = self.cache.invalidate(invalidate_paths)
            logger.debug("http_cache_invalidated", extra={"path": path, "entries": dropped})
        self._record(module, operation, started, "success")
        return payload

    def download(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        accept: str = "application/pdf",
        module: str = "unknown",
        operation: str = "download",
    ) -> bytes:
        """GET a binary artifact. Never cached; errors map like JSON requests."""
        started = time.monotonic()
        response = self._send("GET", self._url(path), self._headers(accept, headers), params=params)
        self.trace.update_from_headers(response.headers)
        if not response.ok:
            self._record(module, operation, started, "error")
            raise self._error_from(response)
        self._record(module, operation, started, "success")
        return response.content

    def clear_cache(self) -> None:
        self.cache.clear()

    def _url(self, path: str) -> str:
        return urljoin(self.config.api_base_url.rstrip("/") + "/", path.lstrip("/"))

    def _headers(self, accept: str, extra: Mapping[str, str] | None) -> dict[str, str]:
        merged = {"Accept": accept, **(extra or {})}
        merged[TRACE_HEADER] = self.trace.begin()
        return merged

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry_mutation: bool = False,
    ) -> requests.Response:
        retryable = method in _RETRYABLE_METHODS or retry_mutation
        attempts = self.config.retries + 1 if retryable else 1
        timeout = (self.config.connect_timeout_seconds, self.config.read_timeout_seconds)
        for attempt in range(1, attempts + 1):
            last_attempt = attempt == attempts
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=json_body,
                    params=params,
                    timeout=timeout,
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException as exc:
                if last_attempt:
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc),
                        details={"type": type(exc).__name__},
                        trace_id=self.trace.trace_id,
                        status_code=0,
                    ) from exc
                logger.debug("http_retry", extra={"url": url, "attempt": attempt, "reason": type(exc).__name__})
            else:
                if response.status_code < 500 or last_attempt:
                    return response
                logger.debug("http_retry", extra={"url": url, "attempt": attempt, "reason": response.status_code})
            time.sleep(self.config.retry_backoff_seconds * (2 ** (attempt - 1)))
        raise RuntimeError(f"{method} {url} made no attempts")

    def _error_from(self, response: requests.Response) -> ApiError:
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}
        if not isinstance(payload, dict):
            payload = {}
        self.trace.update_from_payload(payload)
        return map_error(response.status_code, payload, self.trace.trace_id)

    def _record(self, module: str, operation: str, started: float, result: str) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=self.trace.trace_id,
        )
