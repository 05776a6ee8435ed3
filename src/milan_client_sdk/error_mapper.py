from __future__ import annotations

from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ServerError,
    ValidationError,
)


def _payload_message(payload: Mapping[str, object]) -> str:
    # The API answers with {"message": ...} or {"error": ...} depending on the route.
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return "Request failed"


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    message = _payload_message(payload)
    details = payload.get("details")
    payload_trace_id = payload.get("trace_id")
    resolved_trace_id = str(payload_trace_id) if payload_trace_id is not None else trace_id
    mapped: type[ApiError]
    if status_code in {401}:
        mapped = AuthError
    elif status_code in {403}:
        mapped = PermissionError
    elif status_code in {404}:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=resolved_trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )


def rebrand(exc: ApiError, error_type: type[ApiError], *, code: str | None = None) -> ApiError:
    """Copy an API error into a more specific domain error class."""
    return error_type(
        code=code or exc.code,
        message=exc.message,
        details=exc.details,
        trace_id=exc.trace_id,
        status_code=exc.status_code,
        raw_payload=exc.raw_payload,
    )
