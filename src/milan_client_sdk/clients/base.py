from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..exceptions import EnvelopeError
from ..http_client import HttpClient
from ..models import ApiEnvelope


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        merged = {**self._auth_headers(), **headers}
        return self.http.request(method, path, headers=merged, **kwargs)


def unwrap_envelope(payload: Any) -> Any:
    """Return the ``data`` member of a ``{"success", "data"}`` envelope.

    Payloads without a ``success`` key are returned untouched; a
    ``success: false`` envelope raises :class:`EnvelopeError`.
    """
    if not isinstance(payload, dict) or "success" not in payload:
        return payload
    envelope = ApiEnvelope.model_validate(payload)
    if not envelope.success:
        message = envelope.message or envelope.error or "Request rejected"
        raise EnvelopeError(
            code="REQUEST_REJECTED",
            message=message,
            details=payload.get("details"),
            trace_id=None,
            status_code=200,
            raw_payload=payload,
        )
    return envelope.data


def coerce_model(value: Any, model_type: type[Any]):
    if isinstance(value, model_type):
        return value
    return model_type.model_validate(value)
