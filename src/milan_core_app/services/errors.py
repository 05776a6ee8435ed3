from __future__ import annotations

from dataclasses import dataclass

from milan_client_sdk import to_user_facing_error
from milan_client_sdk.exceptions import ApiError


@dataclass(eq=False)
class ServiceError(RuntimeError):
    message: str
    code: str | None = None
    details: str | None = None
    trace_id: str | None = None

    def __str__(self) -> str:
        return self.message


def normalize_error(exc: Exception, *, fallback: str) -> ServiceError:
    if isinstance(exc, ServiceError):
        return exc
    if isinstance(exc, ApiError):
        presented = to_user_facing_error(exc)
        return ServiceError(
            message=presented.message,
            code=exc.code,
            details=presented.details,
            trace_id=exc.trace_id,
        )
    return ServiceError(message=str(exc) or fallback)
