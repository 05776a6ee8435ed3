from __future__ import annotations

from dataclasses import dataclass

from .exceptions import (
    ApiError,
    AuthError,
    CashSessionAlreadyOpenError,
    CashSessionNotOpenError,
    ClosingAlreadyExistsError,
    ClosingNotFoundError,
    NoSalesForDayError,
    PermissionError,
    RateLimitError,
    ServerError,
    TransportError,
)

GENERIC_MESSAGE = "Request failed"

# Most specific first. The API's own text wins when it sent one.
_FALLBACK_MESSAGES: tuple[tuple[type[ApiError], str], ...] = (
    (ClosingAlreadyExistsError, "A cash closing already exists for this date."),
    (ClosingNotFoundError, "No cash closing exists for this date."),
    (NoSalesForDayError, "No sales recorded for this day."),
    (CashSessionAlreadyOpenError, "The register is already open."),
    (CashSessionNotOpenError, "No register is open."),
    (AuthError, "Your session has expired. Log in again."),
    (PermissionError, "Your role cannot perform this action."),
    (RateLimitError, "Too many requests. Wait a moment and try again."),
    (ServerError, "The server could not complete the request. Try again later."),
)

TRANSPORT_MESSAGE = "Could not reach the server. Check the connection and try again."


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    trace_id: str | None = None


def _fallback_for(exc: ApiError) -> str:
    for error_type, text in _FALLBACK_MESSAGES:
        if isinstance(exc, error_type):
            return text
    return GENERIC_MESSAGE


def to_user_facing_error(exc: ApiError) -> UserFacingError:
    """Message for the cashier plus a technical line for support.

    Transport failures never show the raw exception text. For HTTP errors the
    server's ``message``/``error`` text is already written for the cashier, so
    it is shown as-is and the table above only fills in when it is missing.
    """
    server_text = (exc.message or "").strip()
    if isinstance(exc, TransportError):
        message = TRANSPORT_MESSAGE
    elif server_text and server_text != GENERIC_MESSAGE:
        message = server_text
    else:
        message = _fallback_for(exc)
    details = f"{exc.code} (HTTP {exc.status_code})"
    if isinstance(exc, TransportError) and server_text:
        details = f"{details}: {server_text}"
    elif exc.details:
        details = f"{details}: {exc.details}"
    return UserFacingError(message=message, details=details, trace_id=exc.trace_id)
