from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    trace_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class AuthError(UnauthorizedError):
    """Authentication failed or the stored token is no longer valid."""


class PermissionError(ForbiddenError):
    """Authorization denied for the current user role."""


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


class EnvelopeError(ApiError):
    """2xx response whose envelope reported success=false."""


class ClosingNotFoundError(NotFoundError):
    """No closing record stored for the requested date."""


class ClosingAlreadyExistsError(ConflictError):
    pass


class NoSalesForDayError(ValidationError):
    pass


class CashSessionNotOpenError(ApiError):
    pass


class CashSessionAlreadyOpenError(ConflictError):
    pass
