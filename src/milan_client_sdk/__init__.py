from .auth_store import AuthStore
from .cash_closing_validation import (
    ClosingValidationIssue,
    ClosingValidationResult,
    is_late_closing,
    validate_closing_entry,
    validate_close_session,
    validate_date_range,
    validate_open_session,
)
from .closing_alerts import ClosingAlert, LastClosing, build_closing_alerts
from .closing_analytics import ClosingAnalytics, analyze_closings
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    CashSessionAlreadyOpenError,
    CashSessionNotOpenError,
    ClosingAlreadyExistsError,
    ClosingNotFoundError,
    EnvelopeError,
    ForbiddenError,
    NoSalesForDayError,
    NotFoundError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import HttpClient
from .idempotency import IdempotencyKey, new_idempotency_key
from .models import SessionData, TokenResponse, UserResponse
from .models_cash_closing import CashClosing, CashClosingQuery, ClosingEntry, DailySummary
from .models_cash_session import (
    ActiveCashSession,
    CashSession,
    CashSessionActionResult,
    CashSessionStatistics,
    CloseCashSessionRequest,
    OpenCashSessionRequest,
)
from .reconciliation import (
    Reconciliation,
    VarianceDirection,
    VarianceTier,
    classify_variance,
    expected_cash,
    needs_review,
    reconcile,
    reconcile_closing,
    reconcile_or_none,
)
from .session import ApiSession
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "ActiveCashSession",
    "ApiError",
    "ApiSession",
    "AuthStore",
    "CashClosing",
    "CashClosingQuery",
    "CashSession",
    "CashSessionActionResult",
    "CashSessionAlreadyOpenError",
    "CashSessionNotOpenError",
    "CashSessionStatistics",
    "ClientConfig",
    "CloseCashSessionRequest",
    "ClosingAlert",
    "ClosingAlreadyExistsError",
    "ClosingAnalytics",
    "ClosingEntry",
    "ClosingNotFoundError",
    "ClosingValidationIssue",
    "ClosingValidationResult",
    "ConfigError",
    "DailySummary",
    "EnvelopeError",
    "ForbiddenError",
    "HttpClient",
    "IdempotencyKey",
    "LastClosing",
    "NoSalesForDayError",
    "NotFoundError",
    "OpenCashSessionRequest",
    "Reconciliation",
    "SessionData",
    "TokenResponse",
    "TraceContext",
    "TransportError",
    "UnauthorizedError",
    "UserFacingError",
    "UserResponse",
    "ValidationError",
    "VarianceDirection",
    "VarianceTier",
    "analyze_closings",
    "build_closing_alerts",
    "classify_variance",
    "expected_cash",
    "is_late_closing",
    "load_config",
    "needs_review",
    "new_idempotency_key",
    "reconcile",
    "reconcile_closing",
    "reconcile_or_none",
    "to_user_facing_error",
    "validate_close_session",
    "validate_closing_entry",
    "validate_date_range",
    "validate_open_session",
]
