from .auth_service import AuthService
from .cash_closing_service import CashClosingService, ClosingSubmission
from .cash_session_service import CashSessionService
from .errors import ServiceError

__all__ = ["AuthService", "CashClosingService", "CashSessionService", "ClosingSubmission", "ServiceError"]
