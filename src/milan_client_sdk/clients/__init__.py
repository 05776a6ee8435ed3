from .auth import AuthClient
from .cash_closing_client import CashClosingClient
from .cash_session_client import CashSessionClient

__all__ = [
    "AuthClient",
    "CashClosingClient",
    "CashSessionClient",
]
