"""Session exports."""

from .models import BalanceLoader, CurrentUser, WalletSession
from .service import SessionService

__all__ = ["BalanceLoader", "CurrentUser", "SessionService", "WalletSession"]
