"""Transaction history errors."""

from mychangex.core.errors import ChangeXError


class TransactionNotFoundError(ChangeXError):
    code = "transaction_not_found"
    default_message = "Transaction not found."
