"""Transaction notification relay.

Delivery itself belongs to the ``send-transaction-notification`` edge
function; this side only hands it the finished transaction. A relay never
raises: a lost notification must not undo or block a transfer.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from mychangex.core.config import NotificationSettings
from mychangex.modules.transactions.models import TransactionRecord

logger = logging.getLogger(__name__)


class NotificationRelay(Protocol):
    async def notify_transaction(
        self,
        transaction: TransactionRecord,
        *,
        sender_name: str,
        recipient_name: str,
    ) -> bool:
        ...


def build_payload(transaction: TransactionRecord, *, sender_name: str, recipient_name: str) -> dict[str, Any]:
    return {
        "transaction": {
            "id": transaction.id,
            "sender_id": transaction.sender_id,
            "receiver_id": transaction.receiver_id,
            "amount": f"{transaction.amount:.2f}",
            "type": transaction.type,
            "created_at": transaction.created_at.isoformat() if transaction.created_at else None,
        },
        "sender_name": sender_name,
        "recipient_name": recipient_name,
    }


class EdgeFunctionNotificationRelay:
    """Posts transactions to the notification edge function over HTTP."""

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: str | None = None,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> "NotificationRelay":
        if not settings.enabled or not settings.endpoint:
            return NullNotificationRelay()
        return cls(settings.endpoint, api_key=settings.api_key, timeout=settings.timeout_seconds)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._endpoint, json=payload, headers=self._headers())
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._endpoint, json=payload, headers=self._headers())

    async def notify_transaction(
        self,
        transaction: TransactionRecord,
        *,
        sender_name: str,
        recipient_name: str,
    ) -> bool:
        payload = build_payload(transaction, sender_name=sender_name, recipient_name=recipient_name)
        try:
            response = await self._post(payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Notification for transaction %s failed: %s", transaction.id, exc)
            return False
        logger.debug("Notification relayed for transaction %s", transaction.id)
        return True


class NullNotificationRelay:
    async def notify_transaction(
        self,
        transaction: TransactionRecord,
        *,
        sender_name: str,
        recipient_name: str,
    ) -> bool:
        logger.debug("Notifications disabled; skipping transaction %s", transaction.id)
        return False


__all__ = [
    "EdgeFunctionNotificationRelay",
    "NotificationRelay",
    "NullNotificationRelay",
    "build_payload",
]
