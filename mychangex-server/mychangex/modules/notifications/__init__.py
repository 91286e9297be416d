"""Notification relay exports."""

from .relay import EdgeFunctionNotificationRelay, NotificationRelay, NullNotificationRelay, build_payload

__all__ = ["EdgeFunctionNotificationRelay", "NotificationRelay", "NullNotificationRelay", "build_payload"]
