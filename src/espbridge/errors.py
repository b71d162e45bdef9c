"""Exceptions raised across the bridge."""

from __future__ import annotations

from enum import Enum

DUPLICATE_MESSAGE = "DUPLICATE_MESSAGE"
COMPONENT_NOT_FOUND_PREFIX = "COMPONENTNAME_NOT_FOUND"


class BridgeError(Exception):
    """Base class for bridge errors."""


class DeviceNotFoundError(BridgeError, LookupError):
    """Command or query addressed to a device that was never discovered."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Device not found: {address}")
        self.address = address


class TransportError(BridgeError):
    """Communication with a device failed."""

    def __init__(self, address: str, code: str) -> None:
        super().__init__(f"Device {address} error: {code}")
        self.address = address
        self.code = code


class ScanError(BridgeError):
    """A discovery probe failed."""


class NotificationErrorKind(str, Enum):
    DUPLICATE_MESSAGE = "duplicate_message"
    COMPONENT_NOT_FOUND = "component_not_found"
    OTHER = "other"

    @property
    def benign(self) -> bool:
        return self is not NotificationErrorKind.OTHER


class NotificationError(BridgeError):
    """The hub rejected a component update."""

    def __init__(self, kind: NotificationErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


def classify_notification_error(exc: BaseException) -> NotificationErrorKind:
    """Classify a failed hub notification.

    Hub SDKs that raise ``NotificationError`` carry their kind; anything else
    is classified from the message text the hub sends back.
    """
    if isinstance(exc, NotificationError):
        return exc.kind
    message = str(exc)
    if message == DUPLICATE_MESSAGE:
        return NotificationErrorKind.DUPLICATE_MESSAGE
    if message.startswith(COMPONENT_NOT_FOUND_PREFIX):
        return NotificationErrorKind.COMPONENT_NOT_FOUND
    return NotificationErrorKind.OTHER
