from __future__ import annotations

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Domain specific error codes."""

    SIZE_EXCEEDED = 1001
    TOO_MANY_PARTS = 1002
    MALFORMED_FRAME = 1003
    INVALID_ADDRESS = 1101
    TRANSPORT_FAILED = 1102
    VERSION_MISMATCH = 1103
    INVALID_TARGET = 1201
    TARGET_NOT_FOUND = 1202
    HANDLER_FAILED = 1301
    PAYLOAD_TOO_LARGE = 1401
    UNSAFE_PAYLOAD = 1402
    MALFORMED_PAYLOAD = 1403
    SCHEMA_MISMATCH = 1404


class ProtocolError(Exception):
    """Structured protocol exception carrying an error code + message."""

    def __init__(self, code: ErrorCode, message: str = "", detail: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        self.detail = detail
        super().__init__(f"{code.name} ({int(code)}): {message}")

    def to_payload(self) -> dict:
        """Map error into a dict suitable for structured log records."""
        return {
            "error_code": int(self.code),
            "error_name": self.code.name,
            "error_message": self.message,
            "detail": self.detail,
        }


class FrameError(ProtocolError):
    """An inbound message could not be turned into a frame."""


class SizeExceeded(FrameError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(ErrorCode.SIZE_EXCEEDED, f"Message size {size} exceeds limit {limit}")
        self.size = size
        self.limit = limit


class TooManyParts(FrameError):
    def __init__(self, limit: int) -> None:
        super().__init__(ErrorCode.TOO_MANY_PARTS, f"Message has more than {limit} parts")
        self.limit = limit


class ConnectError(ProtocolError):
    """Connection could not be established or was lost."""


class InvalidAddress(ConnectError):
    def __init__(self, url: str, reason: str = "Invalid WebSocket URL") -> None:
        super().__init__(ErrorCode.INVALID_ADDRESS, reason, detail=url)
        self.url = url


class DispatchError(ProtocolError):
    """Frame addressed an invalid or missing target."""


class HandlerError(ProtocolError):
    """A custom or built-in handler raised while applying a frame."""


class SecurityViolation(ProtocolError):
    """Structured payload or identifier rejected by a security check."""


__all__ = [
    "ErrorCode",
    "ProtocolError",
    "FrameError",
    "SizeExceeded",
    "TooManyParts",
    "ConnectError",
    "InvalidAddress",
    "DispatchError",
    "HandlerError",
    "SecurityViolation",
]
