from __future__ import annotations

import logging
from typing import Any, Optional

SECURITY_LOGGER_NAME = "wshm.security"


class ToggleLogger(logging.LoggerAdapter):
    """Logger adapter that can be switched off per client instance."""

    def __init__(self, logger: logging.Logger, enabled: bool = True) -> None:
        super().__init__(logger, {})
        self.enabled = enabled

    def isEnabledFor(self, level: int) -> bool:
        return self.enabled and self.logger.isEnabledFor(level)


def get_logger(name: str, enabled: bool = True) -> ToggleLogger:
    return ToggleLogger(logging.getLogger(name), enabled)


def security_logger(enabled: bool = True) -> ToggleLogger:
    """Dedicated channel for rejected identifiers and structured payloads."""
    return get_logger(SECURITY_LOGGER_NAME, enabled)


def log_security_event(log: ToggleLogger, event: str, target: Optional[str] = None, **details: Any) -> None:
    log.warning("security event=%s target=%s details=%s", event, target, details)


__all__ = ["ToggleLogger", "get_logger", "security_logger", "log_security_event", "SECURITY_LOGGER_NAME"]
