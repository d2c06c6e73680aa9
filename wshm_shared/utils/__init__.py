from .common import SECURITY_LOGGER_NAME, ToggleLogger, get_logger, log_security_event, security_logger

__all__ = ["ToggleLogger", "get_logger", "security_logger", "log_security_event", "SECURITY_LOGGER_NAME"]
