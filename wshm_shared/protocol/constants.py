"""Protocol-wide constants for the hypermedia wire format."""

DEFAULT_VERSION = "1.0"
ENCODING = "utf-8"
FIELD_SEPARATOR = "|"
DEFAULT_ESCAPE_CHAR = "~"
MIN_FRAME_FIELDS = 3  # verb | target | payload
DEFAULT_MAX_MESSAGE_SIZE = 1024 * 1024  # characters
DEFAULT_MAX_PARTS = 100
DEFAULT_MAX_JSON_SIZE = 10 * 1024  # characters
MAX_TARGET_ID_LENGTH = 100
ALLOWED_SCHEMES = ("ws", "wss")
SUBPROTOCOL_PREFIX = "wshm.v"
FORBIDDEN_JSON_KEYS = frozenset({"__proto__", "constructor", "prototype"})

__all__ = [
    "DEFAULT_VERSION",
    "ENCODING",
    "FIELD_SEPARATOR",
    "DEFAULT_ESCAPE_CHAR",
    "MIN_FRAME_FIELDS",
    "DEFAULT_MAX_MESSAGE_SIZE",
    "DEFAULT_MAX_PARTS",
    "DEFAULT_MAX_JSON_SIZE",
    "MAX_TARGET_ID_LENGTH",
    "ALLOWED_SCHEMES",
    "SUBPROTOCOL_PREFIX",
    "FORBIDDEN_JSON_KEYS",
]
