"""
Shared protocol package that centralizes verbs, frame models, the escape-aware
parser/builder and validation utilities for the hypermedia wire format.
"""

from .commands import Verb, normalize_verb, verbs_in_group
from .constants import (
    DEFAULT_ESCAPE_CHAR,
    DEFAULT_MAX_JSON_SIZE,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_MAX_PARTS,
    DEFAULT_VERSION,
    ENCODING,
    FIELD_SEPARATOR,
)
from .errors import (
    ConnectError,
    DispatchError,
    ErrorCode,
    FrameError,
    HandlerError,
    InvalidAddress,
    ProtocolError,
    SecurityViolation,
    SizeExceeded,
    TooManyParts,
)
from .framing import create_escaped_message, create_message, decode_text, escape_field, parse_message
from .messages import AnimationTiming, EventInit, Frame, TransitionSpec
from .validator import (
    check_forbidden_keys,
    load_json_payload,
    load_schema,
    validate_target_id,
    validate_url,
    validate_version,
)

__all__ = [
    "Verb",
    "normalize_verb",
    "verbs_in_group",
    "DEFAULT_ESCAPE_CHAR",
    "DEFAULT_MAX_JSON_SIZE",
    "DEFAULT_MAX_MESSAGE_SIZE",
    "DEFAULT_MAX_PARTS",
    "DEFAULT_VERSION",
    "ENCODING",
    "FIELD_SEPARATOR",
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
    "parse_message",
    "create_message",
    "create_escaped_message",
    "escape_field",
    "decode_text",
    "Frame",
    "AnimationTiming",
    "TransitionSpec",
    "EventInit",
    "load_schema",
    "load_json_payload",
    "check_forbidden_keys",
    "validate_target_id",
    "validate_url",
    "validate_version",
]
