from __future__ import annotations

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import jsonschema

from .constants import (
    ALLOWED_SCHEMES,
    DEFAULT_MAX_JSON_SIZE,
    DEFAULT_VERSION,
    FORBIDDEN_JSON_KEYS,
    MAX_TARGET_ID_LENGTH,
)
from .errors import ErrorCode, InvalidAddress, ProtocolError, SecurityViolation

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping verb -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    "trigger": "trigger.init.json",
    "keyframe": "keyframe.frames.json",
}

TARGET_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@lru_cache(maxsize=16)
def load_schema(verb: str) -> Optional[dict]:
    """Load JSON schema for a verb's structured payload if present."""
    filename = SCHEMA_REGISTRY.get(verb)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_target_id(target: Any) -> bool:
    """Non-empty, at most 100 characters, letters/digits/underscore/hyphen only."""
    if not isinstance(target, str) or not target or len(target) > MAX_TARGET_ID_LENGTH:
        return False
    return TARGET_ID_PATTERN.match(target) is not None


def validate_url(url: str) -> str:
    """Return the scheme of a ws:// or wss:// URL, else raise InvalidAddress."""
    try:
        parts = urlsplit(url)
    except (TypeError, ValueError) as exc:
        raise InvalidAddress(str(url)) from exc
    if parts.scheme not in ALLOWED_SCHEMES:
        raise InvalidAddress(url, f"Invalid WebSocket protocol {parts.scheme!r}")
    if not parts.netloc:
        raise InvalidAddress(url, "WebSocket URL has no host")
    return parts.scheme


def validate_version(version: Optional[str], expected: str = DEFAULT_VERSION) -> None:
    """Ensure the peer speaks the expected protocol version."""
    if version != expected:
        raise ProtocolError(
            ErrorCode.VERSION_MISMATCH,
            f"Protocol version mismatch: expected {expected}, got {version}",
        )


def check_forbidden_keys(data: Any, path: str = "$") -> None:
    """Reject prototype-polluting keys at any depth."""
    stack = [(data, path)]
    while stack:
        node, where = stack.pop()
        if isinstance(node, dict):
            for key, value in node.items():
                if key in FORBIDDEN_JSON_KEYS:
                    raise SecurityViolation(
                        ErrorCode.UNSAFE_PAYLOAD, f"Forbidden key {key!r} in structured payload", detail=where
                    )
                stack.append((value, f"{where}.{key}"))
        elif isinstance(node, list):
            stack.extend((item, f"{where}[{index}]") for index, item in enumerate(node))


def load_json_payload(
    raw: str,
    verb: Optional[str] = None,
    max_size: int = DEFAULT_MAX_JSON_SIZE,
    validate: bool = True,
) -> Any:
    """
    Parse a structured payload.

    With validation enabled the raw text is size checked before parsing, the
    result is scanned for forbidden keys and checked against the verb's schema.
    Size and key violations raise SecurityViolation; unparsable text and schema
    mismatches raise ProtocolError.
    """
    if validate and len(raw) > max_size:
        raise SecurityViolation(
            ErrorCode.PAYLOAD_TOO_LARGE, f"Structured payload size {len(raw)} exceeds limit {max_size}"
        )
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ProtocolError(ErrorCode.MALFORMED_PAYLOAD, f"Invalid JSON payload: {exc}") from exc
    if not validate:
        return data

    check_forbidden_keys(data)
    schema = load_schema(verb) if verb else None
    if schema:
        try:
            jsonschema.validate(instance=data, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ProtocolError(ErrorCode.SCHEMA_MISMATCH, f"Schema validation failed: {exc.message}") from exc
    return data


__all__ = [
    "load_schema",
    "validate_target_id",
    "validate_url",
    "validate_version",
    "check_forbidden_keys",
    "load_json_payload",
]
