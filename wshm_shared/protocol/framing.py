from __future__ import annotations

from typing import List, Union

from .constants import (
    DEFAULT_ESCAPE_CHAR,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_MAX_PARTS,
    ENCODING,
    FIELD_SEPARATOR,
)
from .errors import ErrorCode, FrameError, SizeExceeded, TooManyParts


def parse_message(
    data: str,
    escape_char: str = DEFAULT_ESCAPE_CHAR,
    max_size: int = DEFAULT_MAX_MESSAGE_SIZE,
    max_parts: int = DEFAULT_MAX_PARTS,
) -> List[str]:
    """
    Split a raw message into fields on unescaped separators.

    Each escape character toggles a single "inside escape" flag and is dropped
    from the output; escape regions do not nest and a literal escape character
    cannot be expressed. Raises SizeExceeded before scanning and TooManyParts as
    soon as the field limit would be passed.
    """
    if len(data) > max_size:
        raise SizeExceeded(len(data), max_size)

    parts: List[str] = []
    current: List[str] = []
    escaped = False

    for char in data:
        if char == escape_char:
            escaped = not escaped
        elif char == FIELD_SEPARATOR and not escaped:
            parts.append("".join(current))
            current = []
            # a separator always implies one more trailing field
            if len(parts) >= max_parts:
                raise TooManyParts(max_parts)
        else:
            current.append(char)

    if current or parts:
        parts.append("".join(current))
    return parts


def create_message(verb: str, target: str, payload: str, *extras: str) -> str:
    """Join frame fields with the separator, without escaping."""
    return FIELD_SEPARATOR.join([verb, target, payload, *extras])


def escape_field(value: str, escape_char: str = DEFAULT_ESCAPE_CHAR) -> str:
    """Bracket a field with the escape character so separators inside it survive."""
    return f"{escape_char}{value}{escape_char}"


def create_escaped_message(
    verb: str,
    target: str,
    payload: str,
    *extras: str,
    escape_char: str = DEFAULT_ESCAPE_CHAR,
) -> str:
    """Build a message whose payload is wrapped in the escape character."""
    return create_message(verb, target, escape_field(payload, escape_char), *extras)


def decode_text(data: Union[str, bytes]) -> str:
    """Turn a transport message into text; binary frames must be UTF-8."""
    if isinstance(data, str):
        return data
    try:
        return bytes(data).decode(ENCODING)
    except UnicodeDecodeError as exc:
        raise FrameError(ErrorCode.MALFORMED_FRAME, f"Decode failed: {exc}") from exc


__all__ = [
    "parse_message",
    "create_message",
    "escape_field",
    "create_escaped_message",
    "decode_text",
]
