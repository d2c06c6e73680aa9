from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import MIN_FRAME_FIELDS
from .errors import ErrorCode, FrameError
from .framing import create_escaped_message, create_message


def extra_or_default(extras: Sequence[str], index: int, default: str) -> str:
    """Positional extra, falling back to `default` when absent or empty."""
    if index < len(extras) and extras[index] != "":
        return extras[index]
    return default


class Frame(BaseModel):
    """One decoded protocol message: verb | target | payload [| extras...]."""

    model_config = ConfigDict(frozen=True)

    verb: str = Field(..., description="Action identifier such as update/setAttr")
    target: str = Field(..., description="Identifier of the addressed element")
    payload: str = Field(default="", description="Primary content / argument")
    extras: Tuple[str, ...] = Field(default=(), description="Opaque positional fields")

    @classmethod
    def from_parts(cls, parts: Sequence[str]) -> "Frame":
        if len(parts) < MIN_FRAME_FIELDS:
            raise FrameError(
                ErrorCode.MALFORMED_FRAME,
                f"Frame needs at least {MIN_FRAME_FIELDS} fields, got {len(parts)}",
            )
        verb, target, payload, *extras = parts
        try:
            return cls(verb=verb, target=target, payload=payload, extras=tuple(extras))
        except ValidationError as exc:
            raise FrameError(ErrorCode.MALFORMED_FRAME, f"Frame validation failed: {exc}") from exc

    def to_parts(self) -> List[str]:
        return [self.verb, self.target, self.payload, *self.extras]

    def to_wire(self, escape_char: Optional[str] = None) -> str:
        """Serialize; the payload is bracketed when an escape character is given."""
        if escape_char is None:
            return create_message(self.verb, self.target, self.payload, *self.extras)
        return create_escaped_message(
            self.verb, self.target, self.payload, *self.extras, escape_char=escape_char
        )


class AnimationTiming(BaseModel):
    """Timing options decoded positionally from animate/keyframe extras."""

    model_config = ConfigDict(frozen=True)

    duration: str = "1s"
    easing: str = "ease"
    delay: str = "0s"
    iterations: str = "1"
    direction: str = "normal"
    fill: str = "none"

    @classmethod
    def from_extras(cls, extras: Sequence[str], offset: int = 0) -> "AnimationTiming":
        defaults = cls()
        names = ("duration", "easing", "delay", "iterations", "direction", "fill")
        values = {
            name: extra_or_default(extras, offset + index, getattr(defaults, name))
            for index, name in enumerate(names)
        }
        return cls(**values)


class TransitionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    properties: Tuple[str, ...] = ("all",)
    duration: str = "0.3s"
    easing: str = "ease"
    delay: str = "0s"

    @classmethod
    def decode(cls, payload: str, extras: Sequence[str]) -> "TransitionSpec":
        props = tuple(p.strip() for p in payload.split(",") if p.strip()) or ("all",)
        return cls(
            properties=props,
            duration=extra_or_default(extras, 0, "0.3s"),
            easing=extra_or_default(extras, 1, "ease"),
            delay=extra_or_default(extras, 2, "0s"),
        )

    def css_value(self) -> str:
        return ", ".join(f"{prop} {self.duration} {self.easing} {self.delay}" for prop in self.properties)


class EventInit(BaseModel):
    """Event construction options carried as JSON by the trigger verb."""

    model_config = ConfigDict(extra="allow")

    bubbles: bool = True
    cancelable: bool = True
    detail: Any = None

    def as_init(self) -> Dict[str, Any]:
        """Flat init dict; extra keys such as key/clientX are kept."""
        return self.model_dump()


__all__ = ["extra_or_default", "Frame", "AnimationTiming", "TransitionSpec", "EventInit"]
