from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

from pydantic import ValidationError

from wshm_client.config import ClientConfig
from wshm_client.dom.document import Element
from wshm_shared.protocol.commands import Verb
from wshm_shared.protocol.errors import ProtocolError, SecurityViolation
from wshm_shared.protocol.framing import create_message
from wshm_shared.protocol.messages import AnimationTiming, EventInit, TransitionSpec, extra_or_default
from wshm_shared.protocol.validator import load_json_payload
from wshm_shared.utils.common import ToggleLogger, log_security_event

if TYPE_CHECKING:
    from .registry import ActionRegistry

Decoder = Callable[[str, Sequence[str]], Tuple[Any, ...]]
Effect = Callable[..., Any]
Reply = Callable[[str], Awaitable[Any]]


@dataclass
class ActionContext:
    """Per-frame state handed to every built-in effect."""

    target_id: str
    registry: "ActionRegistry"
    config: ClientConfig
    log: ToggleLogger
    security_log: ToggleLogger
    reply: Optional[Reply] = None

    def load_json(self, raw: str, verb: str) -> Optional[Any]:
        """Parse a structured payload; None means the caller should degrade."""
        try:
            return load_json_payload(
                raw,
                verb,
                max_size=self.config.max_json_size,
                validate=self.config.enable_json_validation,
            )
        except SecurityViolation as exc:
            log_security_event(self.security_log, exc.code.name, self.target_id, verb=verb, message=exc.message)
        except ProtocolError as exc:
            self.log.debug("Structured payload for %s rejected: %s", verb, exc)
        return None


class ActionKind(Enum):
    """Argument shape of a verb; each kind owns a default decoder."""

    CONTENT = "content"  # (payload)
    TARGET = "target"  # ()
    KEYED = "keyed"  # (name, value)
    TOKENS = "tokens"  # (tokens,)
    TIMED = "timed"  # (name, timing)
    STRUCTURED = "structured"  # (payload, raw json)
    CONTROL = "control"  # () against the animation side map


def decode_content(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (payload,)


def decode_target(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return ()


def decode_keyed(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (payload, extra_or_default(extras, 0, ""))


def decode_tokens(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (tuple(payload.split()),)


def decode_csv(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (tuple(value.strip() for value in payload.split(",") if value.strip()),)


def decode_flag(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (payload.strip().lower() == "true",)


def decode_timed(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (payload, AnimationTiming.from_extras(extras))


def decode_transition(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (TransitionSpec.decode(payload, extras),)


def decode_structured(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    return (payload, extras[0] if extras and extras[0] else None)


def decode_keyframe(payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
    raw = extras[0] if extras and extras[0] else None
    return (payload, raw, AnimationTiming.from_extras(extras, offset=1))


KIND_DECODERS: Dict[ActionKind, Decoder] = {
    ActionKind.CONTENT: decode_content,
    ActionKind.TARGET: decode_target,
    ActionKind.KEYED: decode_keyed,
    ActionKind.TOKENS: decode_tokens,
    ActionKind.TIMED: decode_timed,
    ActionKind.STRUCTURED: decode_structured,
    ActionKind.CONTROL: decode_target,
}


@dataclass(frozen=True)
class Action:
    verb: str
    kind: ActionKind
    effect: Effect
    decoder: Optional[Decoder] = None

    def decode(self, payload: str, extras: Sequence[str]) -> Tuple[Any, ...]:
        decoder = self.decoder or KIND_DECODERS[self.kind]
        return decoder(payload, extras)

    def invoke(self, ctx: ActionContext, element: Element, payload: str, extras: Sequence[str]) -> Any:
        """Run the effect; may return an awaitable the caller must await."""
        return self.effect(ctx, element, *self.decode(payload, extras))


# Content


def _update(ctx: ActionContext, element: Element, html: str) -> None:
    element.set_inner_html(html)


def _inserter(position: str) -> Effect:
    def insert(ctx: ActionContext, element: Element, html: str) -> None:
        element.insert_adjacent_html(position, html)

    insert.__name__ = f"insert_{position}"
    return insert


def _replace(ctx: ActionContext, element: Element, html: str) -> None:
    ctx.registry.cancel_animation(ctx.target_id)
    element.replace_with_html(html)


def _remove(ctx: ActionContext, element: Element) -> None:
    ctx.registry.cancel_animation(ctx.target_id)
    element.remove()


# Attributes, classes, styles, forms


def _set_attr(ctx: ActionContext, element: Element, name: str, value: str) -> None:
    element.set_attribute(name, value)


def _remove_attr(ctx: ActionContext, element: Element, name: str) -> None:
    element.remove_attribute(name)


def _add_class(ctx: ActionContext, element: Element, tokens: Tuple[str, ...]) -> None:
    if tokens:
        element.add_class(*tokens)


def _remove_class(ctx: ActionContext, element: Element, tokens: Tuple[str, ...]) -> None:
    if tokens:
        element.remove_class(*tokens)


def _toggle_class(ctx: ActionContext, element: Element, tokens: Tuple[str, ...]) -> None:
    for token in tokens:
        element.toggle_class(token)


def _set_style(ctx: ActionContext, element: Element, prop: str, value: str) -> None:
    element.set_style(prop, value)


def _remove_style(ctx: ActionContext, element: Element, prop: str) -> None:
    element.remove_style(prop)


def _set_value(ctx: ActionContext, element: Element, value: str) -> None:
    element.set_value(value)


def _set_checked(ctx: ActionContext, element: Element, checked: bool) -> None:
    element.set_checked(checked)


def _set_selected(ctx: ActionContext, element: Element, values: Tuple[str, ...]) -> None:
    element.set_selected(values)


# Events


def _trigger(ctx: ActionContext, element: Element, event_type: str, raw_init: Optional[str]) -> None:
    if not event_type:
        ctx.log.debug("trigger on %s without event type ignored", ctx.target_id)
        return
    init = EventInit().as_init()
    if raw_init is not None:
        data = ctx.load_json(raw_init, Verb.TRIGGER.value)
        try:
            init = EventInit(**data).as_init() if isinstance(data, dict) else None
        except ValidationError:
            init = None
        if init is None:
            # Raw text becomes the event detail.
            init = EventInit(detail=raw_init).as_init()
    element.dispatch_event(event_type, init)


# Animations


def _start_animation(ctx: ActionContext, element: Element, name: str, keyframes: Any, timing: AnimationTiming) -> None:
    if not name:
        ctx.log.debug("animation on %s without a name ignored", ctx.target_id)
        return
    ctx.registry.start_animation(ctx.target_id, element.animate(name, keyframes, timing))


def _animate(ctx: ActionContext, element: Element, name: str, timing: AnimationTiming) -> None:
    _start_animation(ctx, element, name, None, timing)


def _keyframe(
    ctx: ActionContext, element: Element, name: str, raw_frames: Optional[str], timing: AnimationTiming
) -> None:
    frames = ctx.load_json(raw_frames, Verb.KEYFRAME.value) if raw_frames is not None else None
    if frames is None:
        ctx.log.debug("keyframe %s on %s has no usable frames, running by name", name, ctx.target_id)
    _start_animation(ctx, element, name, frames, timing)


def _transition(ctx: ActionContext, element: Element, spec: TransitionSpec) -> None:
    element.set_style("transition", spec.css_value())


def _pause_animation(ctx: ActionContext, element: Element) -> None:
    if not ctx.registry.pause_animation(ctx.target_id):
        ctx.log.debug("No animation to pause on %s", ctx.target_id)


def _resume_animation(ctx: ActionContext, element: Element) -> None:
    if not ctx.registry.resume_animation(ctx.target_id):
        ctx.log.debug("No animation to resume on %s", ctx.target_id)


def _remove_animation(ctx: ActionContext, element: Element) -> None:
    if not ctx.registry.cancel_animation(ctx.target_id):
        ctx.log.debug("No animation to remove on %s", ctx.target_id)


async def _report_animation_state(ctx: ActionContext, element: Element) -> None:
    state = ctx.registry.animation_state(ctx.target_id)
    if ctx.reply is None:
        ctx.log.debug("Animation state of %s is %s (no reply channel)", ctx.target_id, state)
        return
    await ctx.reply(create_message(Verb.ANIMATION_STATE.value, ctx.target_id, state))


BUILTIN_ACTIONS: Tuple[Action, ...] = (
    Action(Verb.UPDATE.value, ActionKind.CONTENT, _update),
    Action(Verb.APPEND.value, ActionKind.CONTENT, _inserter("beforeend")),
    Action(Verb.PREPEND.value, ActionKind.CONTENT, _inserter("afterbegin")),
    Action(Verb.BEFORE.value, ActionKind.CONTENT, _inserter("beforebegin")),
    Action(Verb.AFTER.value, ActionKind.CONTENT, _inserter("afterend")),
    Action(Verb.REPLACE.value, ActionKind.CONTENT, _replace),
    Action(Verb.SWAP.value, ActionKind.CONTENT, _replace),
    Action(Verb.REMOVE.value, ActionKind.TARGET, _remove),
    Action(Verb.SET_ATTR.value, ActionKind.KEYED, _set_attr),
    Action(Verb.REMOVE_ATTR.value, ActionKind.CONTENT, _remove_attr),
    Action(Verb.ADD_CLASS.value, ActionKind.TOKENS, _add_class),
    Action(Verb.REMOVE_CLASS.value, ActionKind.TOKENS, _remove_class),
    Action(Verb.TOGGLE_CLASS.value, ActionKind.TOKENS, _toggle_class),
    Action(Verb.SET_STYLE.value, ActionKind.KEYED, _set_style),
    Action(Verb.REMOVE_STYLE.value, ActionKind.CONTENT, _remove_style),
    Action(Verb.SET_VALUE.value, ActionKind.CONTENT, _set_value),
    Action(Verb.SET_CHECKED.value, ActionKind.CONTENT, _set_checked, decoder=decode_flag),
    Action(Verb.SET_SELECTED.value, ActionKind.TOKENS, _set_selected, decoder=decode_csv),
    Action(Verb.TRIGGER.value, ActionKind.STRUCTURED, _trigger),
    Action(Verb.ANIMATE.value, ActionKind.TIMED, _animate),
    Action(Verb.KEYFRAME.value, ActionKind.STRUCTURED, _keyframe, decoder=decode_keyframe),
    Action(Verb.TRANSITION.value, ActionKind.TIMED, _transition, decoder=decode_transition),
    Action(Verb.PAUSE_ANIMATION.value, ActionKind.CONTROL, _pause_animation),
    Action(Verb.RESUME_ANIMATION.value, ActionKind.CONTROL, _resume_animation),
    Action(Verb.REMOVE_ANIMATION.value, ActionKind.CONTROL, _remove_animation),
    Action(Verb.GET_ANIMATION_STATE.value, ActionKind.CONTROL, _report_animation_state),
)


__all__ = [
    "Action",
    "ActionContext",
    "ActionKind",
    "BUILTIN_ACTIONS",
    "KIND_DECODERS",
    "decode_content",
    "decode_csv",
    "decode_flag",
    "decode_keyed",
    "decode_keyframe",
    "decode_structured",
    "decode_target",
    "decode_timed",
    "decode_tokens",
    "decode_transition",
]
