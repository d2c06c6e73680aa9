from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from wshm_client.config import ClientConfig
from wshm_client.dom.document import Document, Element
from wshm_client.features.actions import ActionContext
from wshm_client.features.registry import ActionRegistry
from wshm_shared.protocol.commands import Verb, normalize_verb
from wshm_shared.protocol.errors import DispatchError, ErrorCode, FrameError, HandlerError
from wshm_shared.protocol.framing import parse_message
from wshm_shared.protocol.messages import Frame
from wshm_shared.protocol.validator import validate_target_id
from wshm_shared.utils.common import get_logger, log_security_event, security_logger

# (element, payload, target, extras) -> None | awaitable
MessageHandler = Callable[[Element, str, str, Sequence[str]], Optional[Awaitable[Any]]]
Reply = Callable[[str], Awaitable[Any]]


class Dispatcher:
    """Maps decoded verbs to custom handlers first, then built-in actions."""

    def __init__(
        self,
        document: Document,
        config: ClientConfig,
        registry: Optional[ActionRegistry] = None,
        reply: Optional[Reply] = None,
    ) -> None:
        self.document = document
        self.config = config
        self.registry = registry or ActionRegistry()
        self.reply = reply
        self._handlers: Dict[str, MessageHandler] = {}
        self.log = get_logger(__name__, config.enable_logging)
        self.security_log = security_logger(config.enable_security_logging)

    def register(self, verb: str | Verb, handler: MessageHandler) -> None:
        self._handlers[normalize_verb(verb)] = handler

    def unregister(self, verb: str | Verb) -> None:
        self._handlers.pop(normalize_verb(verb), None)

    def has_handler(self, verb: str | Verb) -> bool:
        return normalize_verb(verb) in self._handlers

    async def handle_message(self, data: str) -> bool:
        """Parse one raw message and apply it; never raises."""
        try:
            parts = parse_message(
                data,
                escape_char=self.config.escape_char,
                max_size=self.config.max_message_size,
                max_parts=self.config.max_parts,
            )
            frame = Frame.from_parts(parts)
        except FrameError as exc:
            if exc.code == ErrorCode.MALFORMED_FRAME:
                self.log.debug("Ignoring short message: %s", exc)
            else:
                self.log.warning("Dropping frame: %s", exc)
            return False
        return await self.process(frame.verb, frame.target, frame.payload, frame.extras)

    async def process(self, verb: str, target: str, payload: str, extras: Sequence[str] = ()) -> bool:
        """Apply one frame; True when a handler or action ran to completion."""
        try:
            element = self._resolve(verb, target)
            custom = self._handlers.get(verb)
            if custom is not None:
                result = custom(element, payload, target, extras)
            else:
                action = self.registry.get(verb)
                if action is None:
                    self.log.warning("Unknown verb: %s - server can extend protocol without client updates", verb)
                    return False
                sanitizer = self.config.sanitizers.get(verb)
                if sanitizer is not None:
                    payload = sanitizer(payload)
                ctx = ActionContext(
                    target_id=target,
                    registry=self.registry,
                    config=self.config,
                    log=self.log,
                    security_log=self.security_log,
                    reply=self.reply,
                )
                result = action.invoke(ctx, element, payload, extras)
            if inspect.isawaitable(result):
                await result
        except DispatchError as exc:
            self.log.warning("%s", exc.message)
            return False
        except Exception as exc:
            error = HandlerError(ErrorCode.HANDLER_FAILED, f"Handler for {verb!r} failed: {exc}", detail=target)
            self.log.exception("Handler error for %s: %s", verb, error.to_payload())
            return False
        return True

    def _resolve(self, verb: str, target: str) -> Element:
        if not validate_target_id(target):
            log_security_event(self.security_log, "INVALID_TARGET", target, verb=verb)
            raise DispatchError(ErrorCode.INVALID_TARGET, f"Invalid element ID: {target!r}", detail=target)
        element = self.document.get_element_by_id(target)
        if element is None:
            raise DispatchError(ErrorCode.TARGET_NOT_FOUND, f"Element not found: {target}", detail=target)
        return element


__all__ = ["Dispatcher", "MessageHandler"]
