from __future__ import annotations

import asyncio
import contextlib
import inspect
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, List, Optional, Set, Union

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from wshm_client.config import ClientConfig
from wshm_client.dom.document import Document
from wshm_client.features.registry import ActionRegistry
from wshm_shared.protocol.commands import Verb
from wshm_shared.protocol.constants import SUBPROTOCOL_PREFIX
from wshm_shared.protocol.errors import ConnectError, ErrorCode, FrameError, InvalidAddress, ProtocolError
from wshm_shared.protocol.framing import create_escaped_message, create_message, decode_text
from wshm_shared.protocol.validator import validate_url, validate_version
from wshm_shared.utils.common import get_logger

from .dispatcher import Dispatcher, MessageHandler

Connector = Callable[..., Awaitable[Any]]


class ConnectionState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay before reconnect `attempt` (1-based); no jitter."""
    return base_delay * 2 ** (attempt - 1)


class HypermediaClient:
    """WebSocket client that handles reconnect with backoff and frame routing."""

    def __init__(
        self,
        config: ClientConfig,
        document: Document,
        connector: Optional[Connector] = None,
    ) -> None:
        self.config = config
        self.document = document
        self.registry = ActionRegistry()
        self.dispatcher = Dispatcher(document, config, self.registry, reply=self.send)
        self.log = get_logger(__name__, config.enable_logging)

        self._connector: Connector = connector or websockets.connect
        self._ws: Any = None
        self._state = ConnectionState.IDLE
        self._connecting = False
        self._closing = False
        self._reconnect_attempts = 0
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._receive_task: Optional[asyncio.Task] = None
        self._closed_event = asyncio.Event()
        self._callback_tasks: Set[asyncio.Future] = set()
        self.scheduled_delays: List[float] = []

    @property
    def ready_state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def subprotocol(self) -> str:
        return f"{SUBPROTOCOL_PREFIX}{self.config.protocol_version}"

    async def connect(self) -> None:
        self._closing = False
        await self._open()

    async def _open(self) -> None:
        if self._connecting or self._closing or self._state is ConnectionState.OPEN:
            return
        self._connecting = True
        self._cancel_reconnect()
        self._state = ConnectionState.CONNECTING

        try:
            validate_url(self.config.url)
        except InvalidAddress as exc:
            self._connecting = False
            self._state = ConnectionState.CLOSED
            self._handle_error(exc)
            self._closed_event.set()
            return

        try:
            ws = await self._connector(
                self.config.url,
                subprotocols=[self.subprotocol],
                open_timeout=self.config.open_timeout,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            self._connecting = False
            self._handle_error(ConnectError(ErrorCode.TRANSPORT_FAILED, f"Connect failed: {exc}", detail=self.config.url))
            self._after_close()
            return

        if self.config.require_version:
            try:
                offered = getattr(ws, "subprotocol", None) or ""
                version = offered.removeprefix(SUBPROTOCOL_PREFIX) if offered.startswith(SUBPROTOCOL_PREFIX) else None
                validate_version(version, self.config.protocol_version)
            except ProtocolError as exc:
                self._connecting = False
                await ws.close()
                self._handle_error(ConnectError(exc.code, exc.message, detail=self.config.url))
                self._after_close()
                return

        self._ws = ws
        self._connecting = False
        if self._closing:
            # disconnect() arrived while the handshake was in flight
            await ws.close()
            self._ws = None
            self._state = ConnectionState.CLOSED
            self._closed_event.set()
            return

        self._state = ConnectionState.OPEN
        self._reconnect_attempts = 0
        self._closed_event.clear()
        self.log.info("Connected to %s", self.config.url)
        self._notify(self.config.on_connect)
        self._receive_task = asyncio.create_task(self._receive_loop(ws), name="wshm-recv-loop")

    async def disconnect(self) -> None:
        """Close for good: no retry is scheduled afterwards."""
        self._closing = True
        self._cancel_reconnect()
        if self._state in (ConnectionState.CLOSED, ConnectionState.IDLE) and self._ws is None:
            self._state = ConnectionState.CLOSED
            self._closed_event.set()
            return
        self._state = ConnectionState.CLOSING
        ws = self._ws
        task = self._receive_task
        if ws is not None:
            await ws.close()
        if task is not None and task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)
        if self._connecting or (self._ws is not None and self._ws is not ws):
            # connect() was called while this socket was closing
            self.log.info("Disconnect superseded by a new connection")
            return
        self._state = ConnectionState.CLOSED
        self._closed_event.set()
        self.log.info("Hypermedia client closed")

    async def wait_closed(self) -> None:
        """Wait until the client is closed with no reconnect pending."""
        while True:
            await self._closed_event.wait()
            if self._reconnect_handle is None and not self._connecting:
                return
            self._closed_event.clear()

    async def send(self, message: str) -> bool:
        if self._state is not ConnectionState.OPEN or self._ws is None:
            self.log.warning("WebSocket not ready, state: %s", self._state)
            return False
        try:
            await self._ws.send(message)
        except (ConnectionClosed, OSError) as exc:
            self.log.warning("Send failed: %s", exc)
            return False
        self.log.debug("Sent message %r", message)
        return True

    async def send_message(self, verb: Union[str, Verb], target: str, payload: str, *extras: str) -> bool:
        return await self.send(create_message(str(verb), target, payload, *extras))

    async def send_escaped(self, verb: Union[str, Verb], target: str, payload: str, *extras: str) -> bool:
        message = create_escaped_message(str(verb), target, payload, *extras, escape_char=self.config.escape_char)
        return await self.send(message)

    def add_message_handler(self, verb: Union[str, Verb], handler: MessageHandler) -> None:
        self.dispatcher.register(verb, handler)

    def remove_message_handler(self, verb: Union[str, Verb]) -> None:
        self.dispatcher.unregister(verb)

    async def _receive_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                await self._handle_message(raw)
        except ConnectionClosed as exc:
            self.log.warning("Connection lost: %s", exc)
        except OSError as exc:
            self._handle_error(ConnectError(ErrorCode.TRANSPORT_FAILED, f"Receive failed: {exc}", detail=self.config.url))
        except Exception as exc:
            self.log.exception("Receive loop crashed: %s", exc)
            with contextlib.suppress(ConnectionClosed, OSError):
                await ws.close()
        finally:
            code = getattr(ws, "close_code", None)
            reason = getattr(ws, "close_reason", None) or ""
            replaced = self._connecting or (self._ws is not None and self._ws is not ws)
            if self._ws is ws:
                self._ws = None
        self.log.info("Connection closed (code=%s reason=%s)", code, reason)
        self._notify(self.config.on_disconnect, code, reason)
        if not replaced:
            self._after_close()

    async def _handle_message(self, raw: Union[str, bytes]) -> None:
        try:
            data = decode_text(raw)
        except FrameError as exc:
            self.log.warning("Dropping frame: %s", exc)
            return
        await self.dispatcher.handle_message(data)
        self._notify(self.config.on_message, data)

    def _after_close(self) -> None:
        self._state = ConnectionState.CLOSED
        if not self._closing:
            if self.config.auto_reconnect and self._reconnect_attempts < self.config.max_reconnect_attempts:
                self._schedule_reconnect()
            elif self.config.auto_reconnect:
                self.log.warning("Giving up after %s reconnect attempts", self._reconnect_attempts)
        self._closed_event.set()

    def _schedule_reconnect(self) -> None:
        self._reconnect_attempts += 1
        delay = backoff_delay(self.config.reconnect_delay, self._reconnect_attempts)
        self.scheduled_delays.append(delay)
        self.log.info("Reconnect attempt %s in %.3fs", self._reconnect_attempts, delay)
        self._reconnect_handle = self._call_later(delay, self._fire_reconnect)

    def _call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)

    def _fire_reconnect(self) -> None:
        self._reconnect_handle = None
        if self._closing or self._state is not ConnectionState.CLOSED:
            return
        self._reconnect_task = asyncio.ensure_future(self._open())

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    def _handle_error(self, error: BaseException) -> None:
        self.log.error("WebSocket Hypermedia error: %s", error)
        self._notify(self.config.on_error, error)

    def _notify(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._callback_tasks.add(task)
                task.add_done_callback(self._callback_done)
        except Exception as exc:
            self.log.exception("Callback %s failed: %s", getattr(callback, "__name__", callback), exc)

    def _callback_done(self, task: asyncio.Future) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.log.error("Callback task failed: %s", exc, exc_info=exc)


__all__ = ["ConnectionState", "HypermediaClient", "backoff_delay"]
