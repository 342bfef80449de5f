"""
Live channel client.

Keeps at most one push connection open, hands every inbound frame to the
invalidation router and recovers from drops with a fixed-delay, bounded
retry. All work happens on the running asyncio loop; the connection task and
the pending retry handle are owned here and cancelled by ``disconnect``.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, Callable, List, Optional, Union

import structlog
from pydantic import BaseModel

from ..config import settings
from ..contracts import LiveConnection, LiveTransport
from .invalidation import InvalidationRouter
from .messages import LiveMessage, MalformedMessageError

logger = structlog.get_logger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


StateListener = Callable[[ConnectionState], None]
MessageListener = Callable[[LiveMessage], None]


class LiveChannelClient:
    """Single-connection push client with bounded fixed-delay reconnection."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        transport: Optional[LiveTransport] = None,
        router: Optional[InvalidationRouter] = None,
        reconnect_interval: Optional[float] = None,
        max_reconnect_attempts: Optional[int] = None,
    ) -> None:
        if transport is None:
            from .transport import WebSocketTransport

            transport = WebSocketTransport()
        self.url = url or settings.live.url
        self.reconnect_interval = (
            settings.live.reconnect_interval
            if reconnect_interval is None
            else max(0.0, float(reconnect_interval))
        )
        self.max_reconnect_attempts = (
            settings.live.max_reconnect_attempts
            if max_reconnect_attempts is None
            else max(0, int(max_reconnect_attempts))
        )
        self._transport = transport
        self._router = router

        self._state = ConnectionState.DISCONNECTED
        self._connection: Optional[LiveConnection] = None
        self._task: Optional[asyncio.Task] = None
        self._retry_handle: Optional[asyncio.TimerHandle] = None
        self._reconnect_attempts = 0
        self._gave_up = False
        self._closing = False

        self.last_message: Optional[LiveMessage] = None
        self._state_listeners: List[StateListener] = []
        self._message_listeners: List[MessageListener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def gave_up(self) -> bool:
        """True once the retry budget is spent and no retry is pending."""
        return self._gave_up

    @property
    def retry_pending(self) -> bool:
        return self._retry_handle is not None

    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def add_message_listener(self, listener: MessageListener) -> Callable[[], None]:
        self._message_listeners.append(listener)
        return lambda: self._remove(self._message_listeners, listener)

    @staticmethod
    def _remove(listeners: List[Any], listener: Any) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def connect(self) -> None:
        """Start a connection attempt unless one is open or in flight.

        Must be called from a running event loop.
        """
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            return
        if self._task is not None and not self._task.done():
            return
        loop = asyncio.get_running_loop()
        self._cancel_retry()
        self._closing = False
        self._gave_up = False
        self._set_state(ConnectionState.CONNECTING)
        self._task = loop.create_task(self._run())

    async def disconnect(self) -> None:
        """Close the connection and cancel any pending retry. Idempotent."""
        self._closing = True
        self._cancel_retry()
        task, self._task = self._task, None
        connection, self._connection = self._connection, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if connection is not None:
            await self._close_quietly(connection)
        if self._state is not ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.DISCONNECTED)
            logger.info("Live channel closed", url=self.url)

    def send(self, message: Union[BaseModel, Any]) -> bool:
        """Serialize and transmit ``message`` if connected; never queues."""
        connection = self._connection
        if self._state is not ConnectionState.CONNECTED or connection is None:
            logger.warning("Live channel not connected, message not sent", state=self._state.value)
            return False
        if isinstance(message, BaseModel):
            message = message.model_dump(mode="json")
        data = json.dumps(message)
        try:
            connection.send(data)
        except Exception as exc:
            self._handle_error(exc)
            return False
        return True

    def on_message(self, raw: Union[str, bytes]) -> Optional[LiveMessage]:
        """Parse one inbound frame and dispatch it; malformed frames are dropped."""
        try:
            message = LiveMessage.parse_frame(raw)
        except MalformedMessageError as exc:
            logger.warning("Dropped malformed live message", error=str(exc))
            return None
        self.last_message = message
        if self._router is not None:
            self._router.route(message)
        for listener in list(self._message_listeners):
            try:
                listener(message)
            except Exception as exc:
                logger.error("Live message listener failed", error=str(exc), message_type=message.type)
        return message

    async def _run(self) -> None:
        try:
            connection = await self._transport.open(self.url)
        except Exception as exc:
            self._handle_error(exc)
            self._handle_close()
            return

        self._connection = connection
        self._reconnect_attempts = 0
        self._gave_up = False
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Live channel connected", url=self.url)

        try:
            async for raw in connection:
                self.on_message(raw)
        except Exception as exc:
            self._handle_error(exc)

        if not self._closing:
            await self._close_quietly(connection)
            self._connection = None
            self._handle_close()

    def _handle_error(self, exc: BaseException) -> None:
        logger.warning("Live channel transport error", url=self.url, error=str(exc))
        self._set_state(ConnectionState.ERROR)

    def _handle_close(self) -> None:
        self._set_state(ConnectionState.DISCONNECTED)
        if self._closing:
            return
        if self._reconnect_attempts < self.max_reconnect_attempts:
            self._reconnect_attempts += 1
            logger.info(
                "Live channel reconnecting",
                attempt=self._reconnect_attempts,
                max_attempts=self.max_reconnect_attempts,
                delay=self.reconnect_interval,
            )
            loop = asyncio.get_running_loop()
            self._retry_handle = loop.call_later(self.reconnect_interval, self._retry)
        else:
            self._gave_up = True
            logger.warning(
                "Live channel reconnection limit reached",
                url=self.url,
                max_attempts=self.max_reconnect_attempts,
            )

    def _retry(self) -> None:
        self._retry_handle = None
        self.connect()

    def _cancel_retry(self) -> None:
        handle, self._retry_handle = self._retry_handle, None
        if handle is not None:
            handle.cancel()

    async def _close_quietly(self, connection: LiveConnection) -> None:
        try:
            await connection.close()
        except Exception as exc:
            logger.debug("Live connection close failed", error=str(exc))

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as exc:
                logger.error("Live state listener failed", error=str(exc), state=state.value)
