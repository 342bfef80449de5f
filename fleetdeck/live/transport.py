"""WebSocket transport for the live channel."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional, Union

import structlog
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

logger = structlog.get_logger(__name__)


class WebSocketConnection:
    """Adapts a websockets client connection to the live connection contract.

    ``send`` is synchronous for callers; frames are written in order by a
    single writer task.
    """

    def __init__(self, websocket: ClientConnection) -> None:
        self._websocket = websocket
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = asyncio.get_running_loop().create_task(
            self._drain()
        )

    async def _drain(self) -> None:
        while True:
            data = await self._outbox.get()
            try:
                await self._websocket.send(data)
            except ConnectionClosed as exc:
                logger.warning("Live frame dropped, connection closed", error=str(exc))
                return

    def send(self, data: str) -> None:
        if self._writer is None or self._writer.done():
            raise ConnectionError("Live connection is no longer writable")
        self._outbox.put_nowait(data)

    async def close(self) -> None:
        writer, self._writer = self._writer, None
        if writer is not None:
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass
        await self._websocket.close()

    async def __aiter__(self) -> AsyncIterator[Union[str, bytes]]:
        # Binary frames pass through undecoded; the message parser rejects bad UTF-8.
        async for frame in self._websocket:
            yield frame


class WebSocketTransport:
    """Opens live connections with the ``websockets`` asyncio client."""

    def __init__(self, *, open_timeout: float = 10.0) -> None:
        self._open_timeout = open_timeout

    async def open(self, url: str) -> WebSocketConnection:
        websocket = await connect(url, open_timeout=self._open_timeout)
        return WebSocketConnection(websocket)
