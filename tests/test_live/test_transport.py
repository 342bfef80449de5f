"""WebSocket connection adapter."""

import asyncio

import pytest
from websockets.exceptions import ConnectionClosed

from fleetdeck.live.transport import WebSocketConnection


class FakeWebSocket:
    def __init__(self, frames=()):
        self.frames = list(frames)
        self.sent = []
        self.closed = False

    async def send(self, data):
        await asyncio.sleep(0)
        self.sent.append(data)

    async def close(self):
        self.closed = True

    async def __aiter__(self):
        for frame in self.frames:
            yield frame


@pytest.mark.asyncio
async def test_send_writes_frames_in_order(wait_until):
    websocket = FakeWebSocket()
    connection = WebSocketConnection(websocket)

    for index in range(3):
        connection.send(f'{{"type": "ping", "seq": {index}}}')
    await wait_until(lambda: len(websocket.sent) == 3)
    await connection.close()

    assert [frame[-2] for frame in websocket.sent] == ["0", "1", "2"]
    assert websocket.closed is True


@pytest.mark.asyncio
async def test_frames_pass_through_undecoded():
    websocket = FakeWebSocket([b'{"type": "alert"}', '{"type": "iot_update"}'])
    connection = WebSocketConnection(websocket)

    frames = [frame async for frame in connection]
    await connection.close()

    assert frames == [b'{"type": "alert"}', '{"type": "iot_update"}']


class ClosedWebSocket(FakeWebSocket):
    async def send(self, data):
        raise ConnectionClosed(None, None)


@pytest.mark.asyncio
async def test_send_fails_once_writer_has_stopped(wait_until):
    connection = WebSocketConnection(ClosedWebSocket())

    connection.send('{"type": "ping"}')
    await wait_until(lambda: connection._writer.done())

    with pytest.raises(ConnectionError):
        connection.send('{"type": "ping"}')
    await connection.close()
