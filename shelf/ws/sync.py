"""WebSocket handler pushing album and config events to connected clients."""

import asyncio
import contextlib
import json
import logging

import jwt
from fastapi import WebSocket, WebSocketDisconnect

from shelf.services.events import EventHub, hub
from shelf.utils.security import decode_token

logger = logging.getLogger(__name__)

# Events queued per client before new ones are dropped
QUEUE_SIZE = 256


class ConnectionManager:
    """Forwards hub events to active WebSocket connections."""

    def __init__(self, event_hub: EventHub):
        self._hub = event_hub
        self._connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> asyncio.Queue:
        await ws.accept()
        self._connections.append(ws)

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)

        def forward(topic: str, data: dict) -> None:
            loop.call_soon_threadsafe(self._offer, queue, {"event": topic, "data": data})

        ws.state.forward = forward
        self._hub.subscribe(forward)
        logger.debug("websocket: client connected, %d active", self.connection_count)
        return queue

    def disconnect(self, ws: WebSocket):
        if ws in self._connections:
            self._connections.remove(ws)
        forward = getattr(ws.state, "forward", None)
        if forward is not None:
            self._hub.unsubscribe(forward)
        logger.debug("websocket: client disconnected, %d active", self.connection_count)

    @staticmethod
    def _offer(queue: asyncio.Queue, message: dict) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("websocket: client queue full, dropped %s", message["event"])

    @property
    def connection_count(self) -> int:
        return len(self._connections)


manager = ConnectionManager(hub)


async def _send_events(ws: WebSocket, queue: asyncio.Queue):
    while True:
        message = await queue.get()
        await ws.send_json(message)


async def websocket_sync(ws: WebSocket, token: str | None = None):
    """WebSocket endpoint for real-time album updates."""
    # Authenticate
    if not token:
        await ws.close(code=4001, reason="Missing token")
        return

    try:
        decode_token(token)
    except jwt.PyJWTError:
        await ws.close(code=4001, reason="Invalid token")
        return

    queue = await manager.connect(ws)
    sender = asyncio.create_task(_send_events(ws, queue))

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
                if not isinstance(msg, dict):
                    await ws.send_json({"type": "error", "message": "Expected an object"})
                    continue
                msg_type = msg.get("type", "")

                if msg_type == "ping":
                    await ws.send_json({"type": "pong"})
                else:
                    await ws.send_json({"type": "error", "message": f"Unknown type: {msg_type}"})
            except json.JSONDecodeError:
                await ws.send_json({"type": "error", "message": "Invalid JSON"})
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            await sender
        manager.disconnect(ws)
