import asyncio
import logging
from typing import Any, Dict, List

from fastapi import WebSocket

from app.core.config import WS_SEND_TIMEOUT

log = logging.getLogger(__name__)


class ConnectionManager:
    """
    Keeps the open WebSocket connections and pushes change notifications to them.

    Delivery is best effort: clients treat a push as a hint to re-fetch, so a
    connection that fails to receive is dropped instead of retried.
    """

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        log.info(f"WebSocket client connected ({len(self.active_connections)} open)")
        await websocket.send_json({"type": "CONNECTED", "data": {"message": "Connected to WB-Tracks"}})

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            log.info(f"WebSocket client disconnected ({len(self.active_connections)} open)")

    async def publish(self, message: Dict[str, Any]):
        """Sends `message` to every connected client, dropping the ones that fail or stall."""
        if not self.active_connections:
            return
        connections = list(self.active_connections)
        results = await asyncio.gather(
            *(asyncio.wait_for(ws.send_json(message), timeout=WS_SEND_TIMEOUT) for ws in connections),
            return_exceptions=True,
        )
        for ws, result in zip(connections, results):
            if isinstance(result, Exception):
                log.warning(f"Dropping WebSocket client after failed send: {result!r}")
                self.disconnect(ws)
