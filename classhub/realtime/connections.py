# classhub/realtime/connections.py
import logging
import uuid
from typing import Any, Iterable, Protocol

from starlette.websockets import WebSocketDisconnect

logger = logging.getLogger(__name__)


class JSONSocket(Protocol):
    async def send_json(self, data: Any) -> None: ...


class ConnectionManager:
    """
    Tracks live sockets by a server-assigned id.
    Sends are fire-and-forget: a socket that fails to receive is logged and
    skipped, the rest of a broadcast still goes out.
    """

    def __init__(self):
        self.active_connections: dict[str, JSONSocket] = {}

    def register(self, socket: JSONSocket) -> str:
        sid = uuid.uuid4().hex
        self.active_connections[sid] = socket
        return sid

    def disconnect(self, sid: str) -> None:
        self.active_connections.pop(sid, None)

    def is_connected(self, sid: str) -> bool:
        return sid in self.active_connections

    async def send_to(self, sid: str, message: dict) -> bool:
        socket = self.active_connections.get(sid)
        if socket is None:
            return False
        try:
            await socket.send_json(message)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.warning("Dropping message to socket %s: %s", sid, e)
            return False
        return True

    async def broadcast(self, sids: Iterable[str], message: dict) -> None:
        for sid in list(sids):
            await self.send_to(sid, message)
