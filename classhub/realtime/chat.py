# classhub/realtime/chat.py
from collections import defaultdict

from classhub.realtime.connections import ConnectionManager


class ChatRelay:
    """
    Per-classroom chat channels. A published message goes to every socket
    joined to the channel, sender included, in server receive order.
    """

    def __init__(self, connections: ConnectionManager):
        self.connections = connections
        self._channels: dict[int, set[str]] = defaultdict(set)

    def join(self, classroom_id: int, sid: str) -> None:
        self._channels[classroom_id].add(sid)

    def is_joined(self, classroom_id: int, sid: str) -> bool:
        return sid in self._channels.get(classroom_id, ())

    def members(self, classroom_id: int) -> set[str]:
        return set(self._channels.get(classroom_id, ()))

    def leave_all(self, sid: str) -> None:
        for classroom_id in list(self._channels):
            self._channels[classroom_id].discard(sid)
            if not self._channels[classroom_id]:
                del self._channels[classroom_id]

    async def publish(self, classroom_id: int, message: dict) -> None:
        await self.connections.broadcast(self.members(classroom_id), message)
