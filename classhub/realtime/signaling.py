"""
Meeting presence registry.

Holds, per room, the participants currently connected. It is the only owner
of that state; callers go through join/leave/participants/can_relay.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Participant:
    sid: str
    user_id: int
    name: str
    role: str

    def public(self) -> dict:
        return {"id": self.sid, "userId": self.user_id, "name": self.name, "role": self.role}


class SignalingRelay:
    def __init__(self):
        self._rooms: dict[str, dict[str, Participant]] = {}

    def join(self, room_id: str, participant: Participant) -> list[Participant]:
        room = self._rooms.setdefault(room_id, {})
        room[participant.sid] = participant
        logger.info("Socket %s (user %s) joined room %s", participant.sid, participant.user_id, room_id)
        return list(room.values())

    def leave(self, room_id: str, sid: str) -> Participant | None:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        participant = room.pop(sid, None)
        if not room:
            del self._rooms[room_id]
        if participant is not None:
            logger.info("Socket %s left room %s", sid, room_id)
        return participant

    def leave_all(self, sid: str) -> list[str]:
        """Remove the socket from every room; returns the rooms it was in."""
        left = []
        for room_id in list(self._rooms):
            if self.leave(room_id, sid) is not None:
                left.append(room_id)
        return left

    def close_room(self, room_id: str) -> list[Participant]:
        return list(self._rooms.pop(room_id, {}).values())

    def participants(self, room_id: str) -> list[Participant]:
        return list(self._rooms.get(room_id, {}).values())

    def participant(self, room_id: str, sid: str) -> Participant | None:
        return self._rooms.get(room_id, {}).get(sid)

    def peer_ids(self, room_id: str, *, exclude: str | None = None) -> list[str]:
        return [sid for sid in self._rooms.get(room_id, {}) if sid != exclude]

    def can_relay(self, room_id: str, sender: str, recipient: str) -> bool:
        room = self._rooms.get(room_id, {})
        return sender in room and recipient in room and sender != recipient

    def rooms(self) -> list[str]:
        return list(self._rooms)
