# classhub/realtime/hub.py
import asyncio
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from classhub.models.user import User
from classhub.realtime.chat import ChatRelay
from classhub.realtime.connections import ConnectionManager, JSONSocket
from classhub.realtime.events import (
    Answer,
    EndMeet,
    IceCandidate,
    JoinClassroom,
    JoinRoom,
    Kick,
    LeaveRoom,
    Offer,
    SendMessage,
    WhoAmI,
    parse_client_event,
    server_event,
)
from classhub.realtime.signaling import Participant, SignalingRelay
from classhub.services import chat_service, classroom_service

logger = logging.getLogger(__name__)


def in_session(session_factory: sessionmaker, fn, *args, **kwargs):
    """Run ``fn(db, ...)`` in a fresh session that is closed afterwards."""
    db = session_factory()
    try:
        return fn(db, *args, **kwargs)
    finally:
        db.close()


def _chat_access(db: Session, classroom_id: int, user_id: int) -> tuple[bool, bool]:
    """(classroom exists, user may use its channel)"""
    classroom = classroom_service.get_classroom(db, classroom_id)
    if classroom is None:
        return False, False
    allowed = classroom.teacher_id == user_id or classroom_service.is_member(
        db, classroom_id=classroom.id, user_id=user_id
    )
    return True, allowed


def _store_message(db: Session, sender: User, classroom_id: int, content: str) -> dict:
    message = chat_service.save_message(
        db,
        sender_id=sender.id,
        classroom_id=classroom_id,
        content=content,
    )
    return server_event(
        "newMessage",
        id=message.id,
        senderId=sender.id,
        senderName=sender.name,
        classroomId=classroom_id,
        content=message.content,
        createdAt=message.created_at.isoformat() if message.created_at else None,
    )


class RealtimeHub:
    """
    Socket side of the application: classroom chat plus meeting signaling.

    One instance serves every connection. Each frame is handled on its own;
    the only shared state is the chat channels and the room registry.
    Database work runs on a worker thread with its own short-lived session,
    so a slow query never holds up the event loop.
    """

    HANDLERS = {
        JoinClassroom: "_on_join_classroom",
        SendMessage: "_on_send_message",
        JoinRoom: "_on_join_room",
        WhoAmI: "_on_whoami",
        Offer: "_on_negotiation",
        Answer: "_on_negotiation",
        IceCandidate: "_on_negotiation",
        LeaveRoom: "_on_leave_room",
        Kick: "_on_kick",
        EndMeet: "_on_end_meet",
    }

    def __init__(self):
        self.connections = ConnectionManager()
        self.chat = ChatRelay(self.connections)
        self.signaling = SignalingRelay()

    async def connect(self, socket: JSONSocket) -> str:
        sid = self.connections.register(socket)
        await self.connections.send_to(sid, server_event("connected", id=sid))
        return sid

    async def disconnect(self, sid: str) -> None:
        self.chat.leave_all(sid)
        for room_id in self.signaling.leave_all(sid):
            await self._announce_departure(room_id, sid)
        self.connections.disconnect(sid)

    async def handle(self, sid: str, user: User, raw: dict, session_factory: sessionmaker) -> None:
        try:
            event = parse_client_event(raw)
        except ValidationError as e:
            logger.warning("Rejected frame from socket %s: %s", sid, e.errors(include_url=False))
            await self._error(sid, "Invalid event")
            return

        handler = getattr(self, self.HANDLERS[type(event)])
        await handler(sid, user, event, session_factory)

    # -- chat --

    async def _on_join_classroom(self, sid, user, event: JoinClassroom, session_factory):
        found, allowed = await asyncio.to_thread(
            in_session, session_factory, _chat_access, event.classroom_id, user.id
        )
        if not found:
            await self._error(sid, "Classroom not found")
            return
        if not allowed:
            await self._error(sid, "Not a member of this classroom")
            return
        self.chat.join(event.classroom_id, sid)
        await self.connections.send_to(
            sid, server_event("joinedClassroom", classroomId=event.classroom_id)
        )

    async def _on_send_message(self, sid, user, event: SendMessage, session_factory):
        if not self.chat.is_joined(event.classroom_id, sid):
            await self._error(sid, "Join the classroom before sending")
            return
        payload = await asyncio.to_thread(
            in_session, session_factory, _store_message, user, event.classroom_id, event.content
        )
        await self.chat.publish(event.classroom_id, payload)

    # -- meeting signaling --

    async def _on_join_room(self, sid, user, event: JoinRoom, session_factory):
        participant = Participant(sid=sid, user_id=user.id, name=user.name, role=user.role)
        self.signaling.join(event.room_id, participant)
        await self._broadcast_room_users(event.room_id)

    async def _on_whoami(self, sid, user, event: WhoAmI, session_factory):
        await self.connections.send_to(
            sid,
            server_event(
                "peers",
                roomId=event.room_id,
                peers=self.signaling.peer_ids(event.room_id, exclude=sid),
            ),
        )

    async def _on_negotiation(self, sid, user, event, session_factory):
        if not self.signaling.can_relay(event.room_id, sid, event.to):
            await self._error(sid, "Peer not in room", peer=event.to)
            return
        # relay verbatim, only `to` is swapped for `from`
        payload = event.model_dump(by_alias=True, exclude={"to"})
        payload["from"] = sid
        await self.connections.send_to(event.to, payload)

    async def _on_leave_room(self, sid, user, event: LeaveRoom, session_factory):
        if self.signaling.leave(event.room_id, sid) is not None:
            await self._announce_departure(event.room_id, sid)

    async def _on_kick(self, sid, user, event: Kick, session_factory):
        if not await self._require_host(sid, user, event.room_id):
            return
        if self.signaling.leave(event.room_id, event.target) is None:
            await self._error(sid, "Peer not in room")
            return
        logger.info("Teacher %s removed socket %s from room %s", user.id, event.target, event.room_id)
        await self.connections.send_to(event.target, server_event("kicked", roomId=event.room_id))
        await self._announce_departure(event.room_id, event.target)

    async def _on_end_meet(self, sid, user, event: EndMeet, session_factory):
        if not await self._require_host(sid, user, event.room_id):
            return
        participants = self.signaling.close_room(event.room_id)
        logger.info("Teacher %s ended meeting in room %s", user.id, event.room_id)
        await self.connections.broadcast(
            [p.sid for p in participants if p.sid != sid],
            server_event("meet-ended", roomId=event.room_id),
        )

    # -- helpers --

    async def _require_host(self, sid: str, user: User, room_id: str) -> bool:
        if user.role != "teacher" or self.signaling.participant(room_id, sid) is None:
            logger.warning("Socket %s (user %s) tried a host action in room %s", sid, user.id, room_id)
            await self._error(sid, "Only the teacher in the room can do that")
            return False
        return True

    async def _announce_departure(self, room_id: str, sid: str) -> None:
        remaining = self.signaling.peer_ids(room_id)
        await self.connections.broadcast(remaining, server_event("user-left", roomId=room_id, id=sid))
        await self._broadcast_room_users(room_id)

    async def _broadcast_room_users(self, room_id: str) -> None:
        participants = self.signaling.participants(room_id)
        await self.connections.broadcast(
            [p.sid for p in participants],
            server_event("room-users", roomId=room_id, users=[p.public() for p in participants]),
        )

    async def _error(self, sid: str, detail: str, **extra) -> None:
        await self.connections.send_to(sid, server_event("error", detail=detail, **extra))


hub = RealtimeHub()
