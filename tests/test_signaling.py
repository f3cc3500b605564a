import asyncio
import threading

from sqlalchemy.orm import sessionmaker

from classhub.models.user import User
from classhub.realtime.events import CLIENT_EVENT_TYPES, Offer, parse_client_event
from classhub.realtime.hub import RealtimeHub
from classhub.realtime.peer_view import MeetingView, PeerState
from classhub.realtime.signaling import Participant, SignalingRelay


class FakeSocket:
    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)


class ClosedSocket:
    async def send_json(self, data):
        raise RuntimeError("socket closed")


def _user(user_id, role="student"):
    return User(id=user_id, name=f"user{user_id}", role=role)


class TestRelayRegistry:
    def test_join_leave_and_list(self):
        relay = SignalingRelay()
        relay.join("r1", Participant("a", 1, "A", "teacher"))
        relay.join("r1", Participant("b", 2, "B", "student"))

        assert relay.peer_ids("r1") == ["a", "b"]
        assert relay.peer_ids("r1", exclude="a") == ["b"]
        assert relay.can_relay("r1", "a", "b")
        assert not relay.can_relay("r1", "a", "a")
        assert not relay.can_relay("r1", "a", "zzz")

        assert relay.leave("r1", "b").user_id == 2
        assert relay.leave("r1", "b") is None
        assert relay.peer_ids("r1") == ["a"]

    def test_empty_rooms_are_dropped(self):
        relay = SignalingRelay()
        relay.join("r1", Participant("a", 1, "A", "teacher"))
        relay.join("r2", Participant("a", 1, "A", "teacher"))
        assert sorted(relay.leave_all("a")) == ["r1", "r2"]
        assert relay.rooms() == []

    def test_rejoin_is_idempotent(self):
        relay = SignalingRelay()
        p = Participant("a", 1, "A", "teacher")
        relay.join("r1", p)
        relay.join("r1", p)
        assert relay.participants("r1") == [p]


class TestEvents:
    def test_every_event_has_a_handler(self):
        assert set(RealtimeHub.HANDLERS) == set(CLIENT_EVENT_TYPES)

    def test_numeric_room_id_is_normalised(self):
        event = parse_client_event({"event": "offer", "roomId": 5, "to": "x", "offer": "anything"})
        assert isinstance(event, Offer)
        assert event.room_id == "5"
        assert event.offer == "anything"


class TestHub:
    def test_broadcast_survives_a_dead_socket(self):
        async def scenario():
            hub = RealtimeHub()
            good = FakeSocket()
            a = await hub.connect(good)
            b = await hub.connect(ClosedSocket())
            await hub.handle(a, _user(1, "teacher"), {"event": "join-room", "roomId": "r"}, session_factory=None)
            await hub.handle(b, _user(2), {"event": "join-room", "roomId": "r"}, session_factory=None)
            return good.sent

        sent = asyncio.run(scenario())
        assert [m["event"] for m in sent] == ["connected", "room-users", "room-users"]
        assert len(sent[-1]["users"]) == 2

    def test_leave_tears_down_remote_views(self):
        async def scenario():
            hub = RealtimeHub()
            sockets = [FakeSocket() for _ in range(3)]
            sids = [await hub.connect(s) for s in sockets]
            for i, sid in enumerate(sids):
                await hub.handle(sid, _user(i + 1), {"event": "join-room", "roomId": "m"}, session_factory=None)
            views = [MeetingView(sid) for sid in sids]
            # full mesh: every pair negotiates once
            for view in views:
                view.on_peers(list(sids))
            await hub.handle(sids[0], _user(1), {"event": "leave-room", "roomId": "m"}, session_factory=None)
            views[0].leave()
            for view, socket in zip(views[1:], sockets[1:]):
                for message in socket.sent:
                    view.apply(message)
            return hub, sids, views

        hub, sids, views = asyncio.run(scenario())
        assert hub.signaling.peer_ids("m") == sids[1:]
        assert views[0].links == {}
        for view in views[1:]:
            assert sids[0] not in view.links
            assert view.participants and sids[0] not in [u["id"] for u in view.participants]
            assert len(view.links) == 1


class TestPeerView:
    def test_state_machine(self):
        view = MeetingView("me")
        view.join()
        assert view.on_peers(["me", "p1", "p2"]) == ["p1", "p2"]
        assert view.state_of("p1") is PeerState.NEGOTIATING

        view.on_track("p1")
        assert view.state_of("p1") is PeerState.CONNECTED

        # a failed negotiation is dropped, no retry
        view.on_failure("p2")
        assert "p2" not in view.links

        view.apply({"event": "meet-ended", "roomId": "r"})
        assert view.links == {}
        assert not view.in_meeting

    def test_track_before_negotiation_is_ignored(self):
        view = MeetingView("me")
        view.on_track("stranger")
        assert view.state_of("stranger") is PeerState.CLOSED

    def test_answer_marks_only_known_links(self):
        view = MeetingView("me")
        view.on_peers(["p1"])
        assert not view.links["p1"].remote_described

        view.apply({"event": "answer", "roomId": "r", "from": "p1", "answer": {}})
        assert view.links["p1"].remote_described
        assert view.state_of("p1") is PeerState.NEGOTIATING

        view.apply({"event": "answer", "roomId": "r", "from": "stranger", "answer": {}})
        assert "stranger" not in view.links

    def test_offer_opens_a_described_link(self):
        view = MeetingView("me")
        view.apply({"event": "offer", "roomId": "r", "from": "p9", "offer": {}})
        assert view.state_of("p9") is PeerState.NEGOTIATING
        assert view.links["p9"].remote_described

    def test_relay_failure_drops_the_link(self):
        view = MeetingView("me")
        view.on_peers(["p1", "p2"])
        view.apply({"event": "error", "detail": "Peer not in room", "peer": "p2"})
        assert "p2" not in view.links
        assert view.state_of("p1") is PeerState.NEGOTIATING

        # errors that name no peer leave the links alone
        view.apply({"event": "error", "detail": "Invalid event"})
        assert list(view.links) == ["p1"]


class TestChatPersistence:
    def test_each_frame_gets_its_own_session_off_the_loop(self, engine, teacher, classroom):
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        opened = []

        def session_factory():
            session = SessionLocal()
            opened.append((threading.get_ident(), session))
            return session

        async def scenario():
            hub = RealtimeHub()
            socket = FakeSocket()
            sid = await hub.connect(socket)
            await hub.handle(
                sid, teacher, {"event": "joinClassroom", "classroomId": classroom.id}, session_factory
            )
            await hub.handle(
                sid,
                teacher,
                {"event": "sendMessage", "classroomId": classroom.id, "content": "hi"},
                session_factory,
            )
            return threading.get_ident(), socket.sent

        loop_thread, sent = asyncio.run(scenario())

        assert [m["event"] for m in sent] == ["connected", "joinedClassroom", "newMessage"]
        assert sent[-1]["content"] == "hi"
        assert sent[-1]["senderName"] == "Test Teacher"
        assert len(opened) == 2
        assert all(thread != loop_thread for thread, _ in opened)
        # closed sessions hold no transaction open
        assert not any(session.in_transaction() for _, session in opened)

    def test_unknown_classroom_touches_no_channel(self, engine, teacher):
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        async def scenario():
            hub = RealtimeHub()
            socket = FakeSocket()
            sid = await hub.connect(socket)
            await hub.handle(sid, teacher, {"event": "joinClassroom", "classroomId": 999}, SessionLocal)
            return hub, sid, socket.sent

        hub, sid, sent = asyncio.run(scenario())
        assert sent[-1] == {"event": "error", "detail": "Classroom not found"}
        assert not hub.chat.is_joined(999, sid)
