"""
Client-side view of a meeting, without media.

Mirrors what a browser participant keeps per remote peer
(idle -> negotiating -> connected -> closed) and how it reacts to relay
events. There is no reconnection: a failed or closed link is dropped.
"""

from dataclasses import dataclass
from enum import Enum


class PeerState(str, Enum):
    IDLE = "idle"
    NEGOTIATING = "negotiating"
    CONNECTED = "connected"
    CLOSED = "closed"


@dataclass
class PeerLink:
    peer_id: str
    state: PeerState = PeerState.IDLE
    # set once the remote side's offer or answer has been applied
    remote_described: bool = False

    def close(self) -> None:
        self.state = PeerState.CLOSED


class MeetingView:
    def __init__(self, self_id: str):
        self.self_id = self_id
        self.links: dict[str, PeerLink] = {}
        self.in_meeting = False
        self.participants: list[dict] = []

    def join(self) -> None:
        self.in_meeting = True

    def _open(self, peer_id: str) -> PeerLink:
        link = self.links.get(peer_id)
        if link is None or link.state is PeerState.CLOSED:
            link = PeerLink(peer_id)
            self.links[peer_id] = link
        link.state = PeerState.NEGOTIATING
        return link

    def on_peers(self, peer_ids: list[str]) -> list[str]:
        """Open one outbound offer per existing peer; returns who to offer to."""
        targets = [pid for pid in peer_ids if pid != self.self_id]
        for pid in targets:
            self._open(pid)
        return targets

    def on_offer(self, from_id: str) -> None:
        self._open(from_id).remote_described = True

    def on_answer(self, from_id: str) -> None:
        # answers for unknown or closed peers are ignored
        link = self.links.get(from_id)
        if link is not None and link.state is PeerState.NEGOTIATING:
            link.remote_described = True

    def on_track(self, from_id: str) -> None:
        link = self.links.get(from_id)
        if link is not None and link.state is PeerState.NEGOTIATING:
            link.state = PeerState.CONNECTED

    def on_failure(self, peer_id: str) -> None:
        self._drop(peer_id)

    def on_user_left(self, peer_id: str) -> None:
        self._drop(peer_id)

    def leave(self) -> None:
        for peer_id in list(self.links):
            self._drop(peer_id)
        self.in_meeting = False

    def _drop(self, peer_id: str) -> None:
        link = self.links.pop(peer_id, None)
        if link is not None:
            link.close()

    def state_of(self, peer_id: str) -> PeerState:
        link = self.links.get(peer_id)
        return link.state if link is not None else PeerState.CLOSED

    def apply(self, message: dict) -> list[str]:
        """
        Feed one server frame in. Returns peer ids this client should now
        send offers to (non-empty only for ``peers``).
        """
        event = message.get("event")
        if event == "peers":
            return self.on_peers(message.get("peers", []))
        if event == "offer":
            self.on_offer(message["from"])
        elif event == "answer":
            self.on_answer(message["from"])
        elif event == "error" and message.get("peer"):
            # the relay could not reach this peer
            self.on_failure(message["peer"])
        elif event == "user-left":
            self.on_user_left(message["id"])
        elif event == "room-users":
            self.participants = list(message.get("users", []))
        elif event in ("kicked", "meet-ended"):
            self.leave()
        return []
