"""
Socket event types.

Client frames are flat JSON objects discriminated by their ``event`` key and
parsed into exactly one of the models below. Negotiation payloads (offer,
answer, candidate) are opaque and relayed untouched.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter

# rooms are keyed by string; clients often send the classroom id as a number
RoomId = Annotated[str, BeforeValidator(lambda v: str(v) if isinstance(v, int) else v)]


class _ClientEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinClassroom(_ClientEvent):
    event: Literal["joinClassroom"]
    classroom_id: int = Field(alias="classroomId")


class SendMessage(_ClientEvent):
    event: Literal["sendMessage"]
    classroom_id: int = Field(alias="classroomId")
    content: str = Field(min_length=1)


class JoinRoom(_ClientEvent):
    event: Literal["join-room"]
    room_id: RoomId = Field(alias="roomId")


class WhoAmI(_ClientEvent):
    event: Literal["whoami"]
    room_id: RoomId = Field(alias="roomId")


class Offer(_ClientEvent):
    event: Literal["offer"]
    room_id: RoomId = Field(alias="roomId")
    to: str
    offer: Any


class Answer(_ClientEvent):
    event: Literal["answer"]
    room_id: RoomId = Field(alias="roomId")
    to: str
    answer: Any


class IceCandidate(_ClientEvent):
    event: Literal["ice-candidate"]
    room_id: RoomId = Field(alias="roomId")
    to: str
    candidate: Any


class LeaveRoom(_ClientEvent):
    event: Literal["leave-room"]
    room_id: RoomId = Field(alias="roomId")


class Kick(_ClientEvent):
    event: Literal["kick"]
    room_id: RoomId = Field(alias="roomId")
    target: str


class EndMeet(_ClientEvent):
    event: Literal["end-meet"]
    room_id: RoomId = Field(alias="roomId")


ClientEvent = Annotated[
    Union[
        JoinClassroom,
        SendMessage,
        JoinRoom,
        WhoAmI,
        Offer,
        Answer,
        IceCandidate,
        LeaveRoom,
        Kick,
        EndMeet,
    ],
    Field(discriminator="event"),
]

CLIENT_EVENT_TYPES = (
    JoinClassroom,
    SendMessage,
    JoinRoom,
    WhoAmI,
    Offer,
    Answer,
    IceCandidate,
    LeaveRoom,
    Kick,
    EndMeet,
)

_adapter = TypeAdapter(ClientEvent)


def parse_client_event(raw: Any) -> ClientEvent:
    """Raises pydantic.ValidationError for unknown events or bad fields."""
    return _adapter.validate_python(raw)


def server_event(name: str, **fields: Any) -> dict:
    return {"event": name, **fields}
