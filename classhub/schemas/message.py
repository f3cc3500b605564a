# classhub/schemas/message.py
from pydantic import BaseModel, field_validator
from datetime import datetime


class MessagePublic(BaseModel):
    id: int
    sender_id: int
    classroom_id: int
    type: str
    content: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PrivateMessageRequest(BaseModel):
    to: str
    content: str

    @field_validator("to", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing fields")
        return v


class ChatbotRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("No message")
        return v


class ChatbotReply(BaseModel):
    reply: str
