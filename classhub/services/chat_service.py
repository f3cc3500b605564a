# classhub/services/chat_service.py
from typing import List

from sqlalchemy.orm import Session

from classhub.models.message import Message


def save_message(
    db: Session,
    *,
    sender_id: int,
    classroom_id: int,
    content: str,
) -> Message:
    message = Message(
        sender_id=sender_id,
        classroom_id=classroom_id,
        type="text",
        content=content,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def list_messages(
    db: Session,
    *,
    classroom_id: int,
    skip: int = 0,
    limit: int = 100,
) -> List[Message]:
    """
    Chat history for a classroom in the order the server received it.
    """
    return (
        db.query(Message)
        .filter(Message.classroom_id == classroom_id)
        .order_by(Message.id.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )
