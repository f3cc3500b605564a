# classhub/api/v1/endpoints/messages.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from classhub.models.user import User
from classhub.schemas.auth import SuccessResponse
from classhub.schemas.message import ChatbotReply, ChatbotRequest, PrivateMessageRequest
from classhub.services import chatbot_client, mail_service
from classhub.core.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


@router.post("/chatbot", response_model=ChatbotReply)
async def chatbot(
    payload: ChatbotRequest,
    current_user: User = Depends(get_current_user),
):
    try:
        reply = await chatbot_client.ask(payload.message)
    except chatbot_client.ChatbotError:
        logger.error("Chatbot request failed for user %s", current_user.id, exc_info=True)
        raise HTTPException(status_code=500, detail="Bot error")
    return ChatbotReply(reply=reply)


@router.post("/privateMessage", response_model=SuccessResponse)
async def private_message(
    payload: PrivateMessageRequest,
    current_user: User = Depends(get_current_user),
):
    try:
        await mail_service.send_private_message(
            sender_name=current_user.name,
            to=payload.to.strip(),
            content=payload.content,
        )
    except mail_service.MailError:
        logger.error("Private message from user %s failed", current_user.id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to send")
    return SuccessResponse()
