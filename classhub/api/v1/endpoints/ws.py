# classhub/api/v1/endpoints/ws.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from classhub.core.security import user_from_token
from classhub.db.session import get_session_factory
from classhub.realtime.hub import hub, in_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session_factory=Depends(get_session_factory),
):
    user = await asyncio.to_thread(in_session, session_factory, user_from_token, token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    sid = await hub.connect(websocket)
    logger.info("Socket %s opened for user %s", sid, user.id)
    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except (ValueError, KeyError):
                # KeyError: a binary frame has no "text" part
                await hub.connections.send_to(sid, {"event": "error", "detail": "Invalid JSON"})
                continue
            await hub.handle(sid, user, raw, session_factory)
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(sid)
        logger.info("Socket %s closed", sid)
