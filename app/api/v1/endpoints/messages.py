from fastapi import APIRouter, Depends

from app.api.deps import get_user_cache
from app.db.mongo import get_db
from app.models.message import InboundMessage
from app.schemas.message import MessageIn, MessageReply
from app.services.command_service import CommandService

router = APIRouter()

@router.post("/", response_model=MessageReply)
async def receive_message(
    payload: MessageIn,
    db = Depends(get_db),
    cache = Depends(get_user_cache)
):
    """Handle one chat message and return the bot's reply"""
    service = CommandService(db, cache)
    message = await service.resolve_sender(InboundMessage(
        platform=payload.platform,
        platform_user_id=payload.platform_user_id,
        username=payload.username,
        chat_id=payload.chat_id,
        text=payload.text
    ))
    reply = await service.handle(message)
    return MessageReply(chat_id=payload.chat_id, reply=reply)
