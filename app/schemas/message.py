from pydantic import BaseModel, Field
from typing import Optional


class MessageIn(BaseModel):
    """A chat message delivered by a platform transport."""
    platform: str = Field(..., min_length=1)
    platform_user_id: str = Field(..., min_length=1)
    username: str = ""
    chat_id: Optional[str] = None
    text: str = ""


class MessageReply(BaseModel):
    chat_id: Optional[str] = None
    reply: str
