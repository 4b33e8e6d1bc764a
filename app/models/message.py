from typing import Optional
from pydantic import BaseModel, ConfigDict
from app.models.user import User

class InboundMessage(BaseModel):
    """
    One chat message handed over by a transport (e.g. a Telegram poller).

    `sender` is the resolved ledger user, or None when the platform identity
    has never been seen before.
    """
    platform: str
    platform_user_id: str
    username: str
    chat_id: Optional[str] = None
    text: str = ""
    sender: Optional[User] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)
