from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict

from app.models.user import User


class UserRegister(BaseModel):
    """Register (or resolve) a chat platform identity."""
    platform: str = Field(..., min_length=1, max_length=50)
    platform_user_id: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)


class UserResponse(BaseModel):
    id: str
    platform_ids: Dict[str, str]
    platform_usernames: Dict[str, str]
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            platform_ids=user.platform_ids,
            platform_usernames=user.platform_usernames,
            created_at=user.created_at
        )
