from datetime import datetime
from typing import Dict, Optional
from pydantic import Field
from app.models.base import MongoModel, _utcnow

class User(MongoModel):
    """
    A person known to the ledger.

    platform_ids maps a platform name (e.g. "telegram") to that platform's
    user id; platform_usernames maps it to the lower-cased display username.
    """
    platform_ids: Dict[str, str] = {}
    platform_usernames: Dict[str, str] = {}
    updated_at: datetime = Field(default_factory=_utcnow)

    def username(self, platform: str) -> Optional[str]:
        return self.platform_usernames.get(platform)

    def display_name(self, platform: str) -> str:
        """Username on the platform, falling back to the internal id."""
        return self.platform_usernames.get(platform) or str(self.id)

    def __str__(self) -> str:
        return f"User<ID: {self.id}, PlatformIds: {self.platform_ids}>"
