"""
Account model - the running balance between exactly two users.

Design principles:
- One account per unordered pair of users (pair_key is unique)
- creator/subject roles are fixed when the account is created
- balance > 0: subject owes creator
- balance < 0: creator owes subject
- Mutated in place on every expense touching the pair, never deleted
"""

from datetime import datetime
from typing import Any
from bson import ObjectId
from pydantic import Field
from app.models.base import MongoModel, PyObjectId, _utcnow


def make_pair_key(u1: Any, u2: Any) -> str:
    """Order-independent key for a pair of user ids."""
    a, b = sorted((str(u1), str(u2)))
    return f"{a}:{b}"


class Account(MongoModel):
    creator_id: PyObjectId
    subject_id: PyObjectId
    pair_key: str = ""
    balance: float = 0.0
    updated_at: datetime = Field(default_factory=_utcnow)

    def model_post_init(self, __context: Any) -> None:
        if not self.pair_key:
            self.pair_key = make_pair_key(self.creator_id, self.subject_id)

    def involves(self, user_id: ObjectId) -> bool:
        return user_id == self.creator_id or user_id == self.subject_id

    def counterparty_of(self, user_id: ObjectId) -> ObjectId:
        """The other party to this account."""
        return self.subject_id if user_id == self.creator_id else self.creator_id

    def __str__(self) -> str:
        return (
            f"Account<ID: {self.id}, Creator: {self.creator_id}, "
            f"Subject: {self.subject_id}, Balance: {self.balance}>"
        )
