"""
Transaction model - immutable audit record of one expense event.

- created_by: the user who recorded the expense
- participants: flat list of the other users charged (never the initiator)
- amount: total recorded for the event, before splitting (signed)
- share: per-participant due actually applied to each pair (signed)

The account hit for each participant is not stored; it is resolved through
the account registry when needed.
"""

from typing import List
from app.models.base import MongoModel, PyObjectId


class Transaction(MongoModel):
    created_by: PyObjectId
    participants: List[PyObjectId]
    amount: float
    share: float

    def involves(self, user_id) -> bool:
        return user_id == self.created_by or user_id in self.participants

    def __str__(self) -> str:
        return (
            f"Transaction<ID: {self.id}, Amount: {self.amount}, "
            f"CreatedBy: {self.created_by}, Participants: {self.participants}>"
        )
