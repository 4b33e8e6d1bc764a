from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from app.core.exceptions import TransactionNotFound
from app.models.base import to_object_id
from app.models.transaction import Transaction


def _involving(user_id) -> dict:
    return {"$or": [{"created_by": user_id}, {"participants": user_id}]}


class TransactionRepository:
    """Append-only ledger of expense events."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["transactions"]

    async def append(self, created_by, participants: List, amount: float, share: float) -> Transaction:
        """Record one expense event. Entries are never updated afterwards."""
        transaction = Transaction(
            created_by=created_by,
            participants=list(participants),
            amount=float(amount),
            share=float(share),
            created_at=datetime.now(timezone.utc)
        )
        await self.collection.insert_one(transaction.to_document())
        return transaction

    async def history(self, user_id, filter_user_id: Optional[object] = None) -> List[Transaction]:
        """
        Transactions involving `user_id` as initiator or participant, newest first.

        With `filter_user_id`, only those that also involve that user.
        Ties on created_at are broken by id so the order is stable.
        """
        query = _involving(user_id)
        if filter_user_id is not None:
            query = {"$and": [query, _involving(filter_user_id)]}

        cursor = self.collection.find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        docs = await cursor.to_list(None)
        return [Transaction(**doc) for doc in docs]

    async def get_transaction(self, transaction_id) -> Transaction:
        """Get transaction by ID."""
        try:
            oid = to_object_id(transaction_id)
        except ValueError:
            raise TransactionNotFound()

        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise TransactionNotFound()
        return Transaction(**doc)
