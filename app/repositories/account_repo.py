"""
AccountRepository - the pairwise account registry.

Core rules:
1. At most one account per unordered pair of users (unique pair_key index)
2. Lookups match the pair regardless of which user is creator or subject
3. Balance changes are single atomic $inc updates keyed by account id
"""

import logging
from dataclasses import dataclass
from typing import List
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import (
    AccountExists,
    AccountNotFound,
    DataIntegrityError,
    InvalidAccount,
)
from app.models.account import Account, make_pair_key
from app.models.base import to_object_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsuredAccount:
    """Result of ensure_account: the pair's account and whether this call created it."""
    account: Account
    created: bool


class AccountRepository:
    """Repository for pairwise accounts."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["accounts"]

    async def find_between(self, u1, u2) -> Account:
        """
        Find the account between two users, in either creator/subject order.

        Raises AccountNotFound when the pair has no account and
        DataIntegrityError when it has more than one.
        """
        docs = await self.collection.find({
            "$or": [
                {"creator_id": u1, "subject_id": u2},
                {"creator_id": u2, "subject_id": u1},
            ]
        }).to_list(2)

        if not docs:
            raise AccountNotFound()
        if len(docs) > 1:
            logger.error(
                "Found %d accounts between %s and %s: %s",
                len(docs), u1, u2, [str(doc["_id"]) for doc in docs]
            )
            raise DataIntegrityError(f"More than one account between {u1} and {u2}")

        return Account(**docs[0])

    async def create_account(self, creator_id, subject_id, opening_balance: float = 0.0) -> Account:
        """
        Create the account for a pair.

        Raises InvalidAccount for a missing id or a self-account, and
        AccountExists when the pair already has an account.
        """
        if creator_id is None or subject_id is None:
            raise InvalidAccount("An account must have a creator and a subject")
        if creator_id == subject_id:
            raise InvalidAccount("Cannot create an account with yourself")

        now = datetime.now(timezone.utc)
        account = Account(
            creator_id=creator_id,
            subject_id=subject_id,
            balance=float(opening_balance),
            created_at=now,
            updated_at=now
        )

        try:
            await self.collection.insert_one(account.to_document())
        except DuplicateKeyError:
            existing = await self.collection.find_one({"pair_key": make_pair_key(creator_id, subject_id)})
            raise AccountExists(Account(**existing) if existing else None)

        logger.info("Created account %s between %s and %s", account.id, creator_id, subject_id)
        return account

    async def ensure_account(self, creator_id, subject_id, opening_balance: float = 0.0) -> EnsuredAccount:
        """Create the pair's account, or return the one that already exists."""
        try:
            account = await self.create_account(creator_id, subject_id, opening_balance)
            return EnsuredAccount(account=account, created=True)
        except AccountExists as exc:
            existing = exc.existing or await self.find_between(creator_id, subject_id)
            return EnsuredAccount(account=existing, created=False)

    async def find_all_for(self, user_id) -> List[Account]:
        """Every account where the user is creator or subject."""
        docs = await self.collection.find({
            "$or": [{"creator_id": user_id}, {"subject_id": user_id}]
        }).sort("_id", 1).to_list(None)
        return [Account(**doc) for doc in docs]

    async def get_account(self, account_id) -> Account:
        """Get account by ID."""
        try:
            oid = to_object_id(account_id)
        except ValueError:
            raise AccountNotFound()

        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise AccountNotFound()
        return Account(**doc)

    async def increment_balance(self, account: Account, delta: float) -> Account:
        """
        Atomically add `delta` to the stored balance.

        The filter pins the creator/subject pair the delta was computed for.
        """
        doc = await self.collection.find_one_and_update(
            {
                "_id": account.id,
                "creator_id": account.creator_id,
                "subject_id": account.subject_id
            },
            {
                "$inc": {"balance": float(delta)},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            return_document=ReturnDocument.AFTER
        )
        if not doc:
            raise AccountNotFound()
        return Account(**doc)
