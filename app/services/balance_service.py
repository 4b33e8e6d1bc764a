"""
BalanceService - applies expenses to pairwise accounts.

Recording an expense:
1. De-duplicate participants and reject self-only expenses
2. Split the total into a per-participant share (remainder dropped)
3. For each participant other than the initiator, charge the pair's account,
   opening it with the share as balance on first contact
4. Append one ledger entry for the whole event
5. Surface the first per-participant failure, if any

Participant updates are independent: a failure for one participant does not
roll back the others, and the ledger entry is still written.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.exceptions import (
    AccountMembershipError,
    AccountNotFound,
    InvalidInput,
    LedgerError,
    SelfTransaction,
)
from app.models.account import Account
from app.models.transaction import Transaction
from app.repositories.account_repo import AccountRepository
from app.repositories.transaction_repo import TransactionRepository
from app.utils.balance_rules import Role, charge_delta, role_of, split_amount

logger = logging.getLogger(__name__)


@dataclass
class ExpenseResult:
    share: int
    accounts: List[Account] = field(default_factory=list)
    opened: List[Account] = field(default_factory=list)
    transaction: Optional[Transaction] = None


def _unique(ids: List) -> List:
    seen = set()
    unique = []
    for user_id in ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        unique.append(user_id)
    return unique


class BalanceService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.accounts = AccountRepository(db)
        self.transactions = TransactionRepository(db)

    async def apply_charge(self, initiator_id, counterparty_id, amount: float) -> Account:
        """
        Apply a signed charge recorded by `initiator_id` against `counterparty_id`.

        Raises AccountNotFound when the pair has no account yet; callers open
        the account with the charge as opening balance in that case.
        """
        account = await self.accounts.find_between(initiator_id, counterparty_id)
        try:
            role = role_of(account, initiator_id)
        except AccountMembershipError:
            logger.error("Account %s does not involve initiator %s", account.id, initiator_id)
            raise

        return await self.accounts.increment_balance(account, charge_delta(role, amount))

    async def record_expense(self, initiator_id, participant_ids: List, amount: int) -> ExpenseResult:
        participants = _unique(participant_ids)
        if not participants:
            raise InvalidInput("An expense needs at least one participant")
        if participants == [initiator_id]:
            raise SelfTransaction()

        share = split_amount(amount, len(participants))
        others = [user_id for user_id in participants if user_id != initiator_id]

        logger.info(
            "Creating a balance of %s across %d users: %s",
            amount, len(participants), [str(user_id) for user_id in participants]
        )

        result = ExpenseResult(share=share)
        failures: List[Exception] = []
        for counterparty_id in others:
            try:
                account, opened = await self._charge_or_open(initiator_id, counterparty_id, share)
            except (LedgerError, PyMongoError) as exc:
                logger.error("Failed to charge %s for %s: %s", counterparty_id, initiator_id, exc)
                failures.append(exc)
                continue
            result.accounts.append(account)
            if opened:
                result.opened.append(account)

        try:
            result.transaction = await self.transactions.append(initiator_id, others, amount, share)
        except PyMongoError as exc:
            logger.warning("Failed to create transaction log: %s", exc)

        if failures:
            raise failures[0]
        return result

    async def _charge_or_open(self, initiator_id, counterparty_id, share: int):
        try:
            return await self.apply_charge(initiator_id, counterparty_id, share), False
        except AccountMembershipError:
            raise
        except AccountNotFound:
            logger.info("Creating account between user %s and %s", initiator_id, counterparty_id)

        opening = charge_delta(Role.CREATOR, share)
        ensured = await self.accounts.ensure_account(initiator_id, counterparty_id, opening)
        if ensured.created:
            return ensured.account, True

        # lost the race to open the account; charge the winner's account instead
        return await self.apply_charge(initiator_id, counterparty_id, share), False

    async def accounts_for(self, user_id) -> List[Account]:
        return await self.accounts.find_all_for(user_id)

    async def history(self, user_id, filter_user_id=None) -> List[Transaction]:
        return await self.transactions.history(user_id, filter_user_id)

    async def get_transaction(self, transaction_id) -> Transaction:
        return await self.transactions.get_transaction(transaction_id)
