from pydantic import BaseModel
from datetime import datetime
from typing import List

from app.models.account import Account
from app.services.presenter import Position


class AccountResponse(BaseModel):
    id: str
    creator_id: str
    subject_id: str
    balance: float
    updated_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=str(account.id),
            creator_id=str(account.creator_id),
            subject_id=str(account.subject_id),
            balance=account.balance,
            updated_at=account.updated_at
        )


class PositionResponse(BaseModel):
    """One account from the requesting user's side."""
    account_id: str
    counterparty_id: str
    amount: float  # > 0: counterparty owes the user, < 0: the user owes them
    owes: bool

    @classmethod
    def from_position(cls, position: Position) -> "PositionResponse":
        return cls(
            account_id=str(position.account_id),
            counterparty_id=str(position.counterparty_id),
            amount=position.amount,
            owes=position.owes
        )


class BalanceSummaryResponse(BaseModel):
    user_id: str
    positions: List[PositionResponse]
    net: float
    summary: str
