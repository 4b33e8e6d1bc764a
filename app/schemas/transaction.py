from pydantic import BaseModel
from datetime import datetime
from typing import List

from app.models.transaction import Transaction


class TransactionResponse(BaseModel):
    id: str
    created_by: str
    participants: List[str]
    amount: float
    share: float
    created_at: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=str(transaction.id),
            created_by=str(transaction.created_by),
            participants=[str(user_id) for user_id in transaction.participants],
            amount=transaction.amount,
            share=transaction.share,
            created_at=transaction.created_at
        )


class HistoryResponse(BaseModel):
    user_id: str
    with_user_id: str | None = None
    transactions: List[TransactionResponse]
