from pydantic import BaseModel, Field
from typing import List, Optional

from app.schemas.balance import AccountResponse
from app.schemas.transaction import TransactionResponse


class ExpenseCreate(BaseModel):
    """
    Expense recorded by `initiator_id` and split across `participant_ids`.

    A negative amount records a credit (e.g. a payment received).
    """
    initiator_id: str
    participant_ids: List[str] = Field(..., min_length=1)
    amount: int


class ExpenseResponse(BaseModel):
    share: int
    accounts: List[AccountResponse]
    transaction: Optional[TransactionResponse] = None
