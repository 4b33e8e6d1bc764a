from fastapi import APIRouter, Depends, HTTPException, status

from app.core.exceptions import TransactionNotFound
from app.db.mongo import get_db
from app.schemas.transaction import TransactionResponse
from app.services.balance_service import BalanceService

router = APIRouter()

@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(transaction_id: str, db = Depends(get_db)):
    """Get a single ledger entry"""
    try:
        transaction = await BalanceService(db).get_transaction(transaction_id)
    except TransactionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return TransactionResponse.from_transaction(transaction)
