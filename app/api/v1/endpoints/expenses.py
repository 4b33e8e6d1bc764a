from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_user_cache
from app.core.exceptions import AlreadyExists, DataIntegrityError, InvalidInput, NotFound
from app.db.mongo import get_db
from app.schemas.balance import AccountResponse
from app.schemas.expense import ExpenseCreate, ExpenseResponse
from app.schemas.transaction import TransactionResponse
from app.services.balance_service import BalanceService
from app.services.identity_service import IdentityService

router = APIRouter()

@router.post("/", response_model=ExpenseResponse)
async def record_expense(
    expense_in: ExpenseCreate,
    db = Depends(get_db),
    cache = Depends(get_user_cache)
):
    """Split an expense across participants and charge each pairwise account"""
    identity = IdentityService(db, cache)

    try:
        initiator = await identity.get_user(expense_in.initiator_id)
        participants = [await identity.get_user(user_id) for user_id in expense_in.participant_ids]
        result = await BalanceService(db).record_expense(
            initiator.id, [user.id for user in participants], expense_in.amount
        )
    except DataIntegrityError:
        raise
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except AlreadyExists as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return ExpenseResponse(
        share=result.share,
        accounts=[AccountResponse.from_account(account) for account in result.accounts],
        transaction=TransactionResponse.from_transaction(result.transaction) if result.transaction else None
    )
