from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, status

from app.api.deps import get_user_cache
from app.core.config import settings
from app.core.exceptions import AlreadyExists, UserNotFound
from app.db.mongo import get_db
from app.schemas.balance import BalanceSummaryResponse, PositionResponse
from app.schemas.transaction import HistoryResponse, TransactionResponse
from app.schemas.user import UserRegister, UserResponse
from app.services import presenter
from app.services.balance_service import BalanceService
from app.services.identity_service import IdentityService

router = APIRouter()

@router.post("/", response_model=UserResponse)
async def register_user(
    user_in: UserRegister,
    db = Depends(get_db),
    cache = Depends(get_user_cache)
):
    """Resolve a platform identity, registering it on first contact"""
    identity = IdentityService(db, cache)
    try:
        user = await identity.resolve_or_register(
            user_in.platform, user_in.platform_user_id, user_in.username
        )
    except AlreadyExists as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return UserResponse.from_user(user)

@router.get("/", response_model=List[UserResponse])
async def list_users(db = Depends(get_db), cache = Depends(get_user_cache)):
    """List all registered users"""
    users = await IdentityService(db, cache).list_users()
    return [UserResponse.from_user(user) for user in users]

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db = Depends(get_db), cache = Depends(get_user_cache)):
    """Get user by ID"""
    try:
        user = await IdentityService(db, cache).get_user(user_id)
    except UserNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_user(user)

@router.get("/{user_id}/balances", response_model=BalanceSummaryResponse)
async def get_balances(
    user_id: str,
    platform: str = settings.DEFAULT_PLATFORM,
    db = Depends(get_db),
    cache = Depends(get_user_cache)
):
    """Every account the user is party to, from the user's side"""
    identity = IdentityService(db, cache)
    try:
        user = await identity.get_user(user_id)
    except UserNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    accounts = await BalanceService(db).accounts_for(user.id)
    user_positions = presenter.positions(user.id, accounts)
    names = await identity.display_names(
        [position.counterparty_id for position in user_positions], platform
    )

    return BalanceSummaryResponse(
        user_id=str(user.id),
        positions=[PositionResponse.from_position(position) for position in user_positions],
        net=sum(position.amount for position in user_positions),
        summary=presenter.summarize(user.id, accounts, names, settings.CURRENCY_SYMBOL)
    )

@router.get("/{user_id}/history", response_model=HistoryResponse)
async def get_history(
    user_id: str,
    with_user: Optional[str] = None,
    db = Depends(get_db),
    cache = Depends(get_user_cache)
):
    """Transactions involving the user, optionally only those also involving `with_user`"""
    identity = IdentityService(db, cache)
    try:
        user = await identity.get_user(user_id)
        filter_user = await identity.get_user(with_user) if with_user else None
    except UserNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    transactions = await BalanceService(db).history(
        user.id, filter_user.id if filter_user else None
    )
    return HistoryResponse(
        user_id=str(user.id),
        with_user_id=str(filter_user.id) if filter_user else None,
        transactions=[TransactionResponse.from_transaction(t) for t in transactions]
    )
