from fastapi import APIRouter
from app.api.v1.endpoints import messages, users, expenses, transactions

api_router = APIRouter()

api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
