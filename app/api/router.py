from fastapi import APIRouter

from . import reports, telegram, transactions

api_router = APIRouter()
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(telegram.router, prefix="/telegram", tags=["telegram"])
