from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from ..models.transaction import TransactionType
from ..schemas.transaction import TransactionRead
from ..services import get_transaction, list_transactions
from .dependencies import SessionDep

router = APIRouter()


@router.get("", response_model=list[TransactionRead])
async def list_transactions_endpoint(
    session: SessionDep,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    transaction_type: Optional[TransactionType] = Query(default=None, alias="type"),
) -> list[TransactionRead]:
    transactions = await list_transactions(
        session,
        limit=limit,
        offset=offset,
        transaction_type=transaction_type,
    )
    return [TransactionRead.model_validate(tx) for tx in transactions]


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction_endpoint(transaction_id: UUID, session: SessionDep) -> TransactionRead:
    transaction = await get_transaction(session, transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionRead.model_validate(transaction)
