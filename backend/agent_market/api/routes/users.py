"""User Routes — accounts, balances, and per-user ledger history.

Invariants:
    - Balances are read-only over HTTP; they change only through the ledger routes
    - Unknown user → 404 error envelope on every /users/{id}/... path
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.core.domain_types import TransactionType, UserId
from agent_market.infrastructure.database import get_db
from agent_market.schemas.catalog import AgentResponse
from agent_market.schemas.ledger import CreditTransactionResponse, PurchaseResponse
from agent_market.schemas.user import (
    UserBalanceResponse, UserCreate, UserResponse, UserUpdate,
)
from agent_market.services import catalog

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_user(db, body)


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await catalog.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.get_user_or_404(db, UserId(user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int, body: UserUpdate, db: AsyncSession = Depends(get_db),
):
    return await catalog.update_user(db, UserId(user_id), body)


@router.get("/{user_id}/balance", response_model=UserBalanceResponse)
async def get_user_balance(user_id: int, db: AsyncSession = Depends(get_db)):
    """Current credit balance and lifetime earnings."""
    return await catalog.get_user_balance(db, UserId(user_id))


@router.get("/{user_id}/purchases", response_model=list[PurchaseResponse])
async def list_user_purchases(user_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.list_user_purchases(db, UserId(user_id))


@router.get("/{user_id}/sales", response_model=list[PurchaseResponse])
async def list_user_sales(user_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.list_user_sales(db, UserId(user_id))


@router.get("/{user_id}/transactions", response_model=list[CreditTransactionResponse])
async def list_credit_transactions(
    user_id: int,
    transaction_type: TransactionType | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Credit history, newest first, optionally narrowed to one transaction type."""
    return await catalog.list_credit_transactions(db, UserId(user_id), transaction_type)


@router.get("/{user_id}/agents", response_model=list[AgentResponse])
async def list_creator_agents(user_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.list_creator_agents(db, UserId(user_id))
