"""Balance Ledger — the shared mutate-and-record primitives every engine goes through.

Invariants:
    - Rows read here are locked for the rest of the unit (SELECT ... FOR UPDATE);
      users are always locked in ascending id order
    - apply_balance_change is the only code that assigns credit_balance / total_earned,
      and it always bumps updated_at
    - Each apply_balance_change is paired with exactly one record_transaction in the same unit
    - LedgerRejected is control flow for aborting a unit of work on a business rule;
      engines convert it to LedgerOutcome.rejected and never let it escape

Design Decisions:
    - Plain functions over a repository class: each takes the unit's AsyncSession explicitly
    - Locks taken on PostgreSQL only; SQLite ignores FOR UPDATE and relies on BEGIN IMMEDIATE
      (infrastructure/database.py)
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.core.domain_types import (
    AgentId, LedgerRejection, TransactionType, UserId,
)
from agent_market.core.enforce_credits import next_balance
from agent_market.core.money import ZERO
from agent_market.models.ai_agent import AIAgent
from agent_market.models.credit_transaction import CreditTransaction
from agent_market.models.purchase import Purchase
from agent_market.models.user import User


class LedgerRejected(Exception):
    """Abort the current unit of work because a business rule failed."""

    def __init__(self, reason: LedgerRejection):
        super().__init__(reason.value)
        self.reason = reason


async def lock_users(db: AsyncSession, user_ids: Iterable[UserId]) -> dict[UserId, User]:
    """Load and lock user rows. Missing ids are simply absent from the result."""
    ids = sorted(set(user_ids))
    result = await db.execute(
        select(User).where(User.id.in_(ids)).order_by(User.id).with_for_update(),
    )
    return {UserId(user.id): user for user in result.scalars().all()}


async def lock_agent(db: AsyncSession, agent_id: AgentId) -> AIAgent | None:
    """Load and lock an agent row (serializes concurrent purchases of one agent)."""
    result = await db.execute(
        select(AIAgent).where(AIAgent.id == agent_id).with_for_update(),
    )
    return result.scalar_one_or_none()


async def has_purchased(db: AsyncSession, buyer_id: UserId, agent_id: AgentId) -> bool:
    result = await db.execute(
        select(Purchase.id)
        .where(Purchase.buyer_id == buyer_id)
        .where(Purchase.agent_id == agent_id),
    )
    return result.first() is not None


def apply_balance_change(
    user: User, delta: Decimal, earned_delta: Decimal = ZERO,
) -> None:
    """Adjust balance (and optionally lifetime earnings) on a locked user row."""
    user.credit_balance = next_balance(UserId(user.id), user.credit_balance, delta)
    if earned_delta:
        user.total_earned = next_balance(UserId(user.id), user.total_earned, earned_delta)
    user.updated_at = datetime.now(timezone.utc)


def record_transaction(
    db: AsyncSession,
    user_id: UserId,
    transaction_type: TransactionType,
    amount: Decimal,
    description: str | None = None,
    reference_id: int | None = None,
) -> CreditTransaction:
    """Append an audit row to the unit. Caller flushes."""
    entry = CreditTransaction(
        user_id=user_id,
        transaction_type=transaction_type.value,
        amount=amount,
        description=description,
        reference_id=reference_id,
    )
    db.add(entry)
    return entry
