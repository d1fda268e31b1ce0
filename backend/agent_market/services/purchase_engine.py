"""Purchase Engine — buys an agent: debit buyer, credit creator, count the sale, log it.

Invariants:
    - One unit of work per purchase: every write below commits together or not at all
    - Preconditions are evaluated on rows locked inside that same unit (no stale reads)
    - price_paid and both transaction amounts come from ONE read of agent.price
    - Exactly one Purchase and two CreditTransactions (-price buyer, +price creator),
      both referencing the purchase id
    - Business failures return LedgerOutcome.rejected; storage failures raise DatabaseError

Design Decisions:
    - Rules live in core/enforce_purchase.py; this module only loads, locks, and writes
    - The agent row is locked before the users: concurrent buyers of one agent queue on it
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.core.domain_types import AgentId, TransactionType, UserId
from agent_market.core.enforce_purchase import (
    check_purchase, purchase_description, sale_description,
)
from agent_market.core.ledger_outcome import LedgerOutcome
from agent_market.infrastructure.database import DatabaseSessionManager
from agent_market.models.purchase import Purchase
from agent_market.services.balance_ledger import (
    LedgerRejected,
    apply_balance_change,
    has_purchased,
    lock_agent,
    lock_users,
    record_transaction,
)

logger = logging.getLogger(__name__)


class PurchaseEngine:
    """Runs agent purchases as atomic units of work."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self.db_manager = db_manager

    async def purchase_agent(self, buyer_id: UserId, agent_id: AgentId) -> LedgerOutcome[Purchase]:
        """Purchase agent_id for buyer_id. Rejected outcomes leave no trace in the store."""
        try:
            async with self.db_manager.transaction() as db:
                purchase = await self._purchase_in_unit(db, buyer_id, agent_id)
        except LedgerRejected as r:
            logger.info(
                f"Purchase rejected: {r.reason.value}",
                extra={"user_id": buyer_id, "agent_id": agent_id, "rejection": r.reason.value},
            )
            return LedgerOutcome.rejected(r.reason)

        logger.info(
            f"Agent {agent_id} purchased by user {buyer_id} for {purchase.price_paid}",
            extra={
                "user_id": buyer_id, "agent_id": agent_id,
                "purchase_id": purchase.id, "amount": str(purchase.price_paid),
            },
        )
        return LedgerOutcome.completed(purchase)

    async def _purchase_in_unit(
        self, db: AsyncSession, buyer_id: UserId, agent_id: AgentId,
    ) -> Purchase:
        agent = await lock_agent(db, agent_id)
        creator_id = UserId(agent.creator_id) if agent is not None else None
        user_ids = {buyer_id} if creator_id is None else {buyer_id, creator_id}
        users = await lock_users(db, user_ids)
        buyer = users.get(buyer_id)
        creator = users.get(creator_id) if creator_id is not None else None
        already_purchased = await has_purchased(db, buyer_id, agent_id)

        rejection = check_purchase(agent, buyer, creator, already_purchased)
        if rejection is not None:
            raise LedgerRejected(rejection)

        price = agent.price
        apply_balance_change(buyer, -price)
        apply_balance_change(creator, price, earned_delta=price)
        agent.total_sales += 1

        purchase = Purchase(
            buyer_id=buyer.id,
            agent_id=agent.id,
            creator_id=creator.id,
            price_paid=price,
        )
        db.add(purchase)
        await db.flush()

        record_transaction(
            db, buyer.id, TransactionType.PURCHASE, -price,
            purchase_description(agent.name), reference_id=purchase.id,
        )
        record_transaction(
            db, creator.id, TransactionType.SALE_EARNING, price,
            sale_description(agent.name), reference_id=purchase.id,
        )
        await db.flush()
        return purchase
