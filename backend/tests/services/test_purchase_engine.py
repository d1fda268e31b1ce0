"""Purchase Engine — verifies the atomic purchase unit against a real SQLite ledger.

Invariants:
    - Success: buyer -price, creator +price (balance and total_earned), total_sales +1,
      one Purchase, two CreditTransactions referencing it
    - Every rejection leaves balances, counters and history untouched
    - A fault midway through the unit rolls everything back
    - Concurrent duplicate purchases: exactly one succeeds
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from agent_market.core.domain_types import LedgerRejection, OutcomeStatus
from agent_market.core.errors import DatabaseError
from agent_market.models.ai_agent import AIAgent
from agent_market.models.credit_transaction import CreditTransaction
from agent_market.models.purchase import Purchase
from agent_market.models.user import User
from agent_market.services import purchase_engine as purchase_engine_module
from agent_market.services.purchase_engine import PurchaseEngine


async def _count(db_manager, model) -> int:
    async with db_manager.session() as db:
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _transactions(db_manager, user_id: int) -> list[CreditTransaction]:
    async with db_manager.session() as db:
        result = await db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.id),
        )
        return list(result.scalars().all())


# ─── success path ────────────────────────────────────────────────

async def test_purchase_moves_price_from_buyer_to_creator(
    db_manager, make_user, make_agent, reload,
):
    buyer = await make_user("100.00", user_type="buyer")
    creator = await make_user("5.00", user_type="creator")
    agent = await make_agent(creator, price="29.99")

    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    assert outcome.status == OutcomeStatus.COMPLETED
    assert outcome.record.price_paid == Decimal("29.99")
    assert outcome.record.creator_id == creator.id

    buyer_after = await reload(User, buyer.id)
    creator_after = await reload(User, creator.id)
    agent_after = await reload(AIAgent, agent.id)
    assert buyer_after.credit_balance == Decimal("70.01")
    assert buyer_after.total_earned == Decimal("0.00")
    assert creator_after.credit_balance == Decimal("34.99")
    assert creator_after.total_earned == Decimal("29.99")
    assert agent_after.total_sales == 1


async def test_purchase_records_two_transactions_referencing_purchase(
    db_manager, make_user, make_agent,
):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, price="29.99", name="Storyboarder")

    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)
    purchase_id = outcome.record.id

    buyer_rows = await _transactions(db_manager, buyer.id)
    creator_rows = await _transactions(db_manager, creator.id)
    assert len(buyer_rows) == 1
    assert len(creator_rows) == 1

    debit, credit = buyer_rows[0], creator_rows[0]
    assert debit.transaction_type == "purchase"
    assert debit.amount == Decimal("-29.99")
    assert debit.reference_id == purchase_id
    assert debit.description == 'Purchase of AI agent "Storyboarder"'
    assert credit.transaction_type == "sale_earning"
    assert credit.amount == Decimal("29.99")
    assert credit.reference_id == purchase_id
    assert credit.description == 'Sale of AI agent "Storyboarder"'
    assert await _count(db_manager, Purchase) == 1


async def test_exact_balance_purchase_leaves_zero(db_manager, make_user, make_agent, reload):
    buyer = await make_user("29.99")
    creator = await make_user()
    agent = await make_agent(creator, price="29.99")

    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    assert outcome.ok
    assert (await reload(User, buyer.id)).credit_balance == Decimal("0.00")


async def test_price_change_does_not_touch_recorded_purchase(
    db_manager, make_user, make_agent, reload,
):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, price="29.99")
    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    async with db_manager.transaction() as db:
        row = await db.get(AIAgent, agent.id)
        row.price = Decimal("99.00")

    purchase = await reload(Purchase, outcome.record.id)
    assert purchase.price_paid == Decimal("29.99")


# ─── rejections ──────────────────────────────────────────────────

async def test_duplicate_purchase_rejected_and_charged_once(
    db_manager, make_user, make_agent, reload,
):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, price="10.00")
    engine = PurchaseEngine(db_manager)

    first = await engine.purchase_agent(buyer.id, agent.id)
    second = await engine.purchase_agent(buyer.id, agent.id)

    assert first.ok
    assert second.rejection == LedgerRejection.DUPLICATE_PURCHASE
    assert (await reload(User, buyer.id)).credit_balance == Decimal("90.00")
    assert (await reload(AIAgent, agent.id)).total_sales == 1
    assert await _count(db_manager, Purchase) == 1
    assert await _count(db_manager, CreditTransaction) == 2


async def test_self_purchase_rejected_even_when_rich(db_manager, make_user, make_agent, reload):
    creator = await make_user("1000.00", user_type="both")
    agent = await make_agent(creator, price="1.00")

    outcome = await PurchaseEngine(db_manager).purchase_agent(creator.id, agent.id)

    assert outcome.rejection == LedgerRejection.SELF_PURCHASE
    assert outcome.record is None
    after = await reload(User, creator.id)
    assert after.credit_balance == Decimal("1000.00")
    assert after.total_earned == Decimal("0.00")
    assert await _count(db_manager, CreditTransaction) == 0


async def test_insufficient_funds_changes_nothing(db_manager, make_user, make_agent, reload):
    buyer = await make_user("29.98")
    creator = await make_user("1.00")
    agent = await make_agent(creator, price="29.99")

    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    assert outcome.rejection == LedgerRejection.INSUFFICIENT_FUNDS
    assert (await reload(User, buyer.id)).credit_balance == Decimal("29.98")
    creator_after = await reload(User, creator.id)
    assert creator_after.credit_balance == Decimal("1.00")
    assert creator_after.total_earned == Decimal("0.00")
    assert (await reload(AIAgent, agent.id)).total_sales == 0
    assert await _count(db_manager, Purchase) == 0
    assert await _count(db_manager, CreditTransaction) == 0


async def test_unknown_agent_rejected(db_manager, make_user):
    buyer = await make_user("10.00")
    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, 999)
    assert outcome.rejection == LedgerRejection.AGENT_NOT_FOUND


async def test_inactive_agent_rejected(db_manager, make_user, make_agent):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, is_active=False)

    outcome = await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    assert outcome.rejection == LedgerRejection.AGENT_INACTIVE


async def test_unknown_buyer_rejected(db_manager, make_user, make_agent):
    creator = await make_user()
    agent = await make_agent(creator)

    outcome = await PurchaseEngine(db_manager).purchase_agent(999, agent.id)

    assert outcome.rejection == LedgerRejection.BUYER_NOT_FOUND


# ─── atomicity & concurrency ─────────────────────────────────────

async def test_fault_midway_rolls_back_whole_unit(
    db_manager, make_user, make_agent, reload, monkeypatch,
):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, price="29.99")
    real_record = purchase_engine_module.record_transaction
    calls = {"n": 0}

    def failing_record(db, user_id, *args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("INSERT INTO credit_transactions", {}, Exception("disk I/O error"))
        return real_record(db, user_id, *args, **kwargs)

    monkeypatch.setattr(purchase_engine_module, "record_transaction", failing_record)

    with pytest.raises(DatabaseError):
        await PurchaseEngine(db_manager).purchase_agent(buyer.id, agent.id)

    assert (await reload(User, buyer.id)).credit_balance == Decimal("100.00")
    assert (await reload(User, creator.id)).total_earned == Decimal("0.00")
    assert (await reload(AIAgent, agent.id)).total_sales == 0
    assert await _count(db_manager, Purchase) == 0
    assert await _count(db_manager, CreditTransaction) == 0


async def test_concurrent_duplicate_purchases_one_succeeds(
    db_manager, make_user, make_agent, reload,
):
    buyer = await make_user("100.00")
    creator = await make_user()
    agent = await make_agent(creator, price="40.00")
    engine = PurchaseEngine(db_manager)

    outcomes = await asyncio.gather(
        engine.purchase_agent(buyer.id, agent.id),
        engine.purchase_agent(buyer.id, agent.id),
    )

    assert sorted(o.status.value for o in outcomes) == ["completed", "rejected"]
    rejected = next(o for o in outcomes if not o.ok)
    assert rejected.rejection == LedgerRejection.DUPLICATE_PURCHASE
    assert (await reload(User, buyer.id)).credit_balance == Decimal("60.00")
    assert (await reload(AIAgent, agent.id)).total_sales == 1


async def test_concurrent_purchases_cannot_overdraw(db_manager, make_user, make_agent, reload):
    buyer = await make_user("50.00")
    creator = await make_user()
    first = await make_agent(creator, price="30.00", name="Agent A")
    second = await make_agent(creator, price="30.00", name="Agent B")
    engine = PurchaseEngine(db_manager)

    outcomes = await asyncio.gather(
        engine.purchase_agent(buyer.id, first.id),
        engine.purchase_agent(buyer.id, second.id),
    )

    assert [o.ok for o in outcomes].count(True) == 1
    assert LedgerRejection.INSUFFICIENT_FUNDS in [o.rejection for o in outcomes]
    assert (await reload(User, buyer.id)).credit_balance == Decimal("20.00")
