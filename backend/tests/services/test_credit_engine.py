"""Credit Engine — verifies top-ups and withdrawals against a real SQLite ledger.

Invariants:
    - Top-up: balance +amount, one "purchase" row with the payment method in its description
    - Withdrawal: balance -amount, one "withdrawal" row with a positive amount,
      total_earned untouched
    - Declines and over-withdrawals change nothing
    - Payout is sent only after the withdrawal commits; a refused or failed payout
      is put back by a "refund" row that references the withdrawal
    - Concurrent top-ups on one user both land
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio.session import AsyncSessionTransaction

from agent_market.core.domain_types import LedgerRejection
from agent_market.core.errors import (
    DatabaseError, InvalidAmountError, PaymentGatewayError, ResourceNotFoundError,
)
from agent_market.infrastructure.payment_gateway import (
    SimulatedPaymentGateway, SimulatedPayoutGateway,
)
from agent_market.models.credit_transaction import CreditTransaction
from agent_market.models.user import User
from agent_market.services.credit_engine import CreditEngine


class DecliningPayment:
    async def authorize(self, amount, method):
        return False


class BrokenPayment:
    async def authorize(self, amount, method):
        raise ConnectionError("processor unreachable")


class RefusingPayout:
    async def payout(self, user_id, amount):
        return False


class BrokenPayout:
    async def payout(self, user_id, amount):
        raise ConnectionError("bank unreachable")


class RecordingPayout:
    def __init__(self):
        self.sent = []

    async def payout(self, user_id, amount):
        self.sent.append((user_id, amount))
        return True


@pytest.fixture
def engine(db_manager):
    return CreditEngine(
        db_manager, SimulatedPaymentGateway(delay_ms=5), SimulatedPayoutGateway(),
    )


async def _rows(db_manager, user_id: int) -> list[CreditTransaction]:
    async with db_manager.session() as db:
        result = await db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.id),
        )
        return list(result.scalars().all())


# ─── buy_credits ─────────────────────────────────────────────────

async def test_buy_credits_adds_to_balance(engine, db_manager, make_user, reload):
    user = await make_user("10.00")

    outcome = await engine.buy_credits(user.id, "25.50", "credit_card")

    assert outcome.ok
    assert outcome.record.transaction_type == "purchase"
    assert outcome.record.amount == Decimal("25.50")
    assert outcome.record.description == "Credit purchase via credit_card"
    assert outcome.record.reference_id is None
    assert (await reload(User, user.id)).credit_balance == Decimal("35.50")


async def test_concurrent_top_ups_both_land(engine, db_manager, make_user, reload):
    user = await make_user("0.00")

    outcomes = await asyncio.gather(
        engine.buy_credits(user.id, Decimal("10.00"), "paypal"),
        engine.buy_credits(user.id, Decimal("15.00"), "paypal"),
    )

    assert all(o.ok for o in outcomes)
    assert (await reload(User, user.id)).credit_balance == Decimal("25.00")
    assert len(await _rows(db_manager, user.id)) == 2


async def test_buy_credits_unknown_user_is_an_error(engine):
    with pytest.raises(ResourceNotFoundError):
        await engine.buy_credits(999, "10.00", "credit_card")


async def test_buy_credits_rejects_invalid_amount(engine, make_user, reload):
    user = await make_user("5.00")
    with pytest.raises(InvalidAmountError):
        await engine.buy_credits(user.id, "-5.00", "credit_card")
    assert (await reload(User, user.id)).credit_balance == Decimal("5.00")


async def test_buy_credits_rejects_amount_beyond_ledger_precision(engine, make_user):
    user = await make_user("5.00")
    for amount in ("1e30", "12345678901.00"):
        with pytest.raises(InvalidAmountError):
            await engine.buy_credits(user.id, amount, "credit_card")


async def test_payment_decline_changes_nothing(db_manager, make_user, reload):
    engine = CreditEngine(db_manager, DecliningPayment(), SimulatedPayoutGateway())
    user = await make_user("5.00")

    outcome = await engine.buy_credits(user.id, "20.00", "credit_card")

    assert outcome.rejection == LedgerRejection.PAYMENT_DECLINED
    assert (await reload(User, user.id)).credit_balance == Decimal("5.00")
    assert await _rows(db_manager, user.id) == []


async def test_blank_payment_method_declined_by_simulator(engine, db_manager, make_user):
    user = await make_user("5.00")
    outcome = await engine.buy_credits(user.id, "20.00", "   ")
    assert outcome.rejection == LedgerRejection.PAYMENT_DECLINED


async def test_processor_outage_maps_to_gateway_error(db_manager, make_user, reload):
    engine = CreditEngine(db_manager, BrokenPayment(), SimulatedPayoutGateway())
    user = await make_user("5.00")

    with pytest.raises(PaymentGatewayError):
        await engine.buy_credits(user.id, "20.00", "credit_card")
    assert (await reload(User, user.id)).credit_balance == Decimal("5.00")


# ─── withdraw_credits ────────────────────────────────────────────

async def test_withdraw_full_balance_leaves_zero(engine, db_manager, make_user, reload):
    user = await make_user("50.00", user_type="creator")

    outcome = await engine.withdraw_credits(user.id, "50.00")

    assert outcome.ok
    assert outcome.record.transaction_type == "withdrawal"
    assert outcome.record.amount == Decimal("50.00")
    assert outcome.record.description == "Credit withdrawal of $50.00"
    assert (await reload(User, user.id)).credit_balance == Decimal("0.00")


async def test_withdraw_one_cent(engine, make_user, reload):
    user = await make_user("10.00")

    outcome = await engine.withdraw_credits(user.id, "0.01")

    assert outcome.ok
    assert (await reload(User, user.id)).credit_balance == Decimal("9.99")


async def test_withdraw_does_not_touch_total_earned(engine, db_manager, make_user, reload):
    user = await make_user("40.00")
    async with db_manager.transaction() as db:
        row = await db.get(User, user.id)
        row.total_earned = Decimal("40.00")

    await engine.withdraw_credits(user.id, "15.00")

    after = await reload(User, user.id)
    assert after.credit_balance == Decimal("25.00")
    assert after.total_earned == Decimal("40.00")


async def test_over_withdrawal_rejected(engine, db_manager, make_user, reload):
    user = await make_user("10.00")

    outcome = await engine.withdraw_credits(user.id, "10.01")

    assert outcome.rejection == LedgerRejection.INSUFFICIENT_FUNDS
    assert (await reload(User, user.id)).credit_balance == Decimal("10.00")
    assert await _rows(db_manager, user.id) == []


async def test_withdraw_unknown_user_rejected(engine):
    outcome = await engine.withdraw_credits(999, "1.00")
    assert outcome.rejection == LedgerRejection.USER_NOT_FOUND


async def test_refused_payout_refunds_the_withdrawal(db_manager, make_user, reload):
    engine = CreditEngine(db_manager, SimulatedPaymentGateway(delay_ms=0), RefusingPayout())
    user = await make_user("30.00")

    outcome = await engine.withdraw_credits(user.id, "20.00")

    assert outcome.rejection == LedgerRejection.PAYOUT_DECLINED
    assert (await reload(User, user.id)).credit_balance == Decimal("30.00")
    withdrawal, refund = await _rows(db_manager, user.id)
    assert withdrawal.transaction_type == "withdrawal"
    assert refund.transaction_type == "refund"
    assert refund.amount == Decimal("20.00")
    assert refund.reference_id == withdrawal.id
    assert refund.description == "Refund of failed credit withdrawal of $20.00"


async def test_payout_outage_refunds_then_raises(db_manager, make_user, reload):
    engine = CreditEngine(db_manager, SimulatedPaymentGateway(delay_ms=0), BrokenPayout())
    user = await make_user("30.00")

    with pytest.raises(PaymentGatewayError):
        await engine.withdraw_credits(user.id, "12.50")

    assert (await reload(User, user.id)).credit_balance == Decimal("30.00")
    rows = await _rows(db_manager, user.id)
    assert [r.transaction_type for r in rows] == ["withdrawal", "refund"]
    assert rows[1].reference_id == rows[0].id


async def test_failed_commit_sends_no_payout(db_manager, make_user, reload, monkeypatch):
    payout = RecordingPayout()
    engine = CreditEngine(db_manager, SimulatedPaymentGateway(delay_ms=0), payout)
    user = await make_user("30.00")
    original_exit = AsyncSessionTransaction.__aexit__

    async def failing_commit(self, type_, value, traceback):
        if type_ is None:
            await self.rollback()
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
        return await original_exit(self, type_, value, traceback)

    monkeypatch.setattr(AsyncSessionTransaction, "__aexit__", failing_commit)

    with pytest.raises(DatabaseError):
        await engine.withdraw_credits(user.id, "20.00")

    assert payout.sent == []
    assert (await reload(User, user.id)).credit_balance == Decimal("30.00")
    assert await _rows(db_manager, user.id) == []


async def test_payout_receives_committed_amount(db_manager, make_user):
    payout = RecordingPayout()
    engine = CreditEngine(db_manager, SimulatedPaymentGateway(delay_ms=0), payout)
    user = await make_user("30.00")

    await engine.withdraw_credits(user.id, "7.25")

    assert payout.sent == [(user.id, Decimal("7.25"))]


async def test_withdraw_rejects_sub_cent_amount(engine, make_user):
    user = await make_user("10.00")
    with pytest.raises(InvalidAmountError):
        await engine.withdraw_credits(user.id, "0.001")
