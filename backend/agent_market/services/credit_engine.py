"""Credit Engine — credit top-ups (buy credits) and withdrawals for a single user.

Invariants:
    - Amounts are validated by core.money.parse_amount before any IO
    - Top-up: unknown user is an ERROR (ResourceNotFoundError); a payment decline is a rejection
    - Payment authorization happens BEFORE the unit of work opens; a decline or outage
      changes nothing
    - Balance read-modify-write happens on a row locked inside the unit, so concurrent
      top-ups on one user both land
    - Withdrawal records a positive magnitude with type=withdrawal; total_earned untouched
    - Payout runs only AFTER the withdrawal unit has committed, outside any lock; if the
      commit fails no payout is sent
    - A refused or failed payout is compensated by a second unit: +amount back on the
      balance and a type=refund row whose reference_id is the withdrawal row

Design Decisions:
    - Gateways injected (core.repository_protocols): the simulated processors in
      infrastructure/payment_gateway.py are swappable without touching ledger logic
    - Gateway exceptions mapped to PaymentGatewayError here, at the seam
"""

import logging
from decimal import Decimal

from agent_market.core.domain_types import LedgerRejection, TransactionType, UserId
from agent_market.core.enforce_credits import (
    check_withdrawal, refund_description, top_up_description, withdrawal_description,
)
from agent_market.core.errors import (
    ErrorContext, PaymentGatewayError, ResourceNotFoundError,
)
from agent_market.core.ledger_outcome import LedgerOutcome
from agent_market.core.money import parse_amount
from agent_market.core.repository_protocols import PaymentGateway, PayoutGateway
from agent_market.infrastructure.database import DatabaseSessionManager
from agent_market.models.credit_transaction import CreditTransaction
from agent_market.models.user import User
from agent_market.services.balance_ledger import (
    LedgerRejected, apply_balance_change, lock_users, record_transaction,
)

logger = logging.getLogger(__name__)


class CreditEngine:
    """Single-party balance mutations with pre-condition checks."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        payment_gateway: PaymentGateway,
        payout_gateway: PayoutGateway,
    ):
        self.db_manager = db_manager
        self.payment_gateway = payment_gateway
        self.payout_gateway = payout_gateway

    async def buy_credits(
        self, user_id: UserId, amount: Decimal | int | str, payment_method: str,
    ) -> LedgerOutcome[CreditTransaction]:
        """Charge the payment method and add the credits to the user's balance."""
        amount = parse_amount(amount)
        context = ErrorContext(user_id=user_id, operation="buy_credits")

        async with self.db_manager.session() as db:
            if await db.get(User, user_id) is None:
                raise ResourceNotFoundError("User", str(user_id), context)

        if not await self._authorize(amount, payment_method, context):
            logger.info(
                f"Credit purchase declined for user {user_id}",
                extra={
                    "user_id": user_id, "amount": str(amount),
                    "rejection": LedgerRejection.PAYMENT_DECLINED.value,
                },
            )
            return LedgerOutcome.rejected(LedgerRejection.PAYMENT_DECLINED)

        async with self.db_manager.transaction() as db:
            user = (await lock_users(db, [user_id])).get(user_id)
            if user is None:
                raise ResourceNotFoundError("User", str(user_id), context)
            apply_balance_change(user, amount)
            entry = record_transaction(
                db, user_id, TransactionType.PURCHASE, amount,
                top_up_description(payment_method),
            )
            await db.flush()

        logger.info(
            f"User {user_id} bought {amount} credits via {payment_method}",
            extra={"user_id": user_id, "amount": str(amount), "transaction_id": entry.id},
        )
        return LedgerOutcome.completed(entry)

    async def withdraw_credits(
        self, user_id: UserId, amount: Decimal | int | str,
    ) -> LedgerOutcome[CreditTransaction]:
        """Deduct credits from the balance, then hand them to the payout processor."""
        amount = parse_amount(amount)
        context = ErrorContext(user_id=user_id, operation="withdraw_credits")

        try:
            async with self.db_manager.transaction() as db:
                user = (await lock_users(db, [user_id])).get(user_id)
                rejection = check_withdrawal(user, amount)
                if rejection is not None:
                    raise LedgerRejected(rejection)

                apply_balance_change(user, -amount)
                entry = record_transaction(
                    db, user_id, TransactionType.WITHDRAWAL, amount,
                    withdrawal_description(amount),
                )
                await db.flush()
        except LedgerRejected as r:
            logger.info(
                f"Withdrawal rejected: {r.reason.value}",
                extra={"user_id": user_id, "amount": str(amount), "rejection": r.reason.value},
            )
            return LedgerOutcome.rejected(r.reason)

        try:
            paid = await self._payout(user_id, amount, context)
        except PaymentGatewayError:
            await self._refund_withdrawal(user_id, amount, entry)
            raise

        if not paid:
            await self._refund_withdrawal(user_id, amount, entry)
            logger.info(
                "Withdrawal rejected: payout declined",
                extra={
                    "user_id": user_id, "amount": str(amount),
                    "transaction_id": entry.id,
                    "rejection": LedgerRejection.PAYOUT_DECLINED.value,
                },
            )
            return LedgerOutcome.rejected(LedgerRejection.PAYOUT_DECLINED)

        logger.info(
            f"User {user_id} withdrew {amount} credits",
            extra={"user_id": user_id, "amount": str(amount), "transaction_id": entry.id},
        )
        return LedgerOutcome.completed(entry)

    async def _refund_withdrawal(
        self, user_id: UserId, amount: Decimal, withdrawal: CreditTransaction,
    ) -> CreditTransaction:
        """Compensating unit: put a committed withdrawal back on the balance."""
        async with self.db_manager.transaction() as db:
            user = (await lock_users(db, [user_id]))[user_id]
            apply_balance_change(user, amount)
            refund = record_transaction(
                db, user_id, TransactionType.REFUND, amount,
                refund_description(amount), reference_id=withdrawal.id,
            )
            await db.flush()
        logger.warning(
            f"Withdrawal {withdrawal.id} refunded to user {user_id}",
            extra={"user_id": user_id, "amount": str(amount), "transaction_id": refund.id},
        )
        return refund

    async def _authorize(
        self, amount: Decimal, payment_method: str, context: ErrorContext,
    ) -> bool:
        try:
            return await self.payment_gateway.authorize(amount, payment_method)
        except PaymentGatewayError:
            raise
        except Exception as e:
            logger.error(f"Payment authorization failed: {e}", exc_info=True)
            raise PaymentGatewayError(str(e), "payment", context) from e

    async def _payout(
        self, user_id: UserId, amount: Decimal, context: ErrorContext,
    ) -> bool:
        try:
            return await self.payout_gateway.payout(user_id, amount)
        except PaymentGatewayError:
            raise
        except Exception as e:
            logger.error(f"Payout failed: {e}", exc_info=True)
            raise PaymentGatewayError(str(e), "payout", context) from e
