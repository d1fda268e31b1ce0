"""Payment & Payout Gateways — simulated processors behind the core gateway protocols.

Invariants:
    - authorize() returns False for a decline; it never mutates balances
    - Processor outages surface as exceptions; the credit engine maps them to PaymentGatewayError
    - payout() approves every request until a real payout processor is wired in

Design Decisions:
    - No real processor integration: the simulated delay keeps the call genuinely async,
      so concurrent top-ups interleave the way they would against a remote processor
    - Both gateways satisfy core.repository_protocols structurally (no inheritance)
"""

import asyncio
import logging
from decimal import Decimal

from agent_market.core.domain_types import UserId

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway:
    """Approves any positive charge with a non-blank payment method."""

    def __init__(self, delay_ms: int = 10):
        self.delay_ms = delay_ms

    async def authorize(self, amount: Decimal, method: str) -> bool:
        await asyncio.sleep(self.delay_ms / 1000)
        if amount <= 0:
            logger.info("Payment declined: non-positive amount", extra={"amount": str(amount)})
            return False
        if not method or not method.strip():
            logger.info("Payment declined: blank payment method", extra={"amount": str(amount)})
            return False
        return True


class SimulatedPayoutGateway:
    """Records nothing externally; approves every payout."""

    async def payout(self, user_id: UserId, amount: Decimal) -> bool:
        logger.info(
            f"Simulated payout of {amount} to user {user_id}",
            extra={"user_id": user_id, "amount": str(amount)},
        )
        return True
