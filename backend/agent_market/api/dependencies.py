"""Engine Dependencies — FastAPI providers for the ledger engines and their gateways.

Invariants:
    - Engines are built per request over the process-wide DatabaseSessionManager
    - Gateways come from here only; tests swap them via app.dependency_overrides
"""

from fastapi import Depends

from agent_market.config import get_settings
from agent_market.core.repository_protocols import PaymentGateway, PayoutGateway
from agent_market.infrastructure.database import DatabaseSessionManager, get_db_manager
from agent_market.infrastructure.payment_gateway import (
    SimulatedPaymentGateway, SimulatedPayoutGateway,
)
from agent_market.services.credit_engine import CreditEngine
from agent_market.services.purchase_engine import PurchaseEngine


def get_payment_gateway() -> PaymentGateway:
    return SimulatedPaymentGateway(get_settings().payment_simulated_delay_ms)


def get_payout_gateway() -> PayoutGateway:
    return SimulatedPayoutGateway()


def get_purchase_engine(
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
) -> PurchaseEngine:
    return PurchaseEngine(db_manager)


def get_credit_engine(
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
    payment_gateway: PaymentGateway = Depends(get_payment_gateway),
    payout_gateway: PayoutGateway = Depends(get_payout_gateway),
) -> CreditEngine:
    return CreditEngine(db_manager, payment_gateway, payout_gateway)
