"""Ledger Routes — agent purchases, credit top-ups, credit withdrawals.

Invariants:
    - Completed outcome → 201 with the created record
    - Rejected outcome → 200 with status="rejected" and the reason code
    - Faults (unknown user on top-up, invalid amount, database, gateway) → error envelope
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from agent_market.api.dependencies import get_credit_engine, get_purchase_engine
from agent_market.core.domain_types import AgentId, UserId
from agent_market.schemas.ledger import (
    BuyCreditsRequest,
    PurchaseAgentRequest,
    PurchaseOutcomeResponse,
    TransactionOutcomeResponse,
    WithdrawCreditsRequest,
)
from agent_market.services.credit_engine import CreditEngine
from agent_market.services.purchase_engine import PurchaseEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["ledger"])


def _outcome_status(response: Response, ok: bool) -> None:
    response.status_code = status.HTTP_201_CREATED if ok else status.HTTP_200_OK


@router.post("/purchases", response_model=PurchaseOutcomeResponse)
async def purchase_agent(
    body: PurchaseAgentRequest,
    response: Response,
    engine: PurchaseEngine = Depends(get_purchase_engine),
):
    """Buy an agent with credits."""
    outcome = await engine.purchase_agent(UserId(body.buyer_id), AgentId(body.agent_id))
    _outcome_status(response, outcome.ok)
    return PurchaseOutcomeResponse.from_outcome(outcome)


@router.post("/credits/top-ups", response_model=TransactionOutcomeResponse)
async def buy_credits(
    body: BuyCreditsRequest,
    response: Response,
    engine: CreditEngine = Depends(get_credit_engine),
):
    """Buy credits through the payment processor."""
    outcome = await engine.buy_credits(
        UserId(body.user_id), body.amount, body.payment_method,
    )
    _outcome_status(response, outcome.ok)
    return TransactionOutcomeResponse.from_outcome(outcome)


@router.post("/credits/withdrawals", response_model=TransactionOutcomeResponse)
async def withdraw_credits(
    body: WithdrawCreditsRequest,
    response: Response,
    engine: CreditEngine = Depends(get_credit_engine),
):
    """Withdraw credits to the payout processor."""
    outcome = await engine.withdraw_credits(UserId(body.user_id), body.amount)
    _outcome_status(response, outcome.ok)
    return TransactionOutcomeResponse.from_outcome(outcome)
