"""Ledger Schemas — purchase / top-up / withdrawal requests and outcome envelopes.

Invariants:
    - Outcome envelopes always carry status; reason is set only when status == "rejected"
    - A rejected outcome is NOT an error response: faults use the error envelope
      (core/errors.py to_response) with a 4xx/5xx status instead

Design Decisions:
    - payment_method may be blank: the payment processor decides (declines), not the schema
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from agent_market.core.domain_types import (
    LedgerRejection, OutcomeStatus, TransactionType,
)
from agent_market.core.ledger_outcome import LedgerOutcome
from agent_market.schemas.money import MoneyNumber, PositiveAmount


class PurchaseAgentRequest(BaseModel):
    buyer_id: int
    agent_id: int


class BuyCreditsRequest(BaseModel):
    user_id: int
    amount: PositiveAmount
    payment_method: str = Field(max_length=50)


class WithdrawCreditsRequest(BaseModel):
    user_id: int
    amount: PositiveAmount


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    buyer_id: int
    agent_id: int
    creator_id: int
    price_paid: MoneyNumber
    purchase_date: datetime


class CreditTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    transaction_type: TransactionType
    amount: MoneyNumber
    description: str | None
    reference_id: int | None
    created_at: datetime


class PurchaseOutcomeResponse(BaseModel):
    status: OutcomeStatus
    reason: LedgerRejection | None = None
    purchase: PurchaseResponse | None = None

    @classmethod
    def from_outcome(cls, outcome: LedgerOutcome) -> "PurchaseOutcomeResponse":
        return cls(
            status=outcome.status,
            reason=outcome.rejection,
            purchase=(
                PurchaseResponse.model_validate(outcome.record)
                if outcome.ok else None
            ),
        )


class TransactionOutcomeResponse(BaseModel):
    status: OutcomeStatus
    reason: LedgerRejection | None = None
    transaction: CreditTransactionResponse | None = None

    @classmethod
    def from_outcome(cls, outcome: LedgerOutcome) -> "TransactionOutcomeResponse":
        return cls(
            status=outcome.status,
            reason=outcome.rejection,
            transaction=(
                CreditTransactionResponse.model_validate(outcome.record)
                if outcome.ok else None
            ),
        )
