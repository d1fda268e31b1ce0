"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, AgentId, CategoryId wrap ints — never use bare int ids in domain logic
    - Money is always Decimal, never float
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as plain strings and serialized to JSON without custom encoders
"""

from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
AgentId = NewType("AgentId", int)
CategoryId = NewType("CategoryId", int)


# ─── Value Types ─────────────────────────────────────────────────

Money = NewType("Money", Decimal)   # quantized to 0.01


# ─── Enums ───────────────────────────────────────────────────────

class UserType(str, Enum):
    """Marketplace role. Buyers cannot list agents."""
    CREATOR = "creator"
    BUYER = "buyer"
    BOTH = "both"


class TransactionType(str, Enum):
    """Classification of a CreditTransaction audit entry."""
    PURCHASE = "purchase"
    SALE_EARNING = "sale_earning"
    WITHDRAWAL = "withdrawal"
    REFUND = "refund"


class OutcomeStatus(str, Enum):
    """Whether a ledger operation happened."""
    COMPLETED = "completed"
    REJECTED = "rejected"


class LedgerRejection(str, Enum):
    """Named business-rule non-events. Never raised, always returned."""
    AGENT_NOT_FOUND = "agent_not_found"
    AGENT_INACTIVE = "agent_inactive"
    BUYER_NOT_FOUND = "buyer_not_found"
    SELF_PURCHASE = "self_purchase"
    DUPLICATE_PURCHASE = "duplicate_purchase"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CREATOR_NOT_FOUND = "creator_not_found"
    USER_NOT_FOUND = "user_not_found"
    PAYMENT_DECLINED = "payment_declined"
    PAYOUT_DECLINED = "payout_declined"
