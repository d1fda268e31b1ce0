"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM models satisfy UserLike/AgentLike as-is
    - Gateways are async because implementations do network IO; the pure rules that
      consume their answers are not
"""

from decimal import Decimal
from typing import Protocol

from agent_market.core.domain_types import AgentId, UserId


class UserLike(Protocol):
    """Structural contract for the balance-bearing user row."""
    id: int
    credit_balance: Decimal
    total_earned: Decimal
    user_type: str


class AgentLike(Protocol):
    """Structural contract for a sellable agent listing."""
    id: int
    creator_id: int
    name: str
    price: Decimal
    is_active: bool
    total_sales: int


class UserReader(Protocol):
    """Read-only user lookup for callers outside the ledger (reporting, admin tools).

    Rows come back unlocked and detached, so they are unsafe for deciding a balance
    change. The ledger engines lock and read rows inside their own unit instead.
    Shell implementation: services.catalog.CatalogReader.
    """
    async def get_user(self, user_id: UserId) -> UserLike | None: ...


class AgentReader(Protocol):
    """Read-only agent lookup; same contract as UserReader."""
    async def get_agent(self, agent_id: AgentId) -> AgentLike | None: ...


class PaymentGateway(Protocol):
    """Authorizes a card/wallet charge for a credit top-up.

    Returns False for a decline. Raises for an outage.
    """
    async def authorize(self, amount: Decimal, method: str) -> bool: ...


class PayoutGateway(Protocol):
    """Sends withdrawn credits out to the user. Returns False when refused."""
    async def payout(self, user_id: UserId, amount: Decimal) -> bool: ...
