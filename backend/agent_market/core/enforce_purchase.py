"""Purchase Enforcement — pure precondition checks for buying an agent.

Invariants:
    - check_purchase is PURE: reads snapshots, returns a rejection or None, mutates nothing
    - Checks run in a fixed order; the first failing rule wins
    - Self-purchase is rejected regardless of balance
    - balance == price is sufficient (balance may reach exactly 0)

Design Decisions:
    - Shell loads (and locks) the rows inside the write transaction, then asks this module;
      the same function serves both the decision and the tests
"""

from agent_market.core.domain_types import LedgerRejection
from agent_market.core.repository_protocols import AgentLike, UserLike


def check_purchase(
    agent: AgentLike | None,
    buyer: UserLike | None,
    creator: UserLike | None,
    already_purchased: bool,
) -> LedgerRejection | None:
    """Return the first violated purchase rule, or None when the purchase may proceed."""
    if agent is None:
        return LedgerRejection.AGENT_NOT_FOUND
    if not agent.is_active:
        return LedgerRejection.AGENT_INACTIVE
    if buyer is None:
        return LedgerRejection.BUYER_NOT_FOUND
    if agent.creator_id == buyer.id:
        return LedgerRejection.SELF_PURCHASE
    if already_purchased:
        return LedgerRejection.DUPLICATE_PURCHASE
    if buyer.credit_balance < agent.price:
        return LedgerRejection.INSUFFICIENT_FUNDS
    if creator is None:
        return LedgerRejection.CREATOR_NOT_FOUND
    return None


def purchase_description(agent_name: str) -> str:
    """Buyer-side audit text."""
    return f'Purchase of AI agent "{agent_name}"'


def sale_description(agent_name: str) -> str:
    """Creator-side audit text."""
    return f'Sale of AI agent "{agent_name}"'
