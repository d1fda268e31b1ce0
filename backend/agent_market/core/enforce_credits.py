"""Credit Enforcement — pure rules for top-ups, withdrawals and balance mutation.

Invariants:
    - next_balance never returns a negative balance; it raises NegativeBalanceError instead
    - Withdrawals record a POSITIVE magnitude; the transaction type carries the direction
    - check_withdrawal allows withdrawing the exact balance
"""

from decimal import Decimal

from agent_market.core.domain_types import LedgerRejection, Money, UserId
from agent_market.core.errors import NegativeBalanceError
from agent_market.core.money import format_dollars, to_money
from agent_market.core.repository_protocols import UserLike


def check_withdrawal(user: UserLike | None, amount: Decimal) -> LedgerRejection | None:
    """Return the first violated withdrawal rule, or None."""
    if user is None:
        return LedgerRejection.USER_NOT_FOUND
    if user.credit_balance < amount:
        return LedgerRejection.INSUFFICIENT_FUNDS
    return None


def next_balance(user_id: UserId, balance: Decimal, delta: Decimal) -> Money:
    """Balance after applying delta. Pure; the caller assigns the result."""
    result = to_money(balance + delta)
    if result < 0:
        raise NegativeBalanceError(user_id, balance, delta)
    return result


def top_up_description(payment_method: str) -> str:
    return f"Credit purchase via {payment_method}"


def withdrawal_description(amount: Decimal) -> str:
    return f"Credit withdrawal of {format_dollars(amount)}"


def refund_description(amount: Decimal) -> str:
    return f"Refund of failed credit withdrawal of {format_dollars(amount)}"
