"""Money — exact two-decimal currency arithmetic and storage-boundary conversion.

Invariants:
    - Every monetary value inside the process is a Decimal quantized to 0.01
    - float never participates in money arithmetic (floats are converted via str())
    - Storage representation is fixed-point text: "70.01", "0.00"
    - parse_amount rejects non-positive values, sub-cent precision and more than MAX_DIGITS
      digits instead of rounding (same bounds as schemas.money.PositiveAmount)
    - Values outside the decimal context (e.g. 1e30) raise InvalidAmountError, never a raw
      decimal.InvalidOperation

Design Decisions:
    - Pure functions, no IO: shared by the ORM type (db/money_type.py), schemas, and engines
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from agent_market.core.domain_types import Money
from agent_market.core.errors import InvalidAmountError


CENT = Decimal("0.01")
ZERO = Money(Decimal("0.00"))
MAX_DIGITS = 12


def to_money(value: Decimal | int | str | float) -> Money:
    """Coerce a numeric value to a quantized Decimal."""
    if isinstance(value, bool):
        raise InvalidAmountError(value)
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
        if not d.is_finite():
            raise InvalidAmountError(value)
        return Money(d.quantize(CENT, rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(value)


def parse_amount(value: Decimal | int | str | float) -> Money:
    """Validate a caller-supplied amount: positive, at most two decimal places and 12 digits."""
    money = to_money(value)
    raw = value if isinstance(value, Decimal) else Decimal(str(value))
    if money != raw or money <= 0:
        raise InvalidAmountError(value)
    if len(money.as_tuple().digits) > MAX_DIGITS:
        raise InvalidAmountError(value)
    return money


def to_storage(value: Decimal) -> str:
    """Decimal -> fixed-point text for persistence."""
    return format(to_money(value), "f")


def from_storage(value: str | None) -> Money | None:
    """Fixed-point text -> Decimal. None passes through (nullable columns)."""
    if value is None:
        return None
    return to_money(value)


def format_dollars(value: Decimal) -> str:
    """Human-readable amount for transaction descriptions: $1234.50"""
    return f"${to_money(value):.2f}"
