"""MoneyText Column Type — persists Decimal money as fixed-point text.

Invariants:
    - Bound values are written as "123.45" (two decimals, no exponent)
    - Loaded values are Decimal quantized to 0.01, never float
    - SQL-side comparisons on these columns are TEXT comparisons, so numeric filtering
      happens in Python after load

Design Decisions:
    - TypeDecorator over Numeric: identical round-trip on PostgreSQL and SQLite
      (the SQLite driver has no native Decimal and would go through float)
"""

from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from agent_market.core.money import from_storage, to_storage


class MoneyText(TypeDecorator):
    """Decimal <-> fixed-point text."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect) -> str | None:
        if value is None:
            return None
        return to_storage(value)

    def process_result_value(self, value: str | None, dialect) -> Decimal | None:
        return from_storage(value)
