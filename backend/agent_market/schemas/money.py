"""Money Fields — Decimal in Python, JSON number on the wire.

Invariants:
    - Request amounts: positive, at most two decimal places, parsed without float
    - Response amounts: Decimal internally, rendered as JSON numbers only at serialization
"""

from decimal import Decimal
from typing import Annotated

from pydantic import Field, PlainSerializer

from agent_market.core.money import MAX_DIGITS

MoneyNumber = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

PositiveAmount = Annotated[
    Decimal,
    Field(gt=0, max_digits=MAX_DIGITS, decimal_places=2),
]
