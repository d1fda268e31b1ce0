"""ORM Models — SQLAlchemy declarative models for all marketplace entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Purchase and CreditTransaction are append-only facts

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from agent_market.models.user import User  # noqa: F401
from agent_market.models.category import Category  # noqa: F401
from agent_market.models.ai_agent import AIAgent  # noqa: F401
from agent_market.models.purchase import Purchase  # noqa: F401
from agent_market.models.credit_transaction import CreditTransaction  # noqa: F401
