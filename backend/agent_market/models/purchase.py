"""Purchase ORM — immutable fact: a buyer bought an agent from its creator.

Invariants:
    - At most one row per (buyer_id, agent_id): uq_purchases_buyer_agent
    - price_paid is a snapshot; later agent price changes never touch it
    - Rows are inserted by the purchase engine only, never updated or deleted
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agent_market.db.base import Base
from agent_market.db.money_type import MoneyText


class Purchase(Base):
    """Agent purchase record."""
    __tablename__ = "purchases"
    __table_args__ = (
        UniqueConstraint("buyer_id", "agent_id", name="uq_purchases_buyer_agent"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    buyer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ai_agents.id"), nullable=False,
    )
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    price_paid: Mapped[Decimal] = mapped_column(MoneyText, nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
