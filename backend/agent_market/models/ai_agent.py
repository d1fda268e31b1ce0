"""AIAgent ORM — a sellable listing owned by exactly one creator.

Invariants:
    - creator_id and category_id are required foreign keys
    - price > 0 (validated at the schema boundary)
    - total_sales is incremented only by the purchase engine

Design Decisions:
    - key_features / screenshots as JSON lists: display-only data, never queried
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Integer, String, Text, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from agent_market.db.base import Base
from agent_market.db.money_type import MoneyText


class AIAgent(Base):
    """AI agent listing."""
    __tablename__ = "ai_agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(MoneyText, nullable=False)
    key_features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    screenshots: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    total_sales: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
