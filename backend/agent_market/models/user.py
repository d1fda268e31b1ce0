"""User ORM — marketplace account and owner of its credit balance.

Invariants:
    - email and username are unique
    - credit_balance >= 0 after every ledger operation
    - total_earned only grows (sale earnings), withdrawals never touch it
    - Only the ledger services mutate credit_balance / total_earned

Design Decisions:
    - Money columns use MoneyText: fixed-point text in the database, Decimal in Python
    - user_type stored as plain string mirroring core.domain_types.UserType
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from agent_market.db.base import Base
from agent_market.db.money_type import MoneyText


class User(Base):
    """Marketplace user (buyer, creator, or both)."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    credit_balance: Mapped[Decimal] = mapped_column(
        MoneyText, nullable=False, default=Decimal("0.00"),
    )
    total_earned: Mapped[Decimal] = mapped_column(
        MoneyText, nullable=False, default=Decimal("0.00"),
    )
    user_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="buyer",
    )
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
