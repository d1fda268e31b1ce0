"""CreditTransaction ORM — append-only audit entry for every balance change.

Invariants:
    - amount is signed for purchase/sale_earning (-price / +price);
      top-ups and withdrawals store a positive magnitude, the type carries direction
    - reference_id optionally points at the Purchase that caused the entry (weak reference, no FK)
    - Rows are never updated or deleted

Design Decisions:
    - transaction_type stored as string mirroring core.domain_types.TransactionType
    - index on (user_id, created_at): history queries are per-user, newest first
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from agent_market.db.base import Base
from agent_market.db.money_type import MoneyText


class CreditTransaction(Base):
    """Ledger audit row."""
    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index("ix_credit_transactions_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyText, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
