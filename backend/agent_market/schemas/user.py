"""User Schemas — account creation, partial update, and public projections.

Invariants:
    - username 3-50 chars, full_name 1-100 chars, both stripped
    - Balances are read-only here: no request schema carries credit_balance or total_earned
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agent_market.core.domain_types import UserType
from agent_market.schemas.money import MoneyNumber

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(BaseModel):
    """New marketplace account."""
    email: str = Field(max_length=255, pattern=_EMAIL_PATTERN)
    username: str = Field(min_length=3, max_length=50)
    full_name: str = Field(min_length=1, max_length=100)
    user_type: UserType = UserType.BUYER

    @field_validator("username", "full_name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class UserUpdate(BaseModel):
    """Partial account update: only provided fields change."""
    email: str | None = Field(None, max_length=255, pattern=_EMAIL_PATTERN)
    username: str | None = Field(None, min_length=3, max_length=50)
    full_name: str | None = Field(None, min_length=1, max_length=100)
    user_type: UserType | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    full_name: str
    credit_balance: MoneyNumber
    total_earned: MoneyNumber
    user_type: UserType
    created_at: datetime
    updated_at: datetime


class UserBalanceResponse(BaseModel):
    """Dashboard balance view."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    credit_balance: MoneyNumber
    total_earned: MoneyNumber
