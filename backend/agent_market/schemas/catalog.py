"""Catalog Schemas — categories and agent listings.

Invariants:
    - Agent price is positive with at most two decimals
    - key_features has at least one entry
    - AgentUpdate is partial: unset fields are left untouched
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from agent_market.schemas.money import MoneyNumber, PositiveAmount


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    created_at: datetime


class AgentCreate(BaseModel):
    """New agent listing."""
    creator_id: int
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10)
    price: PositiveAmount
    key_features: list[str] = Field(min_length=1)
    screenshots: list[str] = Field(default_factory=list)
    category_id: int


class AgentUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=10)
    price: PositiveAmount | None = None
    key_features: list[str] | None = Field(None, min_length=1)
    screenshots: list[str] | None = None
    category_id: int | None = None
    is_active: bool | None = None


class AgentFilter(BaseModel):
    """Browse filters. Inactive listings are hidden unless is_active=False is asked for."""
    category_id: int | None = None
    creator_id: int | None = None
    search: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool = True


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    creator_id: int
    name: str
    description: str
    price: MoneyNumber
    key_features: list[str]
    screenshots: list[str]
    category_id: int
    is_active: bool
    total_sales: int
    created_at: datetime
    updated_at: datetime
