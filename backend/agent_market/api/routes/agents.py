"""Agent Routes — list, browse, and edit AI agent listings.

Invariants:
    - Browsing hides inactive listings unless is_active=false is requested
    - Only creator-type users may list agents (403 otherwise)
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.core.domain_types import AgentId
from agent_market.infrastructure.database import get_db
from agent_market.schemas.catalog import (
    AgentCreate, AgentFilter, AgentResponse, AgentUpdate,
)
from agent_market.services import catalog

router = APIRouter(prefix="/api/v1/agents", tags=["agents"])


@router.post("", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_agent(body: AgentCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_agent(db, body)


@router.get("", response_model=list[AgentResponse])
async def list_agents(
    category_id: int | None = Query(None),
    creator_id: int | None = Query(None),
    search: str | None = Query(None, max_length=200),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    is_active: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """Browse the catalog, newest first."""
    filters = AgentFilter(
        category_id=category_id,
        creator_id=creator_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
    )
    return await catalog.list_agents(db, filters)


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.get_agent_or_404(db, AgentId(agent_id))


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: int, body: AgentUpdate, db: AsyncSession = Depends(get_db),
):
    return await catalog.update_agent(db, AgentId(agent_id), body)
