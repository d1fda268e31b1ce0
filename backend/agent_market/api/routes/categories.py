"""Category Routes — create, list, and seed the predefined categories."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.infrastructure.database import get_db
from agent_market.schemas.catalog import CategoryCreate, CategoryResponse
from agent_market.services import catalog

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_category(db, body)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await catalog.list_categories(db)


@router.post("/seed", response_model=list[CategoryResponse])
async def seed_categories(db: AsyncSession = Depends(get_db)):
    """Insert any missing predefined categories. Idempotent."""
    return await catalog.seed_categories(db)
