"""Catalog — users, categories, agent listings, and read-side ledger queries.

Invariants:
    - Never assigns credit_balance / total_earned (only balance_ledger does)
    - Unique fields (email, username, category name) checked before insert;
      the database unique constraint remains the backstop
    - History queries are newest first (created_at DESC, id DESC as tie-break)
    - Missing resources raise ResourceNotFoundError; callers never see None from *_or_404

Design Decisions:
    - Functions take the request-scoped AsyncSession (get_db) and commit themselves
    - Price range filtering happens after the query: money is stored as fixed-point text,
      so a SQL comparison would be lexicographic
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from agent_market.core.domain_types import (
    AgentId, CategoryId, TransactionType, UserId, UserType,
)
from agent_market.core.errors import (
    CreatorRoleRequiredError, DuplicateResourceError, ErrorContext,
    ResourceNotFoundError,
)
from agent_market.infrastructure.database import DatabaseSessionManager
from agent_market.models.ai_agent import AIAgent
from agent_market.models.category import Category
from agent_market.models.credit_transaction import CreditTransaction
from agent_market.models.purchase import Purchase
from agent_market.models.user import User
from agent_market.schemas.catalog import (
    AgentCreate, AgentFilter, AgentUpdate, CategoryCreate,
)
from agent_market.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

PREDEFINED_CATEGORIES: tuple[tuple[str, str], ...] = (
    (
        "Image Prompts",
        "AI agents specialized in generating creative and effective image prompts "
        "for various use cases",
    ),
    (
        "Video Prompts",
        "AI agents that create compelling video prompts and concepts for content creation",
    ),
    (
        "Workflows",
        "Automated workflow AI agents that streamline business processes and productivity",
    ),
    (
        "AI Agent Prompts",
        "Meta AI agents that help create and optimize prompts for other AI agents",
    ),
)


class CatalogReader:
    """Read-only UserReader / AgentReader (core.repository_protocols) for callers outside the ledger.

    Each read uses its own short-lived session and returns a detached row. The ledger
    engines never use this: they must read inside their unit of work, with row locks
    (services/balance_ledger.py).
    """

    def __init__(self, db_manager: DatabaseSessionManager):
        self.db_manager = db_manager

    async def get_user(self, user_id: UserId) -> User | None:
        async with self.db_manager.session() as db:
            return await db.get(User, user_id)

    async def get_agent(self, agent_id: AgentId) -> AIAgent | None:
        async with self.db_manager.session() as db:
            return await db.get(AIAgent, agent_id)


# ─── Users ──────────────────────────────────────────────────────

async def get_user_or_404(db: AsyncSession, user_id: UserId) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError(
            "User", str(user_id), ErrorContext(user_id=user_id, operation="get_user"),
        )
    return user


async def _ensure_user_unique(
    db: AsyncSession, email: str | None, username: str | None, exclude_id: UserId | None = None,
) -> None:
    for field_name, column, value in (
        ("email", User.email, email),
        ("username", User.username, username),
    ):
        if value is None:
            continue
        query = select(User.id).where(column == value)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise DuplicateResourceError("User", field_name, value)


async def create_user(db: AsyncSession, body: UserCreate) -> User:
    await _ensure_user_unique(db, body.email, body.username)
    user = User(
        email=body.email,
        username=body.username,
        full_name=body.full_name,
        user_type=body.user_type.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} created", extra={"user_id": user.id})
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def update_user(db: AsyncSession, user_id: UserId, body: UserUpdate) -> User:
    """Partial update. Balances are not updatable through here."""
    user = await get_user_or_404(db, user_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    await _ensure_user_unique(
        db, changes.get("email"), changes.get("username"), exclude_id=user_id,
    )
    if "user_type" in changes:
        changes["user_type"] = UserType(changes["user_type"]).value
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user_balance(db: AsyncSession, user_id: UserId) -> dict:
    user = await get_user_or_404(db, user_id)
    return {
        "user_id": user.id,
        "credit_balance": user.credit_balance,
        "total_earned": user.total_earned,
    }


# ─── Categories ─────────────────────────────────────────────────

async def create_category(db: AsyncSession, body: CategoryCreate) -> Category:
    existing = await db.execute(select(Category.id).where(Category.name == body.name))
    if existing.first() is not None:
        raise DuplicateResourceError("Category", "name", body.name)
    category = Category(name=body.name, description=body.description)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def seed_categories(db: AsyncSession) -> list[Category]:
    """Ensure the predefined categories exist. Safe to run repeatedly."""
    result = await db.execute(select(Category.name))
    present = set(result.scalars().all())
    missing = [
        Category(name=name, description=description)
        for name, description in PREDEFINED_CATEGORIES
        if name not in present
    ]
    if missing:
        db.add_all(missing)
        await db.commit()
        logger.info(f"Seeded {len(missing)} categories")
    return await list_categories(db)


# ─── Agents ─────────────────────────────────────────────────────

async def get_agent_or_404(db: AsyncSession, agent_id: AgentId) -> AIAgent:
    agent = await db.get(AIAgent, agent_id)
    if agent is None:
        raise ResourceNotFoundError(
            "AIAgent", str(agent_id),
            ErrorContext(agent_id=agent_id, operation="get_agent"),
        )
    return agent


async def _ensure_category(db: AsyncSession, category_id: CategoryId) -> None:
    if await db.get(Category, category_id) is None:
        raise ResourceNotFoundError("Category", str(category_id))


async def create_agent(db: AsyncSession, body: AgentCreate) -> AIAgent:
    """List a new agent. Creator must exist and hold the creator role."""
    creator = await get_user_or_404(db, UserId(body.creator_id))
    if creator.user_type == UserType.BUYER.value:
        raise CreatorRoleRequiredError(creator.id)
    await _ensure_category(db, CategoryId(body.category_id))

    agent = AIAgent(
        creator_id=creator.id,
        name=body.name,
        description=body.description,
        price=body.price,
        key_features=list(body.key_features),
        screenshots=list(body.screenshots),
        category_id=body.category_id,
    )
    db.add(agent)
    await db.commit()
    await db.refresh(agent)
    logger.info(
        f"Agent {agent.id} listed by user {creator.id}",
        extra={"user_id": creator.id, "agent_id": agent.id, "amount": str(agent.price)},
    )
    return agent


async def update_agent(db: AsyncSession, agent_id: AgentId, body: AgentUpdate) -> AIAgent:
    """Partial update. Price changes never touch recorded purchases (price_paid is a snapshot)."""
    agent = await get_agent_or_404(db, agent_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        await _ensure_category(db, CategoryId(changes["category_id"]))
    for key, value in changes.items():
        setattr(agent, key, value)
    agent.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(agent)
    return agent


def escape_like(text: str) -> str:
    """Make %, _ and the escape character match literally in a LIKE pattern."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _within_price_range(
    price: Decimal, min_price: Decimal | None, max_price: Decimal | None,
) -> bool:
    if min_price is not None and price < min_price:
        return False
    if max_price is not None and price > max_price:
        return False
    return True


async def list_agents(db: AsyncSession, filters: AgentFilter) -> list[AIAgent]:
    query = select(AIAgent).where(AIAgent.is_active == filters.is_active)
    if filters.category_id is not None:
        query = query.where(AIAgent.category_id == filters.category_id)
    if filters.creator_id is not None:
        query = query.where(AIAgent.creator_id == filters.creator_id)
    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        query = query.where(or_(
            AIAgent.name.ilike(pattern, escape="\\"),
            AIAgent.description.ilike(pattern, escape="\\"),
        ))
    query = query.order_by(AIAgent.created_at.desc(), AIAgent.id.desc())

    agents = (await db.execute(query)).scalars().all()
    return [
        a for a in agents
        if _within_price_range(a.price, filters.min_price, filters.max_price)
    ]


async def list_creator_agents(db: AsyncSession, creator_id: UserId) -> list[AIAgent]:
    """Every listing of a creator, inactive included."""
    await get_user_or_404(db, creator_id)
    result = await db.execute(
        select(AIAgent)
        .where(AIAgent.creator_id == creator_id)
        .order_by(AIAgent.created_at.desc(), AIAgent.id.desc()),
    )
    return list(result.scalars().all())


# ─── Ledger history ─────────────────────────────────────────────

async def list_user_purchases(db: AsyncSession, buyer_id: UserId) -> list[Purchase]:
    await get_user_or_404(db, buyer_id)
    result = await db.execute(
        select(Purchase)
        .where(Purchase.buyer_id == buyer_id)
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc()),
    )
    return list(result.scalars().all())


async def list_user_sales(db: AsyncSession, creator_id: UserId) -> list[Purchase]:
    await get_user_or_404(db, creator_id)
    result = await db.execute(
        select(Purchase)
        .where(Purchase.creator_id == creator_id)
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc()),
    )
    return list(result.scalars().all())


async def list_credit_transactions(
    db: AsyncSession, user_id: UserId, transaction_type: TransactionType | None = None,
) -> list[CreditTransaction]:
    await get_user_or_404(db, user_id)
    query = select(CreditTransaction).where(CreditTransaction.user_id == user_id)
    if transaction_type is not None:
        query = query.where(CreditTransaction.transaction_type == transaction_type.value)
    query = query.order_by(
        CreditTransaction.created_at.desc(), CreditTransaction.id.desc(),
    )
    return list((await db.execute(query)).scalars().all())
