"""Service test fixtures — per-test SQLite ledger + FastAPI test client.

Invariants:
    - Every test gets a fresh file-backed SQLite database under tmp_path
    - The real DatabaseSessionManager is used, so BEGIN IMMEDIATE write locking is live
    - Seeding helpers commit through short-lived units and return detached rows;
      no test holds a session open while an engine runs
    - The client patches the db_manager singleton; get_db / get_db_manager read it

Design Decisions:
    - File database instead of :memory: so every pooled connection sees the same data
    - Payment gateway overridden with a zero-delay simulator to keep tests fast
"""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from agent_market.api.dependencies import get_payment_gateway
from agent_market.db.base import Base
from agent_market.infrastructure.database import DatabaseSessionManager
import agent_market.infrastructure.database as db_module
from agent_market.infrastructure.payment_gateway import SimulatedPaymentGateway
from agent_market.main import app
from agent_market.models.ai_agent import AIAgent
from agent_market.models.category import Category
from agent_market.models.user import User
import agent_market.models  # noqa: F401


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def make_user(db_manager):
    """Insert a user and return the committed row."""
    counter = {"n": 0}

    async def _make(balance: str = "0.00", user_type: str = "both", name: str | None = None):
        counter["n"] += 1
        handle = name or f"user{counter['n']}"
        async with db_manager.transaction() as db:
            user = User(
                email=f"{handle}@example.com",
                username=handle,
                full_name=handle.title(),
                credit_balance=Decimal(balance),
                user_type=user_type,
            )
            db.add(user)
            await db.flush()
        return user

    return _make


@pytest.fixture
async def category(db_manager):
    async with db_manager.transaction() as db:
        cat = Category(name="Workflows", description="Automation agents")
        db.add(cat)
        await db.flush()
    return cat


@pytest.fixture
def make_agent(db_manager, category):
    """Insert an agent listing for a creator."""

    async def _make(
        creator: User, price: str = "29.99", name: str = "Prompt Smith",
        is_active: bool = True,
    ):
        async with db_manager.transaction() as db:
            agent = AIAgent(
                creator_id=creator.id,
                name=name,
                description="Writes image prompts for product shots",
                price=Decimal(price),
                key_features=["fast", "consistent"],
                screenshots=[],
                category_id=category.id,
                is_active=is_active,
            )
            db.add(agent)
            await db.flush()
        return agent

    return _make


@pytest.fixture
def reload(db_manager):
    """Re-read a row by primary key through a fresh session."""

    async def _reload(model, pk):
        async with db_manager.session() as db:
            return await db.get(model, pk)

    return _reload


@pytest.fixture
async def client(db_manager):
    """FastAPI test client bound to the per-test database."""
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager
    app.dependency_overrides[get_payment_gateway] = lambda: SimulatedPaymentGateway(delay_ms=0)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
