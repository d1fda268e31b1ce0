"""Root conftest — shared test configuration."""

import os

# Tests never reach a real database server or seed on startup
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("SEED_CATEGORIES_ON_STARTUP", "false")
os.environ.setdefault("LOG_FORMAT", "text")
