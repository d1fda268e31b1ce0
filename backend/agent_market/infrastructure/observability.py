"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Ledger fields (user_id, agent_id, purchase_id, transaction_id, rejection, amount)
      and request fields (error_code, path) surfaced when present
    - Decimal amounts are logged as their exact text, never as floats
    - setup_logging is idempotent: calling it again replaces its handler instead of stacking

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan (and by the seed script)
    - SQLAlchemy engine chatter capped at WARNING; SQL echo is a debugging switch, not a log level
"""

import logging
import json
from datetime import datetime, timezone
from decimal import Decimal

LEDGER_FIELDS = (
    "user_id", "agent_id", "purchase_id", "transaction_id",
    "rejection", "amount", "error_code", "path",
)

_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def _json_default(value):
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in LEDGER_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=_json_default)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging for the application; returns the installed handler."""
    handler = logging.StreamHandler()
    handler.set_name("agent_market")
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == "agent_market":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
