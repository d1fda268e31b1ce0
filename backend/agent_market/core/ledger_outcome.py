"""Ledger Outcome — tagged result for operations that may legitimately not happen.

Invariants:
    - Exactly one of record / rejection is set
    - status is derived from which one is set (never stored independently)
    - Rejections are business non-events; faults are exceptions (core/errors.py)

Design Decisions:
    - Frozen generic dataclass over Optional[T]: callers and tests branch on an enum,
      never on None or on message text
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from agent_market.core.domain_types import LedgerRejection, OutcomeStatus

T = TypeVar("T")


@dataclass(frozen=True)
class LedgerOutcome(Generic[T]):
    """Completed with a record, or rejected with a named reason."""

    record: T | None = None
    rejection: LedgerRejection | None = None

    def __post_init__(self):
        if (self.record is None) == (self.rejection is None):
            raise ValueError("LedgerOutcome needs exactly one of record or rejection")

    @classmethod
    def completed(cls, record: T) -> "LedgerOutcome[T]":
        return cls(record=record)

    @classmethod
    def rejected(cls, reason: LedgerRejection) -> "LedgerOutcome[T]":
        return cls(rejection=reason)

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.COMPLETED if self.rejection is None else OutcomeStatus.REJECTED

    @property
    def ok(self) -> bool:
        return self.rejection is None
