"""Per-conversation session ledger."""

from skillgate.session.ledger import (
    FileLedgerStore,
    InMemoryLedgerStore,
    LedgerState,
    LedgerStore,
    merge_activated,
)

__all__ = [
    "FileLedgerStore",
    "InMemoryLedgerStore",
    "LedgerState",
    "LedgerStore",
    "merge_activated",
]
